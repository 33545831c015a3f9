"""Shared pytest fixtures for meshwire tests."""

import pytest

from meshwire.declarations import DeclarationTable
from meshwire.mesh import Mesh


@pytest.fixture()
def mesh() -> Mesh:
    """Root container using the shared declaration table."""
    return Mesh()


@pytest.fixture()
def declarations() -> DeclarationTable:
    """Empty declaration table, isolated from other tests."""
    return DeclarationTable()
