from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Declaration:
    """Describe one ``dep()`` field: which class owns it and what key it resolves."""

    owner: type[Any]
    """The class the field was declared on."""
    field_name: str
    """Attribute name of the declared field."""
    key: str
    """Key resolved through the owning container on read."""
    optional: bool = False
    """Yield ``None`` instead of failing when nothing binds ``key``."""
    cache: bool = True
    """Pin the first resolved value onto the instance."""


class DeclarationTable:
    """Store dependency declarations recorded by ``dep()`` fields.

    The table is append-only. Containers read it for diagnostics; a class's
    effective declarations include those recorded against its ancestors.
    """

    def __init__(self) -> None:
        self._declarations: list[Declaration] = []

    def record(self, declaration: Declaration) -> None:
        """Append a declaration.

        Args:
            declaration: Declaration produced when a ``dep()`` field is bound to its class.

        """
        self._declarations.append(declaration)

    def for_class(self, cls: type[Any]) -> list[Declaration]:
        """Return the declarations of ``cls`` and of every class in its MRO.

        Declarations on ``cls`` itself come first, then those of its bases in
        MRO order.

        Args:
            cls: Class whose effective declaration set is requested.

        """
        result: list[Declaration] = []
        for klass in cls.__mro__:
            if klass is object:
                break
            result.extend(d for d in self._declarations if d.owner is klass)
        return result

    def __iter__(self) -> Iterator[Declaration]:
        return iter(self._declarations)

    def __len__(self) -> int:
        return len(self._declarations)


default_declarations = DeclarationTable()
"""Table used by ``dep()`` and ``Mesh`` when no other table is passed."""


__all__ = ["Declaration", "DeclarationTable", "default_declarations"]
