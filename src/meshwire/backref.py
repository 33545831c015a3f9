from __future__ import annotations

import inspect
from contextlib import suppress
from typing import TYPE_CHECKING, Any

from meshwire.defaults import MESH_REF_ATTRIBUTE

if TYPE_CHECKING:
    from meshwire.mesh import Mesh


def get_back_reference(obj: object) -> Mesh | None:
    """Return the container that produced or adopted ``obj``, if any.

    Instances built by a container carry it as their own attribute from before
    ``__init__`` runs. Fully slotted instances see it through their class.

    Args:
        obj: Object to inspect.

    """
    return getattr(obj, MESH_REF_ATTRIBUTE, None)


def has_own_back_reference(obj: object) -> bool:
    return MESH_REF_ATTRIBUTE in getattr(obj, "__dict__", {})


def attach_back_reference(obj: Any, mesh: Mesh) -> None:
    """Attach ``mesh`` to ``obj`` unless it already carries its own reference.

    Classes and functions are skipped so a bound class never leaks the reference
    to its instances. Objects without an instance ``__dict__`` are left as is.
    """
    if inspect.isclass(obj) or inspect.isroutine(obj) or has_own_back_reference(obj):
        return
    with suppress(AttributeError, TypeError):
        object.__setattr__(obj, MESH_REF_ATTRIBUTE, mesh)


__all__ = ["attach_back_reference", "get_back_reference", "has_own_back_reference"]
