from __future__ import annotations

import types
from collections.abc import Callable
from typing import Any, TypeAlias, TypeGuard, TypeVar

T = TypeVar("T")

ServiceKey: TypeAlias = "str | type[Any]"
"""A string key or a type whose ``__name__`` is used as the key."""


def key_to_string(key: ServiceKey) -> str:
    """Return the string form a key is stored and looked up under.

    Types are reduced to their ``__name__``, so distinct types sharing a name
    map to the same key.

    Args:
        key: String key or type.

    """
    if isinstance(key, str):
        return key
    return key.__name__


def is_service_key(candidate: object) -> TypeGuard[ServiceKey]:
    return isinstance(candidate, (str, type))


def is_constructor(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class.

    Args:
        candidate: Value being checked.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def instantiate(constructor_or_factory: type[T] | Callable[..., T], *args: Any) -> T:
    return constructor_or_factory(*args)


__all__ = ["ServiceKey", "instantiate", "is_constructor", "is_service_key", "key_to_string"]
