from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from meshwire.exceptions import MeshInvalidBindingError
from meshwire.keys import ServiceKey, is_constructor, is_service_key, key_to_string

if TYPE_CHECKING:
    from typing_extensions import Self

logger = logging.getLogger(__name__)


class Binding:
    """Base class of every registry entry variant."""

    __slots__ = ()


@dataclass(frozen=True, slots=True, eq=False)
class ConstantBinding(Binding):
    """Resolve to a literal value."""

    value: Any


@dataclass(frozen=True, slots=True, eq=False)
class ServiceBinding(Binding):
    """Resolve to a lazily constructed instance of ``cls``."""

    cls: type[Any]


@dataclass(frozen=True, slots=True, eq=False)
class AliasBinding(Binding):
    """Resolve by resolving ``target`` again on the same container."""

    target: str


@dataclass(frozen=True, slots=True, eq=False)
class ScopeBinding(Binding):
    """Resolve to a provider building child containers with ``factory``."""

    factory: Callable[..., Any]


class BindingRegistry:
    """Map string keys to bindings.

    A key holds at most one binding; binding it again replaces the previous
    entry silently. ``bind_*`` methods return the registry so calls chain.
    """

    def __init__(self, name: str, bindings: Iterable[tuple[str, Binding]] = ()) -> None:
        self.name = name
        self._bindings: dict[str, Binding] = dict(bindings)

    def bind_service(self, key: ServiceKey, impl: type[Any] | None = None) -> Self:
        """Bind a class to be instantiated on first resolution.

        Args:
            key: Key to bind. When ``impl`` is omitted it must be the class
                itself and is bound under its own name.
            impl: Class instantiated with no arguments.

        Raises:
            MeshInvalidBindingError: If no class can be derived from the arguments.

        """
        if impl is None:
            if not is_constructor(key):
                raise MeshInvalidBindingError(_describe_key(key))
            impl = key
        elif not is_constructor(impl):
            raise MeshInvalidBindingError(_describe_key(key))
        return self._add(key, ServiceBinding(impl))

    def bind_constant(self, key: ServiceKey, value: Any) -> Self:
        return self._add(key, ConstantBinding(value))

    def bind_alias(self, key: ServiceKey, target: ServiceKey) -> Self:
        if not is_service_key(target):
            raise MeshInvalidBindingError(_describe_key(key))
        return self._add(key, AliasBinding(key_to_string(target)))

    def bind_scope(self, key: ServiceKey, factory: Callable[..., Any]) -> Self:
        """Bind a child-container factory.

        Args:
            key: Key to bind.
            factory: Class taking the parent container, or a function taking an
                optional parent container, that returns a child container.

        Raises:
            MeshInvalidBindingError: If ``factory`` is not callable.

        """
        if not callable(factory):
            raise MeshInvalidBindingError(_describe_key(key))
        return self._add(key, ScopeBinding(factory))

    def unbind(self, key: ServiceKey) -> Self:
        self._bindings.pop(key_to_string(key), None)
        return self

    def get(self, key: ServiceKey) -> Binding | None:
        return self._bindings.get(key_to_string(key))

    def copy(self, name: str) -> BindingRegistry:
        return BindingRegistry(name, self._bindings.items())

    def _add(self, key: ServiceKey, binding: Binding) -> Self:
        if not is_service_key(key):
            raise MeshInvalidBindingError(key)
        k = key_to_string(key)
        if k in self._bindings:
            logger.debug("Rebinding %r in %r to %r", k, self.name, binding)
        else:
            logger.debug("Binding %r in %r to %r", k, self.name, binding)
        self._bindings[k] = binding
        return self

    def __contains__(self, key: object) -> bool:
        if not is_service_key(key):
            return False
        return key_to_string(key) in self._bindings

    def __iter__(self) -> Iterator[tuple[str, Binding]]:
        return iter(list(self._bindings.items()))

    def __len__(self) -> int:
        return len(self._bindings)


def _describe_key(key: object) -> object:
    if is_service_key(key):
        return key_to_string(key)
    return key


__all__ = [
    "AliasBinding",
    "Binding",
    "BindingRegistry",
    "ConstantBinding",
    "ScopeBinding",
    "ServiceBinding",
]
