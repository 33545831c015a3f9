from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from meshwire.bindings import ServiceBinding

if TYPE_CHECKING:
    from meshwire.mesh import Mesh

F = TypeVar("F", bound=Callable[..., Any])

HANDLER_NAMES_ATTRIBUTE = "__mesh_handlers__"


@dataclass(frozen=True, slots=True)
class Handler:
    """A tagged method on a resolved service instance."""

    target: Any
    method_name: str

    def __call__(self) -> Any:
        return getattr(self.target, self.method_name)()


def handler(name: str) -> Callable[[], Callable[[F], F]]:
    """Create a decorator factory tagging methods as handlers for ``name``.

    Examples:
        .. code-block:: python

            on_start = handler("start")


            class Cache:
                @on_start()
                def warm_up(self) -> None: ...


            invoke_handlers(mesh, "start")

    """

    def decorator_factory() -> Callable[[F], F]:
        def decorator(method: F) -> F:
            names = set(getattr(method, HANDLER_NAMES_ATTRIBUTE, ()))
            names.add(name)
            setattr(method, HANDLER_NAMES_ATTRIBUTE, frozenset(names))
            return method

        return decorator

    return decorator_factory


def find_handlers(mesh: Mesh, name: str, *, recursive: bool = True) -> Iterator[Handler]:
    """Yield handlers tagged ``name`` on services bound in ``mesh``.

    Each service owning at least one tagged method (its own or inherited) is
    resolved. With ``recursive`` the parent chain is searched as well.
    """
    for key, binding in mesh.bindings:
        if not isinstance(binding, ServiceBinding):
            continue
        method_names = _tagged_method_names(binding.cls, name)
        if not method_names:
            continue
        target = mesh.resolve(key)
        for method_name in method_names:
            yield Handler(target=target, method_name=method_name)
    if recursive and mesh.parent is not None:
        yield from find_handlers(mesh.parent, name, recursive=recursive)


def invoke_handlers(mesh: Mesh, name: str, *, recursive: bool = False) -> list[Any]:
    """Call every handler tagged ``name`` in discovery order and collect the results."""
    return [h() for h in list(find_handlers(mesh, name, recursive=recursive))]


async def ainvoke_handlers(mesh: Mesh, name: str, *, recursive: bool = False) -> list[Any]:
    """Call every handler tagged ``name`` and await awaitable results concurrently."""
    results = [h() for h in list(find_handlers(mesh, name, recursive=recursive))]
    return list(await asyncio.gather(*(_as_awaitable(result) for result in results)))


async def _as_awaitable(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _tagged_method_names(cls: type[Any], name: str) -> list[str]:
    method_names: list[str] = []
    seen: set[str] = set()
    for klass in cls.__mro__:
        for attribute_name, attribute in vars(klass).items():
            if attribute_name in seen:
                continue
            seen.add(attribute_name)
            if name in getattr(attribute, HANDLER_NAMES_ATTRIBUTE, ()):
                method_names.append(attribute_name)
    return method_names


__all__ = ["Handler", "ainvoke_handlers", "find_handlers", "handler", "invoke_handlers"]
