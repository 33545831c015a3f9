from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar, overload

from meshwire.backref import attach_back_reference
from meshwire.bindings import (
    AliasBinding,
    Binding,
    BindingRegistry,
    ConstantBinding,
    ScopeBinding,
    ServiceBinding,
)
from meshwire.declarations import Declaration, DeclarationTable, default_declarations
from meshwire.defaults import DEFAULT_MESH_NAME, MESH_REF_ATTRIBUTE, MESH_SELF_KEY
from meshwire.exceptions import MeshBindingNotFoundError
from meshwire.keys import ServiceKey, instantiate, is_constructor, key_to_string
from meshwire.scope import Scope

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")
Middleware = Callable[[Any], Any]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _CachedInstance:
    """Resolved value together with the binding that produced it."""

    binding: Binding
    value: Any


class ScopeProvider:
    """Build child containers from a scope binding.

    Returned by resolving a key bound with ``bind_scope``. Every call builds a
    new child; the provider keeps no cache of its own.
    """

    def __init__(self, mesh: Mesh, factory: Callable[..., Any]) -> None:
        self._mesh = mesh
        self._factory = factory

    def __call__(self, parent: Mesh | None = None) -> Any:
        """Build a child container.

        Args:
            parent: Parent of the new child. Defaults to the container owning
                the scope binding.

        """
        parent = parent if parent is not None else self._mesh
        if is_constructor(self._factory) or _accepts_positional_argument(self._factory):
            return instantiate(self._factory, parent)
        return instantiate(self._factory)

    def __repr__(self) -> str:
        return f"ScopeProvider({self._factory!r}, mesh={self._mesh.name!r})"


class Mesh:
    """Register bindings, resolve them lazily and cache the results.

    Keys are strings, or types reduced to their ``__name__``. Constants and
    services are connected and cached on first resolution, aliases are replayed
    on every resolution, and scope bindings resolve to a ``ScopeProvider``.
    Keys missing locally are delegated to the parent container.

    Every container binds itself under ``"Mesh"``, so any managed object can
    declare ``mesh: Mesh = dep()`` to reach the container that owns it.

    Examples:
        .. code-block:: python

            mesh = Mesh()
            mesh.bind_service(Logger, StandardLogger)
            mesh.bind_service(Database)

            db = mesh.resolve(Database)
            db.connect()

    """

    def __init__(
        self,
        name: str = DEFAULT_MESH_NAME,
        parent: Mesh | None = None,
        *,
        declarations: DeclarationTable | None = None,
        bindings: BindingRegistry | None = None,
    ) -> None:
        """Initialize a container.

        Args:
            name: Label used in error messages and logs.
            parent: Container that unresolved keys are delegated to. It is not
                owned by this container.
            declarations: Declaration table read by the diagnostics. Defaults to
                the parent's table, or the shared table for root containers.
            bindings: Initial bindings. The registry is used as is.

        """
        self.name = name
        self.parent = parent
        if declarations is None:
            declarations = parent.declarations if parent is not None else default_declarations
        self.declarations = declarations
        self.bindings = bindings if bindings is not None else BindingRegistry(name)
        self.instances: dict[str, _CachedInstance] = {}
        self.middlewares: list[Middleware] = []
        self.child_scopes: dict[str, Scope] = {}
        self.bindings.bind_constant(MESH_SELF_KEY, self)

    def __repr__(self) -> str:
        parent_name = self.parent.name if self.parent is not None else None
        return f"Mesh({self.name!r}, parent={parent_name!r})"

    # region Registration Methods
    def bind_service(self, key: ServiceKey, impl: type[Any] | None = None) -> Self:
        """Bind a class instantiated with no arguments on first resolution.

        Args:
            key: Key to bind, or the class itself when ``impl`` is omitted.
            impl: Class to instantiate.

        Raises:
            MeshInvalidBindingError: If no class can be derived from the arguments.

        Examples:
            .. code-block:: python

                mesh.bind_service(Database)
                mesh.bind_service(Logger, StandardLogger)
                mesh.bind_service("logger", StandardLogger)

        """
        self.bindings.bind_service(key, impl)
        return self

    def bind_constant(self, key: ServiceKey, value: Any) -> Self:
        """Bind a pre-built value.

        The value passes through middleware and receives a back-reference the
        first time it is resolved.
        """
        self.bindings.bind_constant(key, value)
        return self

    def bind_alias(self, key: ServiceKey, target: ServiceKey) -> Self:
        """Bind ``key`` to whatever ``target`` resolves to on this container.

        The alias is resolved again on every lookup, so it follows later
        changes to ``target``.
        """
        self.bindings.bind_alias(key, target)
        return self

    def bind_scope(self, key: ServiceKey, factory: Callable[..., Any]) -> Self:
        """Bind a child-container factory; resolving ``key`` yields a ``ScopeProvider``."""
        self.bindings.bind_scope(key, factory)
        return self

    def unbind(self, key: ServiceKey) -> Self:
        """Remove the local binding and cached value for ``key``."""
        k = key_to_string(key)
        self.bindings.unbind(k)
        self.instances.pop(k, None)
        return self

    service = bind_service
    constant = bind_constant
    alias = bind_alias

    def use(self, middleware: Middleware) -> Self:
        """Register a transform applied to every connected value.

        Middleware runs in registration order on constants and services the
        first time they are resolved, and on guests passed to ``connect``.
        Each middleware returns the value handed to the next one.
        """
        self.middlewares.append(middleware)
        logger.debug("Registered middleware %r on %r", middleware, self.name)
        return self

    # endregion Registration Methods

    def lookup(self, key: ServiceKey, *, recursive: bool = True) -> Binding | None:
        """Return the binding for ``key``, searching parents when ``recursive``."""
        binding = self.bindings.get(key)
        if binding is None and recursive and self.parent is not None:
            return self.parent.lookup(key, recursive=recursive)
        return binding

    @overload
    def resolve(self, key: type[T]) -> T: ...

    @overload
    def resolve(self, key: str) -> Any: ...

    def resolve(self, key: ServiceKey) -> Any:
        """Resolve a key to a live value.

        Args:
            key: Key to resolve.

        Raises:
            MeshBindingNotFoundError: If no container in the chain binds the key.

        Examples:
            .. code-block:: python

                logger = mesh.resolve(Logger)
                same_logger = mesh.resolve("Logger")

        """
        k = key_to_string(key)
        binding = self.bindings.get(k)
        if binding is None:
            if self.parent is not None:
                return self.parent.resolve(k)
            raise MeshBindingNotFoundError(self.name, k)

        cached = self.instances.get(k)
        if cached is not None and cached.binding is binding:
            return cached.value

        if isinstance(binding, AliasBinding):
            return self.resolve(binding.target)
        if isinstance(binding, ScopeBinding):
            return ScopeProvider(self, binding.factory)

        value = self._instantiate(k, binding)
        self.instances[k] = _CachedInstance(binding, value)
        return value

    @overload
    def try_resolve(self, key: type[T]) -> T | None: ...

    @overload
    def try_resolve(self, key: str) -> Any | None: ...

    def try_resolve(self, key: ServiceKey) -> Any | None:
        """Resolve a key, or return ``None`` when nothing in the chain binds it.

        Errors raised while building a bound value still propagate.
        """
        if self._final_binding(key) is None:
            return None
        return self.resolve(key)

    def connect(self, value: T) -> T:
        """Adopt a value: apply middleware, then attach this container to it.

        Objects built elsewhere gain working ``dep()`` fields once connected.
        A value that already belongs to a container keeps its reference.

        Args:
            value: Object to adopt.

        Returns:
            The value returned by the last middleware.

        Examples:
            .. code-block:: python

                guest = mesh.connect(Database())
                guest.connect()

        """
        result = self._apply_middleware(value)
        attach_back_reference(result, self)
        return result

    def _apply_middleware(self, value: Any) -> Any:
        result = value
        for middleware in self.middlewares:
            result = middleware(result)
        if self.parent is not None:
            result = self.parent._apply_middleware(result)
        return result

    def _instantiate(self, key: str, binding: Binding) -> Any:
        if isinstance(binding, ConstantBinding):
            return self.connect(binding.value)
        if isinstance(binding, ServiceBinding):
            logger.debug("Instantiating %r for %r in %r", binding.cls, key, self.name)
            return self.connect(self._construct(binding.cls))
        msg = f"Unsupported binding {binding!r} for {key!r}"
        raise TypeError(msg)

    def _construct(self, cls: type[T]) -> T:
        if not _has_instance_dict(cls):
            return self._construct_subclass(cls)
        instance = cls.__new__(cls)
        # dep() fields read the reference during __init__.
        attach_back_reference(instance, self)
        if isinstance(instance, cls):
            instance.__init__()
        return instance

    def _construct_subclass(self, cls: type[T]) -> T:
        # Instances without a __dict__ cannot hold the reference, so it lives on
        # a per-call subclass with the same names instead.
        managed_cls = type(cls)(
            cls.__name__,
            (cls,),
            {
                "__slots__": (),
                "__qualname__": cls.__qualname__,
                "__module__": cls.__module__,
                "__doc__": cls.__doc__,
                MESH_REF_ATTRIBUTE: self,
            },
        )
        return managed_cls()

    # region Scopes
    def scope(self, scope_id: str) -> Scope:
        """Return the binding set children created for ``scope_id`` start with.

        Examples:
            .. code-block:: python

                mesh.scope("session").bind_service(SessionService)

        """
        scope = self.child_scopes.get(scope_id)
        if scope is None:
            scope = Scope(scope_id)
            self.child_scopes[scope_id] = scope
        return scope

    def create_scope(self, scope_id: str, name: str | None = None) -> Mesh:
        """Materialize the ``scope_id`` definition into a new child container.

        Args:
            scope_id: Identifier passed to ``scope``. An unknown id yields an
                empty child.
            name: Name of the child's binding set, shown in registration logs.
                Defaults to ``scope_id``. The child itself is named ``scope_id``.

        """
        bindings_name = name if name is not None else scope_id
        definition = self.child_scopes.get(scope_id)
        if definition is not None:
            bindings = definition.copy(bindings_name)
        else:
            bindings = BindingRegistry(bindings_name)
        logger.debug("Creating scope %r from %r", scope_id, self.name)
        return Mesh(scope_id, self, bindings=bindings)

    # endregion Scopes

    # region Diagnostics
    def all_bindings(self) -> Iterator[tuple[str, Binding]]:
        """Yield local bindings, then those of every parent in turn.

        Keys bound on several containers appear once per container.
        """
        yield from self.bindings
        if self.parent is not None:
            yield from self.parent.all_bindings()

    def traverse_class_deps(
        self,
        cls: type[Any],
        visited: set[str] | None = None,
    ) -> Iterator[Declaration]:
        """Yield declarations reachable from ``cls``, each key at most once.

        Keys bound to a service class, directly or through aliases, are
        expanded into that class's declarations. ``visited`` is updated in
        place, so passing the same set across calls deduplicates between them.
        """
        if visited is None:
            visited = set()
        for declaration in self.declarations.for_class(cls):
            if declaration.key in visited:
                continue
            visited.add(declaration.key)
            yield declaration
            service_cls = self._service_class(declaration.key)
            if service_cls is not None:
                yield from self.traverse_class_deps(service_cls, visited)

    def all_deps(self) -> Iterator[Declaration]:
        """Yield declarations reachable from every service in the chain."""
        visited: set[str] = set()
        for _, binding in self.all_bindings():
            if isinstance(binding, ServiceBinding):
                yield from self.traverse_class_deps(binding.cls, visited)

    def missing_deps(self) -> Iterator[Declaration]:
        """Yield declarations whose key nothing in the chain binds.

        Nothing is instantiated, so this is safe for startup validation.
        """
        for declaration in self.all_deps():
            if self.lookup(declaration.key) is None:
                yield declaration

    def _service_class(self, key: str) -> type[Any] | None:
        binding = self._final_binding(key)
        if isinstance(binding, ServiceBinding):
            return binding.cls
        return None

    # endregion Diagnostics

    def _final_binding(self, key: ServiceKey) -> Binding | None:
        # Mirrors resolve(): an alias found on a parent is followed from that parent.
        k = key_to_string(key)
        binding = self.bindings.get(k)
        if binding is None:
            return self.parent._final_binding(k) if self.parent is not None else None
        if isinstance(binding, AliasBinding):
            return self._final_binding(binding.target)
        return binding


def _has_instance_dict(cls: type[Any]) -> bool:
    return any("__dict__" in vars(base) for base in cls.__mro__)


def _accepts_positional_argument(factory: Callable[..., Any]) -> bool:
    try:
        parameters = inspect.signature(factory).parameters.values()
    except (TypeError, ValueError):
        return False
    return any(
        parameter.kind
        in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
            inspect.Parameter.VAR_POSITIONAL,
        )
        for parameter in parameters
    )


__all__ = ["Mesh", "Middleware", "ScopeProvider"]
