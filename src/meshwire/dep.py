from __future__ import annotations

import sys
from contextlib import suppress
from typing import Any, ForwardRef, Generic, TypeVar, overload

from meshwire.backref import get_back_reference
from meshwire.declarations import Declaration, DeclarationTable, default_declarations
from meshwire.exceptions import MeshDepKeyNotInferredError, MeshInstanceNotConnectedError
from meshwire.keys import ServiceKey, is_constructor, key_to_string

T = TypeVar("T")

_MISSING_ANNOTATION: Any = object()


class Dep(Generic[T]):
    """Field descriptor resolving its value through the owning container.

    Created by ``dep()``. Binding the descriptor to a class records a
    ``Declaration``; reading it from an instance resolves the key through the
    container attached to that instance.
    """

    def __init__(
        self,
        key: ServiceKey | None = None,
        *,
        optional: bool = False,
        cache: bool = True,
        table: DeclarationTable | None = None,
    ) -> None:
        self._explicit_key = None if key is None else key_to_string(key)
        self.optional = optional
        self.cache = cache
        self.table = table if table is not None else default_declarations
        self.declaration: Declaration | None = None

    @property
    def key(self) -> str | None:
        if self.declaration is not None:
            return self.declaration.key
        return self._explicit_key

    def __set_name__(self, owner: type[Any], name: str) -> None:
        key = self._explicit_key
        if key is None:
            key = _infer_key(owner, name)
        self.declaration = Declaration(
            owner=owner,
            field_name=name,
            key=key,
            optional=self.optional,
            cache=self.cache,
        )
        self.table.record(self.declaration)

    @overload
    def __get__(self, instance: None, owner: type[Any]) -> Dep[T]: ...

    @overload
    def __get__(self, instance: object, owner: type[Any]) -> T: ...

    def __get__(self, instance: object | None, owner: type[Any]) -> Dep[T] | T:
        if instance is None:
            return self
        declaration = self.declaration
        if declaration is None:
            msg = "dep() must be assigned in a class body"
            raise TypeError(msg)

        mesh = get_back_reference(instance)
        if mesh is None:
            raise MeshInstanceNotConnectedError(type(instance).__name__, declaration.field_name)

        if declaration.optional:
            value = mesh.try_resolve(declaration.key)
            if value is None:
                return None  # type: ignore[return-value]
        else:
            value = mesh.resolve(declaration.key)

        if declaration.cache:
            # Instance attribute shadows this non-data descriptor on later reads.
            with suppress(AttributeError, TypeError):
                object.__setattr__(instance, declaration.field_name, value)
        return value


def dep(
    key: ServiceKey | None = None,
    *,
    optional: bool = False,
    cache: bool = True,
    table: DeclarationTable | None = None,
) -> Any:
    """Declare a field resolved lazily from the container owning the instance.

    The field can be read from inside ``__init__`` of a container-built class,
    and from any object adopted with ``Mesh.connect``.

    Args:
        key: Key to resolve. Inferred from the field annotation when omitted: a
            class contributes its name, a string annotation its text.
        optional: Yield ``None`` instead of raising when nothing binds the key.
        cache: Pin the first resolved value onto the instance. With ``False``
            every read resolves again and follows binding changes.
        table: Declaration table to record into. Defaults to the shared table.

    Raises:
        MeshDepKeyNotInferredError: At class creation, when ``key`` is omitted
            and the annotation does not name a class.

    Examples:
        .. code-block:: python

            class Database:
                logger: Logger = dep()
                settings: Settings = dep(key="DatabaseSettings", optional=True)

                def connect(self) -> None:
                    self.logger.log("Connected to database")

    """
    return Dep(key, optional=optional, cache=cache, table=table)


def _infer_key(owner: type[Any], name: str) -> str:
    annotation = _field_annotation(owner, name)
    if isinstance(annotation, ForwardRef):
        annotation = annotation.__forward_arg__
    if isinstance(annotation, str):
        if annotation.isidentifier():
            return annotation
    elif is_constructor(annotation):
        return annotation.__name__
    raise MeshDepKeyNotInferredError(owner.__name__, name)


def _field_annotation(owner: type[Any], name: str) -> Any:
    if sys.version_info >= (3, 14):
        import annotationlib  # noqa: PLC0415

        annotations = annotationlib.get_annotations(
            owner,
            format=annotationlib.Format.FORWARDREF,
        )
    else:
        annotations = owner.__dict__.get("__annotations__", {})
    return annotations.get(name, _MISSING_ANNOTATION)


__all__ = ["Dep", "dep"]
