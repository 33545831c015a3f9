from __future__ import annotations

from collections.abc import Iterable

from meshwire.bindings import Binding, BindingRegistry


class Scope(BindingRegistry):
    """Hold the bindings a child container starts with.

    Returned by ``Mesh.scope`` and filled with the usual ``bind_*`` calls.
    ``Mesh.create_scope`` copies the current bindings into each new child, so
    changes made afterwards only affect children created later.

    Examples:
        .. code-block:: python

            mesh.scope("request").bind_service(RequestHandler)

            request_mesh = mesh.create_scope("request")
            request_mesh.bind_constant("RequestId", "42")
            handler = request_mesh.resolve(RequestHandler)

    """

    def __init__(self, scope_id: str, bindings: Iterable[tuple[str, Binding]] = ()) -> None:
        super().__init__(scope_id, bindings)
        self.scope_id = scope_id

    def __repr__(self) -> str:
        return f"Scope({self.scope_id!r}, bindings={len(self)})"


__all__ = ["Scope"]
