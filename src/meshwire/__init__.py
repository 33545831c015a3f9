from meshwire.backref import get_back_reference
from meshwire.bindings import (
    AliasBinding,
    Binding,
    BindingRegistry,
    ConstantBinding,
    ScopeBinding,
    ServiceBinding,
)
from meshwire.declarations import Declaration, DeclarationTable, default_declarations
from meshwire.dep import Dep, dep
from meshwire.exceptions import (
    MeshBindingNotFoundError,
    MeshDepKeyNotInferredError,
    MeshError,
    MeshInstanceNotConnectedError,
    MeshInvalidBindingError,
)
from meshwire.handlers import Handler, ainvoke_handlers, find_handlers, handler, invoke_handlers
from meshwire.keys import ServiceKey, key_to_string
from meshwire.mesh import Mesh, Middleware, ScopeProvider
from meshwire.scope import Scope

__all__ = [
    "AliasBinding",
    "Binding",
    "BindingRegistry",
    "ConstantBinding",
    "Declaration",
    "DeclarationTable",
    "Dep",
    "Handler",
    "Mesh",
    "MeshBindingNotFoundError",
    "MeshDepKeyNotInferredError",
    "MeshError",
    "MeshInstanceNotConnectedError",
    "MeshInvalidBindingError",
    "Middleware",
    "Scope",
    "ScopeBinding",
    "ScopeProvider",
    "ServiceBinding",
    "ServiceKey",
    "ainvoke_handlers",
    "default_declarations",
    "dep",
    "find_handlers",
    "get_back_reference",
    "handler",
    "invoke_handlers",
    "key_to_string",
]
