class MeshError(Exception):
    """Represent a base class for all meshwire-specific failures.

    Catch this type when you want to handle any meshwire error path without
    matching each concrete exception class individually.
    """


class MeshBindingNotFoundError(MeshError):
    """Signal that no container in the chain binds the requested key.

    Raised by ``Mesh.resolve`` once the lookup reached the root container, and by
    required ``dep()`` fields when they are read.

    Typical fixes include binding the key on the container (or one of its
    parents), or declaring the field with ``optional=True``.
    """

    def __init__(self, mesh_name: str, key: str) -> None:
        self.mesh_name = mesh_name
        self.key = key
        super().__init__(f'"{key}" not found in Mesh "{mesh_name}"')


class MeshInvalidBindingError(MeshError):
    """Signal that registration arguments match no known binding shape.

    Raised by ``bind_service`` when neither the key nor the implementation is a
    class, and by ``bind_scope`` when the factory is not callable. Keys and
    alias targets must be strings or classes.
    """

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(
            f'Invalid binding "{key}". Valid bindings are: '
            "string to class e.g. ('MyService', MyService), "
            "abstract class to class e.g. (MyService, MyServiceImpl) or "
            "class to self e.g. (MyService)",
        )


class MeshDepKeyNotInferredError(MeshError):
    """Signal that ``dep()`` could not infer a key from the field annotation.

    Raised at class creation time. Typical fix is passing ``dep(key=...)``
    explicitly.
    """

    def __init__(self, type_name: str, field_name: str) -> None:
        self.type_name = type_name
        self.field_name = field_name
        super().__init__(
            f"{type_name}.{field_name}: dep() cannot infer the binding key "
            "(possibly due to a circular or unsupported annotation); "
            "please specify dep(key=...) explicitly",
        )


class MeshInstanceNotConnectedError(MeshError):
    """Signal a ``dep()`` field read on an object no container produced or adopted.

    Typical fixes include resolving the object through a ``Mesh`` or adopting it
    with ``Mesh.connect``.
    """

    def __init__(self, type_name: str, field_name: str) -> None:
        self.type_name = type_name
        self.field_name = field_name
        super().__init__(
            f"{type_name}.{field_name}: cannot access dep(): instance is not connected to Mesh",
        )
