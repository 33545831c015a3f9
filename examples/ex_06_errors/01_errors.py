"""Errors: what each failure carries."""

from __future__ import annotations

from meshwire import Mesh, dep
from meshwire.exceptions import (
    MeshBindingNotFoundError,
    MeshInstanceNotConnectedError,
    MeshInvalidBindingError,
)


class Mailer:
    pass


class Signup:
    mailer: Mailer = dep()
    audit: Mailer = dep(key="AuditMailer", optional=True)


def main() -> None:
    mesh = Mesh("app")
    mesh.bind_service(Signup)
    signup = mesh.resolve(Signup)

    print(f"optional={signup.audit}")  # => optional=None

    try:
        _ = signup.mailer
    except MeshBindingNotFoundError as error:
        print(f"not_found={error.key}@{error.mesh_name}")  # => not_found=Mailer@app

    try:
        _ = Signup().mailer
    except MeshInstanceNotConnectedError as error:
        print(f"not_connected={error.type_name}.{error.field_name}")  # => not_connected=Signup.mailer

    try:
        mesh.bind_service("mailer", Mailer())  # type: ignore[arg-type]
    except MeshInvalidBindingError as error:
        print(f"invalid={error.key}")  # => invalid=mailer


if __name__ == "__main__":
    main()
