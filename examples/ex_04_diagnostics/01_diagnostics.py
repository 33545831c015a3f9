"""Diagnostics: find unbound dependencies without instantiating anything."""

from __future__ import annotations

from meshwire import Mesh, dep


class Cache:
    pass


class Repository:
    cache: Cache = dep()
    dsn: str = dep(key="DatabaseDsn")


class Service:
    repository: Repository = dep()


def main() -> None:
    mesh = Mesh()
    mesh.bind_service(Service)
    mesh.bind_service(Repository)

    all_keys = sorted(declaration.key for declaration in mesh.all_deps())
    print(f"all={all_keys}")  # => all=['Cache', 'DatabaseDsn', 'Repository']

    missing = sorted(f"{d.owner.__name__}.{d.field_name}" for d in mesh.missing_deps())
    print(f"missing={missing}")  # => missing=['Repository.cache', 'Repository.dsn']


if __name__ == "__main__":
    main()
