"""Quickstart: declared fields resolved through the owning container.

Declare dependencies with ``dep()``, bind implementations, and resolve only the
top-level service. Fields resolve lazily, even inside ``__init__``.
"""

from __future__ import annotations

from meshwire import Mesh, dep


class Logger:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def log(self, message: str) -> None:
        self.messages.append(message)


class Database:
    logger: Logger = dep()

    def __init__(self) -> None:
        self.logger.log("Database created")

    def connect(self) -> None:
        self.logger.log("Connected to database")


class UserService:
    database: Database = dep()


def main() -> None:
    mesh = Mesh()
    mesh.bind_service(Logger)
    mesh.bind_service(Database)
    mesh.bind_service(UserService)

    service = mesh.resolve(UserService)
    service.database.connect()

    print(f"messages={mesh.resolve(Logger).messages}")  # => messages=['Database created', 'Connected to database']
    print(f"same_db={service.database is mesh.resolve(Database)}")  # => same_db=True
    print(f"exact_type={type(service.database) is Database}")  # => exact_type=True


if __name__ == "__main__":
    main()
