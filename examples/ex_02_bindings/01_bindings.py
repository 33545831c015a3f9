"""Binding kinds: services, constants and live aliases."""

from __future__ import annotations

from meshwire import Mesh, dep


class Logger:
    def log(self, message: str) -> str:
        raise NotImplementedError


class ConsoleLogger(Logger):
    def log(self, message: str) -> str:
        return f"console: {message}"


class FileLogger(Logger):
    def log(self, message: str) -> str:
        return f"file: {message}"


class Settings:
    def __init__(self, dsn: str) -> None:
        self.dsn = dsn


class Repository:
    settings: Settings = dep()
    logger: Logger = dep(cache=False)


def main() -> None:
    mesh = Mesh()
    mesh.bind_constant(Settings, Settings("sqlite://"))
    mesh.bind_service(ConsoleLogger)
    mesh.bind_service(FileLogger)
    mesh.bind_alias(Logger, ConsoleLogger)
    mesh.bind_service(Repository)

    repository = mesh.resolve(Repository)
    print(f"dsn={repository.settings.dsn}")  # => dsn=sqlite://
    print(repository.logger.log("hello"))  # => console: hello

    mesh.bind_alias(Logger, FileLogger)
    print(repository.logger.log("hello"))  # => file: hello


if __name__ == "__main__":
    main()
