"""Middleware and guests: transform connected values and adopt outside objects."""

from __future__ import annotations

from meshwire import Mesh, dep


class Clock:
    def now(self) -> str:
        return "12:00"


class Report:
    clock: Clock = dep()

    def __init__(self) -> None:
        self.tags: list[str] = []

    def render(self) -> str:
        return f"report at {self.clock.now()} tags={self.tags}"


def tag_reports(value: object) -> object:
    if isinstance(value, Report):
        value.tags.append("audited")
    return value


def main() -> None:
    mesh = Mesh()
    mesh.use(tag_reports)
    mesh.bind_service(Clock)

    guest = mesh.connect(Report())
    print(guest.render())  # => report at 12:00 tags=['audited']


if __name__ == "__main__":
    main()
