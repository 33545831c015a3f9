"""Scopes: per-request child containers sharing parent singletons."""

from __future__ import annotations

from meshwire import Mesh, dep


class Metrics:
    def __init__(self) -> None:
        self.requests = 0


class RequestHandler:
    request_id: str = dep(key="RequestId")
    metrics: Metrics = dep()

    def handle(self) -> str:
        self.metrics.requests += 1
        return f"handled {self.request_id}"


def main() -> None:
    app = Mesh("app")
    app.bind_service(Metrics)
    app.scope("request").bind_service(RequestHandler)

    request_a = app.create_scope("request").bind_constant("RequestId", "a")
    request_b = app.create_scope("request").bind_constant("RequestId", "b")
    handler_a = request_a.resolve(RequestHandler)
    handler_b = request_b.resolve(RequestHandler)

    print(handler_a.handle())  # => handled a
    print(handler_b.handle())  # => handled b
    print(f"shared_metrics={handler_a.metrics is handler_b.metrics}")  # => shared_metrics=True

    print(f"requests={app.resolve(Metrics).requests}")  # => requests=2


if __name__ == "__main__":
    main()
