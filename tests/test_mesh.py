import logging

import pytest

from meshwire import (
    AliasBinding,
    ConstantBinding,
    Mesh,
    MeshBindingNotFoundError,
    MeshInvalidBindingError,
    ServiceBinding,
    get_back_reference,
)
from tests.services import Database, Logger, StandardLogger, TestLogger


class TestBindings:
    def test_creates_an_instance_of_bound_service(self, mesh: Mesh) -> None:
        mesh.bind_service(Logger, StandardLogger)

        logger = mesh.resolve(Logger)

        assert isinstance(logger, StandardLogger)

    def test_caches_the_instance(self, mesh: Mesh) -> None:
        mesh.bind_service(Logger, StandardLogger)

        assert mesh.resolve(Logger) is mesh.resolve(Logger)

    def test_returns_another_instance_if_binding_has_changed(self, mesh: Mesh) -> None:
        mesh.bind_service(Logger, StandardLogger)
        logger1 = mesh.resolve(Logger)

        mesh.bind_service(Logger, TestLogger)
        logger2 = mesh.resolve(Logger)

        assert logger1 is not logger2
        assert isinstance(logger2, TestLogger)

    def test_stale_entry_is_kept_until_unbind(self, mesh: Mesh) -> None:
        mesh.bind_service(Logger, StandardLogger)
        stale = mesh.resolve(Logger)

        mesh.bind_service(Logger, TestLogger)

        assert mesh.instances["Logger"].value is stale

        mesh.unbind(Logger)

        assert "Logger" not in mesh.instances

    def test_service_bound_to_itself(self, mesh: Mesh) -> None:
        mesh.bind_service(TestLogger)

        assert isinstance(mesh.resolve(TestLogger), TestLogger)
        assert isinstance(mesh.resolve("TestLogger"), TestLogger)

    def test_service_bound_under_string_key(self, mesh: Mesh) -> None:
        mesh.bind_service("logger", TestLogger)

        assert isinstance(mesh.resolve("logger"), TestLogger)

    def test_constant_is_identity_stable(self, mesh: Mesh) -> None:
        value = {"url": "sqlite://"}
        mesh.bind_constant("Settings", value)

        assert mesh.resolve("Settings") is value
        assert mesh.resolve("Settings") is mesh.resolve("Settings")

    def test_constant_none_value_is_cached(self, mesh: Mesh) -> None:
        mesh.bind_constant("Nothing", None)

        assert mesh.resolve("Nothing") is None
        assert mesh.instances["Nothing"].value is None

    def test_fluent_registration(self) -> None:
        mesh = Mesh().service(TestLogger).constant("answer", 42).alias(Logger, TestLogger)

        assert mesh.resolve("answer") == 42
        assert mesh.resolve(Logger) is mesh.resolve(TestLogger)

    def test_lookup_returns_binding_variants(self, mesh: Mesh) -> None:
        mesh.bind_service(TestLogger)
        mesh.bind_constant("answer", 42)
        mesh.bind_alias(Logger, TestLogger)

        assert isinstance(mesh.lookup(TestLogger), ServiceBinding)
        assert isinstance(mesh.lookup("answer"), ConstantBinding)
        alias = mesh.lookup(Logger)
        assert isinstance(alias, AliasBinding)
        assert alias.target == "TestLogger"
        assert mesh.lookup("missing") is None

    def test_lookup_recursive_flag(self, mesh: Mesh) -> None:
        mesh.bind_constant("answer", 42)
        child = Mesh("child", mesh)

        assert child.lookup("answer") is not None
        assert child.lookup("answer", recursive=False) is None

    def test_unbind_clears_binding_and_cache(self, mesh: Mesh) -> None:
        mesh.bind_service(TestLogger)
        mesh.resolve(TestLogger)

        mesh.unbind(TestLogger)

        assert "TestLogger" not in mesh.instances
        with pytest.raises(MeshBindingNotFoundError):
            mesh.resolve(TestLogger)

    def test_unbind_missing_key_is_noop(self, mesh: Mesh) -> None:
        mesh.unbind("missing")

    @pytest.mark.parametrize("impl", [42, "StandardLogger", StandardLogger()])
    def test_invalid_service_implementation(self, mesh: Mesh, impl: object) -> None:
        with pytest.raises(MeshInvalidBindingError) as exc_info:
            mesh.bind_service("logger", impl)  # type: ignore[arg-type]

        assert exc_info.value.key == "logger"

    def test_invalid_keys_are_rejected(self, mesh: Mesh) -> None:
        with pytest.raises(MeshInvalidBindingError) as exc_info:
            mesh.bind_service(42, StandardLogger)  # type: ignore[arg-type]
        assert exc_info.value.key == 42

        with pytest.raises(MeshInvalidBindingError):
            mesh.bind_constant(None, "value")  # type: ignore[arg-type]

    def test_invalid_alias_target(self, mesh: Mesh) -> None:
        with pytest.raises(MeshInvalidBindingError) as exc_info:
            mesh.bind_alias("logger", 42)  # type: ignore[arg-type]

        assert exc_info.value.key == "logger"
        assert mesh.lookup("logger") is None

    def test_service_without_implementation_requires_class(self, mesh: Mesh) -> None:
        with pytest.raises(MeshInvalidBindingError, match='"logger"'):
            mesh.bind_service("logger")

    def test_scope_factory_must_be_callable(self, mesh: Mesh) -> None:
        with pytest.raises(MeshInvalidBindingError):
            mesh.bind_scope("request", "not callable")  # type: ignore[arg-type]

    def test_registration_is_logged(self, mesh: Mesh, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="meshwire"):
            mesh.bind_service(TestLogger)
            mesh.bind_service(TestLogger)

        messages = [record.getMessage() for record in caplog.records]
        assert any(message.startswith("Binding 'TestLogger'") for message in messages)
        assert any(message.startswith("Rebinding 'TestLogger'") for message in messages)


class TestResolve:
    def test_resolves_binding_by_class_name(self, mesh: Mesh) -> None:
        mesh.bind_service(Logger, StandardLogger)

        assert isinstance(mesh.resolve("Logger"), StandardLogger)

    def test_missing_key_raises(self, mesh: Mesh) -> None:
        with pytest.raises(MeshBindingNotFoundError) as exc_info:
            mesh.resolve("Missing")

        assert exc_info.value.mesh_name == "default"
        assert exc_info.value.key == "Missing"
        assert str(exc_info.value) == '"Missing" not found in Mesh "default"'

    def test_missing_key_reports_root_container(self) -> None:
        root = Mesh("root")
        child = Mesh("child", root)

        with pytest.raises(MeshBindingNotFoundError) as exc_info:
            child.resolve(Logger)

        assert exc_info.value.mesh_name == "root"
        assert exc_info.value.key == "Logger"

    def test_try_resolve_returns_none_when_missing(self, mesh: Mesh) -> None:
        assert mesh.try_resolve("Missing") is None

    def test_try_resolve_returns_bound_value(self, mesh: Mesh) -> None:
        mesh.bind_constant("answer", 42)

        assert mesh.try_resolve("answer") == 42

    def test_try_resolve_propagates_construction_errors(self, mesh: Mesh) -> None:
        class Broken:
            def __init__(self) -> None:
                raise RuntimeError("boom")

        mesh.bind_service(Broken)

        with pytest.raises(RuntimeError, match="boom"):
            mesh.try_resolve(Broken)

    def test_mesh_resolves_itself(self, mesh: Mesh) -> None:
        assert mesh.resolve(Mesh) is mesh
        assert mesh.resolve("Mesh") is mesh

    def test_child_resolves_itself_not_parent(self, mesh: Mesh) -> None:
        child = Mesh("child", mesh)

        assert child.resolve(Mesh) is child

    def test_parent_delegation(self, mesh: Mesh) -> None:
        mesh.bind_service(TestLogger)
        child = Mesh("child", mesh)
        grandchild = Mesh("grandchild", child)

        assert grandchild.resolve(TestLogger) is mesh.resolve(TestLogger)
        assert "TestLogger" not in grandchild.instances

    def test_local_binding_shadows_parent(self, mesh: Mesh) -> None:
        mesh.bind_constant("answer", 1)
        child = Mesh("child", mesh).bind_constant("answer", 2)

        assert child.resolve("answer") == 2
        assert mesh.resolve("answer") == 1


class TestAlias:
    def test_alias_resolves_target(self, mesh: Mesh) -> None:
        mesh.bind_service(TestLogger)
        mesh.bind_alias(Logger, TestLogger)

        assert mesh.resolve(Logger) is mesh.resolve(TestLogger)

    def test_alias_is_live(self, mesh: Mesh) -> None:
        mesh.bind_constant("primary", "a")
        mesh.bind_alias("current", "primary")
        assert mesh.resolve("current") == "a"

        mesh.bind_constant("primary", "b")

        assert mesh.resolve("current") == "b"
        assert "current" not in mesh.instances

    def test_alias_chain(self, mesh: Mesh) -> None:
        mesh.bind_constant("c", 3)
        mesh.bind_alias("b", "c")
        mesh.bind_alias("a", "b")

        assert mesh.resolve("a") == 3

    def test_alias_to_missing_key_raises(self, mesh: Mesh) -> None:
        mesh.bind_alias("a", "b")

        with pytest.raises(MeshBindingNotFoundError) as exc_info:
            mesh.resolve("a")

        assert exc_info.value.key == "b"

    def test_alias_cycle_exhausts_recursion(self, mesh: Mesh) -> None:
        mesh.bind_alias("a", "b")
        mesh.bind_alias("b", "a")

        with pytest.raises(RecursionError):
            mesh.resolve("a")


class TestConnect:
    def test_services_are_connected(self, mesh: Mesh) -> None:
        mesh.bind_service(TestLogger)

        logger = mesh.resolve(TestLogger)

        assert get_back_reference(logger) is mesh

    def test_service_keeps_class_identity(self, mesh: Mesh) -> None:
        mesh.bind_service(TestLogger)

        logger = mesh.resolve(TestLogger)

        assert type(logger) is TestLogger
        assert get_back_reference(TestLogger()) is None

    def test_back_reference_does_not_leak_between_containers(self) -> None:
        mesh_a = Mesh("a").bind_service(TestLogger)
        mesh_b = Mesh("b").bind_service(TestLogger)

        assert get_back_reference(mesh_a.resolve(TestLogger)) is mesh_a
        assert get_back_reference(mesh_b.resolve(TestLogger)) is mesh_b

    def test_guest_object_gains_working_deps(self, mesh: Mesh) -> None:
        mesh.bind_service(Logger, TestLogger)
        db = Database()

        assert mesh.connect(db) is db
        db.connect()

        assert mesh.resolve(Logger).messages == ["Connected to database"]

    def test_connect_keeps_existing_back_reference(self, mesh: Mesh) -> None:
        other = Mesh("other")
        guest = other.connect(TestLogger())

        mesh.connect(guest)

        assert get_back_reference(guest) is other

    def test_constant_classes_are_not_connected(self, mesh: Mesh) -> None:
        mesh.bind_constant("LoggerClass", TestLogger)

        assert mesh.resolve("LoggerClass") is TestLogger
        assert get_back_reference(TestLogger()) is None

    def test_constants_without_attributes_are_returned_unchanged(self, mesh: Mesh) -> None:
        mesh.bind_constant("answer", 42)
        mesh.bind_constant("names", ["a"])

        assert mesh.resolve("answer") == 42
        assert mesh.resolve("names") == ["a"]


class TestMiddleware:
    def test_middleware_applies_in_order(self, mesh: Mesh) -> None:
        calls: list[str] = []

        def first(value: object) -> object:
            calls.append("first")
            return value

        def second(value: object) -> object:
            calls.append("second")
            return value

        mesh.use(first).use(second)
        mesh.bind_service(TestLogger)
        mesh.resolve(TestLogger)

        assert calls == ["first", "second"]

    def test_middleware_result_replaces_value(self, mesh: Mesh) -> None:
        mesh.use(lambda value: value * 2 if isinstance(value, int) else value)
        mesh.bind_constant("answer", 21)

        assert mesh.resolve("answer") == 42

    def test_middleware_runs_once_per_cached_value(self, mesh: Mesh) -> None:
        seen: list[object] = []
        mesh.use(lambda value: seen.append(value) or value)
        mesh.bind_service(TestLogger)

        mesh.resolve(TestLogger)
        mesh.resolve(TestLogger)

        assert len(seen) == 1

    def test_middleware_applies_to_guests(self, mesh: Mesh) -> None:
        def tag(value: TestLogger) -> TestLogger:
            value.messages.append("tagged")
            return value

        mesh.use(tag)

        guest = mesh.connect(TestLogger())

        assert guest.messages == ["tagged"]

    def test_parent_middleware_runs_after_child_middleware(self, mesh: Mesh) -> None:
        calls: list[str] = []
        mesh.use(lambda value: calls.append("parent") or value)
        child = Mesh("child", mesh)
        child.use(lambda value: calls.append("child") or value)

        child.connect(TestLogger())

        assert calls == ["child", "parent"]


class TestDependencyResolution:
    def test_resolves_declared_dependency(self, mesh: Mesh) -> None:
        mesh.bind_service(TestLogger)
        mesh.bind_alias(Logger, TestLogger)
        mesh.bind_service(Database)

        db = mesh.resolve(Database)

        assert isinstance(db.logger, TestLogger)
        db.connect()
        assert mesh.resolve(TestLogger).messages == ["Connected to database"]

    def test_logger_bound_to_test_logger(self, mesh: Mesh) -> None:
        mesh.bind_service(Logger, TestLogger)
        mesh.bind_service(Database)

        mesh.resolve(Database).connect()

        assert mesh.resolve(Logger).messages == ["Connected to database"]
