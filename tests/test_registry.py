from typing import Annotated, Optional

import pytest

from sprig.domain import ComponentDescriptor, InjectionTarget, Scope
from sprig.errors import ContainerError, NoSuchComponentError
from sprig.markers import Autowired, Value, autowired, component, lazy, scope
from sprig.registry import DescriptorRegistry, describe, inferred_name


class Database:
    pass


class Cache:
    pass


class AuditLog:
    pass


class PlainService:
    pass


@component("reporting", scope="prototype", lazy=True)
class ReportingService:
    database: Annotated[Database, Autowired()]
    cache: Annotated[Optional[Cache], Autowired(required=False)]
    primary: Annotated[Database, Autowired(name="primaryDatabase")]
    page_size: Annotated[int, Value("${reports.page-size:20}")]
    title: str = "untouched"

    @autowired
    def __init__(self, audit: AuditLog, backup: Annotated[Database, "backupDatabase"]):
        self.audit = audit
        self.backup = backup

    @autowired(required=False)
    def set_cache(self, cache: Cache):
        self.cache = cache

    def not_injected(self, value: int):
        pass


class ExtendedReportingService(ReportingService):
    extra: Annotated[Cache, Autowired()]


@pytest.fixture
def registry():
    return DescriptorRegistry()


def test_name_is_inferred_from_class_name():
    assert inferred_name(PlainService) == "plainService"
    assert describe(PlainService).name == "plainService"


def test_defaults_for_undecorated_class():
    descriptor = describe(PlainService)

    assert descriptor.scope is Scope.SINGLETON
    assert descriptor.lazy is False
    assert descriptor.injection_points.constructor is None
    assert descriptor.injection_points.fields == []
    assert descriptor.injection_points.setters == []


def test_component_decorator_supplies_name_scope_and_laziness():
    descriptor = describe(ReportingService)

    assert descriptor.name == "reporting"
    assert descriptor.is_prototype
    assert descriptor.lazy is True


def test_explicit_arguments_override_decorator():
    descriptor = describe(ReportingService, name="reports", scope="singleton", lazy=False)

    assert descriptor.name == "reports"
    assert descriptor.is_singleton
    assert descriptor.lazy is False


def test_bare_component_decorator_and_stacked_markers():
    @lazy
    @scope("PROTOTYPE")
    @component
    class Stacked:
        pass

    descriptor = describe(Stacked)
    assert descriptor.name == "stacked"
    assert descriptor.scope is Scope.PROTOTYPE
    assert descriptor.lazy is True


def test_autowired_fields_are_described():
    fields = {f.attribute: f for f in describe(ReportingService).injection_points.fields}

    assert set(fields) == {"database", "cache", "primary"}
    assert fields["database"].declared_type is Database
    assert fields["database"].required is True
    assert fields["database"].target is InjectionTarget.FIELD
    assert fields["cache"].declared_type is Cache
    assert fields["cache"].required is False
    assert fields["primary"].name == "primaryDatabase"


def test_value_fields_are_described():
    values = describe(ReportingService).injection_points.values

    assert len(values) == 1
    assert values[0].attribute == "page_size"
    assert values[0].declared_type is int
    assert values[0].expression == "${reports.page-size:20}"


def test_autowired_constructor_parameters_are_described():
    constructor = describe(ReportingService).injection_points.constructor

    assert [(p.attribute, p.declared_type, p.name) for p in constructor] == [
        ("audit", AuditLog, None),
        ("backup", Database, "backupDatabase"),
    ]
    assert all(p.target is InjectionTarget.CONSTRUCTOR for p in constructor)


def test_parameter_level_autowired_marker_can_make_a_parameter_optional():
    class Notifier:
        @autowired
        def __init__(
            self,
            audit: Annotated[AuditLog, Autowired(required=False)],
            cache: Annotated[Cache, Autowired(required=False, name="fastCache")],
            database: Annotated[Database, Autowired()],
        ):
            pass

        @autowired(required=False)
        def set_database(self, database: Annotated[Database, Autowired(required=True)]):
            pass

    descriptor = describe(Notifier)

    assert [(p.attribute, p.name, p.required) for p in descriptor.injection_points.constructor] == [
        ("audit", None, False),
        ("cache", "fastCache", False),
        ("database", None, True),
    ]
    # An optional setter keeps every parameter optional.
    assert descriptor.injection_points.setters[0].parameters[0].required is False


def test_only_marked_methods_become_setters():
    setters = describe(ReportingService).injection_points.setters

    assert [s.method for s in setters] == ["set_cache"]
    assert setters[0].required is False
    assert setters[0].parameters[0].declared_type is Cache
    assert setters[0].parameters[0].required is False


def test_injection_points_are_inherited():
    descriptor = describe(ExtendedReportingService)

    assert [f.attribute for f in descriptor.injection_points.fields] == [
        "database",
        "cache",
        "primary",
        "extra",
    ]
    assert descriptor.injection_points.constructor is not None
    # The decorator is declared on the base class only.
    assert descriptor.name == "extendedReportingService"
    assert descriptor.is_singleton


def test_unannotated_parameter_is_rejected():
    class Broken:
        @autowired
        def __init__(self, something):
            self.something = something

    with pytest.raises(ContainerError, match="Dependency 'something'.*is not annotated"):
        describe(Broken)


def test_unknown_scope_is_rejected():
    with pytest.raises(ContainerError, match="Unknown scope 'session'"):
        describe(PlainService, scope="session")


def test_only_classes_can_be_described():
    with pytest.raises(ContainerError, match="is not a class"):
        describe(lambda: None)


def test_registry_preserves_registration_order(registry):
    for name in ["c", "a", "b"]:
        registry.register(name, ComponentDescriptor(name, PlainService))

    assert registry.names() == ["c", "a", "b"]
    assert len(registry) == 3


def test_reregistering_replaces_descriptor_in_place(registry):
    registry.register("first", ComponentDescriptor("first", PlainService))
    registry.register("second", ComponentDescriptor("second", PlainService))
    registry.register("first", ComponentDescriptor("first", Database))

    assert registry.names() == ["first", "second"]
    assert registry.get("first").component_type is Database


def test_registered_name_wins_over_descriptor_name(registry):
    registry.register("alias", ComponentDescriptor("original", PlainService))

    assert registry.get("alias").name == "alias"
    assert "original" not in registry


def test_missing_descriptor_raises(registry):
    with pytest.raises(NoSuchComponentError, match="No component named 'missing'"):
        registry.get("missing")

    assert not registry.contains("missing")
