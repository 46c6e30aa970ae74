from sprig.builders import run
from sprig.config import MappingPropertyResolver
from sprig.container import Container
from sprig.markers import scan_packages_of
from sprig.scanner import ComponentScanner, ScannedComponent

import sample_app
from sample_app.config import AppConfig, ServicesConfig
from sample_app.reporting import ReportGenerator, ReportRequest
from sample_app.services import OrderService, OrderServiceImpl, UserService, UserServiceImpl
from sample_app.services.orders import AuditTrail


def test_scanner_finds_components_in_definition_order():
    scanned = list(ComponentScanner().scan("sample_app"))

    assert [(s.component_type, s.name) for s in scanned] == [
        (ReportGenerator, None),
        (ReportRequest, "reportRequest"),
        (OrderServiceImpl, "orderService"),
        (UserServiceImpl, None),
    ]
    assert AuditTrail not in [s.component_type for s in scanned]


def test_scanner_accepts_a_single_module():
    scanned = list(ComponentScanner().scan(sample_app.services.users))

    assert [s.component_type for s in scanned] == [UserServiceImpl]


def test_order_service_is_wired_with_the_user_service_singleton():
    container = Container()
    container.register(UserServiceImpl, name="userService")
    container.register(OrderServiceImpl)
    container.eager_init()

    order_service = container.get_by_name("orderService")

    assert order_service.user_service is container.get_by_name("userService")
    assert order_service.order_prefix == "ORD"
    assert order_service.component_name == "orderService"


def test_run_scans_and_starts_the_application():
    container = run(packages=["sample_app"])

    user_service = container[UserService]
    order_service = container[OrderService]

    assert user_service.get_current_user() == "Admin"
    user_service.set_current_user("John Doe")

    order_id = order_service.create_order("PROD-1234", 5)
    assert order_id.startswith("ORD-")
    assert order_service.get_order_details(order_id) == (
        "Order for product PROD-1234, quantity 5 by user John Doe"
    )
    assert order_service.get_order_details("nope") == "Order not found: nope"


def test_component_scan_defaults_to_the_declaring_package():
    assert scan_packages_of(AppConfig) == ("sample_app",)
    assert scan_packages_of(ServicesConfig) == ("sample_app.services",)
    assert scan_packages_of(AuditTrail) is None


def test_run_with_a_configuration_class_scans_its_own_package():
    container = run(AppConfig, properties={"default.user": "Guest"})

    assert container.names() == [
        "appConfig",
        "reportGenerator",
        "reportRequest",
        "orderService",
        "userServiceImpl",
    ]
    assert isinstance(container["appConfig"], AppConfig)
    assert container[OrderService].user_service is container[UserService]
    assert container[UserService].get_current_user() == "Guest"


def test_configuration_class_names_the_packages_to_scan():
    container = Container()

    container.register(ServicesConfig)

    assert container.names() == ["servicesConfig", "orderService", "userServiceImpl"]
    assert "reportGenerator" not in container


def test_scanned_configuration_class_does_not_start_another_scan():
    container = Container()

    container.register_all([ScannedComponent(ServicesConfig)])

    assert container.names() == ["servicesConfig"]


def test_run_uses_supplied_properties():
    container = run(
        packages=["sample_app"], properties={"order.prefix": "PO", "default.user": "Guest"}
    )

    assert container[UserService].get_current_user() == "Guest"
    assert container[OrderService].create_order("PROD-1", 1).startswith("PO-")


def test_run_accepts_an_explicit_property_resolver():
    container = run(
        UserServiceImpl,
        OrderServiceImpl,
        property_resolver=MappingPropertyResolver({"order.prefix": "XX"}),
        name="orders",
    )

    assert container.name == "orders"
    assert container["orderService"].order_prefix == "XX"


def test_lazy_and_prototype_components_after_startup():
    container = run(packages=["sample_app"])

    assert container.is_cached("orderService")
    assert container.is_cached("userServiceImpl")
    assert not container.is_cached("reportGenerator")
    assert not container.is_cached("reportRequest")

    first, second = container["reportRequest"], container["reportRequest"]

    assert first is not second
    assert first.generator is second.generator
    assert first.generator.orders is container["orderService"]
    assert container.is_cached("reportGenerator")

