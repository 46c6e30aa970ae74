from typing import Optional

import pytest

from sprig.config import (
    EnvironmentPropertyResolver,
    MappingPropertyResolver,
    PropertyResolver,
    coerce_value,
    resolve_expression,
    strip_placeholder,
)


def test_strip_placeholder():
    assert strip_placeholder("${order.prefix:ORD}") == "order.prefix:ORD"
    assert strip_placeholder("${order.prefix}") == "order.prefix"
    assert strip_placeholder("literal") == "literal"
    assert strip_placeholder("${unterminated") == "${unterminated"


def test_placeholder_default_is_used_without_resolver():
    assert resolve_expression("${order.prefix:ORD}") == "ORD"


def test_placeholder_without_default_yields_literal_key():
    assert resolve_expression("${order.prefix}") == "order.prefix"


def test_literal_expression_is_returned_unchanged():
    assert resolve_expression("ORD") == "ORD"


def test_resolver_value_wins_over_default():
    resolver = MappingPropertyResolver({"order.prefix": "PO"})

    assert resolve_expression("${order.prefix:ORD}", resolver) == "PO"


def test_default_used_when_resolver_has_no_value():
    resolver = MappingPropertyResolver({"other": "x"})

    assert resolve_expression("${order.prefix:ORD}", resolver) == "ORD"


def test_mapping_resolver_stringifies_values():
    resolver = MappingPropertyResolver({"pool.size": 8})

    assert resolver.resolve("pool.size") == "8"
    assert resolver.resolve("missing") is None
    assert isinstance(resolver, PropertyResolver)


def test_environment_resolver_tries_exact_and_upper_snake_case():
    environ = {"APP_ORDER_PREFIX": "ENV", "APP_user.name": "exact"}
    resolver = EnvironmentPropertyResolver("APP_", environ)

    assert resolver.resolve("order.prefix") == "ENV"
    assert resolver.resolve("user.name") == "exact"
    assert resolver.resolve("missing") is None


@pytest.mark.parametrize(
    "raw, declared_type, expected",
    [
        ("ORD", str, "ORD"),
        ("42", int, 42),
        (" 9000000000 ", int, 9000000000),
        ("2.5", float, 2.5),
        ("true", bool, True),
        ("TRUE", bool, True),
        ("yes", bool, False),
        ("7", Optional[int], 7),
        ("raw", list, "raw"),
    ],
)
def test_coerce_value(raw, declared_type, expected):
    assert coerce_value(raw, declared_type) == expected


def test_coerce_invalid_number_raises():
    with pytest.raises(ValueError):
        coerce_value("ORD", int)
