"""Configuration values for fields marked with :class:`~sprig.markers.Value`.

The container does not own a configuration system. It unwraps ``${...}``
placeholders, asks a :class:`PropertyResolver` for the key and coerces the
resulting string to the field's declared type. With no resolver, or when the
resolver has no value, ``${key:default}`` yields ``default`` and ``${key}``
yields the literal ``key``.
"""

import logging
import os
import types
from typing import Any, Mapping, Optional, Protocol, Union, get_args, get_origin, runtime_checkable

__all__ = [
    "PropertyResolver",
    "MappingPropertyResolver",
    "EnvironmentPropertyResolver",
    "strip_placeholder",
    "resolve_expression",
    "coerce_value",
    "unwrap_optional",
]

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "${"
PLACEHOLDER_SUFFIX = "}"
DEFAULT_SEPARATOR = ":"


@runtime_checkable
class PropertyResolver(Protocol):
    def resolve(self, key: str) -> Optional[str]:
        """Return the value for ``key``, or None if it is not defined."""
        ...


class MappingPropertyResolver:
    """Resolve properties from a plain mapping, e.g. ``{"order.prefix": "ORD"}``."""

    def __init__(self, properties: Optional[Mapping[str, Any]] = None):
        self._properties = dict(properties or {})

    def resolve(self, key: str) -> Optional[str]:
        value = self._properties.get(key)
        return None if value is None else str(value)


class EnvironmentPropertyResolver:
    """Resolve properties from environment variables.

    ``order.prefix`` is looked up as ``order.prefix`` first and then as
    ``ORDER_PREFIX``, with ``prefix`` prepended to both when given.
    """

    def __init__(self, prefix: str = "", environ: Optional[Mapping[str, str]] = None):
        self._prefix = prefix
        self._environ = os.environ if environ is None else environ

    def resolve(self, key: str) -> Optional[str]:
        for candidate in (key, key.upper().replace(".", "_").replace("-", "_")):
            value = self._environ.get(self._prefix + candidate)
            if value is not None:
                return value
        return None


def strip_placeholder(expression: str) -> str:
    """Remove a ``${...}`` wrapper if present.

    Example:
        >>> strip_placeholder("${order.prefix:ORD}")
        'order.prefix:ORD'
        >>> strip_placeholder("plain")
        'plain'
    """
    if expression.startswith(PLACEHOLDER_PREFIX) and expression.endswith(PLACEHOLDER_SUFFIX):
        return expression[len(PLACEHOLDER_PREFIX):-len(PLACEHOLDER_SUFFIX)]
    return expression


def resolve_expression(expression: str, resolver: Optional[PropertyResolver] = None) -> str:
    """Turn a value expression into the raw string to be coerced.

    Args:
        expression: The text given to ``Value``, placeholder or literal.
        resolver: Optional source of property values.

    Returns:
        The resolved value, the placeholder default, or the unwrapped literal.
    """
    inner = strip_placeholder(expression)
    if inner == expression:
        return expression

    key, separator, default = inner.partition(DEFAULT_SEPARATOR)
    if resolver is not None:
        value = resolver.resolve(key)
        if value is not None:
            return value
    if separator:
        return default

    logger.debug("No value for property '%s', using the literal key", key)
    return inner


def unwrap_optional(declared_type: Any) -> Any:
    if get_origin(declared_type) in (Union, getattr(types, "UnionType", Union)):
        args = [arg for arg in get_args(declared_type) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return declared_type


def coerce_value(raw: str, declared_type: Any) -> Any:
    """Convert ``raw`` to ``str``, ``int``, ``float`` or ``bool``.

    Any other declared type receives the raw string unchanged.

    Raises:
        ValueError: If ``raw`` is not a valid ``int`` or ``float``.
    """
    target = unwrap_optional(declared_type)
    if target is bool:
        return raw.strip().lower() == "true"
    if target is int:
        return int(raw.strip())
    if target is float:
        return float(raw.strip())
    return raw
