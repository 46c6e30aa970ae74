"""High level entry point for starting a container."""

import logging
from types import ModuleType
from typing import Any, Iterable, Mapping, Optional, Union

from sprig.config import MappingPropertyResolver, PropertyResolver
from sprig.container import Container

__all__ = ["run"]

logger = logging.getLogger(__name__)


def run(
    *sources: Any,
    packages: Iterable[Union[str, ModuleType]] = (),
    properties: Optional[Mapping[str, Any]] = None,
    property_resolver: Optional[PropertyResolver] = None,
    name: Optional[str] = None,
) -> Container:
    """Create, populate and start a :class:`Container`.

    Args:
        sources: Component classes or descriptors to register, in order. A
            configuration class marked with ``@component_scan`` also has its
            packages scanned.
        packages: Packages to scan for ``@component`` classes after the sources.
        properties: Values for ``${...}`` placeholders, used when no
            ``property_resolver`` is given.
        property_resolver: Source of configuration values.
        name: Optional container name.

    Returns:
        The started container, with every eager singleton built.

    Raises:
        ContainerError: If any component cannot be registered or built.

    Example:
        >>> @component_scan("myapp.services")
        ... class AppConfig: ...
        >>> container = run(AppConfig, properties={"order.prefix": "ORD"})
        >>> container[OrderService].create_order("PROD-1234", 5)
    """
    logger.info("Starting container")
    if property_resolver is None and properties is not None:
        property_resolver = MappingPropertyResolver(properties)

    container = Container(property_resolver, name)
    container.register_all(sources)
    container.scan(*packages)
    container.eager_init()

    logger.info("Container %s started", container.name)
    return container
