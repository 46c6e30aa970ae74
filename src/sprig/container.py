"""The container facade: registration, startup and component lookup.

Example:
    >>> container = Container()
    >>> container.register_all([UserServiceImpl, OrderServiceImpl])
    >>> container.eager_init()
    >>> container["orderService"].create_order("PROD-1234", 5)
"""

import logging
import time
from typing import Any, Iterable, Optional, Union

from sprig.cache import InstanceCache
from sprig.config import PropertyResolver
from sprig.domain import ComponentDescriptor, Scope
from sprig.errors import ContainerError
from sprig.markers import scan_packages_of
from sprig.registry import DescriptorRegistry, describe
from sprig.resolver import DependencyResolver
from sprig.scanner import ComponentScanner, ScannedComponent

__all__ = ["Container", "ComponentKey"]

logger = logging.getLogger(__name__)


ComponentKey = Union[str, type]
"""Type alias for keys used to look up components in a Container.

A string looks a component up by name; a type looks up the first registered
component whose class is a subclass of it.

Example:
    >>> container["userService"]  # Lookup by name
    >>> container[UserService]    # Lookup by type
"""


class Container:
    """Registers components, builds them in dependency order and hands them out.

    Each container owns its own registry and singleton cache; containers never
    share instances.

    Args:
        property_resolver: Source of values for ``${...}`` configuration placeholders.
        name: Display name used in log messages; defaults to ``sprig-<startup ms>``.
    """

    def __init__(
        self,
        property_resolver: Optional[PropertyResolver] = None,
        name: Optional[str] = None,
    ):
        self.startup_date = int(time.time() * 1000)
        self.name = name or f"sprig-{self.startup_date}"
        self._registry = DescriptorRegistry()
        self._cache = InstanceCache()
        self._resolver = DependencyResolver(self._registry, self._cache, property_resolver)
        self._scanner = ComponentScanner()
        self._active = True

    def register(
        self,
        component_type: type,
        name: Optional[str] = None,
        scope: Union[str, Scope, None] = None,
        lazy: Optional[bool] = None,
    ) -> ComponentDescriptor:
        """Describe a class and register it.

        A class marked with :func:`~sprig.markers.component_scan` is a
        configuration class: once it is registered, the packages it names (or
        its own package) are scanned as well.

        Returns:
            The registered descriptor.

        Raises:
            ContainerError: If the class cannot be described.
        """
        descriptor = self.register_descriptor(describe(component_type, name, scope, lazy))
        packages = scan_packages_of(component_type)
        if packages is not None:
            logger.info(
                "Configuration class %s requests a scan of %s",
                component_type.__qualname__,
                ", ".join(getattr(p, "__name__", p) for p in packages),
            )
            self.scan(*packages)
        return descriptor

    def register_descriptor(self, descriptor: ComponentDescriptor) -> ComponentDescriptor:
        """Register a descriptor, replacing any component with the same name.

        A singleton already built for a replaced name is discarded, so the next
        lookup builds the new component.
        """
        self._registry.register(descriptor.name, descriptor)
        self._cache.evict(descriptor.name)
        logger.info(
            "Registered component '%s' of type %s",
            descriptor.name,
            descriptor.component_type.__qualname__,
        )
        return descriptor

    def register_all(self, items: Iterable[Any]) -> list[ComponentDescriptor]:
        """Register classes, descriptors, scanned components or ``(class, name, scope)`` tuples."""
        registered = []
        for item in items:
            if isinstance(item, ComponentDescriptor):
                registered.append(self.register_descriptor(item))
            elif isinstance(item, ScannedComponent):
                registered.append(
                    self.register_descriptor(describe(item.component_type, item.name, item.scope))
                )
            elif isinstance(item, tuple):
                registered.append(self.register(*item))
            else:
                registered.append(self.register(item))
        return registered

    def scan(self, *packages) -> int:
        """Register every ``@component`` class found in the given packages.

        Scanned classes are registered as they are; a ``component_scan`` marker
        on one of them does not start another scan.

        Returns:
            The number of components registered.
        """
        count = 0
        for package in packages:
            found = self.register_all(self._scanner.scan(package))
            logger.info("Found %d components in package %s", len(found), package)
            count += len(found)
        return count

    def eager_init(self):
        """Build every non-lazy singleton, in registration order.

        Raises:
            ContainerError: If any component fails; the container is then inactive.
        """
        try:
            for name, descriptor in self._registry.descriptors():
                if descriptor.is_singleton and not descriptor.lazy:
                    self._resolver.resolve_by_name(name)
        except ContainerError:
            logger.exception("Error refreshing container %s", self.name)
            self._active = False
            raise
        logger.info("Container refreshed: %s", self.name)

    def refresh(self):
        """Alias of :meth:`eager_init`."""
        self.eager_init()

    def get(self, key: ComponentKey) -> Any:
        """Look a component up by name or by type.

        Args:
            key: A component name, or a type to match against registered classes.

        Returns:
            The instance; a singleton is built on first use, a prototype every time.

        Raises:
            NoSuchComponentError: If nothing matches ``key``.
            TypeError: If ``key`` is neither a string nor a type.

        Example:
            >>> container.get("orderService")
            >>> container.get(OrderService)
        """
        if isinstance(key, str):
            return self.get_by_name(key)
        if isinstance(key, type):
            return self.get_by_type(key)
        raise TypeError(f"Component key must be a name or a type, not {key!r}")

    def __getitem__(self, key: ComponentKey) -> Any:
        return self.get(key)

    def get_by_name(self, name: str) -> Any:
        """Raises NoSuchComponentError if nothing is registered under ``name``."""
        return self._resolver.resolve_by_name(name)

    def get_by_type(self, component_type: type) -> Any:
        """Return the first registered component assignable to ``component_type``.

        Raises:
            AmbiguousOrMissingError: If no registered component matches.
        """
        return self._resolver.resolve_by_type(component_type)

    def get_optional(self, component_type: type) -> Optional[Any]:
        """Like :meth:`get_by_type`, but return None when nothing matches.

        A matching component that fails to build still raises.
        """
        return self._resolver.resolve_by_type_optional(component_type)

    def get_all(self, component_type: type) -> dict[str, Any]:
        """All components assignable to ``component_type``, keyed by name."""
        return self._resolver.resolve_all_of_type(component_type)

    def contains(self, name: str) -> bool:
        """Whether a component is registered under ``name``, built or not."""
        return self._registry.contains(name)

    def __contains__(self, name: object) -> bool:
        return self._registry.contains(name)

    def is_cached(self, name: str) -> bool:
        """Whether the singleton ``name`` has already been built."""
        return name in self._cache

    def names(self) -> list[str]:
        """Registered component names, in registration order."""
        return self._registry.names()

    def descriptor(self, name: str) -> ComponentDescriptor:
        """Return the descriptor registered under ``name``.

        Raises:
            NoSuchComponentError: If nothing is registered under ``name``.
        """
        return self._registry.get(name)

    def publish_event(self, event: Any):
        """Announce an application event.

        Events are only logged at INFO; there are no listeners to deliver them to.

        Example:
            >>> container.publish_event("orders-imported")
        """
        logger.info("Event published: %s", event)

    @property
    def active(self) -> bool:
        """False once the container is closed or failed to start."""
        return self._active

    def close(self):
        """Mark the container inactive. Instances are not torn down."""
        self._active = False
        logger.info("Closing container: %s", self.name)

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
