"""Declarative markers that drive registration and injection.

Markers only attach metadata; :func:`sprig.registry.describe` reads it once at
registration time and turns it into :class:`~sprig.domain.InjectionPoints`.

Example:
    >>> @component("orderService")
    ... class OrderServiceImpl(OrderService):
    ...     user_service: Annotated[UserService, Autowired()]
    ...     prefix: Annotated[str, Value("${order.prefix:ORD}")]
    ...
    ...     @autowired(required=False)
    ...     def set_audit(self, audit: AuditLog):
    ...         self.audit = audit
"""

import sys
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Callable, Optional, Union

from sprig.domain import Scope

__all__ = [
    "Autowired",
    "Value",
    "autowired",
    "component",
    "scope",
    "lazy",
    "component_scan",
    "scan_packages_of",
    "component_metadata",
    "is_component",
]

COMPONENT_METADATA = "__component_metadata__"
AUTOWIRED_MARKER = "__autowired__"


@dataclass(frozen=True)
class Autowired:
    """Marks a field (through ``Annotated``) for dependency injection.

    Attributes:
        required: If False, a missing dependency leaves the field unset. On a
            constructor or setter parameter, the argument is left out of the call
            so its default applies.
        name: Look the dependency up by this component name instead of by type.
    """

    required: bool = True
    name: Optional[str] = None


@dataclass(frozen=True)
class Value:
    """Marks a field (through ``Annotated``) as a configuration value."""

    expression: str


def autowired(target: Optional[Callable] = None, *, required: bool = True):
    """Mark a constructor or setter method for injection.

    Can be used bare (``@autowired``) or called (``@autowired(required=False)``).
    Every parameter after ``self`` is resolved from its type hint.
    """
    def decorator(func: Callable) -> Callable:
        setattr(func, AUTOWIRED_MARKER, Autowired(required=required))
        return func

    if target is not None:
        return decorator(target)
    return decorator


def _set_metadata(target: type, **kwargs) -> type:
    # Copy rather than update, so tagging a subclass never touches its base.
    metadata = dict(vars(target).get(COMPONENT_METADATA, {}))
    metadata.update(kwargs)
    setattr(target, COMPONENT_METADATA, metadata)
    return target


def component(
    name: Union[str, type, None] = None,
    scope: Union[str, Scope, None] = None,
    lazy: Optional[bool] = None,
):
    """Tag a class as a component.

    Args:
        name: The logical name; defaults to the class name with a lower-case first letter.
        scope: ``"singleton"`` (default) or ``"prototype"``.
        lazy: If True, a singleton is built on first lookup instead of at startup.

    Example:
        @component
        class UserServiceImpl(UserService): ...

        @component("orderService", scope="prototype")
        class OrderServiceImpl(OrderService): ...
    """
    if isinstance(name, type):
        return _set_metadata(name, component=True)

    def decorator(target: type) -> type:
        metadata: dict[str, Any] = {"component": True}
        if name:
            metadata["name"] = name
        if scope is not None:
            metadata["scope"] = Scope.parse(scope)
        if lazy is not None:
            metadata["lazy"] = lazy
        return _set_metadata(target, **metadata)

    return decorator


def scope(value: Union[str, Scope]) -> Callable[[type], type]:
    parsed = Scope.parse(value)

    def decorator(target: type) -> type:
        return _set_metadata(target, scope=parsed)

    return decorator


def lazy(target: Union[type, bool, None] = None):
    """Mark a class as lazily initialized: ``@lazy`` or ``@lazy(False)``."""
    if isinstance(target, type):
        return _set_metadata(target, lazy=True)

    value = True if target is None else bool(target)

    def decorator(cls: type) -> type:
        return _set_metadata(cls, lazy=value)

    return decorator


def component_scan(*packages: Union[str, ModuleType]) -> Callable[[type], type]:
    """Mark a configuration class whose registration also scans packages.

    With no arguments, the package containing the class is scanned.

    Example:
        @component_scan("myapp.services", "myapp.reporting")
        class AppConfig: ...

        container = run(AppConfig)
    """
    def decorator(target: type) -> type:
        return _set_metadata(target, scan_packages=packages)

    return decorator


def scan_packages_of(target: type) -> Optional[tuple[Union[str, ModuleType], ...]]:
    """Packages ``target`` asks to have scanned, or None if it is not marked.

    An empty marker resolves to the package the class was defined in.
    """
    packages = component_metadata(target).get("scan_packages")
    if packages is None:
        return None
    if packages:
        return tuple(packages)
    module = target.__module__
    package = getattr(sys.modules.get(module), "__package__", None)
    return (package or module,)


def component_metadata(target: type) -> dict[str, Any]:
    """Metadata declared directly on ``target`` (not inherited from its bases)."""
    return dict(vars(target).get(COMPONENT_METADATA, {}))


def is_component(target: Any) -> bool:
    return isinstance(target, type) and component_metadata(target).get("component", False)
