"""Exceptions raised by the container.

Every error derives from :class:`ContainerError`, so callers that only care
whether a lookup worked can catch that single type.
"""

from typing import Optional

__all__ = [
    "ContainerError",
    "NoSuchComponentError",
    "AmbiguousOrMissingError",
    "CircularDependencyError",
    "ConstructionFailedError",
    "RequiredDependencyMissingError",
]


class ContainerError(Exception):
    """Raised when a component cannot be registered, resolved or constructed."""

    pass


class NoSuchComponentError(ContainerError, LookupError):
    """Raised when no component is registered under the requested name."""

    def __init__(self, name: str, message: Optional[str] = None):
        super().__init__(message or f"No component named '{name}' available")
        self.name = name


class AmbiguousOrMissingError(NoSuchComponentError):
    """Raised when a lookup by type finds no candidate component.

    Lookups by type take the first match in registration order, so this is only
    raised when there are zero candidates.
    """

    def __init__(self, component_type: type):
        type_name = getattr(component_type, "__qualname__", repr(component_type))
        super().__init__(
            type_name, f"No qualifying component of type {type_name} found"
        )
        self.component_type = component_type


class CircularDependencyError(ContainerError):
    """Raised when a component is requested again while it is being constructed."""

    def __init__(self, path: list[str]):
        super().__init__(f"Circular dependency detected: {' -> '.join(path)}")
        self.path = path


class ConstructionFailedError(ContainerError):
    """Raised when instantiating, populating or initializing a component fails."""

    def __init__(self, name: str, cause: BaseException, message: Optional[str] = None):
        super().__init__(
            message or f"Error creating component with name '{name}': {cause}"
        )
        self.name = name
        self.cause = cause


class RequiredDependencyMissingError(ConstructionFailedError):
    """Raised when a required constructor, field or setter dependency is missing."""

    def __init__(self, name: str, dependency: str, cause: BaseException):
        super().__init__(
            name,
            cause,
            f"Failed to inject '{dependency}' into component '{name}': {cause}",
        )
        self.dependency = dependency
