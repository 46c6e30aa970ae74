"""Domain models used throughout the container."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from sprig.errors import ContainerError

__all__ = [
    "Scope",
    "InjectionTarget",
    "ConstructionPhase",
    "DependencySpec",
    "ValueSpec",
    "SetterSpec",
    "InjectionPoints",
    "ComponentDescriptor",
]


class Scope(str, Enum):
    """Lifetime of the instances handed out for a component."""

    SINGLETON = "singleton"
    PROTOTYPE = "prototype"

    @staticmethod
    def parse(value: Any) -> "Scope":
        """Turn a scope string (or ``Scope``) into a ``Scope``.

        Raises:
            ContainerError: If the value names no known scope.
        """
        if isinstance(value, Scope):
            return value
        try:
            return Scope(str(value).strip().lower())
        except ValueError:
            raise ContainerError(
                f"Unknown scope '{value}': expected one of {[s.value for s in Scope]}"
            ) from None


class InjectionTarget(str, Enum):
    CONSTRUCTOR = "constructor"
    FIELD = "field"
    SETTER = "setter"


class ConstructionPhase(str, Enum):
    """States a component instance passes through while it is being built."""

    UNSTARTED = "unstarted"
    INSTANTIATING = "instantiating"
    POPULATING = "populating"
    INITIALIZING = "initializing"
    READY = "ready"


@dataclass(frozen=True)
class DependencySpec:
    """Describes one injection point on a component.

    Attributes:
        target: Whether this is a constructor parameter, a field or a setter parameter.
        attribute: The parameter or field name.
        declared_type: The type the dependency is looked up by.
        name: Optional component name; when set the dependency is looked up by name.
        required: Whether a missing dependency fails construction.
    """

    target: InjectionTarget
    attribute: str
    declared_type: Optional[type]
    name: Optional[str] = None
    required: bool = True

    def describe(self) -> str:
        return self.name or getattr(self.declared_type, "__qualname__", str(self.declared_type))


@dataclass(frozen=True)
class ValueSpec:
    """A field populated from a configuration expression such as ``${order.prefix:ORD}``."""

    attribute: str
    declared_type: Any
    expression: str


@dataclass(frozen=True)
class SetterSpec:
    """A method invoked after instantiation with its resolved parameters."""

    method: str
    parameters: list[DependencySpec]
    required: bool = True


@dataclass(frozen=True)
class InjectionPoints:
    """Everything the injector needs to know about a component type.

    Computed once when the component is registered, so construction never walks
    the type again.

    Attributes:
        constructor: Parameters of the autowired constructor, or None to construct
            the component with no arguments.
        fields: Autowired fields.
        values: Configuration value fields.
        setters: Autowired setter methods.
    """

    constructor: Optional[list[DependencySpec]] = None
    fields: list[DependencySpec] = field(default_factory=list)
    values: list[ValueSpec] = field(default_factory=list)
    setters: list[SetterSpec] = field(default_factory=list)


@dataclass(frozen=True)
class ComponentDescriptor:
    """Registered metadata about a component.

    Attributes:
        name: The logical name, unique within a registry.
        component_type: The class instantiated for this component.
        scope: Singleton or prototype.
        lazy: If True, a singleton is only built on first lookup rather than at startup.
        injection_points: The component's constructor, field and setter injection points.
    """

    name: str
    component_type: type
    scope: Scope = Scope.SINGLETON
    lazy: bool = False
    injection_points: InjectionPoints = field(default_factory=InjectionPoints)

    @property
    def is_singleton(self) -> bool:
        return self.scope is Scope.SINGLETON

    @property
    def is_prototype(self) -> bool:
        return self.scope is Scope.PROTOTYPE
