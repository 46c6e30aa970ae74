"""Construction of component instances.

A component is built in three phases: it is instantiated (through its
autowired constructor, or with no arguments), populated (autowired fields,
configuration values and autowired setters) and initialized (the
:class:`~sprig.lifecycle.ComponentNameAware` callback). Only an instance that
has completed all three is handed back to the resolver.
"""

import logging
from typing import TYPE_CHECKING, Any, Optional

from sprig.config import PropertyResolver, coerce_value, resolve_expression
from sprig.domain import ComponentDescriptor, ConstructionPhase, DependencySpec
from sprig.errors import (
    ConstructionFailedError,
    ContainerError,
    NoSuchComponentError,
    RequiredDependencyMissingError,
)
from sprig.lifecycle import ComponentNameAware

if TYPE_CHECKING:
    from sprig.resolver import DependencyResolver

__all__ = ["ComponentInjector"]

logger = logging.getLogger(__name__)

_MISSING = object()


def _present(arguments: dict[str, Any]) -> dict[str, Any]:
    """Drop optional arguments that could not be resolved, so their defaults apply."""
    return {key: value for key, value in arguments.items() if value is not _MISSING}


class ComponentInjector:
    """Build components described by a :class:`ComponentDescriptor`."""

    def __init__(
        self,
        resolver: "DependencyResolver",
        property_resolver: Optional[PropertyResolver] = None,
    ):
        self._resolver = resolver
        self._property_resolver = property_resolver

    def construct(self, name: str, descriptor: ComponentDescriptor) -> Any:
        """Instantiate, populate and initialize a component.

        Args:
            name: The logical name the component is being built for.
            descriptor: The component's descriptor.

        Returns:
            The ready instance.

        Raises:
            ConstructionFailedError: If any phase raises. Errors from resolving
                dependencies (a missing or circular dependency, or a dependency that
                failed to construct) propagate as they are.
        """
        phase = ConstructionPhase.UNSTARTED
        try:
            phase = self._enter(name, ConstructionPhase.INSTANTIATING)
            instance = self._instantiate(name, descriptor)

            phase = self._enter(name, ConstructionPhase.POPULATING)
            self._populate(name, instance, descriptor)

            phase = self._enter(name, ConstructionPhase.INITIALIZING)
            self._initialize(name, instance)
        except ContainerError:
            raise
        except Exception as e:
            raise ConstructionFailedError(
                name,
                e,
                f"Error creating component with name '{name}' while {phase.value}: {e}",
            ) from e

        self._enter(name, ConstructionPhase.READY)
        return instance

    @staticmethod
    def _enter(name: str, phase: ConstructionPhase) -> ConstructionPhase:
        logger.debug("Component '%s': %s", name, phase.value)
        return phase

    def _instantiate(self, name: str, descriptor: ComponentDescriptor) -> Any:
        constructor = descriptor.injection_points.constructor
        if constructor is None:
            return descriptor.component_type()

        arguments = self._arguments(name, constructor)
        return descriptor.component_type(**_present(arguments))

    def _populate(self, name: str, instance: Any, descriptor: ComponentDescriptor):
        injection_points = descriptor.injection_points

        for dependency in injection_points.fields:
            value = self._resolve(name, dependency)
            if value is not _MISSING:
                setattr(instance, dependency.attribute, value)

        for value_spec in injection_points.values:
            raw = resolve_expression(value_spec.expression, self._property_resolver)
            setattr(instance, value_spec.attribute, coerce_value(raw, value_spec.declared_type))

        for setter in injection_points.setters:
            arguments = self._arguments(name, setter.parameters)
            if not setter.required and _MISSING in arguments.values():
                logger.debug(
                    "Skipping optional setter '%s' of component '%s'", setter.method, name
                )
                continue
            getattr(instance, setter.method)(**_present(arguments))

    @staticmethod
    def _initialize(name: str, instance: Any):
        if isinstance(instance, ComponentNameAware):
            instance.set_component_name(name)

    def _arguments(self, name: str, parameters: list[DependencySpec]) -> dict[str, Any]:
        return {dependency.attribute: self._resolve(name, dependency) for dependency in parameters}

    def _resolve(self, name: str, dependency: DependencySpec) -> Any:
        """Resolve one injection point.

        Returns ``_MISSING`` when an optional dependency cannot be resolved.
        """
        try:
            return self._resolver.resolve(dependency)
        except NoSuchComponentError as e:
            if dependency.required:
                raise RequiredDependencyMissingError(
                    name, f"{dependency.target.value} {dependency.attribute}", e
                ) from e
            logger.debug(
                "Optional dependency %s of component '%s' not available: %s",
                dependency.describe(),
                name,
                e,
            )
        except ConstructionFailedError as e:
            if dependency.required:
                raise
            logger.debug(
                "Optional dependency %s of component '%s' failed to construct: %s",
                dependency.describe(),
                name,
                e,
            )
        return _MISSING
