"""Capabilities a component can implement to take part in its own lifecycle."""

from abc import ABC, abstractmethod

__all__ = ["ComponentNameAware"]


class ComponentNameAware(ABC):
    """Implemented by components that want to know their name in the container.

    ``set_component_name`` is called once the component's dependencies and
    configuration values have been injected, just before it becomes available.
    """

    @abstractmethod
    def set_component_name(self, name: str) -> None:
        pass
