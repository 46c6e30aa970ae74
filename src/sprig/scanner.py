"""Discovery of ``@component`` classes in packages."""

import importlib
import logging
import pkgutil
from dataclasses import dataclass
from types import ModuleType
from typing import Iterator, Optional, Union

from sprig.domain import Scope
from sprig.markers import component_metadata, is_component

__all__ = ["ScannedComponent", "ComponentScanner"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScannedComponent:
    """A discovered component class with its declared name and scope, if any."""

    component_type: type
    name: Optional[str] = None
    scope: Optional[Scope] = None


class ComponentScanner:
    """Find component-tagged classes in a module or package and its subpackages."""

    def scan(self, package: Union[str, ModuleType]) -> Iterator[ScannedComponent]:
        """Yield every ``@component`` class defined in ``package``.

        Classes are yielded module by module, in the order they are defined, and
        each class only once even if it is re-exported elsewhere.

        Args:
            package: A module object or dotted module name.
        """
        seen: set[type] = set()
        for module in self._modules(package):
            for member in list(vars(module).values()):
                if not is_component(member) or member.__module__ != module.__name__:
                    continue
                if member in seen:
                    continue
                seen.add(member)
                metadata = component_metadata(member)
                yield ScannedComponent(member, metadata.get("name"), metadata.get("scope"))

    @staticmethod
    def _modules(package: Union[str, ModuleType]) -> Iterator[ModuleType]:
        root = importlib.import_module(package) if isinstance(package, str) else package
        logger.info("Scanning package: %s", root.__name__)
        yield root

        if not hasattr(root, "__path__"):
            return
        for module_info in pkgutil.walk_packages(root.__path__, root.__name__ + "."):
            yield importlib.import_module(module_info.name)
