"""Resolution of component names and types to instances.

A lookup by name is served from the :class:`~sprig.cache.InstanceCache` when
possible; otherwise the component is constructed by the
:class:`~sprig.injector.ComponentInjector`, which in turn asks the resolver for
every dependency. Singleton results are cached, prototype results never are.

Lookups by type take the *first* registered component whose class is a
subclass of the requested type, in registration order. They do not check
that the match is unique.

A singleton is built by at most one thread at a time; other threads asking
for it wait for that construction to finish. A cycle is reported as a
:class:`~sprig.errors.CircularDependencyError` both when it stays on one
thread and when it is split across threads that would otherwise wait on each
other forever.
"""

import logging
import threading
from typing import Any, Optional

from sprig.cache import InstanceCache
from sprig.config import PropertyResolver
from sprig.domain import ComponentDescriptor, DependencySpec
from sprig.errors import AmbiguousOrMissingError, CircularDependencyError, ContainerError
from sprig.injector import ComponentInjector
from sprig.registry import DescriptorRegistry

__all__ = ["DependencyResolver"]

logger = logging.getLogger(__name__)


def _is_assignable(component_type: type, requested_type: Any) -> bool:
    try:
        return issubclass(component_type, requested_type)
    except TypeError:
        return False


class DependencyResolver:
    """Resolve components by name or type, constructing them on demand."""

    def __init__(
        self,
        registry: DescriptorRegistry,
        cache: InstanceCache,
        property_resolver: Optional[PropertyResolver] = None,
    ):
        self._registry = registry
        self._cache = cache
        self._injector = ComponentInjector(self, property_resolver)
        self._local = threading.local()
        # Which thread is building each singleton, and which name each waiting
        # thread is blocked on.
        self._construction = threading.Condition()
        self._owners: dict[str, int] = {}
        self._waiting: dict[int, str] = {}

    def resolve_by_name(self, name: str) -> Any:
        """Return the instance for ``name``.

        Raises:
            NoSuchComponentError: If no component is registered under ``name``.
            CircularDependencyError: If ``name`` is already being constructed.
            ConstructionFailedError: If construction fails.
        """
        instance = self._cache.get(name)
        if instance is not None:
            return instance

        descriptor = self._registry.get(name)
        if descriptor.is_singleton:
            return self._get_singleton(name, descriptor)
        return self._create(name, descriptor)

    def resolve_by_type(self, requested_type: Any) -> Any:
        """Return the instance of the first registered component assignable to ``requested_type``.

        Raises:
            AmbiguousOrMissingError: If no registered component matches.
        """
        name = self._first_name_for_type(requested_type)
        if name is None:
            raise AmbiguousOrMissingError(requested_type)
        return self.resolve_by_name(name)

    def resolve_by_type_optional(self, requested_type: Any) -> Optional[Any]:
        """Like :meth:`resolve_by_type`, but return None when nothing matches."""
        name = self._first_name_for_type(requested_type)
        if name is None:
            return None
        return self.resolve_by_name(name)

    def resolve(self, dependency: DependencySpec) -> Any:
        """Resolve an injection point, by its name hint if it has one, else by type."""
        if dependency.name:
            return self.resolve_by_name(dependency.name)
        if dependency.declared_type is None:
            raise ContainerError(
                f"Dependency '{dependency.attribute}' declares neither a type nor a name"
            )
        return self.resolve_by_type(dependency.declared_type)

    def names_for_type(self, requested_type: Any) -> list[str]:
        """Names of every registered component assignable to ``requested_type``."""
        return [
            name
            for name, descriptor in self._registry.descriptors()
            if _is_assignable(descriptor.component_type, requested_type)
        ]

    def resolve_all_of_type(self, requested_type: Any) -> dict[str, Any]:
        return {
            name: self.resolve_by_name(name)
            for name in self.names_for_type(requested_type)
        }

    def _first_name_for_type(self, requested_type: Any) -> Optional[str]:
        return next(
            (
                name
                for name, descriptor in self._registry.descriptors()
                if _is_assignable(descriptor.component_type, requested_type)
            ),
            None,
        )

    def _get_singleton(self, name: str, descriptor: ComponentDescriptor) -> Any:
        self._check_not_in_progress(name)

        instance = self._claim(name)
        if instance is not None:
            return instance

        try:
            instance = self._create(name, descriptor)
            self._cache.put(name, instance)
            logger.debug("Cached singleton '%s'", name)
            return instance
        finally:
            self._release(name)

    def _claim(self, name: str) -> Optional[Any]:
        """Wait until ``name`` is cached or owned by the current thread.

        Returns:
            The cached instance, or None once the current thread owns the
            construction of ``name``.

        Raises:
            CircularDependencyError: If waiting would close a cycle of threads
                each waiting on a component another one is building.
        """
        current = threading.get_ident()
        with self._construction:
            while True:
                instance = self._cache.get(name)
                if instance is not None:
                    return instance

                owner = self._owners.get(name)
                if owner is None:
                    self._owners[name] = current
                    return None

                self._check_no_wait_cycle(name, owner, current)
                self._waiting[current] = name
                try:
                    self._construction.wait()
                finally:
                    del self._waiting[current]

    def _release(self, name: str):
        with self._construction:
            del self._owners[name]
            self._construction.notify_all()

    def _check_no_wait_cycle(self, name: str, owner: int, current: int):
        # Follow owner -> name it waits on -> that name's owner, until the chain
        # ends or comes back to the current thread.
        chain: list[str] = []
        while owner != current:
            waited = self._waiting.get(owner)
            if waited is None or waited in chain:
                return
            chain.append(waited)
            owner = self._owners.get(waited)
            if owner is None:
                return

        in_progress = self._in_progress()
        anchor = chain[-1] if chain else name
        start = in_progress.index(anchor) if anchor in in_progress else 0
        raise CircularDependencyError(in_progress[start:] + [name] + chain)

    def _create(self, name: str, descriptor: ComponentDescriptor) -> Any:
        self._check_not_in_progress(name)

        in_progress = self._in_progress()
        in_progress.append(name)
        try:
            return self._injector.construct(name, descriptor)
        finally:
            in_progress.pop()

    def _check_not_in_progress(self, name: str):
        in_progress = self._in_progress()
        if name in in_progress:
            path = in_progress[in_progress.index(name):] + [name]
            raise CircularDependencyError(path)

    def _in_progress(self) -> list[str]:
        """Names being constructed on the current thread, outermost first."""
        in_progress = getattr(self._local, "in_progress", None)
        if in_progress is None:
            in_progress = self._local.in_progress = []
        return in_progress
