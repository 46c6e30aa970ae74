"""Thread-safe store of constructed singleton instances."""

import threading
from typing import Any, Optional

__all__ = ["InstanceCache"]


class InstanceCache:
    """Singleton instances keyed by component name.

    Only fully constructed instances are ever added, so a reader either sees a
    ready instance or nothing. Who builds a missing singleton is decided by
    the :class:`~sprig.resolver.DependencyResolver`.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._instances: dict[str, Any] = {}

    def get(self, name: str) -> Optional[Any]:
        with self._lock:
            return self._instances.get(name)

    def put(self, name: str, instance: Any):
        with self._lock:
            self._instances[name] = instance

    def evict(self, name: str):
        with self._lock:
            self._instances.pop(name, None)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._instances)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._instances

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)
