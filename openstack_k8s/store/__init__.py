"""
The store module provides access to the OpenStack upgrade custom resources
(CRs) of a cluster, and a watcher for waiting on their conditions.

- Uses NamedResource as the key for all objects.
- Exchanges objects as generic attribute trees in kubernetes API shape.
- Provides get, list and merge-patch operations to the upgrade client.

This abstract interface allows for various implementations (kubectl, in-memory loaded from a file).
"""

from .store import Store
from .in_memory import InMemoryStore
from .kubectl import KubectlStore
from .loader import load_store, read_objects
from .watcher import ConditionWatcher, ProgressSink, WaitResult

__all__ = [
    "Store",
    "InMemoryStore",
    "KubectlStore",
    "load_store",
    "read_objects",
    "ConditionWatcher",
    "ProgressSink",
    "WaitResult",
]
