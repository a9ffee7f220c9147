"""Store module for reading and patching cluster objects."""

from abc import ABC, abstractmethod
from typing import Any

from openstack_k8s.manifest import NamedResource


class Store(ABC):
    """Abstract base class for the object store holding the upgrade resources.

    Objects are exchanged as generic attribute trees in the same shape as the
    kubernetes API returns them. Implementations must be safe for concurrent
    reads from independent callers.
    """

    @abstractmethod
    async def get_object(self, resource_id: NamedResource) -> dict[str, Any]:
        """Retrieve an object by resource identity.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            StoreException: If the store could not serve the request.
        """

    @abstractmethod
    async def list_objects(self, kind: str, namespace: str) -> list[dict[str, Any]]:
        """List all objects of a kind in a namespace, in store order.

        Raises:
            StoreException: If the store could not serve the request.
        """

    @abstractmethod
    async def patch_object(
        self, resource_id: NamedResource, patch: dict[str, Any]
    ) -> dict[str, Any]:
        """Apply a JSON merge-patch to an object and return the updated object.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            StoreException: If the store could not serve the request.
        """
