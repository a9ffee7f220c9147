"""Module for in memory object store."""

import copy
from collections.abc import Iterable
from typing import Any

import logging

from openstack_k8s.manifest import NamedResource, named_resource
from openstack_k8s.exceptions import ObjectNotFoundError

from .store import Store


_LOGGER = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "default"


def merge_patch(target: Any, patch: Any) -> Any:
    """Apply a JSON merge-patch (RFC 7386) and return the merged value.

    The target is not modified. A null value in the patch removes the key.
    """
    if not isinstance(patch, dict):
        return copy.deepcopy(patch)
    result = copy.deepcopy(target) if isinstance(target, dict) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = merge_patch(result.get(key), value)
    return result


class InMemoryStore(Store):
    """In-memory implementation of the Store interface.

    Stores object documents keyed by NamedResource. Documents are copied on the
    way in and out so callers never share state with the store.
    """

    def __init__(self, default_namespace: str = DEFAULT_NAMESPACE) -> None:
        """Initialize the InMemoryStore."""
        self._default_namespace = default_namespace
        self._objects: dict[NamedResource, dict[str, Any]] = {}

    def add_object(self, doc: dict[str, Any]) -> NamedResource:
        """Add or replace an object document in the store."""
        resource_id = named_resource(doc, self._default_namespace)
        if resource_id in self._objects:
            _LOGGER.debug("Replacing existing object %s in store", resource_id)
        else:
            _LOGGER.debug("Adding object %s to store", resource_id)
        self._objects[resource_id] = copy.deepcopy(doc)
        return resource_id

    def add_objects(self, docs: Iterable[dict[str, Any]]) -> None:
        """Add object documents, expanding any `List` documents into their items."""
        for doc in docs:
            if str(doc.get("kind") or "").endswith("List"):
                self.add_objects(doc.get("items") or [])
                continue
            self.add_object(doc)

    def remove_object(self, resource_id: NamedResource) -> None:
        """Remove an object from the store."""
        if self._objects.pop(resource_id, None) is None:
            raise ObjectNotFoundError(f"Object {resource_id} not found")

    async def get_object(self, resource_id: NamedResource) -> dict[str, Any]:
        """Retrieve an object by resource identity."""
        if (doc := self._objects.get(resource_id)) is None:
            raise ObjectNotFoundError(f"Object {resource_id} not found")
        return copy.deepcopy(doc)

    async def list_objects(self, kind: str, namespace: str) -> list[dict[str, Any]]:
        """List all objects of a kind in a namespace, in insertion order."""
        return [
            copy.deepcopy(doc)
            for rid, doc in self._objects.items()
            if rid.kind == kind and rid.namespace == namespace
        ]

    async def patch_object(
        self, resource_id: NamedResource, patch: dict[str, Any]
    ) -> dict[str, Any]:
        """Apply a JSON merge-patch to an object and return the updated object."""
        if (doc := self._objects.get(resource_id)) is None:
            raise ObjectNotFoundError(f"Object {resource_id} not found")
        _LOGGER.debug("Patching object %s with %s", resource_id, patch)
        self._objects[resource_id] = merge_patch(doc, patch)
        return copy.deepcopy(self._objects[resource_id])
