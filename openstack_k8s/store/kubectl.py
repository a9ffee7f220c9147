"""Object store backed by the kubectl command line tool.

Each store call runs one `kubectl` command against the current kubeconfig
context and parses its YAML output:
```python
from openstack_k8s.manifest import NamedResource
from openstack_k8s.store import KubectlStore

store = KubectlStore()
doc = await store.get_object(
    NamedResource("OpenStackVersion", "openstack", "openstack-galera-network-isolation")
)
print(doc["spec"]["targetVersion"])
```
"""

import json
import logging
from typing import Any

import yaml

from openstack_k8s.command import Command, run
from openstack_k8s.context import trace_context
from openstack_k8s.exceptions import KubectlException, ObjectNotFoundError
from openstack_k8s.manifest import NamedResource, resource_type

from .store import Store

_LOGGER = logging.getLogger(__name__)

KUBECTL_BIN = "kubectl"

# Marker kubectl prints to stderr when the API server answers 404
_NOT_FOUND = "(NotFound)"


def _parse_doc(out: str, cmd: Command) -> dict[str, Any]:
    try:
        doc = yaml.safe_load(out)
    except yaml.YAMLError as err:
        raise KubectlException(f"Unable to parse output of '{cmd}': {err}") from err
    if not isinstance(doc, dict):
        raise KubectlException(f"Unexpected output of '{cmd}': {out!r}")
    return doc


class KubectlStore(Store):
    """Store implementation that drives kubectl."""

    def __init__(
        self, kubectl_bin: str = KUBECTL_BIN, env: dict[str, str] | None = None
    ) -> None:
        """Initialize KubectlStore.

        Args:
            kubectl_bin: Path of the kubectl binary.
            env: Extra environment for kubectl, e.g. KUBECONFIG.
        """
        self._kubectl_bin = kubectl_bin
        self._env = env

    def _command(self, args: list[str]) -> Command:
        return Command([self._kubectl_bin] + args, exc=KubectlException, env=self._env)

    async def _run_object_command(
        self, resource_id: NamedResource, args: list[str]
    ) -> dict[str, Any]:
        cmd = self._command(args)
        try:
            out = await run(cmd)
        except KubectlException as err:
            if _NOT_FOUND in str(err):
                raise ObjectNotFoundError(f"Object {resource_id} not found") from err
            raise
        return _parse_doc(out, cmd)

    async def get_object(self, resource_id: NamedResource) -> dict[str, Any]:
        """Retrieve an object by resource identity."""
        rt = resource_type(resource_id.kind)
        with trace_context(f"Get {resource_id}"):
            return await self._run_object_command(
                resource_id,
                [
                    "get",
                    rt.resource,
                    resource_id.name,
                    "--namespace",
                    resource_id.namespace,
                    "--output",
                    "yaml",
                ],
            )

    async def list_objects(self, kind: str, namespace: str) -> list[dict[str, Any]]:
        """List all objects of a kind in a namespace."""
        rt = resource_type(kind)
        cmd = self._command(
            ["get", rt.resource, "--namespace", namespace, "--output", "yaml"]
        )
        with trace_context(f"List {kind}/{namespace}"):
            doc = _parse_doc(await run(cmd), cmd)
        items = doc.get("items") or []
        _LOGGER.debug("Found %d %s objects in %s", len(items), kind, namespace)
        return [item for item in items if isinstance(item, dict)]

    async def patch_object(
        self, resource_id: NamedResource, patch: dict[str, Any]
    ) -> dict[str, Any]:
        """Apply a JSON merge-patch to an object and return the updated object."""
        rt = resource_type(resource_id.kind)
        with trace_context(f"Patch {resource_id}"):
            return await self._run_object_command(
                resource_id,
                [
                    "patch",
                    rt.resource,
                    resource_id.name,
                    "--namespace",
                    resource_id.namespace,
                    "--type",
                    "merge",
                    "--patch",
                    json.dumps(patch),
                    "--output",
                    "yaml",
                ],
            )
