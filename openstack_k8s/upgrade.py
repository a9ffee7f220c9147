"""Operations for driving and inspecting an OpenStack minor update.

The UpgradeClient resolves the objects an operation applies to, reads them from
a Store, and reshapes them into flat reports. When an object name is not given,
the first object of the kind in the namespace is used, since a deployment
normally has exactly one OpenStackVersion and one OpenStackControlPlane.

This example resumes an interrupted update:
```python
from openstack_k8s.store import KubectlStore
from openstack_k8s.upgrade import UpgradeClient

client = UpgradeClient(KubectlStore())
report = await client.get_resume_step()
print(report.resume_step, report.explanation)
```
"""

import asyncio
from dataclasses import dataclass, field
import logging
from typing import Any

from mashumaro import field_options

from .config import UpgradeConfig
from .context import trace_context
from .exceptions import InputException, ObjectNotFoundError
from .manifest import (
    BaseManifest,
    Condition,
    NamedResource,
    OpenStackVersion,
    OPENSTACK_VERSION,
    OPENSTACK_CONTROLPLANE,
    DATAPLANE_DEPLOYMENT,
    DATAPLANE_NODESET,
    object_name,
    object_namespace,
    parse_conditions,
)
from .resume import VersionSnapshot, decide_resume_step
from .store import ConditionWatcher, ProgressSink, Store

__all__ = [
    "UpgradeClient",
    "VersionReport",
    "WaitReport",
    "ResumeReport",
    "ObjectReport",
    "VerificationReport",
    "NodeSetVerification",
    "NodeSetsVerificationReport",
]

_LOGGER = logging.getLogger(__name__)


@dataclass
class VersionReport(BaseManifest):
    """Flattened view of an OpenStackVersion."""

    name: str
    namespace: str
    target_version: str = field(metadata=field_options(alias="targetVersion"))
    available_version: str | None = field(
        metadata=field_options(alias="availableVersion"), default=None
    )
    deployed_version: str | None = field(
        metadata=field_options(alias="deployedVersion"), default=None
    )
    custom_container_images: dict[str, Any] | None = field(
        metadata=field_options(alias="customContainerImages"), default=None
    )
    ready_conditions: list[str] = field(
        metadata=field_options(alias="readyConditions"), default_factory=list
    )
    not_ready_conditions: list[str] = field(
        metadata=field_options(alias="notReadyConditions"), default_factory=list
    )

    @classmethod
    def from_version(cls, version: OpenStackVersion) -> "VersionReport":
        return cls(
            name=version.name,
            namespace=version.namespace,
            target_version=version.target_version,
            available_version=version.available_version,
            deployed_version=version.deployed_version,
            custom_container_images=version.custom_container_images,
            ready_conditions=version.ready_conditions,
            not_ready_conditions=version.not_ready_conditions,
        )


@dataclass
class WaitReport(BaseManifest):
    """Outcome of waiting for a condition on an OpenStackVersion."""

    name: str
    namespace: str
    condition: str
    met: bool
    message: str
    reason: str


@dataclass
class ResumeReport(BaseManifest):
    """The step of the update procedure to resume from."""

    name: str
    namespace: str
    target_version: str = field(metadata=field_options(alias="targetVersion"))
    resume_step: int = field(metadata=field_options(alias="resumeStep"))
    explanation: str
    available_version: str | None = field(
        metadata=field_options(alias="availableVersion"), default=None
    )
    deployed_version: str | None = field(
        metadata=field_options(alias="deployedVersion"), default=None
    )
    not_ready_conditions: list[str] = field(
        metadata=field_options(alias="notReadyConditions"), default_factory=list
    )


@dataclass
class ObjectReport(BaseManifest):
    """The spec and status of an object."""

    name: str
    namespace: str
    spec: dict[str, Any] | None = None
    status: dict[str, Any] | None = None

    @classmethod
    def from_doc(cls, doc: dict[str, Any], default_namespace: str) -> "ObjectReport":
        spec = doc.get("spec")
        status = doc.get("status")
        return cls(
            name=object_name(doc),
            namespace=object_namespace(doc, default_namespace),
            spec=spec if isinstance(spec, dict) else None,
            status=status if isinstance(status, dict) else None,
        )


@dataclass
class VerificationReport(BaseManifest):
    """Readiness of every condition on an OpenStackControlPlane."""

    name: str
    namespace: str
    all_ready: bool = field(metadata=field_options(alias="allReady"))
    total_conditions: int = field(metadata=field_options(alias="totalConditions"))
    ready_conditions: list[str] = field(
        metadata=field_options(alias="readyConditions"), default_factory=list
    )
    not_ready_conditions: list[Condition] = field(
        metadata=field_options(alias="notReadyConditions"), default_factory=list
    )


@dataclass
class NodeSetVerification(BaseManifest):
    """Readiness of every condition on one OpenStackDataplaneNodeSet."""

    name: str
    all_ready: bool = field(metadata=field_options(alias="allReady"))
    total_conditions: int = field(
        metadata=field_options(alias="totalConditions"), default=0
    )
    ready_conditions: list[str] = field(
        metadata=field_options(alias="readyConditions"), default_factory=list
    )
    not_ready_conditions: list[Condition] = field(
        metadata=field_options(alias="notReadyConditions"), default_factory=list
    )


@dataclass
class NodeSetsVerificationReport(BaseManifest):
    """Readiness of every OpenStackDataplaneNodeSet in a namespace."""

    namespace: str
    all_ready: bool = field(metadata=field_options(alias="allReady"))
    total_node_sets: int = field(metadata=field_options(alias="totalNodeSets"))
    ready_node_sets: list[str] = field(
        metadata=field_options(alias="readyNodeSets"), default_factory=list
    )
    not_ready_node_sets: list[NodeSetVerification] = field(
        metadata=field_options(alias="notReadyNodeSets"), default_factory=list
    )


def _verify_node_set(doc: dict[str, Any]) -> NodeSetVerification:
    """Check the conditions of a single node set."""
    name = object_name(doc)
    if not isinstance(doc.get("status"), dict):
        return NodeSetVerification(
            name=name,
            all_ready=False,
            not_ready_conditions=[
                Condition.parse_doc(
                    {
                        "type": "Status",
                        "status": "Unknown",
                        "reason": "NoStatus",
                        "message": "No status found on NodeSet",
                    }
                )
            ],
        )
    conditions = parse_conditions(doc)
    if not conditions:
        return NodeSetVerification(
            name=name,
            all_ready=False,
            not_ready_conditions=[
                Condition.parse_doc(
                    {
                        "type": "Conditions",
                        "status": "Unknown",
                        "reason": "NoConditions",
                        "message": "No conditions found on NodeSet",
                    }
                )
            ],
        )
    not_ready = [cond for cond in conditions if not cond.ready]
    return NodeSetVerification(
        name=name,
        all_ready=not not_ready,
        total_conditions=len(conditions),
        ready_conditions=[cond.type for cond in conditions if cond.ready],
        not_ready_conditions=not_ready,
    )


class UpgradeClient:
    """Reads and updates the OpenStack upgrade resources in a Store."""

    def __init__(
        self,
        store: Store,
        config: UpgradeConfig | None = None,
        progress: ProgressSink | None = None,
    ) -> None:
        """Initialize UpgradeClient.

        Args:
            store: The Store holding the cluster objects.
            config: Default namespace and wait settings.
            progress: Sink for progress messages sent while waiting.
        """
        self._store = store
        self._config = config or UpgradeConfig()
        self._watcher = ConditionWatcher(store, self._config.watcher, progress)

    def _namespace(self, namespace: str | None) -> str:
        return namespace or self._config.namespace

    async def _resolve(
        self, kind: str, namespace: str, name: str | None
    ) -> dict[str, Any]:
        """Fetch the named object, or the first object of the kind if unnamed."""
        if name:
            return await self._store.get_object(NamedResource(kind, namespace, name))
        docs = await self._store.list_objects(kind, namespace)
        if not docs:
            raise ObjectNotFoundError(f"No {kind} found in namespace '{namespace}'")
        if len(docs) > 1:
            _LOGGER.debug(
                "Found %d %s objects in %s, using the first", len(docs), kind, namespace
            )
        return docs[0]

    async def _resolve_version(
        self, namespace: str | None, name: str | None
    ) -> OpenStackVersion:
        namespace = self._namespace(namespace)
        doc = await self._resolve(OPENSTACK_VERSION.kind, namespace, name)
        return OpenStackVersion.parse_doc(doc, namespace)

    async def get_version(
        self, namespace: str | None = None, name: str | None = None
    ) -> VersionReport:
        """Return the versions and condition readiness of an OpenStackVersion."""
        with trace_context("Get version"):
            version = await self._resolve_version(namespace, name)
        return VersionReport.from_version(version)

    async def update_version(
        self,
        target_version: str,
        namespace: str | None = None,
        custom_container_images: dict[str, Any] | None = None,
    ) -> VersionReport:
        """Start a minor update by setting the target version.

        The first OpenStackVersion in the namespace is patched. Custom container
        images are only sent when non-empty.
        """
        if not target_version:
            raise InputException("targetVersion is required")
        namespace = self._namespace(namespace)
        with trace_context("Update version"):
            docs = await self._store.list_objects(OPENSTACK_VERSION.kind, namespace)
            if not docs:
                raise ObjectNotFoundError(
                    f"No {OPENSTACK_VERSION.kind} found in namespace '{namespace}'"
                )
            resource_id = NamedResource(
                OPENSTACK_VERSION.kind, namespace, object_name(docs[0])
            )
            spec: dict[str, Any] = {"targetVersion": target_version}
            if custom_container_images:
                spec["customContainerImages"] = custom_container_images
            _LOGGER.info("Setting targetVersion of %s to %s", resource_id, target_version)
            doc = await self._store.patch_object(resource_id, {"spec": spec})
        return VersionReport.from_version(OpenStackVersion.parse_doc(doc, namespace))

    async def wait_version(
        self,
        condition: str,
        namespace: str | None = None,
        name: str | None = None,
        timeout_seconds: int | None = None,
        poll_interval_seconds: int | None = None,
        cancel: asyncio.Event | None = None,
    ) -> WaitReport:
        """Wait for a condition on an OpenStackVersion to become True."""
        if not condition:
            raise InputException("condition is required")
        namespace = self._namespace(namespace)
        if not name:
            doc = await self._resolve(OPENSTACK_VERSION.kind, namespace, None)
            name = object_name(doc)
        if timeout_seconds is None:
            timeout_seconds = self._config.wait_timeout_seconds
        if poll_interval_seconds is None:
            poll_interval_seconds = self._config.wait_poll_interval_seconds
        resource_id = NamedResource(OPENSTACK_VERSION.kind, namespace, name)
        with trace_context(f"Wait {condition}"):
            result = await self._watcher.wait(
                resource_id,
                condition,
                timeout_seconds=timeout_seconds,
                poll_interval_seconds=poll_interval_seconds,
                cancel=cancel,
            )
        return WaitReport(
            name=name,
            namespace=namespace,
            condition=condition,
            met=result.met,
            message=result.message,
            reason=result.reason,
        )

    async def get_resume_step(
        self, namespace: str | None = None, name: str | None = None
    ) -> ResumeReport:
        """Determine which step of the update procedure to resume from."""
        with trace_context("Get resume step"):
            version = await self._resolve_version(namespace, name)
        snapshot = VersionSnapshot.from_version(version)
        decision = decide_resume_step(snapshot)
        _LOGGER.debug("Resume %s at step %d", version.name, decision.step)
        return ResumeReport(
            name=version.name,
            namespace=version.namespace,
            target_version=snapshot.target_version,
            available_version=snapshot.available_version,
            deployed_version=snapshot.deployed_version,
            not_ready_conditions=list(snapshot.not_ready_conditions),
            resume_step=int(decision.step),
            explanation=decision.explanation,
        )

    async def get_controlplane(
        self, namespace: str | None = None, name: str | None = None
    ) -> ObjectReport:
        """Return the spec and status of an OpenStackControlPlane."""
        namespace = self._namespace(namespace)
        doc = await self._resolve(OPENSTACK_CONTROLPLANE.kind, namespace, name)
        return ObjectReport.from_doc(doc, namespace)

    async def verify_controlplane(
        self, namespace: str | None = None, name: str | None = None
    ) -> VerificationReport:
        """Check that every condition on an OpenStackControlPlane is True."""
        namespace = self._namespace(namespace)
        doc = await self._resolve(OPENSTACK_CONTROLPLANE.kind, namespace, name)
        name = object_name(doc)
        if not isinstance(doc.get("status"), dict):
            raise InputException(
                f"No status found on {OPENSTACK_CONTROLPLANE.kind} '{name}'"
            )
        if not (conditions := parse_conditions(doc)):
            raise InputException(
                f"No conditions found on {OPENSTACK_CONTROLPLANE.kind} '{name}'"
            )
        not_ready = [cond for cond in conditions if not cond.ready]
        return VerificationReport(
            name=name,
            namespace=namespace,
            all_ready=not not_ready,
            total_conditions=len(conditions),
            ready_conditions=[cond.type for cond in conditions if cond.ready],
            not_ready_conditions=not_ready,
        )

    async def list_nodesets(self, namespace: str | None = None) -> list[ObjectReport]:
        """Return every OpenStackDataplaneNodeSet in the namespace."""
        namespace = self._namespace(namespace)
        docs = await self._store.list_objects(DATAPLANE_NODESET.kind, namespace)
        return [ObjectReport.from_doc(doc, namespace) for doc in docs]

    async def verify_nodesets(
        self, namespace: str | None = None
    ) -> NodeSetsVerificationReport:
        """Check that every condition on every OpenStackDataplaneNodeSet is True."""
        namespace = self._namespace(namespace)
        docs = await self._store.list_objects(DATAPLANE_NODESET.kind, namespace)
        if not docs:
            raise ObjectNotFoundError(
                f"No {DATAPLANE_NODESET.kind} found in namespace '{namespace}'"
            )
        results = [_verify_node_set(doc) for doc in docs]
        return NodeSetsVerificationReport(
            namespace=namespace,
            all_ready=all(result.all_ready for result in results),
            total_node_sets=len(results),
            ready_node_sets=[result.name for result in results if result.all_ready],
            not_ready_node_sets=[result for result in results if not result.all_ready],
        )

    async def list_deployments(
        self, namespace: str | None = None
    ) -> list[ObjectReport]:
        """Return every OpenStackDataplaneDeployment in the namespace."""
        namespace = self._namespace(namespace)
        docs = await self._store.list_objects(DATAPLANE_DEPLOYMENT.kind, namespace)
        return [ObjectReport.from_doc(doc, namespace) for doc in docs]

    async def get_deployment(
        self, name: str, namespace: str | None = None
    ) -> ObjectReport:
        """Return the spec and status of an OpenStackDataplaneDeployment."""
        if not name:
            raise InputException("name is required")
        namespace = self._namespace(namespace)
        doc = await self._resolve(DATAPLANE_DEPLOYMENT.kind, namespace, name)
        return ObjectReport.from_doc(doc, namespace)
