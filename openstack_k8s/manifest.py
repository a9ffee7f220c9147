"""Representation of the OpenStack upgrade resources in a cluster.

Objects are read from a store as generic attribute trees (the same shape as
`kubectl get -o yaml`) and parsed into the dataclasses in this module. Only the
fields needed to track an upgrade are parsed; `spec` and `status` of the other
kinds are carried as-is.
"""

from dataclasses import dataclass, field
from enum import StrEnum
import logging
from typing import Any, ClassVar

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig

from .exceptions import InputException

__all__ = [
    "ResourceType",
    "NamedResource",
    "ConditionStatus",
    "Condition",
    "OpenStackVersion",
    "parse_conditions",
    "conditions_by_type",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceType:
    """The API group, version and plural name of a custom resource kind."""

    kind: str
    group: str
    version: str
    plural: str

    @property
    def api_version(self) -> str:
        """Return the apiVersion used in object documents."""
        return f"{self.group}/{self.version}"

    @property
    def resource(self) -> str:
        """Return the fully qualified resource name understood by kubectl."""
        return f"{self.plural}.{self.version}.{self.group}"


OPENSTACK_VERSION = ResourceType(
    "OpenStackVersion", "core.openstack.org", "v1beta1", "openstackversions"
)
OPENSTACK_CONTROLPLANE = ResourceType(
    "OpenStackControlPlane", "core.openstack.org", "v1beta1", "openstackcontrolplanes"
)
DATAPLANE_DEPLOYMENT = ResourceType(
    "OpenStackDataplaneDeployment",
    "dataplane.openstack.org",
    "v1beta1",
    "openstackdataplanedeployments",
)
DATAPLANE_NODESET = ResourceType(
    "OpenStackDataplaneNodeSet",
    "dataplane.openstack.org",
    "v1beta1",
    "openstackdataplanenodesets",
)

RESOURCE_TYPES: dict[str, ResourceType] = {
    rt.kind: rt
    for rt in (
        OPENSTACK_VERSION,
        OPENSTACK_CONTROLPLANE,
        DATAPLANE_DEPLOYMENT,
        DATAPLANE_NODESET,
    )
}


def resource_type(kind: str) -> ResourceType:
    """Return the ResourceType for a supported kind."""
    if (rt := RESOURCE_TYPES.get(kind)) is None:
        raise InputException(f"Unsupported resource kind '{kind}'")
    return rt


@dataclass(frozen=True, order=True)
class NamedResource:
    """Identifier for a kubernetes resource."""

    kind: str
    namespace: str
    name: str

    @property
    def namespaced_name(self) -> str:
        return f"{self.namespace}/{self.name}"

    def __str__(self) -> str:
        """Return the kind and namespaced name concatenated as an id."""
        return f"{self.kind}/{self.namespaced_name}"


@dataclass
class BaseManifest(DataClassDictMixin):
    """Base class for all parsed objects and reports."""

    def compact_dict(self) -> dict[str, Any]:
        """Return a compact dictionary representation of the object.

        Fields that are not set are dropped and field names use the camelCase
        spelling of the cluster API.
        """
        return self.to_dict()

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


class ConditionStatus(StrEnum):
    """Status of a condition as reported by the owning controller."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Any) -> "ConditionStatus":
        """Parse a raw status, treating anything unrecognized as Unknown."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass
class Condition(BaseManifest):
    """A named health signal from an object's status."""

    type: str
    status: ConditionStatus
    reason: str = ""
    message: str = ""

    @property
    def ready(self) -> bool:
        """Return True only when the status is exactly True."""
        return self.status == ConditionStatus.TRUE

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Condition":
        """Parse a Condition from an entry of status.conditions."""
        return cls(
            type=str(doc.get("type") or ""),
            status=ConditionStatus.parse(doc.get("status")),
            reason=str(doc.get("reason") or ""),
            message=str(doc.get("message") or ""),
        )

    def __str__(self) -> str:
        return f"{self.type}={self.status} ({self.reason})"


def parse_conditions(doc: dict[str, Any]) -> list[Condition]:
    """Return the conditions from an object document in list order.

    Entries that are not mappings are skipped.
    """
    status = doc.get("status") or {}
    if not isinstance(status, dict):
        return []
    conditions = status.get("conditions") or []
    if not isinstance(conditions, list):
        return []
    return [Condition.parse_doc(cond) for cond in conditions if isinstance(cond, dict)]


def conditions_by_type(conditions: list[Condition]) -> dict[str, Condition]:
    """Index conditions by type, keeping the first entry of each type."""
    result: dict[str, Condition] = {}
    for cond in conditions:
        if cond.type in result:
            _LOGGER.debug(
                "Ignoring duplicate condition %s, keeping %s", cond, result[cond.type]
            )
            continue
        result[cond.type] = cond
    return result


def object_name(doc: dict[str, Any]) -> str:
    """Return metadata.name of an object document."""
    if not (metadata := doc.get("metadata")):
        raise InputException(f"Invalid object missing metadata: {doc}")
    if not (name := metadata.get("name")):
        raise InputException(f"Invalid object missing metadata.name: {doc}")
    return str(name)


def object_namespace(doc: dict[str, Any], default: str) -> str:
    """Return metadata.namespace of an object document."""
    metadata = doc.get("metadata") or {}
    return str(metadata.get("namespace") or default)


def named_resource(doc: dict[str, Any], default_namespace: str) -> NamedResource:
    """Return the identity of an object document."""
    if not (kind := doc.get("kind")):
        raise InputException(f"Invalid object missing kind: {doc}")
    return NamedResource(
        kind=kind,
        namespace=object_namespace(doc, default_namespace),
        name=object_name(doc),
    )


@dataclass
class OpenStackVersion(BaseManifest):
    """The version tracking object for an OpenStack deployment."""

    kind: ClassVar[str] = OPENSTACK_VERSION.kind

    name: str
    """The name of the object."""

    namespace: str
    """The namespace of the object."""

    target_version: str = field(metadata=field_options(alias="targetVersion"))
    """The version the deployment is being moved to (spec.targetVersion)."""

    available_version: str | None = field(
        metadata=field_options(alias="availableVersion"), default=None
    )
    """The newest version the operator can deploy (status.availableVersion)."""

    deployed_version: str | None = field(
        metadata=field_options(alias="deployedVersion"), default=None
    )
    """The version currently running (status.deployedVersion)."""

    custom_container_images: dict[str, Any] | None = field(
        metadata=field_options(alias="customContainerImages"), default=None
    )
    """Container image overrides from spec.customContainerImages, if any."""

    conditions: list[Condition] = field(default_factory=list)
    """Conditions from status.conditions in list order."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any], default_namespace: str) -> "OpenStackVersion":
        """Parse an OpenStackVersion from a raw kubernetes object."""
        if doc.get("kind") != cls.kind:
            raise InputException(f"Invalid {cls.kind} object kind: {doc.get('kind')}")
        name = object_name(doc)
        if not isinstance(spec := doc.get("spec"), dict):
            raise InputException(f"Invalid {cls.kind} '{name}' missing spec")
        if not isinstance(target_version := spec.get("targetVersion"), str):
            raise InputException(
                f"Invalid {cls.kind} '{name}' missing spec.targetVersion"
            )
        if not isinstance(status := doc.get("status") or {}, dict):
            raise InputException(f"Invalid {cls.kind} '{name}' status: {status!r}")
        versions = {}
        for key in ("availableVersion", "deployedVersion"):
            if not isinstance(value := status.get(key), str | None):
                raise InputException(
                    f"Invalid {cls.kind} '{name}' status.{key}: {value!r}"
                )
            versions[key] = value
        images = spec.get("customContainerImages") or None
        if not isinstance(images, dict | None):
            raise InputException(
                f"Invalid {cls.kind} '{name}' spec.customContainerImages: {images!r}"
            )
        return cls(
            name=name,
            namespace=object_namespace(doc, default_namespace),
            target_version=target_version,
            available_version=versions["availableVersion"],
            deployed_version=versions["deployedVersion"],
            custom_container_images=images,
            conditions=parse_conditions(doc),
        )

    @property
    def ready_conditions(self) -> list[str]:
        """Types of the conditions whose status is True."""
        return [cond.type for cond in self.conditions if cond.ready]

    @property
    def not_ready_conditions(self) -> list[str]:
        """Types of every condition whose status is not exactly True."""
        return [cond.type for cond in self.conditions if not cond.ready]
