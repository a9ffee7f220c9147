"""Tests for the upgrade client."""

import asyncio
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from openstack_k8s.config import UpgradeConfig
from openstack_k8s.exceptions import (
    InputException,
    ObjectNotFoundError,
    WaitCancelledError,
)
from openstack_k8s.manifest import Condition, ConditionStatus, NamedResource
from openstack_k8s.store import ConditionWatcher, InMemoryStore, load_store
from openstack_k8s.upgrade import UpgradeClient

TESTDATA = Path("tests/testdata/objects.yaml")
VERSION_ID = NamedResource("OpenStackVersion", "openstack", "openstack")


@pytest.fixture
async def store() -> InMemoryStore:
    return await load_store(TESTDATA, "openstack")


@pytest.fixture
def messages() -> list[str]:
    return []


@pytest.fixture
def client(store: InMemoryStore, messages: list[str]) -> UpgradeClient:
    return UpgradeClient(store, progress=messages.append)


@pytest.fixture
def mock_sleep(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    sleep = AsyncMock(return_value=False)
    monkeypatch.setattr(ConditionWatcher, "_sleep", sleep)
    return sleep


async def test_get_version(client: UpgradeClient) -> None:
    """Test reading the OpenStackVersion."""
    report = await client.get_version()
    assert report.compact_dict() == {
        "name": "openstack",
        "namespace": "openstack",
        "targetVersion": "0.0.2",
        "availableVersion": "0.0.2",
        "deployedVersion": "0.0.1",
        "readyConditions": ["MinorUpdateOVNControlplane"],
        "notReadyConditions": [
            "Ready",
            "MinorUpdateOVNDataplane",
            "MinorUpdateControlplane",
            "MinorUpdateDataplane",
        ],
    }


async def test_get_version_not_found(client: UpgradeClient) -> None:
    """Test reading the OpenStackVersion of an empty namespace."""
    with pytest.raises(
        ObjectNotFoundError, match="No OpenStackVersion found in namespace 'empty'"
    ):
        await client.get_version(namespace="empty")
    with pytest.raises(ObjectNotFoundError):
        await client.get_version(name="missing")


async def test_update_version(client: UpgradeClient, store: InMemoryStore) -> None:
    """Test starting a minor update."""
    report = await client.update_version("0.0.3")
    assert report.target_version == "0.0.3"
    assert report.custom_container_images is None
    doc = await store.get_object(VERSION_ID)
    assert doc["spec"] == {"targetVersion": "0.0.3"}
    assert doc["status"]["availableVersion"] == "0.0.2"


async def test_update_version_custom_images(
    client: UpgradeClient, store: InMemoryStore
) -> None:
    """Test starting a minor update with container image overrides."""
    images = {"novaAPIImage": "quay.io/podified/nova-api:custom"}
    report = await client.update_version("0.0.3", custom_container_images=images)
    assert report.custom_container_images == images
    doc = await store.get_object(VERSION_ID)
    assert doc["spec"]["customContainerImages"] == images


async def test_update_version_invalid(client: UpgradeClient) -> None:
    """Test the target version is required."""
    with pytest.raises(InputException, match="targetVersion is required"):
        await client.update_version("")
    with pytest.raises(ObjectNotFoundError):
        await client.update_version("0.0.3", namespace="empty")


async def test_wait_version_met(client: UpgradeClient, messages: list[str]) -> None:
    """Test waiting for a condition that is already True."""
    report = await client.wait_version("MinorUpdateOVNControlplane")
    assert report.compact_dict() == {
        "name": "openstack",
        "namespace": "openstack",
        "condition": "MinorUpdateOVNControlplane",
        "met": True,
        "message": "OVN Controlplane minor update completed",
        "reason": "Ready",
    }
    assert messages == [
        "Waiting for condition 'MinorUpdateOVNControlplane' on OpenStackVersion "
        "'openstack/openstack' (timeout: 600s)",
        "Condition 'MinorUpdateOVNControlplane' is True - Ready!",
    ]


async def test_wait_version_becomes_ready(
    client: UpgradeClient, store: InMemoryStore, messages: list[str]
) -> None:
    """Test waiting while the controller reports progress."""

    async def complete(seconds: int, cancel: asyncio.Event | None) -> bool:
        doc = await store.get_object(VERSION_ID)
        for cond in doc["status"]["conditions"]:
            if cond["type"] == "MinorUpdateOVNDataplane":
                cond.update({"status": "True", "reason": "Ready", "message": "Done"})
        store.add_object(doc)
        return False

    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(ConditionWatcher, "_sleep", staticmethod(complete))
        report = await client.wait_version(
            "MinorUpdateOVNDataplane", timeout_seconds=20, poll_interval_seconds=5
        )
    assert report.met
    assert report.message == "Done"
    assert messages[1:] == [
        "Polling... Condition 'MinorUpdateOVNDataplane' status: False "
        "(reason: RequestedVersion)",
        "Condition 'MinorUpdateOVNDataplane' is True - Ready!",
    ]


async def test_wait_version_timeout(
    client: UpgradeClient, mock_sleep: AsyncMock
) -> None:
    """Test waiting for a condition that never becomes True."""
    report = await client.wait_version(
        "MinorUpdateDataplane", name="openstack", timeout_seconds=10
    )
    assert not report.met
    assert report.reason == "Timeout"
    assert report.message == "Timeout waiting for condition 'MinorUpdateDataplane'"
    assert mock_sleep.await_count == 1


async def test_wait_version_config(
    store: InMemoryStore, mock_sleep: AsyncMock
) -> None:
    """Test the wait defaults come from the client config."""
    client = UpgradeClient(
        store, UpgradeConfig(wait_timeout_seconds=30, wait_poll_interval_seconds=10)
    )
    report = await client.wait_version("MinorUpdateDataplane")
    assert not report.met
    assert mock_sleep.await_count == 2
    mock_sleep.assert_awaited_with(10, None)


async def test_wait_version_cancelled(client: UpgradeClient) -> None:
    """Test cancelling a wait."""
    cancel = asyncio.Event()
    cancel.set()
    with pytest.raises(WaitCancelledError):
        await client.wait_version("MinorUpdateDataplane", cancel=cancel)


async def test_wait_version_invalid(client: UpgradeClient) -> None:
    """Test the condition is required."""
    with pytest.raises(InputException, match="condition is required"):
        await client.wait_version("")
    with pytest.raises(ObjectNotFoundError):
        await client.wait_version("Ready", namespace="empty")


async def test_get_resume_step(client: UpgradeClient) -> None:
    """Test finding the resume step of the update in progress."""
    report = await client.get_resume_step()
    assert report.resume_step == 5
    assert report.compact_dict() == {
        "name": "openstack",
        "namespace": "openstack",
        "targetVersion": "0.0.2",
        "availableVersion": "0.0.2",
        "deployedVersion": "0.0.1",
        "notReadyConditions": [
            "Ready",
            "MinorUpdateOVNDataplane",
            "MinorUpdateControlplane",
            "MinorUpdateDataplane",
        ],
        "resumeStep": 5,
        "explanation": (
            "Upgrade in progress (targetVersion='0.0.2' == availableVersion='0.0.2'). "
            "notReadyConditions contains 'MinorUpdateOVNDataplane'. "
            "Resume at Step 5: Deploy OVN on Dataplane."
        ),
    }


async def test_get_resume_step_after_update(client: UpgradeClient) -> None:
    """Test a new target version starts the procedure from the beginning."""
    await client.update_version("0.0.3")
    report = await client.get_resume_step()
    assert report.resume_step == 2
    assert report.explanation.startswith("Upgrade not in progress")


async def test_get_controlplane(client: UpgradeClient) -> None:
    """Test reading the OpenStackControlPlane."""
    report = await client.get_controlplane()
    assert report.name == "controlplane"
    assert report.spec == {"secret": "osp-secret", "storageClass": "local-storage"}
    assert report.status is not None
    assert len(report.status["conditions"]) == 3


async def test_verify_controlplane(client: UpgradeClient) -> None:
    """Test verifying a ready OpenStackControlPlane."""
    report = await client.verify_controlplane()
    assert report.all_ready
    assert report.total_conditions == 3
    assert report.ready_conditions == [
        "Ready",
        "OpenStackControlPlaneDNSReadyCondition",
        "OpenStackControlPlaneOVNReadyCondition",
    ]
    assert report.not_ready_conditions == []


def controlplane(status: Any) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "kind": "OpenStackControlPlane",
        "metadata": {"name": "controlplane", "namespace": "other"},
        "spec": {},
    }
    if status is not None:
        doc["status"] = status
    return doc


async def test_verify_controlplane_not_ready(store: InMemoryStore) -> None:
    """Test verifying an OpenStackControlPlane with a failing condition."""
    store.add_object(
        controlplane(
            {
                "conditions": [
                    {"type": "Ready", "status": "False", "reason": "Error"},
                    {"type": "OpenStackControlPlaneNovaReadyCondition", "status": "True"},
                ]
            }
        )
    )
    client = UpgradeClient(store)
    report = await client.verify_controlplane(namespace="other")
    assert not report.all_ready
    assert report.total_conditions == 2
    assert report.ready_conditions == ["OpenStackControlPlaneNovaReadyCondition"]
    assert report.not_ready_conditions == [
        Condition(type="Ready", status=ConditionStatus.FALSE, reason="Error")
    ]


@pytest.mark.parametrize(
    ("status", "match"),
    [
        (None, "No status found"),
        ({}, "No conditions found"),
        ({"conditions": []}, "No conditions found"),
    ],
)
async def test_verify_controlplane_invalid(
    store: InMemoryStore, status: Any, match: str
) -> None:
    """Test verifying an OpenStackControlPlane without conditions."""
    store.add_object(controlplane(status))
    client = UpgradeClient(store)
    with pytest.raises(InputException, match=match):
        await client.verify_controlplane(namespace="other", name="controlplane")


async def test_list_nodesets(client: UpgradeClient) -> None:
    """Test listing the OpenStackDataplaneNodeSets."""
    reports = await client.list_nodesets()
    assert [report.name for report in reports] == [
        "openstack-edpm",
        "openstack-networker",
    ]
    assert await client.list_nodesets(namespace="empty") == []


async def test_verify_nodesets(client: UpgradeClient) -> None:
    """Test verifying the OpenStackDataplaneNodeSets."""
    report = await client.verify_nodesets()
    assert not report.all_ready
    assert report.total_node_sets == 2
    assert report.ready_node_sets == ["openstack-edpm"]
    assert report.compact_dict()["notReadyNodeSets"] == [
        {
            "name": "openstack-networker",
            "allReady": False,
            "totalConditions": 2,
            "readyConditions": ["SetupReady"],
            "notReadyConditions": [
                {
                    "type": "Ready",
                    "status": "False",
                    "reason": "Requested",
                    "message": "Deployment in progress",
                }
            ],
        }
    ]


async def test_verify_nodesets_without_status() -> None:
    """Test node sets without a status or conditions are not ready."""
    store = InMemoryStore(default_namespace="openstack")
    store.add_objects(
        [
            {"kind": "OpenStackDataplaneNodeSet", "metadata": {"name": "new"}},
            {
                "kind": "OpenStackDataplaneNodeSet",
                "metadata": {"name": "pending"},
                "status": {"observedGeneration": 1},
            },
        ]
    )
    report = await UpgradeClient(store).verify_nodesets()
    assert not report.all_ready
    assert report.ready_node_sets == []
    assert [
        (result.name, [cond.reason for cond in result.not_ready_conditions])
        for result in report.not_ready_node_sets
    ] == [("new", ["NoStatus"]), ("pending", ["NoConditions"])]


async def test_verify_nodesets_not_found(client: UpgradeClient) -> None:
    """Test verifying a namespace without node sets."""
    with pytest.raises(ObjectNotFoundError, match="No OpenStackDataplaneNodeSet"):
        await client.verify_nodesets(namespace="empty")


async def test_list_deployments(client: UpgradeClient) -> None:
    """Test listing the OpenStackDataplaneDeployments."""
    reports = await client.list_deployments()
    assert [report.name for report in reports] == ["edpm-deployment-ovn-update"]


async def test_get_deployment(client: UpgradeClient) -> None:
    """Test reading an OpenStackDataplaneDeployment by name."""
    report = await client.get_deployment("edpm-deployment-ovn-update")
    assert report.spec == {
        "nodeSets": ["openstack-edpm", "openstack-networker"],
        "servicesOverride": ["ovn"],
    }
    with pytest.raises(InputException, match="name is required"):
        await client.get_deployment("")
    with pytest.raises(ObjectNotFoundError):
        await client.get_deployment("missing")
