"""Tests for the kubectl object store."""

from unittest.mock import AsyncMock

import pytest

from openstack_k8s.command import Command
from openstack_k8s.exceptions import (
    KubectlException,
    ObjectNotFoundError,
    StoreException,
)
from openstack_k8s.manifest import NamedResource
from openstack_k8s.store import KubectlStore

VERSIONS = "openstackversions.v1beta1.core.openstack.org"
RESOURCE_ID = NamedResource("OpenStackVersion", "openstack", "openstack")

VERSION_YAML = """\
apiVersion: core.openstack.org/v1beta1
kind: OpenStackVersion
metadata:
  name: openstack
  namespace: openstack
spec:
  targetVersion: 0.0.2
"""

LIST_YAML = """\
apiVersion: v1
kind: List
items:
- apiVersion: core.openstack.org/v1beta1
  kind: OpenStackVersion
  metadata:
    name: openstack
    namespace: openstack
  spec:
    targetVersion: 0.0.2
"""


@pytest.fixture
def mock_run(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    """Replace command execution with a mock returning a single object."""
    run = AsyncMock(return_value=VERSION_YAML)
    monkeypatch.setattr("openstack_k8s.store.kubectl.run", run)
    return run


def command_args(mock_run: AsyncMock) -> list[str]:
    cmd = mock_run.await_args.args[0]
    assert isinstance(cmd, Command)
    assert cmd.exc is KubectlException
    return cmd.cmd


async def test_get_object(mock_run: AsyncMock) -> None:
    """Test getting an object runs kubectl get."""
    store = KubectlStore()
    doc = await store.get_object(RESOURCE_ID)
    assert doc["spec"] == {"targetVersion": "0.0.2"}
    assert command_args(mock_run) == [
        "kubectl",
        "get",
        VERSIONS,
        "openstack",
        "--namespace",
        "openstack",
        "--output",
        "yaml",
    ]


async def test_list_objects(mock_run: AsyncMock) -> None:
    """Test listing objects returns the items of the List."""
    mock_run.return_value = LIST_YAML
    store = KubectlStore(kubectl_bin="/usr/local/bin/oc")
    docs = await store.list_objects("OpenStackVersion", "openstack")
    assert [doc["metadata"]["name"] for doc in docs] == ["openstack"]
    assert command_args(mock_run) == [
        "/usr/local/bin/oc",
        "get",
        VERSIONS,
        "--namespace",
        "openstack",
        "--output",
        "yaml",
    ]


async def test_list_objects_empty(mock_run: AsyncMock) -> None:
    """Test listing when no objects exist."""
    mock_run.return_value = "apiVersion: v1\nitems: []\nkind: List\n"
    store = KubectlStore()
    assert await store.list_objects("OpenStackDataplaneNodeSet", "openstack") == []


async def test_patch_object(mock_run: AsyncMock) -> None:
    """Test patching an object runs a kubectl merge patch."""
    store = KubectlStore(env={"KUBECONFIG": "/tmp/kubeconfig"})
    await store.patch_object(RESOURCE_ID, {"spec": {"targetVersion": "0.0.2"}})
    cmd = mock_run.await_args.args[0]
    assert cmd.env == {"KUBECONFIG": "/tmp/kubeconfig"}
    assert command_args(mock_run) == [
        "kubectl",
        "patch",
        VERSIONS,
        "openstack",
        "--namespace",
        "openstack",
        "--type",
        "merge",
        "--patch",
        '{"spec": {"targetVersion": "0.0.2"}}',
        "--output",
        "yaml",
    ]


async def test_get_object_not_found(mock_run: AsyncMock) -> None:
    """Test a missing object is reported as not found."""
    mock_run.side_effect = KubectlException(
        "Command 'kubectl get' failed with return code 1\n"
        'Error from server (NotFound): openstackversions "openstack" not found'
    )
    store = KubectlStore()
    with pytest.raises(ObjectNotFoundError, match="OpenStackVersion/openstack/openstack"):
        await store.get_object(RESOURCE_ID)


async def test_get_object_failure(mock_run: AsyncMock) -> None:
    """Test other kubectl failures are raised as is."""
    mock_run.side_effect = KubectlException(
        "Command 'kubectl get' failed with return code 1\n"
        "error: You must be logged in to the server (Unauthorized)"
    )
    store = KubectlStore()
    with pytest.raises(KubectlException, match="Unauthorized"):
        await store.get_object(RESOURCE_ID)


@pytest.mark.parametrize("output", ["", "- a\n- b\n", "key: [unclosed\n"])
async def test_invalid_output(mock_run: AsyncMock, output: str) -> None:
    """Test output that is not a single object."""
    mock_run.return_value = output
    store = KubectlStore()
    with pytest.raises(KubectlException):
        await store.get_object(RESOURCE_ID)


async def test_missing_kubectl() -> None:
    """Test a kubectl binary that does not exist is a store failure."""
    store = KubectlStore(kubectl_bin="/nonexistent/kubectl")
    with pytest.raises(StoreException, match="failed to start"):
        await store.get_object(RESOURCE_ID)
