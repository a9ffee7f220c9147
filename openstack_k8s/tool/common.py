"""Flags and helpers shared by the command line actions."""

import logging
import pathlib
from argparse import ArgumentParser
from typing import Any

from openstack_k8s.config import DEFAULT_NAMESPACE, UpgradeConfig
from openstack_k8s.store import KubectlStore, ProgressSink, Store, load_store
from openstack_k8s.upgrade import UpgradeClient

from .format import PrintFormatter, struct_formatter

_LOGGER = logging.getLogger(__name__)


def add_namespace_flags(args: ArgumentParser) -> None:
    """Add the namespace flag to the arguments object."""
    args.add_argument(
        "--namespace",
        "-n",
        default=None,
        help=f"Namespace of the resources (default: {DEFAULT_NAMESPACE})",
    )


def add_name_flags(args: ArgumentParser) -> None:
    """Add the namespace and optional object name flags to the arguments object."""
    add_namespace_flags(args)
    args.add_argument(
        "--name",
        default=None,
        help="Name of the resource (default: the first one in the namespace)",
    )


def add_output_flags(
    args: ArgumentParser, choices: list[str], default: str | None = None
) -> None:
    """Add the output format flag to the arguments object."""
    args.add_argument(
        "--output",
        "-o",
        choices=choices,
        default=default or choices[0],
        help="Output format of the command",
    )


async def build_store(
    kubectl: str, from_file: pathlib.Path | None, namespace: str | None
) -> Store:
    """Return the store selected by the global flags."""
    if from_file is not None:
        _LOGGER.debug("Reading objects from %s", from_file)
        return await load_store(from_file, namespace or DEFAULT_NAMESPACE)
    return KubectlStore(kubectl_bin=kubectl)


async def build_client(
    kubectl: str = "kubectl",
    from_file: pathlib.Path | None = None,
    namespace: str | None = None,
    progress: ProgressSink | None = None,
    **kwargs: Any,  # pylint: disable=unused-argument
) -> UpgradeClient:
    """Return an UpgradeClient for the global flags."""
    store = await build_store(kubectl, from_file, namespace)
    return UpgradeClient(store, UpgradeConfig(), progress)


def print_report(data: Any, output: str, cols: list[str] | None = None) -> None:
    """Print a report dict (or list of them) in the requested format."""
    if output == "table":
        rows = data if isinstance(data, list) else [data]
        PrintFormatter(cols).print(rows)
        return
    struct_formatter(output).print(data)
