"""OpenStack-k8s get action."""

import logging
from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
)
from typing import Any, cast

from . import common


_LOGGER = logging.getLogger(__name__)


class GetVersionAction:
    """Get details about the OpenStackVersion."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "version",
                aliases=["osv", "openstackversion"],
                help="Get the OpenStackVersion object",
                description="Print the versions and conditions of an OpenStackVersion",
            ),
        )
        common.add_name_flags(args)
        common.add_output_flags(args, ["table", "yaml", "json"])
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output: str,
        name: str | None,
        **kwargs,
    ) -> None:
        """Async Action implementation."""
        client = await common.build_client(**kwargs)
        report = await client.get_version(kwargs.get("namespace"), name)
        common.print_report(
            report.compact_dict(),
            output,
            cols=[
                "name",
                "namespace",
                "targetVersion",
                "availableVersion",
                "deployedVersion",
                "notReadyConditions",
            ],
        )


class GetControlPlaneAction:
    """Get details about the OpenStackControlPlane."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "controlplane",
                aliases=["osctlplane", "openstackcontrolplane"],
                help="Get the OpenStackControlPlane object",
                description="Print the spec and status of an OpenStackControlPlane",
            ),
        )
        common.add_name_flags(args)
        common.add_output_flags(args, ["yaml", "json"])
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output: str,
        name: str | None,
        **kwargs,
    ) -> None:
        """Async Action implementation."""
        client = await common.build_client(**kwargs)
        report = await client.get_controlplane(kwargs.get("namespace"), name)
        common.print_report(report.compact_dict(), output)


class GetNodeSetsAction:
    """Get details about OpenStackDataplaneNodeSets."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "nodesets",
                aliases=["osdpns", "nodeset"],
                help="Get OpenStackDataplaneNodeSet objects",
                description="Print the OpenStackDataplaneNodeSets in a namespace",
            ),
        )
        common.add_namespace_flags(args)
        common.add_output_flags(args, ["table", "yaml", "json"])
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output: str,
        **kwargs,
    ) -> None:
        """Async Action implementation."""
        client = await common.build_client(**kwargs)
        reports = await client.list_nodesets(kwargs.get("namespace"))
        if not reports:
            print("No OpenStackDataplaneNodeSets found")
            return
        common.print_report(
            [report.compact_dict() for report in reports],
            output,
            cols=["name", "namespace"],
        )


class GetDeploymentsAction:
    """Get details about OpenStackDataplaneDeployments."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "deployments",
                aliases=["osdpd", "deployment"],
                help="Get OpenStackDataplaneDeployment objects",
                description=(
                    "Print the OpenStackDataplaneDeployments in a namespace, or a "
                    "single one by name"
                ),
            ),
        )
        common.add_name_flags(args)
        common.add_output_flags(args, ["table", "yaml", "json"])
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output: str,
        name: str | None,
        **kwargs,
    ) -> None:
        """Async Action implementation."""
        client = await common.build_client(**kwargs)
        if name:
            reports = [await client.get_deployment(name, kwargs.get("namespace"))]
        else:
            reports = await client.list_deployments(kwargs.get("namespace"))
        if not reports:
            print("No OpenStackDataplaneDeployments found")
            return
        results: list[dict[str, Any]] = []
        for report in reports:
            value = report.compact_dict()
            if output == "table":
                value["nodeSets"] = (report.spec or {}).get("nodeSets")
                value["servicesOverride"] = (report.spec or {}).get("servicesOverride")
            results.append(value)
        common.print_report(
            results,
            output,
            cols=["name", "namespace", "nodeSets", "servicesOverride"],
        )


class GetAction:
    """OpenStack-k8s get action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "get",
                help="Print information about the upgrade resources",
                description="Print information about the OpenStack upgrade resources",
            ),
        )
        subcmds = args.add_subparsers(
            title="Available commands",
            required=True,
        )
        GetVersionAction.register(subcmds)
        GetControlPlaneAction.register(subcmds)
        GetNodeSetsAction.register(subcmds)
        GetDeploymentsAction.register(subcmds)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        # No-op given subcommands are always the dispatch target
