"""OpenStack-k8s verify action."""

import logging
from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
)
import sys
from typing import cast

from . import common


_LOGGER = logging.getLogger(__name__)

# Exit code when some conditions are not ready
NOT_READY_EXIT_CODE = 2


class VerifyControlPlaneAction:
    """Verify all conditions of the OpenStackControlPlane are ready."""

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
                help="Verify all conditions on the OpenStackControlPlane are ready",
                description="Check every condition on an OpenStackControlPlane",
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
        report = await client.verify_controlplane(kwargs.get("namespace"), name)
        common.print_report(report.compact_dict(), output)
        if not report.all_ready:
            sys.exit(NOT_READY_EXIT_CODE)


class VerifyNodeSetsAction:
    """Verify all conditions of every OpenStackDataplaneNodeSet are ready."""

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
                help="Verify all conditions on all OpenStackDataplaneNodeSets are ready",
                description="Check every condition on every OpenStackDataplaneNodeSet",
            ),
        )
        common.add_namespace_flags(args)
        common.add_output_flags(args, ["yaml", "json"])
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output: str,
        **kwargs,
    ) -> None:
        """Async Action implementation."""
        client = await common.build_client(**kwargs)
        report = await client.verify_nodesets(kwargs.get("namespace"))
        common.print_report(report.compact_dict(), output)
        if not report.all_ready:
            sys.exit(NOT_READY_EXIT_CODE)


class VerifyAction:
    """OpenStack-k8s verify action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "verify",
                help="Verify the upgrade resources are ready",
                description="Verify all conditions on the OpenStack resources are ready",
            ),
        )
        subcmds = args.add_subparsers(
            title="Available commands",
            required=True,
        )
        VerifyControlPlaneAction.register(subcmds)
        VerifyNodeSetsAction.register(subcmds)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        # No-op given subcommands are always the dispatch target
