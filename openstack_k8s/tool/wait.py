"""OpenStack-k8s wait action."""

import logging
from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
)
import sys
from typing import cast

from . import common


_LOGGER = logging.getLogger(__name__)

# Exit code when the condition did not become True in time
NOT_MET_EXIT_CODE = 2


def print_progress(message: str) -> None:
    """Write wait progress to stderr, keeping stdout for the result."""
    print(message, file=sys.stderr)


class WaitVersionAction:
    """Wait for a condition on the OpenStackVersion."""

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
                help="Wait for a condition on the OpenStackVersion to become True",
                description=(
                    "Poll the OpenStackVersion until a condition becomes True or "
                    "the timeout expires. Common conditions: MinorUpdateReady, "
                    "Ready, MinorUpdateOVNControlplane, MinorUpdateControlplane."
                ),
            ),
        )
        common.add_name_flags(args)
        args.add_argument(
            "--condition",
            required=True,
            help="Condition type to wait for (e.g. 'MinorUpdateOVNControlplane')",
        )
        args.add_argument(
            "--timeout",
            type=int,
            default=None,
            help="Timeout in seconds (default: 600)",
        )
        args.add_argument(
            "--poll-interval",
            type=int,
            default=None,
            help="Poll interval in seconds (default: 5)",
        )
        common.add_output_flags(args, ["table", "yaml", "json"])
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output: str,
        name: str | None,
        condition: str,
        timeout: int | None,
        poll_interval: int | None,
        **kwargs,
    ) -> None:
        """Async Action implementation."""
        client = await common.build_client(progress=print_progress, **kwargs)
        report = await client.wait_version(
            condition,
            kwargs.get("namespace"),
            name,
            timeout_seconds=timeout,
            poll_interval_seconds=poll_interval,
        )
        common.print_report(
            report.compact_dict(),
            output,
            cols=["name", "condition", "met", "reason", "message"],
        )
        if not report.met:
            sys.exit(NOT_MET_EXIT_CODE)


class WaitAction:
    """OpenStack-k8s wait action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "wait",
                help="Wait for a condition on the upgrade resources",
                description="Wait for a condition on the OpenStack upgrade resources",
            ),
        )
        subcmds = args.add_subparsers(
            title="Available commands",
            required=True,
        )
        WaitVersionAction.register(subcmds)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        # No-op given subcommands are always the dispatch target
