"""OpenStack-k8s resume-step action."""

import logging
from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
)
from typing import cast

from . import common


_LOGGER = logging.getLogger(__name__)


class ResumeStepAction:
    """Determine the step of the minor update to resume from."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "resume-step",
                help="Print the update step to resume from",
                description=(
                    "Compare targetVersion, availableVersion and deployedVersion "
                    "and the not ready conditions of the OpenStackVersion to find "
                    "the step of the minor update to resume from."
                ),
            ),
        )
        common.add_name_flags(args)
        common.add_output_flags(args, ["text", "yaml", "json"])
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
        report = await client.get_resume_step(kwargs.get("namespace"), name)
        if output == "text":
            print(f"Resume step: {report.resume_step}")
            print(report.explanation)
            return
        common.print_report(report.compact_dict(), output)
