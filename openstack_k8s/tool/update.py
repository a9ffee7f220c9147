"""OpenStack-k8s update action."""

import json
import logging
from argparse import (
    ArgumentParser,
    ArgumentTypeError,
    _SubParsersAction as SubParsersAction,
)
from typing import Any, cast

from . import common


_LOGGER = logging.getLogger(__name__)


def json_object(value: str) -> dict[str, Any]:
    """Parse a flag value holding a JSON object."""
    try:
        result = json.loads(value)
    except json.JSONDecodeError as err:
        raise ArgumentTypeError(f"Invalid JSON: {err}") from err
    if not isinstance(result, dict):
        raise ArgumentTypeError(f"Expected a JSON object but got '{value}'")
    return result


class UpdateVersionAction:
    """Set the target version of the OpenStackVersion."""

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
                help="Start a minor update by setting the target version",
                description=(
                    "Set spec.targetVersion of the first OpenStackVersion in the "
                    "namespace, starting the minor update with the OVN update of "
                    "the control plane"
                ),
            ),
        )
        common.add_namespace_flags(args)
        args.add_argument(
            "--target-version",
            required=True,
            help="Target version to update to (e.g. '0.0.2')",
        )
        args.add_argument(
            "--custom-container-images",
            type=json_object,
            default=None,
            help="JSON object of container image overrides for spec.customContainerImages",
        )
        common.add_output_flags(args, ["table", "yaml", "json"])
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output: str,
        target_version: str,
        custom_container_images: dict[str, Any] | None,
        **kwargs,
    ) -> None:
        """Async Action implementation."""
        client = await common.build_client(**kwargs)
        report = await client.update_version(
            target_version,
            kwargs.get("namespace"),
            custom_container_images=custom_container_images,
        )
        common.print_report(
            report.compact_dict(),
            output,
            cols=["name", "namespace", "targetVersion", "availableVersion", "deployedVersion"],
        )


class UpdateAction:
    """OpenStack-k8s update action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "update",
                help="Update the upgrade resources",
                description="Update the OpenStack upgrade resources",
            ),
        )
        subcmds = args.add_subparsers(
            title="Available commands",
            required=True,
        )
        UpdateVersionAction.register(subcmds)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        # No-op given subcommands are always the dispatch target
