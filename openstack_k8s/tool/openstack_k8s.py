"""Command line tool for inspecting and driving an OpenStack minor update."""

import argparse
import asyncio
import logging
import pathlib
import sys
import traceback
from typing import Any

import yaml

from openstack_k8s.exceptions import OpenStackK8sException
from openstack_k8s.store.kubectl import KUBECTL_BIN
from . import get, update, wait, resume_step, verify

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for OpenStack minor updates on kubernetes.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )
    parser.add_argument(
        "--kubectl",
        default=KUBECTL_BIN,
        help="Path of the kubectl binary used to reach the cluster",
    )
    parser.add_argument(
        "--from-file",
        type=pathlib.Path,
        default=None,
        help=(
            "Read objects from a YAML file (e.g. the output of `kubectl get -o yaml`) "
            "instead of the cluster. Updates are not written back."
        ),
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    get.GetAction.register(subparsers)
    update.UpdateAction.register(subparsers)
    wait.WaitAction.register(subparsers)
    resume_step.ResumeStepAction.register(subparsers)
    verify.VerifyAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """OpenStack-k8s command line tool main entry point."""

    def str_presenter(dumper: yaml.Dumper, data: Any) -> Any:
        """Represent multi-line yaml strings as you'd expect.

        See https://github.com/yaml/pyyaml/issues/240
        """
        return dumper.represent_scalar(
            "tag:yaml.org,2002:str", data, style="|" if data.count("\n") > 0 else None
        )

    yaml.add_representer(str, str_presenter)

    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except OpenStackK8sException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("openstack-k8s error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
