"""Command line entry points.

Exit codes:

- ``0``: all files were updated
- ``1``: the release feed or a required file could not be processed
- ``2``: partial failure, some updates failed while others succeeded

"""

import argparse
import logging
import os
import sys

from k8s_versions.block import update_versions_file
from k8s_versions.config import Settings
from k8s_versions.errors import DecodeError
from k8s_versions.errors import FileProcessingError
from k8s_versions.errors import K8sVersionsError
from k8s_versions.errors import PartialFailure
from k8s_versions.feed import ReleaseCycle
from k8s_versions.feed import fetch_release_cycles
from k8s_versions.feed import filter_supported
from k8s_versions.logger import LOGGER
from k8s_versions.matrix import resolve_kind_channel
from k8s_versions.matrix import resolve_minikube_channel
from k8s_versions.matrix import update_matrix_file

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_PARTIAL_FAILURE = 2


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--feed-url",
        type=str,
        default=None,
        help="Url of the endoflife.date compatible Kubernetes release feed",
    )
    parser.add_argument(
        "--registry-url",
        type=str,
        default=None,
        help="Url of the Docker Hub tag listing of the kind node images",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Trace skipped and resolved versions",
    )


def _setup(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env().replace(
        feed_url=args.feed_url,
        registry_url=args.registry_url,
        minikube_url=getattr(args, "minikube_url", None),
        debug=args.debug,
    )
    LOGGER.setLevel(logging.DEBUG if settings.debug else logging.INFO)
    return settings


def _supported_cycles(settings: Settings) -> list[ReleaseCycle] | None:
    try:
        cycles = filter_supported(fetch_release_cycles(settings.feed_url))
    except K8sVersionsError as err:
        LOGGER.error("Failed to get k8s versions: %s", err)
        return None

    for cycle in cycles:
        LOGGER.debug(
            "supported: %s (latest %s, EOL %s)", cycle.cycle, cycle.latest, cycle.eol
        )
    return cycles


def update_workflows(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        "update-k8s-workflows",
        description="Update the Kubernetes versions blocks of workflow files",
    )
    parser.add_argument(
        "files",
        type=str,
        nargs="*",
        help="Workflow files to update, relative to the current directory",
    )
    _add_common_arguments(parser)
    args = parser.parse_args(argv)
    settings = _setup(args)

    if (cycles := _supported_cycles(settings)) is None:
        return EXIT_FAILURE

    partial_failure = False
    for fname in args.files or settings.workflow_files:
        path = os.path.join(os.getcwd(), os.path.normpath(fname))
        try:
            update_versions_file(path, cycles, registry_url=settings.registry_url)
        except K8sVersionsError as err:
            LOGGER.error("Failed to update %s: %s", path, err)
            partial_failure = True

    return EXIT_PARTIAL_FAILURE if partial_failure else EXIT_OK


def update_matrix(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        "update-k8s-matrix",
        description="Update the kind and minikube versions of the json test matrix",
    )
    parser.add_argument(
        "matrix",
        type=str,
        nargs="?",
        default=None,
        help="The json test matrix to update",
    )
    parser.add_argument(
        "--minikube-url",
        type=str,
        default=None,
        help="Url of the minikube source listing the valid Kubernetes versions",
    )
    _add_common_arguments(parser)
    args = parser.parse_args(argv)
    settings = _setup(args)

    if (cycles := _supported_cycles(settings)) is None:
        return EXIT_FAILURE

    kind = resolve_kind_channel(cycles, settings.registry_url)
    minikube = resolve_minikube_channel(cycles, settings.minikube_url)
    for channel in (kind, minikube):
        LOGGER.debug("%s versions: %s", channel.name, ", ".join(channel.versions))
        for err in channel.errors:
            LOGGER.error("Failed to resolve %s versions: %s", channel.name, err)

    try:
        update_matrix_file(args.matrix or settings.matrix_file, kind, minikube)
    except PartialFailure as err:
        LOGGER.error("No versions resolved for any channel:\n%s", err)
        return EXIT_PARTIAL_FAILURE
    except (FileProcessingError, DecodeError) as err:
        LOGGER.error("%s", err)
        return EXIT_FAILURE

    return EXIT_PARTIAL_FAILURE if kind.errors or minikube.errors else EXIT_OK


def main_workflows() -> None:
    sys.exit(update_workflows())


def main_matrix() -> None:
    sys.exit(update_matrix())
