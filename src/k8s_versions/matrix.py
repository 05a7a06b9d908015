"""Update the version lists of the json test matrix.

The matrix maps the name of a test suite to the Kubernetes versions it runs
against, either on kind or on minikube:

.. code-block:: json

   {
     "functional": {
       "k8s-kind-version": ["v1.31.2", "v1.30.6"]
     },
     "eks": {
       "k8s-minikube-version": ["v1.31.2", "v1.30.6"]
     }
   }

Unlike the workflow files, the matrix is fully parsed and written back with
sorted keys, so repeated runs do not produce spurious diffs.

"""

import json
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from k8s_versions.config import DEFAULT_MINIKUBE_URL
from k8s_versions.config import DEFAULT_REGISTRY_URL
from k8s_versions.errors import DecodeError
from k8s_versions.errors import FileProcessingError
from k8s_versions.errors import K8sVersionsError
from k8s_versions.errors import PartialFailure
from k8s_versions.errors import ResolutionExhausted
from k8s_versions.feed import ReleaseCycle
from k8s_versions.feed import strip_v
from k8s_versions.kind import resolve_kind_image
from k8s_versions.logger import LOGGER
from k8s_versions.minikube import VersionListingExtractor
from k8s_versions.minikube import fetch_minikube_versions
from k8s_versions.minikube import resolve_minikube_versions

KIND_FIELD = "k8s-kind-version"

MINIKUBE_FIELD = "k8s-minikube-version"

#: Type of the test matrix: suite name -> channel field -> versions
MATRIX_T = dict[str, dict[str, list[str]]]


@dataclass
class ChannelResult:
    """The versions resolved for one channel and the errors that occurred
    while resolving them.

    """

    name: str
    versions: list[str] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)


def resolve_kind_channel(
    cycles: list[ReleaseCycle], registry_url: str = DEFAULT_REGISTRY_URL
) -> ChannelResult:
    """Resolve the kind node image of every cycle. Cycles without any image
    are skipped, other failures are recorded and the remaining cycles are
    still resolved.

    """
    result = ChannelResult(name="kind")
    for cycle in cycles:
        try:
            result.versions.append(
                f"v{strip_v(resolve_kind_image(cycle.latest, registry_url))}"
            )
        except ResolutionExhausted as err:
            LOGGER.warning("skipping %s: %s", cycle.cycle, err)
        except K8sVersionsError as err:
            result.errors.append(err)
    return result


def resolve_minikube_channel(
    cycles: list[ReleaseCycle],
    url: str = DEFAULT_MINIKUBE_URL,
    extractor: VersionListingExtractor | None = None,
) -> ChannelResult:
    result = ChannelResult(name="minikube")
    try:
        listing = fetch_minikube_versions(url, extractor)
    except K8sVersionsError as err:
        result.errors.append(err)
        return result

    result.versions = resolve_minikube_versions(cycles, listing)
    return result


def patch_matrix(
    matrix: MATRIX_T, kind_tags: list[str], minikube_tags: list[str]
) -> MATRIX_T:
    """Return a copy of ``matrix`` where the kind versions of every entry are
    replaced by ``kind_tags``, or, for entries without kind versions, the
    minikube versions by ``minikube_tags``. Empty lists replace nothing.

    """
    patched: MATRIX_T = {}
    for name, entry in matrix.items():
        entry = dict(entry)
        if kind_tags and KIND_FIELD in entry:
            entry[KIND_FIELD] = list(kind_tags)
        elif minikube_tags and MINIKUBE_FIELD in entry:
            entry[MINIKUBE_FIELD] = list(minikube_tags)
        patched[name] = entry
    return patched


def load_matrix(path: str | Path) -> MATRIX_T:
    try:
        with open(path, "r", encoding="utf-8") as matrix_json:
            matrix = json.load(matrix_json)
    except OSError as err:
        raise FileProcessingError(f"failed to read {path}: {err}") from err
    except ValueError as err:
        raise DecodeError(f"{path} is not valid json: {err}") from err

    if not isinstance(matrix, dict) or not all(
        isinstance(entry, dict) for entry in matrix.values()
    ):
        raise DecodeError(f"{path} must contain a mapping of test matrix entries")
    return matrix


def update_matrix_file(
    path: str | Path, kind: ChannelResult, minikube: ChannelResult
) -> None:
    """Patch the matrix file ``path`` with the resolved versions of both
    channels.

    Raises:
        :py:class:`~k8s_versions.errors.PartialFailure`: if neither channel
            resolved a version while errors occurred, the file is not
            written in this case

    """
    if not kind.versions and not minikube.versions and (kind.errors or minikube.errors):
        raise PartialFailure(kind.errors + minikube.errors)

    matrix = patch_matrix(load_matrix(path), kind.versions, minikube.versions)

    try:
        with open(path, "w", encoding="utf-8") as matrix_json:
            matrix_json.write(json.dumps(matrix, indent=2, sort_keys=True) + "\n")
    except OSError as err:
        raise FileProcessingError(f"failed to write {path}: {err}") from err

    LOGGER.info("updated %s", path)
