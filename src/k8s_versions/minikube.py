"""Kubernetes versions supported by `minikube <https://minikube.sigs.k8s.io/>`_.

minikube keeps its list of valid Kubernetes versions as a Go string slice
ordered newest first:

.. code-block:: go

   var ValidKubernetesVersions = []string{
       "v1.31.2",
       "v1.31.1",
       ...
   }

"""

import abc
import re

from k8s_versions.config import DEFAULT_MINIKUBE_URL
from k8s_versions.errors import DecodeError
from k8s_versions.errors import FormatError
from k8s_versions.feed import ReleaseCycle
from k8s_versions.feed import strip_v
from k8s_versions.logger import LOGGER
from k8s_versions.remote import fetch


class VersionListingExtractor(abc.ABC):
    """Extracts an ordered list of version strings from upstream source
    text.

    """

    @abc.abstractmethod
    def extract(self, source: str) -> list[str]:
        """Return the versions listed in ``source`` in their upstream order.

        Raises:
            :py:class:`~k8s_versions.errors.FormatError`: if ``source`` does
                not contain a version listing

        """


class GoStringSliceExtractor(VersionListingExtractor):
    """Extracts the quoted strings of a ``var <name> = []string{...}``
    declaration.

    """

    _ITEM_RE = re.compile(r'"([^"]*)"')

    def __init__(self, variable: str = "ValidKubernetesVersions") -> None:
        self.variable = variable
        self._slice_re = re.compile(
            rf"{re.escape(variable)}\s*=\s*\[\]string\s*\{{(?P<items>[^}}]*)\}}"
        )

    def extract(self, source: str) -> list[str]:
        match = self._slice_re.search(source)
        if not match:
            raise FormatError(f"could not find the {self.variable} slice")
        return self._ITEM_RE.findall(match.group("items"))


def fetch_minikube_versions(
    url: str = DEFAULT_MINIKUBE_URL,
    extractor: VersionListingExtractor | None = None,
) -> list[str]:
    """Fetch the minikube source from ``url`` and extract the listed
    Kubernetes versions.

    """
    try:
        source = fetch(url).decode("utf-8")
    except UnicodeDecodeError as err:
        raise DecodeError(f"minikube source at {url} is not valid utf-8") from err

    versions = (extractor or GoStringSliceExtractor()).extract(source)
    LOGGER.debug("found %d minikube kubernetes versions", len(versions))
    return versions


def resolve_minikube_versions(
    cycles: list[ReleaseCycle], listing: list[str]
) -> list[str]:
    """Return for every cycle the first entry of ``listing`` containing the
    cycle's version. Cycles without a matching entry are skipped.

    ``listing`` must be ordered newest first, so the first match is the most
    recent patch release.

    """
    resolved = []
    for cycle in cycles:
        needle = strip_v(cycle.cycle)
        for ver in listing:
            if needle in ver:
                LOGGER.debug("found minikube version for %s: %s", cycle.cycle, ver)
                resolved.append(ver)
                break
        else:
            LOGGER.debug("no minikube version for %s", cycle.cycle)
    return resolved
