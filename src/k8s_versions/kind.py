"""Resolve the newest published `kind <https://kind.sigs.k8s.io/>`_ node image
for a Kubernetes release.

Node images are built some time after a Kubernetes patch release, so the
latest patch version from the release feed does not necessarily have an
image yet. :py:func:`resolve_kind_image` therefore walks backwards from the
latest patch release until it finds one that has been published.

"""

from k8s_versions.config import DEFAULT_REGISTRY_URL
from k8s_versions.errors import DecodeError
from k8s_versions.errors import FetchError
from k8s_versions.errors import ResolutionExhausted
from k8s_versions.logger import LOGGER
from k8s_versions.remote import fetch_json


def decrement_patch_version(ver: str) -> str:
    """Return ``ver`` with its patch (third) component lowered by one, e.g.:

    >>> decrement_patch_version("1.24.5")
    '1.24.4'

    Raises:
        :py:class:`~k8s_versions.errors.DecodeError`: if ``ver`` has less
            than three components or a non-numeric patch component
        :py:class:`~k8s_versions.errors.ResolutionExhausted`: if the patch
            component is already ``0``

    """
    parts = ver.split(".")
    if len(parts) < 3:
        raise DecodeError(f"version does not have a patch component: {ver}")

    try:
        patch = int(parts[2])
    except ValueError as err:
        raise DecodeError(f"invalid patch version in {ver}: {parts[2]}") from err

    if patch <= 0:
        raise ResolutionExhausted(
            f"patch version of {ver} cannot be decremented below 0"
        )

    parts[2] = str(patch - 1)
    return ".".join(parts)


def image_tag_exists(tag: str, registry_url: str = DEFAULT_REGISTRY_URL) -> bool:
    """Check whether the registry lists at least one tag with the name
    ``tag``.

    """
    try:
        result = fetch_json(
            registry_url,
            params={
                "page_size": 1,
                "page": 1,
                "ordering": "last_updated",
                "name": tag,
            },
        )
    except (FetchError, DecodeError) as err:
        raise type(err)(f"failed to check image tag {tag}: {err}") from err

    if not isinstance(result, dict) or not isinstance(result.get("count"), int):
        raise DecodeError(f"registry answer for tag {tag} has no integer count")

    return result["count"] > 0


def resolve_kind_image(latest: str, registry_url: str = DEFAULT_REGISTRY_URL) -> str:
    """Find the newest node image version that exists in the registry,
    starting at ``latest`` and decrementing the patch version on every miss.

    Raises:
        :py:class:`~k8s_versions.errors.ResolutionExhausted`: if no image
            exists down to patch version ``0``

    """
    tag = latest
    while True:
        if image_tag_exists(tag, registry_url):
            LOGGER.debug("found kind image for %s: %s", latest, tag)
            return tag

        LOGGER.debug("no kind image for %s", tag)
        try:
            tag = decrement_patch_version(tag)
        except ResolutionExhausted as err:
            raise ResolutionExhausted(
                f"no kind image available for release {latest}"
            ) from err
