"""Rewrite the Kubernetes versions list of a workflow file in place.

A yaml round trip does not preserve the formatting of the workflow files
(blank lines, comments), so the files are scanned line by line instead. A
versions block starts after a line beginning with one of
:py:const:`BLOCK_HEADERS` and consists of all following ``-`` entries and
``#`` comments, e.g.:

.. code-block:: yaml

   strategy:
     matrix:
       k8s-version:
         - v1.31.2 # EOL 2025-10-28
         - v1.30.6 # EOL 2025-06-28

The block ends with the first line that is neither, or with the end of the
file.

"""

import datetime
import enum
import re
from pathlib import Path
from typing import Callable

from k8s_versions.config import DEFAULT_REGISTRY_URL
from k8s_versions.errors import FileProcessingError
from k8s_versions.errors import ResolutionExhausted
from k8s_versions.feed import ReleaseCycle
from k8s_versions.feed import is_supported
from k8s_versions.feed import strip_v
from k8s_versions.kind import resolve_kind_image
from k8s_versions.logger import LOGGER

#: tokens introducing a versions block
BLOCK_HEADERS = ("k8s-version:", "kubernetes_version:")

_VERSION_RE = re.compile(r"\d+\.\d+\.\d+")

#: version of an entry without patch component, e.g. the 1.24 in ``- v1.24``
_ENTRY_VERSION_RE = re.compile(r"(?<=- v)\d+(?:\.\d+)*")

#: callable resolving the latest patch version of a cycle to an image version
RESOLVER_T = Callable[[str], str]


@enum.unique
class ScannerState(enum.Enum):
    OUTSIDE = enum.auto()
    IN_BLOCK = enum.auto()


def _indentation(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def _rewrite_entry(line: str, tag: str) -> str:
    new_line, count = _VERSION_RE.subn(tag, line, count=1)
    if not count:
        new_line = _ENTRY_VERSION_RE.sub(tag, line, count=1)
        LOGGER.debug("no patch version in '%s', replaced by %s", line.strip(), tag)
    return new_line


def _kind_resolver(registry_url: str) -> RESOLVER_T:
    return lambda latest: resolve_kind_image(latest, registry_url)


def merge_versions_block(
    cycles: list[ReleaseCycle],
    block: list[str],
    now: datetime.date | None = None,
    resolve_image: RESOLVER_T | None = None,
) -> list[str]:
    """Merge the supported ``cycles`` into the lines of a versions ``block``.

    Entries of supported cycles keep their position, only their version is
    replaced by the resolved image version. Supported cycles without an entry
    are appended to the end of the block in the order of ``cycles``, using
    the indentation of the block's last line. Entries of all other cycles are
    dropped, as are stray comments.

    Entries without a patch version, like ``- v1.24``, get the full resolved
    version.

    If no image can be found for a cycle, its existing entry is kept
    unchanged and a new cycle is not added.

    """
    resolve = resolve_image or _kind_resolver(DEFAULT_REGISTRY_URL)
    if not block:
        return []

    supported = []
    for cycle in cycles:
        if is_supported(cycle, now):
            supported.append(cycle)
        else:
            LOGGER.debug("dropping %s, end of life since %s", cycle.cycle, cycle.eol)

    output: list[str] = []
    matched: set[ReleaseCycle] = set()

    for line in block:
        trimmed = line.strip()
        cycle = next(
            (
                c
                for c in supported
                if c not in matched and trimmed.startswith(f"- v{strip_v(c.cycle)}")
            ),
            None,
        )
        if cycle is None:
            LOGGER.debug("dropping '%s'", trimmed)
            continue

        matched.add(cycle)
        try:
            tag = strip_v(resolve(cycle.latest))
        except ResolutionExhausted as err:
            LOGGER.warning("keeping '%s' unchanged: %s", trimmed, err)
            output.append(line)
            continue
        output.append(_rewrite_entry(line, tag))

    indent = _indentation(block[-1])
    for cycle in supported:
        if cycle in matched:
            continue
        try:
            tag = strip_v(resolve(cycle.latest))
        except ResolutionExhausted as err:
            LOGGER.warning(
                "not adding %s although it is supported: %s", cycle.cycle, err
            )
            continue
        LOGGER.debug("adding new entry for %s: v%s", cycle.cycle, tag)
        output.append(f"{indent}- v{tag} # EOL {cycle.eol}")

    return output


def patch_versions_blocks(
    lines: list[str],
    cycles: list[ReleaseCycle],
    now: datetime.date | None = None,
    resolve_image: RESOLVER_T | None = None,
) -> list[str]:
    """Return ``lines`` with every versions block merged via
    :py:func:`merge_versions_block`. All other lines are passed through.

    """
    output: list[str] = []
    block: list[str] = []
    state = ScannerState.OUTSIDE

    def flush() -> None:
        output.extend(merge_versions_block(cycles, block, now, resolve_image))
        block.clear()

    for line in lines:
        trimmed = line.strip()

        if state == ScannerState.IN_BLOCK:
            if trimmed.startswith(("-", "#")):
                block.append(line)
                continue
            flush()
            state = ScannerState.OUTSIDE

        if trimmed.startswith(BLOCK_HEADERS):
            state = ScannerState.IN_BLOCK
        output.append(line)

    if state == ScannerState.IN_BLOCK:
        flush()

    return output


def update_versions_file(
    path: str | Path,
    cycles: list[ReleaseCycle],
    now: datetime.date | None = None,
    registry_url: str = DEFAULT_REGISTRY_URL,
    resolve_image: RESOLVER_T | None = None,
) -> None:
    """Rewrite the versions blocks of the file ``path``.

    The new content is built completely before the file is written back, so
    a resolution error leaves the file untouched.

    """
    try:
        with open(path, "r", encoding="utf-8", newline="") as workflow:
            content = workflow.read()
    except (OSError, UnicodeDecodeError) as err:
        raise FileProcessingError(f"failed to read {path}: {err}") from err

    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()

    new_lines = patch_versions_blocks(
        lines, cycles, now, resolve_image or _kind_resolver(registry_url)
    )

    try:
        with open(path, "w", encoding="utf-8", newline="") as workflow:
            workflow.write("\n".join(new_lines) + "\n")
    except (OSError, UnicodeEncodeError) as err:
        raise FileProcessingError(f"failed to write {path}: {err}") from err

    LOGGER.info("updated %s", path)
