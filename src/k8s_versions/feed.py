"""Kubernetes release cycles as published by `endoflife.date
<https://endoflife.date/kubernetes>`_.

The feed is a json array of objects of the following form:

.. code-block:: json

   [
       {
           "cycle": "1.31",
           "releaseDate": "2024-08-13",
           "eol": "2025-10-28",
           "latest": "1.31.2"
       }
   ]

A single malformed record invalidates the whole feed: silently dropping it
could hide a release line that is still supported.

"""

import datetime
from dataclasses import dataclass
from typing import Any

from packaging import version

from k8s_versions.errors import DecodeError
from k8s_versions.logger import LOGGER
from k8s_versions.remote import fetch_json

#: format of the dates in the feed
DATE_FORMAT = "%Y-%m-%d"


def _parse_date(value: Any, key: str, cycle: str) -> datetime.date:
    if not isinstance(value, str):
        raise DecodeError(f"{key} of release cycle {cycle} is not a date: {value!r}")
    try:
        return datetime.datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as err:
        raise DecodeError(
            f"error parsing {key} '{value}' of release cycle {cycle}: {err}"
        ) from err


def strip_v(ver: str) -> str:
    """Remove a leading ``v`` from a version string: ``v1.24`` -> ``1.24``."""
    return ver[1:] if ver.startswith("v") else ver


@dataclass(frozen=True)
class ReleaseCycle:
    """A Kubernetes minor release line."""

    #: release line identifier, e.g. ``1.31``
    cycle: str

    release_date: datetime.date

    #: date after which the release line receives no more fixes
    eol_date: datetime.date

    #: most recent patch release of this cycle, e.g. ``1.31.2``
    latest: str

    @staticmethod
    def from_json(data: Any) -> "ReleaseCycle":
        if not isinstance(data, dict):
            raise DecodeError(f"release cycle must be an object, got {data!r}")

        for key in ("cycle", "releaseDate", "eol", "latest"):
            if not isinstance(data.get(key), str):
                raise DecodeError(
                    f"release cycle {data.get('cycle')!r} has no string field '{key}'"
                )

        cycle: str = data["cycle"]
        try:
            version.Version(data["latest"])
        except version.InvalidVersion as err:
            raise DecodeError(
                f"invalid latest version '{data['latest']}' of release cycle {cycle}"
            ) from err

        return ReleaseCycle(
            cycle=cycle,
            release_date=_parse_date(data["releaseDate"], "releaseDate", cycle),
            eol_date=_parse_date(data["eol"], "eol", cycle),
            latest=data["latest"],
        )

    @property
    def eol(self) -> str:
        """The end-of-life date in the feed's ``YYYY-MM-DD`` form."""
        return self.eol_date.strftime(DATE_FORMAT)


def parse_release_cycles(payload: Any) -> list[ReleaseCycle]:
    """Decode the json document of the release feed into a list of
    :py:class:`ReleaseCycle` preserving the feed's order.

    """
    if not isinstance(payload, list):
        raise DecodeError(f"release feed must be a json array, got {type(payload)}")
    return [ReleaseCycle.from_json(entry) for entry in payload]


def fetch_release_cycles(url: str) -> list[ReleaseCycle]:
    """Fetch and decode all Kubernetes release cycles from ``url``."""
    cycles = parse_release_cycles(fetch_json(url))
    LOGGER.debug("fetched %d release cycles from %s", len(cycles), url)
    return cycles


def _to_date(now: datetime.date | None) -> datetime.date:
    if now is None:
        return datetime.date.today()
    if isinstance(now, datetime.datetime):
        return now.date()
    return now


def is_supported(cycle: ReleaseCycle, now: datetime.date | None = None) -> bool:
    """Return whether the end-of-life date of ``cycle`` lies strictly after
    ``now`` (defaults to today).

    """
    return cycle.eol_date > _to_date(now)


def filter_supported(
    cycles: list[ReleaseCycle], now: datetime.date | None = None
) -> list[ReleaseCycle]:
    """Return all cycles that are still supported at ``now``, in the order of
    ``cycles``.

    """
    today = _to_date(now)
    supported = []
    for cycle in cycles:
        if is_supported(cycle, today):
            supported.append(cycle)
        else:
            LOGGER.debug("skipping %s, end of life since %s", cycle.cycle, cycle.eol)
    return supported
