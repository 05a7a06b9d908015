"""Thin wrappers around :py:mod:`requests` for fetching the upstream sources."""

import importlib.metadata
import json
from typing import Any

import requests

from k8s_versions.errors import DecodeError
from k8s_versions.errors import FetchError

_REQ_HEADERS = {
    "User-Agent": f"k8s-test-versions/{importlib.metadata.version('k8s-test-versions')}"
}


def fetch(url: str, params: dict[str, str | int] | None = None) -> bytes:
    """Retrieve ``url`` via a plain GET request and return the response body.

    Raises:
        :py:class:`~k8s_versions.errors.FetchError`: if the request fails or
            the server does not answer with a success status

    """
    try:
        resp: requests.Response = requests.get(
            url, params=params, headers=_REQ_HEADERS
        )
        resp.raise_for_status()
    except requests.RequestException as err:
        raise FetchError(f"failed to fetch {url}: {err}") from err
    return resp.content


def fetch_json(url: str, params: dict[str, str | int] | None = None) -> Any:
    """Retrieve ``url`` and decode the response body as json."""
    body = fetch(url, params=params)
    try:
        return json.loads(body)
    except ValueError as err:
        raise DecodeError(f"invalid json received from {url}: {err}") from err
