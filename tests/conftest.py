import datetime
import json
from typing import Any
from unittest.mock import Mock

import pytest
import requests

from k8s_versions.feed import ReleaseCycle

#: reference date for all support checks in the tests
NOW = datetime.date(2024, 6, 1)


def fake_response(content: Any, status_code: int = 200) -> Mock:
    resp = Mock()
    resp.status_code = status_code
    if isinstance(content, (dict, list)):
        content = json.dumps(content)
    resp.content = content.encode() if isinstance(content, str) else content
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Client Error"
        )
    else:
        resp.raise_for_status.return_value = None
    return resp


def fake_registry_get(*existing_tags: str):
    """Create a replacement for :py:func:`requests.get` that behaves like the
    Docker Hub tag search and knows exactly ``existing_tags``.

    """

    def _get(url, params=None, **kwargs):
        return fake_response({"count": 1 if params["name"] in existing_tags else 0})

    return _get


def make_cycle(cycle: str, eol: str, latest: str) -> ReleaseCycle:
    return ReleaseCycle(
        cycle=cycle,
        release_date=datetime.date(2022, 5, 3),
        eol_date=datetime.date.fromisoformat(eol),
        latest=latest,
    )


@pytest.fixture
def cycles() -> list[ReleaseCycle]:
    return [
        make_cycle("1.30", "2025-06-28", "1.30.2"),
        make_cycle("1.29", "2025-02-28", "1.29.6"),
        make_cycle("1.28", "2024-10-28", "1.28.11"),
        make_cycle("1.27", "2024-06-28", "1.27.15"),
        make_cycle("1.26", "2024-02-28", "1.26.15"),
    ]
