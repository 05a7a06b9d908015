from unittest.mock import patch

import pytest
import requests

from conftest import fake_registry_get
from conftest import fake_response
from k8s_versions.errors import DecodeError
from k8s_versions.errors import FetchError
from k8s_versions.errors import ResolutionExhausted
from k8s_versions.kind import decrement_patch_version
from k8s_versions.kind import image_tag_exists
from k8s_versions.kind import resolve_kind_image


@pytest.mark.parametrize(
    "ver,expected",
    [
        ("1.24.5", "1.24.4"),
        ("1.24.1", "1.24.0"),
        ("v1.31.10", "v1.31.9"),
        ("1.24.5.1", "1.24.4.1"),
    ],
)
def test_decrement_patch_version(ver: str, expected: str):
    assert decrement_patch_version(ver) == expected


def test_decrement_patch_zero_is_exhausted():
    with pytest.raises(ResolutionExhausted):
        decrement_patch_version("1.24.0")


@pytest.mark.parametrize("ver", ["1.24", "1", "1.24.x", "1.24."])
def test_decrement_invalid_version(ver: str):
    with pytest.raises(DecodeError):
        decrement_patch_version(ver)


def test_image_tag_exists():
    with patch(
        "k8s_versions.remote.requests.get", side_effect=fake_registry_get("1.30.2")
    ) as get:
        assert image_tag_exists("1.30.2")
        assert not image_tag_exists("1.30.3")

    params = get.call_args.kwargs["params"]
    assert params["name"] == "1.30.3"
    assert params["page_size"] == 1
    assert params["ordering"] == "last_updated"


def test_image_tag_exists_reports_probed_tag():
    with patch(
        "k8s_versions.remote.requests.get",
        side_effect=requests.ConnectionError("connection reset"),
    ):
        with pytest.raises(FetchError, match="1.30.2"):
            image_tag_exists("1.30.2")


@pytest.mark.parametrize("payload", ['{"results": []}', '{"count": "1"}', "[]", "nope"])
def test_image_tag_exists_invalid_answer(payload: str):
    with patch(
        "k8s_versions.remote.requests.get", return_value=fake_response(payload)
    ):
        with pytest.raises(DecodeError, match="1.30.2"):
            image_tag_exists("1.30.2")


def test_resolve_latest_image_exists():
    with patch(
        "k8s_versions.remote.requests.get",
        side_effect=fake_registry_get("1.30.2", "1.30.1"),
    ) as get:
        assert resolve_kind_image("1.30.2") == "1.30.2"

    assert get.call_count == 1


def test_resolve_backs_off_to_newest_existing_image():
    with patch(
        "k8s_versions.remote.requests.get",
        side_effect=fake_registry_get("1.30.0", "1.30.1", "1.29.6"),
    ) as get:
        assert resolve_kind_image("1.30.4") == "1.30.1"

    assert [c.kwargs["params"]["name"] for c in get.call_args_list] == [
        "1.30.4",
        "1.30.3",
        "1.30.2",
        "1.30.1",
    ]


def test_resolve_exhausted():
    with patch(
        "k8s_versions.remote.requests.get", side_effect=fake_registry_get("1.29.6")
    ) as get:
        with pytest.raises(ResolutionExhausted, match="1.30.2"):
            resolve_kind_image("1.30.2")

    assert [c.kwargs["params"]["name"] for c in get.call_args_list] == [
        "1.30.2",
        "1.30.1",
        "1.30.0",
    ]


def test_resolve_aborts_on_fetch_error():
    with patch(
        "k8s_versions.remote.requests.get",
        side_effect=[
            fake_response({"count": 0}),
            fake_response("", 500),
        ],
    ):
        with pytest.raises(FetchError, match="1.30.1"):
            resolve_kind_image("1.30.2")
