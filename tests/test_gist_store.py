"""Tests for the gist-backed resources store."""

import json
from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from integrations.gist_store import GistStore, archive_filename


def make_response(json_data):
    response = MagicMock()
    response.json.return_value = json_data
    return response


@pytest.fixture
def store():
    return GistStore(gist_id="abc123", token="secret", api_url="https://api.test")


def test_requires_gist_id():
    with pytest.raises(ValueError, match="GIST_ID"):
        GistStore(gist_id="", token="t")


def test_requires_token():
    with pytest.raises(ValueError, match="GIST_TOKEN"):
        GistStore(gist_id="abc", token=None)


def test_archive_filename():
    assert archive_filename(date(2024, 1, 8)) == "resources.2024-01-08.json"


@patch("integrations.gist_store.request_with_retry")
def test_fetch_current(mock_request, store):
    document = {"introduction": "hi", "resources": [{"title": "A", "source": "u1"}]}
    mock_request.return_value = make_response(
        {"files": {"resources.json": {"content": json.dumps(document)}}}
    )

    assert store.fetch_current() == document
    method, url = mock_request.call_args.args
    assert (method, url) == ("GET", "https://api.test/gists/abc123")
    headers = mock_request.call_args.kwargs["headers"]
    assert headers["Authorization"] == "token secret"
    assert headers["User-Agent"]


@patch("integrations.gist_store.request_with_retry")
def test_fetch_current_missing_file_starts_fresh(mock_request, store):
    mock_request.return_value = make_response({"files": {"notes.md": {"content": "x"}}})

    assert store.fetch_current() == {"resources": []}


@patch("integrations.gist_store.request_with_retry")
def test_fetch_current_invalid_json(mock_request, store):
    mock_request.return_value = make_response({"files": {"resources.json": {"content": "{oops"}}})

    with pytest.raises(ValueError, match="not valid JSON"):
        store.fetch_current()


@patch("integrations.gist_store.request_with_retry")
def test_publish_writes_current_and_archive(mock_request, store):
    mock_request.return_value = make_response({"html_url": "https://gist.github.com/abc123"})
    document = {"resources": [{"title": "A", "source": "u1", "weeks_on_list": 2}]}

    result = store.publish(document, day=date(2024, 1, 8))

    assert result["html_url"] == "https://gist.github.com/abc123"
    method, url = mock_request.call_args.args
    assert method == "PATCH"
    assert url == "https://api.test/gists/abc123"
    files = mock_request.call_args.kwargs["json_data"]["files"]
    assert set(files) == {"resources.json", "resources.2024-01-08.json"}
    assert json.loads(files["resources.json"]["content"]) == document
    assert files["resources.json"]["content"] == files["resources.2024-01-08.json"]["content"]


@patch("integrations.gist_store.request_with_retry")
def test_verify_token(mock_request, store):
    mock_request.return_value = make_response({"login": "octocat"})

    assert store.verify_token() == "octocat"
    assert mock_request.call_args.args == ("GET", "https://api.test/user")
