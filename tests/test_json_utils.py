"""Tests for JSON extraction from generator output."""

import pytest

from generate.json_utils import extract_json_object, require_resources


def test_plain_json():
    assert extract_json_object('{"resources": []}') == {"resources": []}


def test_fenced_json_with_prose():
    text = 'Here is the list:\n```json\n{"resources": [{"title": "A"}]}\n```\nEnjoy!'

    assert extract_json_object(text) == {"resources": [{"title": "A"}]}


def test_trailing_commas_removed():
    text = '{"resources": [{"title": "A", "source": "u1",},],}'

    assert extract_json_object(text) == {"resources": [{"title": "A", "source": "u1"}]}


def test_unescaped_inner_quotes_repaired():
    text = '{"title": "The "Pragmatic" Programmer", "type": "Book"}'

    assert extract_json_object(text) == {
        "title": 'The "Pragmatic" Programmer',
        "type": "Book",
    }


def test_bare_property_names_quoted():
    text = '{title: "A", weeks_on_list: 1}'

    assert extract_json_object(text) == {"title": "A", "weeks_on_list": 1}


def test_urls_survive_repair():
    text = '{title: "A", source: "https://martinfowler.com/articles/x.html"}'

    assert extract_json_object(text)["source"] == "https://martinfowler.com/articles/x.html"


def test_empty_response():
    with pytest.raises(ValueError, match="Empty response"):
        extract_json_object("")


def test_no_object():
    with pytest.raises(ValueError, match="No JSON object"):
        extract_json_object("I could not produce a list this week.")


def test_unrecoverable_json():
    with pytest.raises(ValueError, match="JSON decode failed"):
        extract_json_object('{"resources": [1, 2 3}')


class TestRequireResources:
    """Tests for the generated document shape check."""

    def test_valid(self):
        document = {"resources": [{"title": "A"}]}

        assert require_resources(document) is document

    def test_missing(self):
        with pytest.raises(ValueError, match="valid resources array"):
            require_resources({"introduction": "hi"})

    def test_not_a_list(self):
        with pytest.raises(ValueError, match="valid resources array"):
            require_resources({"resources": {"title": "A"}})

    def test_empty(self):
        with pytest.raises(ValueError, match="empty"):
            require_resources({"resources": []})

    def test_not_an_object(self):
        with pytest.raises(ValueError, match="not an object"):
            require_resources([1, 2])
