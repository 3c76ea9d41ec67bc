"""Tests for the model response decode cascade."""

import pytest

from review_sentinel.analysis.review.decoder import (
    DECODE_STRATEGIES,
    decode_response,
    parse_outer_braces,
    parse_stripped,
)
from review_sentinel.core.exceptions import ResponseDecodeError


class TestDecodeResponse:
    """Each strategy is reached when the earlier ones fail."""

    def test_bare_json_uses_direct(self):
        decoded = decode_response('{"issues": [], "securityScore": 90}')

        assert decoded.strategy == "direct"
        assert decoded.payload == {"issues": [], "securityScore": 90}

    def test_surrounding_whitespace_is_direct(self):
        decoded = decode_response('\n\n  {"issues": []}  \n')

        assert decoded.strategy == "direct"

    def test_json_fence(self):
        raw = 'Here is my review:\n```json\n{"issues": [{"title": "x"}]}\n```\nThanks!'

        decoded = decode_response(raw)

        assert decoded.strategy == "json_fence"
        assert decoded.payload["issues"][0]["title"] == "x"

    def test_uppercase_json_fence(self):
        decoded = decode_response('```JSON\n{"a": 1}\n```')

        assert decoded.strategy == "json_fence"

    def test_unlabelled_fence(self):
        decoded = decode_response('```\n{"a": 1}\n```')

        assert decoded.strategy == "any_fence"
        assert decoded.payload == {"a": 1}

    def test_prose_around_object(self):
        decoded = decode_response('Sure! {"a": 1} Hope this helps.')

        assert decoded.strategy == "outer_braces"
        assert decoded.payload == {"a": 1}

    def test_braces_in_leading_prose(self):
        raw = 'Review {see below}\n{"a": 1}'

        decoded = decode_response(raw)

        assert decoded.strategy == "stripped"
        assert decoded.payload == {"a": 1}

    def test_first_success_wins(self):
        # Valid as a whole, so the fence strategies are never consulted
        decoded = decode_response('{"note": "```json {\\"b\\": 2} ```"}')

        assert decoded.strategy == "direct"
        assert "note" in decoded.payload

    def test_undecodable_raises_with_attempts(self):
        with pytest.raises(ResponseDecodeError) as exc_info:
            decode_response("I cannot review this pull request.")

        err = exc_info.value
        assert err.context["strategy"] == "stripped"
        assert set(err.context["attempts"]) == {name for name, _ in DECODE_STRATEGIES}
        assert "Could not decode model response" in str(err)

    def test_deeply_nested_input_exhausts_cascade(self):
        with pytest.raises(ResponseDecodeError) as exc_info:
            decode_response("[" * 100000)

        assert set(exc_info.value.context["attempts"]) == {
            name for name, _ in DECODE_STRATEGIES
        }

    def test_top_level_array_is_rejected(self):
        with pytest.raises(ResponseDecodeError):
            decode_response("[1, 2, 3]")

    def test_none_and_empty(self):
        with pytest.raises(ResponseDecodeError):
            decode_response(None)
        with pytest.raises(ResponseDecodeError):
            decode_response("")

    def test_strategy_order(self):
        assert [name for name, _ in DECODE_STRATEGIES] == [
            "direct",
            "json_fence",
            "any_fence",
            "outer_braces",
            "stripped",
        ]


class TestStrategies:
    """Individual strategies raise ValueError on failure."""

    def test_outer_braces_without_braces(self):
        with pytest.raises(ValueError):
            parse_outer_braces("no braces")

    def test_outer_braces_reversed(self):
        with pytest.raises(ValueError):
            parse_outer_braces("} then {")

    def test_stripped_removes_fence_markers(self):
        assert parse_stripped('```json\n{"a": 1}') == {"a": 1}
