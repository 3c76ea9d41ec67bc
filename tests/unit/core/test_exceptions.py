"""Tests for the typed exception hierarchy."""

from __future__ import annotations

import pytest

from review_sentinel.core.exceptions import (
    ConfigError,
    ModelCallError,
    ParsingError,
    ResponseDecodeError,
    ReviewSentinelError,
    ScanError,
)


class TestExceptionHierarchy:
    """Verify the class hierarchy defined in core/exceptions.py."""

    @pytest.mark.parametrize(
        "exc_class",
        [ScanError, ParsingError, ModelCallError, ResponseDecodeError, ConfigError],
    )
    def test_subclasses_share_base(self, exc_class):
        assert isinstance(exc_class("x"), ReviewSentinelError)

    def test_parsing_error_is_scan_error(self):
        assert isinstance(ParsingError("bad syntax"), ScanError)

    def test_model_errors_are_not_scan_errors(self):
        assert not isinstance(ModelCallError("x"), ScanError)
        assert not isinstance(ResponseDecodeError("x"), ScanError)

    def test_base_is_exported_from_package_root(self):
        from review_sentinel import ReviewSentinelError as Exported

        assert Exported is ReviewSentinelError


class TestContext:
    """Structured context carried by every error."""

    def test_default_context_is_empty(self):
        assert ConfigError("x").context == {}

    def test_context_preserved(self):
        err = ResponseDecodeError("no json", {"strategy": "stripped"})

        assert str(err) == "no json"
        assert err.context["strategy"] == "stripped"
