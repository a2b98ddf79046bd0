"""Tests for the exception hierarchy and exit codes."""

from __future__ import annotations

import pytest

from ghtarball import exit_codes
from ghtarball.exceptions import (
    ApiError,
    ConfigError,
    ExtractionError,
    GhTarballError,
    InvalidUsageError,
    NotFoundError,
    RateLimitError,
    TransportError,
)


class TestExitCodes:
    @pytest.mark.parametrize(
        ("exc", "code"),
        [
            (GhTarballError("x"), exit_codes.EXIT_GENERIC_FAILURE),
            (InvalidUsageError("x"), exit_codes.EXIT_INVALID_USAGE),
            (NotFoundError("x"), exit_codes.EXIT_NOT_FOUND),
            (ApiError("x", 500), exit_codes.EXIT_API_ERROR),
            (RateLimitError("x"), exit_codes.EXIT_RATE_LIMITED),
            (TransportError("x", "https://example.com"), exit_codes.EXIT_TRANSPORT_ERROR),
            (ExtractionError("x"), exit_codes.EXIT_EXTRACTION_ERROR),
            (ConfigError("x"), exit_codes.EXIT_GENERIC_FAILURE),
        ],
    )
    def test_class_exit_code(self, exc: GhTarballError, code: int) -> None:
        assert exc.exit_code == code

    def test_override(self) -> None:
        assert GhTarballError("x", exit_code=42).exit_code == 42


class TestHierarchy:
    def test_rate_limit_is_api_error_with_403(self) -> None:
        exc = RateLimitError("slow down")
        assert isinstance(exc, ApiError)
        assert exc.status_code == 403

    def test_transport_error_keeps_url(self) -> None:
        exc = TransportError("boom", "https://api.github.com/x")
        assert exc.url == "https://api.github.com/x"
        assert str(exc) == "boom"
