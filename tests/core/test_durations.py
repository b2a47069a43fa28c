"""Tests for duration string parsing and formatting."""

from __future__ import annotations

import pytest

from sample_services.core.durations import (
    DEFAULT_INTERVAL_SECONDS,
    format_duration,
    parse_duration,
    resolve_interval,
)


class TestParseDuration:
    """Tests for parse_duration."""

    @pytest.mark.parametrize(
        ("text", "seconds"),
        [
            ("10s", 10.0),
            ("1m30s", 90.0),
            ("1h", 3600.0),
            ("500ms", 0.5),
            ("1.5s", 1.5),
            (".5s", 0.5),
            ("2h45m", 9900.0),
            ("0", 0.0),
            ("+5s", 5.0),
            ("-5s", -5.0),
        ],
    )
    def test_valid(self, text, seconds):
        assert parse_duration(text) == pytest.approx(seconds)

    def test_micro_and_nano(self):
        assert parse_duration("250us") == pytest.approx(0.00025)
        assert parse_duration("250µs") == pytest.approx(0.00025)
        assert parse_duration("100ns") == pytest.approx(1e-7)

    @pytest.mark.parametrize("text", ["", "   ", "bad-value", "10", "s", "10x", "1m30", "-", "1.2.3s"])
    def test_invalid_returns_none(self, text):
        assert parse_duration(text) is None

    def test_none_returns_none(self):
        assert parse_duration(None) is None


class TestResolveInterval:
    """Fallback rules for the worker interval."""

    def test_bad_value_falls_back_to_ten_seconds(self):
        assert resolve_interval("bad-value") == DEFAULT_INTERVAL_SECONDS == 10.0

    def test_missing_falls_back(self):
        assert resolve_interval(None) == 10.0
        assert resolve_interval("") == 10.0

    def test_zero_and_negative_fall_back(self):
        assert resolve_interval("0") == 10.0
        assert resolve_interval("-3s") == 10.0

    def test_valid_value_used(self):
        assert resolve_interval("2s") == 2.0

    def test_custom_default(self):
        assert resolve_interval("nope", default=3.0) == 3.0


class TestFormatDuration:
    """Tests for format_duration."""

    @pytest.mark.parametrize(
        ("seconds", "text"),
        [
            (10.0, "10s"),
            (90.0, "1m30s"),
            (0.5, "500ms"),
            (3600.0, "1h0m0s"),
            (0.0, "0s"),
            (1.5, "1.5s"),
            (0.00025, "250µs"),
            (-2.0, "-2s"),
        ],
    )
    def test_format(self, seconds, text):
        assert format_duration(seconds) == text

    def test_parse_of_formatted_value(self):
        assert parse_duration(format_duration(5400.0)) == 5400.0
