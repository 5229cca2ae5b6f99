"""Tests for duration parsing."""

from datetime import timedelta

import pytest

from tagstash import format_duration, parse_duration


class TestParseDuration:
    """Tests for parse_duration function."""

    def test_milliseconds(self) -> None:
        assert parse_duration("100ms") == 100
        assert parse_duration("0ms") == 0

    def test_seconds_and_minutes(self) -> None:
        assert parse_duration("30s") == 30_000
        assert parse_duration("10m") == 600_000

    def test_hours_and_days(self) -> None:
        assert parse_duration("2h") == 7_200_000
        assert parse_duration("1d") == 86_400_000

    def test_integer_passthrough(self) -> None:
        """Integers are milliseconds and pass through unchanged."""
        assert parse_duration(1000) == 1000
        assert parse_duration(0) == 0

    def test_timedelta(self) -> None:
        assert parse_duration(timedelta(minutes=10)) == 600_000
        assert parse_duration(timedelta(days=1)) == 86_400_000

    @pytest.mark.parametrize(
        "delta",
        [
            timedelta(milliseconds=1001),
            timedelta(days=195, milliseconds=1),
            timedelta(days=365, hours=3, milliseconds=7),
        ],
    )
    def test_timedelta_is_exact(self, delta: timedelta) -> None:
        """Timedeltas convert to milliseconds without float rounding."""
        expected = (
            delta.days * 86_400_000 + delta.seconds * 1000 + delta.microseconds // 1000
        )
        assert parse_duration(delta) == expected
        assert parse_duration(delta) == parse_duration(f"{expected}ms")

    def test_sub_millisecond_timedelta_truncates(self) -> None:
        assert parse_duration(timedelta(microseconds=1500)) == 1

    def test_invalid_format(self) -> None:
        """Test that invalid formats raise ValueError."""
        for bad in ("invalid", "10x", "s10", "", "10", "-5s"):
            with pytest.raises(ValueError, match="Invalid duration"):
                parse_duration(bad)

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError, match="must not be negative"):
            parse_duration(-1)
        with pytest.raises(ValueError, match="must not be negative"):
            parse_duration(timedelta(seconds=-1))
        with pytest.raises(ValueError, match="must not be negative"):
            parse_duration(timedelta(microseconds=-500))

    def test_bool_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid duration"):
            parse_duration(True)


class TestFormatDuration:
    """Tests for format_duration function."""

    def test_largest_exact_unit(self) -> None:
        assert format_duration("168h") == "7d"
        assert format_duration("90m") == "90m"
        assert format_duration("120s") == "2m"
        assert format_duration(1500) == "1500ms"

    def test_equivalent_inputs_match(self) -> None:
        assert (
            format_duration("7d")
            == format_duration(timedelta(days=7))
            == format_duration(604_800_000)
        )

    def test_zero(self) -> None:
        assert format_duration(0) == "0ms"
        assert format_duration("0d") == "0ms"
