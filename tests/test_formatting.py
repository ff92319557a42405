import math

import pytest

from pnode_analytics.core.formatting import (
    EPOCH,
    SENTINEL_PORT,
    calculate_percent,
    clamp,
    format_bytes,
    format_percent,
    format_relative_time,
    format_uptime,
    parse_address,
    sort_key,
    timestamp_to_datetime,
    truncate_middle,
)

NOW = 1_700_000_000.0


class TestFormatBytes:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (0, "0 B"),
            (-5, "0 B"),
            (512, "512 B"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (1024**2 * 3, "3 MB"),
            (1024**3 * 1.25, "1.25 GB"),
            (1024**4, "1 TB"),
            (1024**5 * 2, "2 PB"),
            (1024**6, "1024 PB"),
        ],
    )
    def test_binary_units(self, value, expected):
        assert format_bytes(value) == expected

    def test_decimals(self):
        assert format_bytes(1024 * 1.2345, decimals=1) == "1.2 KB"
        assert format_bytes(1024 * 1.5, decimals=0) == "2 KB"

    def test_non_finite(self):
        assert format_bytes(math.inf) == "0 B"
        assert format_bytes(math.nan) == "0 B"


class TestFormatUptime:
    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (0, "0s"),
            (42, "42s"),
            (60, "1m"),
            (59 * 60, "59m"),
            (3600 + 5 * 60, "1h 5m"),
            (86400 * 3 + 4 * 3600 + 59, "3d 4h"),
            (-10, "0s"),
        ],
    )
    def test_durations(self, seconds, expected):
        assert format_uptime(seconds) == expected

    def test_nan(self):
        assert format_uptime(math.nan) == "0s"


class TestRelativeTime:
    def test_bands(self):
        assert format_relative_time(NOW - 30, NOW) == "just now"
        assert format_relative_time(NOW + 300, NOW) == "just now"
        assert format_relative_time(NOW - 5 * 60, NOW) == "5m ago"
        assert format_relative_time(NOW - 2 * 3600, NOW) == "2h ago"
        assert format_relative_time(NOW - 3 * 86400, NOW) == "3d ago"

    def test_old_timestamps_render_as_dates(self):
        assert format_relative_time(0.0, NOW) == "1970-01-01"


def test_format_percent():
    assert format_percent(12.345) == "12.3%"
    assert format_percent(50, decimals=0) == "50%"


def test_truncate_middle():
    assert truncate_middle("short") == "short"
    assert truncate_middle("ABCDEFGHIJKLMNOP") == "ABCDEF...MNOP"


def test_calculate_percent_and_clamp():
    assert calculate_percent(1, 4) == 25.0
    assert calculate_percent(5, 0) == 0.0
    assert clamp(150, 0, 100) == 100
    assert clamp(-1, 0, 100) == 0


class TestParseAddress:
    def test_host_and_port(self):
        assert parse_address("173.212.207.32:9001") == ("173.212.207.32", 9001)

    def test_bracketed_ipv6(self):
        assert parse_address("[2001:db8::1]:9001") == ("2001:db8::1", 9001)

    @pytest.mark.parametrize(
        "address",
        ["173.212.207.32", "host:", ":9001", "host:port", "", "host:²", "10.0.0.1:9¹", "host:٣"],
    )
    def test_fallback(self, address):
        assert parse_address(address) == (address, SENTINEL_PORT)


class TestTimestampToDatetime:
    def test_utc(self):
        moment = timestamp_to_datetime(NOW)
        assert moment.tzinfo is not None
        assert moment.timestamp() == NOW

    def test_unrepresentable_timestamps_degrade_to_epoch(self):
        assert timestamp_to_datetime(1e20) == EPOCH
        assert timestamp_to_datetime(math.nan) == EPOCH


class TestSortKey:
    def test_numbers_compare_numerically(self):
        values = [10, 9, 100, 2.5]
        assert sorted(values, key=sort_key) == [2.5, 9, 10, 100]

    def test_strings_compare_lexically(self):
        assert sorted(["b", "a", "C"], key=sort_key) == ["C", "a", "b"]

    def test_mixed_types_do_not_raise(self):
        ordered = sorted(["x", None, 3, 1], key=sort_key)
        assert ordered == [1, 3, "x", None]
