"""
Formatter utilities for pNode display fields.

Pure functions turning raw byte counts, durations and percentages into
display strings, plus the address parser and the generic sort key used by
list views.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

from pnode_analytics.datastructures.type_aliases import (
    HostAddress,
    PortNumber,
    Timestamp,
)

BYTE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")
BYTE_BASE = 1024

SENTINEL_PORT: PortNumber = 0

MISSING_SORT_KEY: tuple[int, str] = (2, "")

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400
SECONDS_PER_WEEK = 604800

EPOCH = datetime.fromtimestamp(0, tz=UTC)


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def calculate_percent(value: float, total: float) -> float:
    """Percentage of ``value`` in ``total``; 0 when total is 0."""
    if total == 0:
        return 0.0
    return value / total * 100.0


def _trim_decimal(value: float, decimals: int) -> str:
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_bytes(value: float, decimals: int = 2) -> str:
    """Format a byte count with binary units, e.g. ``1536 -> "1.5 KB"``."""
    if not math.isfinite(value) or value <= 0:
        return "0 B"

    scaled = float(value)
    exponent = 0
    while scaled >= BYTE_BASE and exponent < len(BYTE_UNITS) - 1:
        scaled /= BYTE_BASE
        exponent += 1
    return f"{_trim_decimal(scaled, max(decimals, 0))} {BYTE_UNITS[exponent]}"


def format_uptime(seconds: float) -> str:
    """Format a duration as ``"3d 4h"``, ``"2h 5m"``, ``"7m"`` or ``"42s"``."""
    if not math.isfinite(seconds) or seconds < 0:
        return "0s"
    if seconds < SECONDS_PER_MINUTE:
        return f"{int(seconds)}s"

    total = int(seconds)
    days = total // SECONDS_PER_DAY
    hours = (total % SECONDS_PER_DAY) // SECONDS_PER_HOUR
    minutes = (total % SECONDS_PER_HOUR) // SECONDS_PER_MINUTE

    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def timestamp_to_datetime(timestamp: Timestamp) -> datetime:
    """UTC datetime for an epoch timestamp; unrepresentable values give the epoch."""
    try:
        return datetime.fromtimestamp(timestamp, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return EPOCH


def format_relative_time(timestamp: Timestamp, now: Timestamp) -> str:
    """Human-readable age of ``timestamp`` relative to ``now``."""
    diff = now - timestamp
    if math.isnan(diff):
        return "unknown"
    if diff < SECONDS_PER_MINUTE:
        return "just now"
    if diff < SECONDS_PER_HOUR:
        return f"{int(diff // SECONDS_PER_MINUTE)}m ago"
    if diff < SECONDS_PER_DAY:
        return f"{int(diff // SECONDS_PER_HOUR)}h ago"
    if diff < SECONDS_PER_WEEK:
        return f"{int(diff // SECONDS_PER_DAY)}d ago"
    return timestamp_to_datetime(timestamp).date().isoformat()


def format_percent(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"


def truncate_middle(text: str, start_chars: int = 6, end_chars: int = 4) -> str:
    """Shorten long keys to ``"abcdef...wxyz"``."""
    if len(text) <= start_chars + end_chars:
        return text
    return f"{text[:start_chars]}...{text[-end_chars:] if end_chars else ''}"


def parse_address(address: str) -> tuple[HostAddress, PortNumber]:
    """Split ``host:port`` into its parts.

    Anything that does not follow the convention comes back whole as the
    host with ``SENTINEL_PORT``.
    """
    host, separator, port_text = address.rpartition(":")
    # int() rejects superscripts that str.isdigit() accepts
    if not separator or not host or not (port_text.isascii() and port_text.isdecimal()):
        return address, SENTINEL_PORT
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port_text)


def sort_key(value: Any) -> tuple[int, Any]:
    """Key for heterogeneous field values under a stable sort.

    Numbers compare numerically and order before other values, which compare
    as plain strings. None and NaN map to ``MISSING_SORT_KEY``, which orders
    last in an ascending sort; ``sort_nodes`` keeps it last when descending
    too.
    """
    if value is None:
        return MISSING_SORT_KEY
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, int | float):
        if isinstance(value, float) and math.isnan(value):
            return MISSING_SORT_KEY
        return (0, value)
    if hasattr(value, "value") and isinstance(value.value, str):
        return (1, value.value)
    return (1, str(value))
