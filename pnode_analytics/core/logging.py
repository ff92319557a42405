"""
Logging setup for pnode_analytics.

Core modules only log at DEBUG, so a quiet run shows transport warnings
and nothing else. Debug output for one area is switched on through named
scopes:

- ``transport``: pRPC endpoint attempts, fallbacks and dropped pods
- ``scoring``: classification, health scoring and normalization
- ``cli``: command dispatch

Any other scope is taken as a module path, with or without the
``pnode_analytics.`` prefix.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable, Mapping

from loguru import logger

PACKAGE_NAME = "pnode_analytics"

SCOPE_MODULES: dict[str, tuple[str, ...]] = {
    "transport": (f"{PACKAGE_NAME}.client",),
    "scoring": (
        f"{PACKAGE_NAME}.core.classifier",
        f"{PACKAGE_NAME}.core.health",
        f"{PACKAGE_NAME}.core.normalizer",
    ),
    "cli": (f"{PACKAGE_NAME}.cli",),
}

DEFAULT_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} - {message}"
)


def resolve_scopes(scopes: Iterable[str]) -> tuple[str, ...]:
    """Expand scope names into the module prefixes they cover."""
    prefixes: list[str] = []
    for scope in scopes:
        scope = scope.strip()
        if not scope:
            continue
        if scope in SCOPE_MODULES:
            candidates = SCOPE_MODULES[scope]
        elif scope == PACKAGE_NAME or scope.startswith(f"{PACKAGE_NAME}."):
            candidates = (scope,)
        else:
            candidates = (f"{PACKAGE_NAME}.{scope}",)
        prefixes.extend(c for c in candidates if c not in prefixes)
    return tuple(prefixes)


def _in_scope(record_name: str, prefixes: tuple[str, ...]) -> bool:
    return any(
        record_name == prefix or record_name.startswith(f"{prefix}.")
        for prefix in prefixes
    )


def configure_logging(
    level: str,
    *,
    debug_scopes: Iterable[str] = (),
    colorize: bool = False,
) -> tuple[int, ...]:
    """Replace loguru's sinks with one stderr sink at ``level``.

    When ``debug_scopes`` is given and ``level`` is above DEBUG, a second
    sink lets DEBUG records from those scopes through. Returns the handler
    ids.
    """
    logger.remove()
    handler_ids = [
        logger.add(sys.stderr, level=level, format=DEFAULT_LOG_FORMAT, colorize=colorize)
    ]

    prefixes = resolve_scopes(debug_scopes)
    if not prefixes or level.upper() == "DEBUG":
        return tuple(handler_ids)

    def _debug_filter(record: Mapping) -> bool:
        if record["level"].name != "DEBUG":
            return False
        return _in_scope(record["name"] or "", prefixes)

    handler_ids.append(
        logger.add(
            sys.stderr,
            level="DEBUG",
            format=DEFAULT_LOG_FORMAT,
            colorize=colorize,
            filter=_debug_filter,
        )
    )
    return tuple(handler_ids)
