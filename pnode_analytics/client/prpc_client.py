"""
Asynchronous pRPC client.

Talks JSON-RPC 2.0 over HTTP POST to a primary endpoint and, when that
fails, to each fallback endpoint in order. The whole endpoint list is tried
up to ``PRPCSettings.retries`` times. Successful results are kept in a small
in-process TTL cache so repeated lookups within one run do not hit the
network again.

This is the only module in the package that performs I/O.
"""

from __future__ import annotations

import asyncio
import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from loguru import logger
from pydantic import ValidationError

from pnode_analytics.core.config import PRPCSettings
from pnode_analytics.datastructures.node_types import RawNodeRecord
from pnode_analytics.datastructures.type_aliases import (
    DurationSeconds,
    JsonDict,
    NodePubkey,
    RPCMethodName,
    Timestamp,
    UrlString,
)

from .prpc_models import PRPCRequest, PRPCResponse

GET_PODS_WITH_STATS: RPCMethodName = "get-pods-with-stats"
GET_STATS: RPCMethodName = "get-stats"
GET_VERSION: RPCMethodName = "get-version"


class PRPCError(Exception):
    """Base exception for pRPC failures."""

    def __init__(self, message: str, *, endpoint: UrlString | None = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint


class PRPCHTTPError(PRPCError):
    """The endpoint answered with a non-success HTTP status."""

    def __init__(self, endpoint: UrlString, status: int, reason: str | None) -> None:
        super().__init__(f"HTTP error: {status} {reason or ''}".rstrip(), endpoint=endpoint)
        self.status = status


class PRPCRemoteError(PRPCError):
    """The endpoint answered with a JSON-RPC error object."""

    def __init__(self, endpoint: UrlString, code: int, message: str) -> None:
        super().__init__(f"pRPC error: {message} (code: {code})", endpoint=endpoint)
        self.code = code


class PRPCProtocolError(PRPCError):
    """The endpoint answered with something that is not a usable JSON-RPC response."""


class PRPCUnavailableError(PRPCError):
    """Every endpoint failed on every attempt."""


@dataclass(frozen=True, slots=True)
class _CacheEntry:
    value: Any
    stored_at: Timestamp
    ttl: DurationSeconds


@dataclass(slots=True)
class PRPCClient:
    """pRPC client with endpoint fallback, retries and a TTL cache.

    ``endpoint`` pins the client to a single URL and disables fallback.
    """

    settings: PRPCSettings = field(default_factory=PRPCSettings)
    endpoint: UrlString | None = None
    clock: Callable[[], float] = time.monotonic
    _cache: dict[str, _CacheEntry] = field(default_factory=dict, init=False)
    _request_ids: itertools.count = field(
        default_factory=lambda: itertools.count(1), init=False
    )

    @property
    def endpoints(self) -> tuple[UrlString, ...]:
        if self.endpoint:
            return (self.endpoint,)
        return self.settings.endpoints

    # Public API

    async def fetch_all(self) -> list[RawNodeRecord]:
        """Every pod reported by ``get-pods-with-stats``.

        Pods missing an identifying field are dropped.
        """
        cached = self._cache_get(GET_PODS_WITH_STATS)
        if cached is not None:
            return list(cached)

        result = await self.request(GET_PODS_WITH_STATS)
        records = tuple(parse_pod_records(result))
        self._cache_put(
            GET_PODS_WITH_STATS, records, self.settings.pods_cache_ttl_seconds
        )
        return list(records)

    async def fetch_one(self, pubkey: NodePubkey) -> RawNodeRecord | None:
        """The pod with ``pubkey``, or None when the network does not report it."""
        for record in await self.fetch_all():
            if record.pubkey == pubkey:
                return record
        return None

    async def fetch_version(self) -> str:
        cached = self._cache_get(GET_VERSION)
        if cached is not None:
            return cached

        result = await self.request(GET_VERSION)
        if isinstance(result, dict):
            version = str(result.get("version", ""))
        else:
            version = str(result)
        self._cache_put(GET_VERSION, version, self.settings.version_cache_ttl_seconds)
        return version

    async def fetch_stats(self) -> JsonDict:
        cached = self._cache_get(GET_STATS)
        if cached is not None:
            return dict(cached)

        result = await self.request(GET_STATS)
        if not isinstance(result, dict):
            raise PRPCProtocolError(f"Unexpected {GET_STATS} result: {result!r}")
        self._cache_put(GET_STATS, result, self.settings.stats_cache_ttl_seconds)
        return dict(result)

    def clear_cache(self) -> None:
        self._cache.clear()

    # Transport

    async def request(self, method: RPCMethodName, params: list[Any] | None = None) -> Any:
        """Call ``method``, falling back across endpoints and retrying rounds."""
        body = PRPCRequest(method=method, params=params, id=next(self._request_ids))
        payload = body.model_dump(exclude_none=True)
        timeout = aiohttp.ClientTimeout(total=self.settings.timeout_seconds)
        last_error: Exception | None = None

        async with aiohttp.ClientSession(timeout=timeout) as session:
            for attempt in range(1, self.settings.retries + 1):
                for url in self.endpoints:
                    try:
                        logger.debug("Trying pRPC endpoint {} ({})", url, method)
                        result = await self._post(session, url, payload)
                    except (aiohttp.ClientError, TimeoutError, PRPCError) as e:
                        last_error = e
                        logger.warning(
                            "pRPC endpoint {} failed for {} (attempt {}/{}): {}",
                            url,
                            method,
                            attempt,
                            self.settings.retries,
                            str(e) or type(e).__name__,
                        )
                        continue
                    logger.debug("pRPC {} succeeded via {}", method, url)
                    return result

                if attempt < self.settings.retries and self.settings.retry_delay_seconds:
                    await asyncio.sleep(self.settings.retry_delay_seconds)

        raise PRPCUnavailableError(
            f"All pRPC endpoints failed for {method}: {last_error}"
        ) from last_error

    async def _post(
        self, session: aiohttp.ClientSession, url: UrlString, payload: JsonDict
    ) -> Any:
        async with session.post(url, json=payload) as response:
            if response.status >= 400:
                raise PRPCHTTPError(url, response.status, response.reason)
            try:
                data = await response.json(content_type=None)
            except ValueError as e:
                raise PRPCProtocolError(
                    f"Invalid JSON from pRPC endpoint: {e}", endpoint=url
                ) from e

        try:
            envelope = PRPCResponse.model_validate(data)
        except ValidationError as e:
            raise PRPCProtocolError(
                f"Malformed JSON-RPC response: {e.error_count()} errors", endpoint=url
            ) from e

        if envelope.error is not None:
            raise PRPCRemoteError(url, envelope.error.code, envelope.error.message)
        if "result" not in envelope.model_fields_set:
            raise PRPCProtocolError("No result in pRPC response", endpoint=url)
        return envelope.result

    # Cache

    def _cache_get(self, key: str) -> Any | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        if self.clock() - entry.stored_at > entry.ttl:
            del self._cache[key]
            return None
        return entry.value

    def _cache_put(self, key: str, value: Any, ttl: DurationSeconds) -> None:
        if ttl > 0:
            self._cache[key] = _CacheEntry(value=value, stored_at=self.clock(), ttl=ttl)


def parse_pod_records(result: Any) -> list[RawNodeRecord]:
    """Records from a ``get-pods-with-stats`` result.

    Accepts both ``{"pods": [...]}`` and a bare list; anything else yields
    no records.
    """
    if isinstance(result, list):
        pods = result
    elif isinstance(result, dict) and isinstance(result.get("pods"), list):
        pods = result["pods"]
    else:
        logger.warning("Unexpected {} result shape: {}", GET_PODS_WITH_STATS, type(result).__name__)
        return []

    records: list[RawNodeRecord] = []
    dropped = 0
    for pod in pods:
        if not isinstance(pod, dict):
            dropped += 1
            continue
        try:
            records.append(RawNodeRecord.from_dict(pod))
        except ValueError as e:
            dropped += 1
            logger.debug("Dropping pod {}: {}", pod.get("pubkey"), e)

    if dropped:
        logger.warning("Dropped {} of {} pods with missing identity fields", dropped, len(pods))
    return records
