"""Replay cache for client-supplied idempotency keys."""

import hashlib
import json
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from picaso.domain.errors import IdempotencyConflict

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class ResponseCache(Protocol):
    """Cache interface for previously returned responses."""

    def get(self, key: str) -> dict[str, object] | None:
        """Return a stored response if present and not expired."""

    def set(self, key: str, value: dict[str, object]) -> None:
        """Store a response under the key."""


@dataclass
class _Entry:
    value: dict[str, object]
    expires_at: datetime


@dataclass
class InMemoryResponseCache(ResponseCache):
    """Bounded in-process TTL cache; oldest entries are evicted first."""

    ttl_seconds: int = 86400
    max_entries: int = 1024
    clock: Clock = _utcnow
    _entries: "OrderedDict[str, _Entry]" = field(default_factory=OrderedDict)

    def get(self, key: str) -> dict[str, object] | None:
        """Return a stored response if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: dict[str, object]) -> None:
        """Store a response and evict the oldest entries past capacity."""
        expires_at = self.clock() + timedelta(seconds=self.ttl_seconds)
        self._entries[key] = _Entry(value=value, expires_at=expires_at)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)


@dataclass
class IdempotencyService:
    """Runs an operation once per (scope, key) and replays its response."""

    cache: ResponseCache

    async def run(
        self,
        scope: str,
        key: str | None,
        func: Callable[[], Awaitable[dict[str, object]]],
        fingerprint: str = "",
    ) -> dict[str, object]:
        """Return the cached response for the key or compute and store one.

        Requests without a key always run. Failures are not cached. A key
        replayed with a different request fingerprint raises
        ``IdempotencyConflict``.
        """
        if not key:
            return await func()
        cache_key = f"{scope}:{key}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            if cached["fingerprint"] != fingerprint:
                raise IdempotencyConflict()
            return cached["response"]  # type: ignore[return-value]
        response = await func()
        self.cache.set(cache_key, {"fingerprint": fingerprint, "response": response})
        return response


def request_fingerprint(payload: Mapping[str, object]) -> str:
    """Return a stable digest of a request body."""
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()
