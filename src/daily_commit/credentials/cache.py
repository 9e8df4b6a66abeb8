"""
TTL cache in front of the credential store.

An entry is valid iff ``now - stored_at < ttl``. Valid entries are served
without contacting the store; invalid ones are replaced on the next ``get``,
never read. A failed refresh leaves the stale entry in place, but it is still
never served: the next call fetches again.

The store call runs through the RetryExecutor under the credentials policy,
so nothing above the cache retries a fetch again.

There is no single-flight deduplication: two concurrent ``get`` calls for the
same expired key both fetch and the last write wins. JobRuntime serializes
job invocations, so this only happens between a job and a health probe.
"""

import time
from dataclasses import dataclass
from typing import Callable

import structlog

from daily_commit.credentials.models import CredentialBundle, parse_credential_bundle
from daily_commit.credentials.store import CredentialStore
from daily_commit.errors import CredentialFetchFailed, IncompleteCredential
from daily_commit.monitoring.metrics import credential_cache_requests_total
from daily_commit.retry.exceptions import RetryExhausted
from daily_commit.retry.executor import RetryExecutor, RetryStats
from daily_commit.retry.policy import RetryPolicy

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Cached credential bundle with its own TTL."""

    key: str
    value: CredentialBundle
    stored_at: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return now - self.stored_at < self.ttl


@dataclass(frozen=True)
class CacheStats:
    """Diagnostic view of the cache."""

    size: int
    keys: list[str]


class CredentialCache:
    """
    Maps credential-store keys to bundles with per-entry TTL.

    Attributes:
        store: Credential store collaborator
        executor: Retry executor wrapping each store call
        policy: Retry policy for credential operations
        default_ttl: TTL (seconds) used when ``get`` is called without one
    """

    def __init__(
        self,
        store: CredentialStore,
        executor: RetryExecutor,
        policy: RetryPolicy,
        default_ttl: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.executor = executor
        self.policy = policy
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    async def get(
        self,
        key: str,
        ttl: float | None = None,
        stats: RetryStats | None = None,
    ) -> CredentialBundle:
        """
        Return the bundle for ``key``, fetching it when missing or expired.

        Args:
            key: Credential-store key
            ttl: Lifetime of a freshly stored entry (seconds)
            stats: Optional retry accounting for the current invocation

        Returns:
            CredentialBundle

        Raises:
            CredentialFetchFailed: Store call failed (after retries)
            IncompleteCredential: Store document lacks a required field
        """
        ttl = self.default_ttl if ttl is None else ttl

        entry = self._entries.get(key)
        if entry is not None and entry.is_valid(self._clock()):
            credential_cache_requests_total.labels(result="hit").inc()
            logger.debug("Using cached credentials", key=key)
            return entry.value

        credential_cache_requests_total.labels(result="miss").inc()
        logger.info("Retrieving fresh credentials", key=key, expired=entry is not None)

        try:
            document = await self.executor.execute(
                lambda: self.store.fetch(key),
                self.policy,
                "credential_fetch",
                stats,
            )
        except RetryExhausted as exc:
            raise CredentialFetchFailed(key, exc.last_error or exc) from exc

        try:
            bundle = parse_credential_bundle(document, key=key)
        except IncompleteCredential:
            logger.error("Credential document incomplete", key=key)
            raise

        self._entries[key] = CacheEntry(
            key=key,
            value=bundle,
            stored_at=self._clock(),
            ttl=ttl,
        )
        logger.info("Credentials retrieved and cached", key=key, ttl=ttl)
        return bundle

    def clear(self, key: str | None = None) -> None:
        """Remove one entry, or all entries when ``key`` is None."""
        if key is not None:
            self._entries.pop(key, None)
            logger.debug("Cleared cached credentials", key=key)
        else:
            self._entries.clear()
            logger.debug("Cleared all cached credentials")

    def stats(self) -> CacheStats:
        return CacheStats(size=len(self._entries), keys=list(self._entries))
