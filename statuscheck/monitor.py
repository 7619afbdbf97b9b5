"""
Status Monitor: the cache and fetch orchestrator.

Owns the single "current verdict" for the process. It:
  - Serves the cached verdict while it is younger than the freshness window
  - Runs at most one fetch at a time; concurrent callers share its result
  - Bounds every fetch with a timeout that cancels the underlying call
  - Tries each acquisition strategy in turn on the fetched payload
  - Falls back to the last good verdict on failure, or to UNKNOWN when
    there is none (UNKNOWN is never cached)

Nothing raises out of get_status(); UNKNOWN is the error signal.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Sequence, Tuple

from statuscheck.errors import NetworkError, ParseError
from statuscheck.models import (
    Assessment,
    CacheEntry,
    CheckerSettings,
    FeedPayload,
    NormalizedEvent,
    Verdict,
    VerdictStatus,
)
from statuscheck.sources import FeedPipelineSource, SimpleFeedSource, StatusSource

log = logging.getLogger(__name__)

FetchFn = Callable[[], Awaitable[FeedPayload]]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def default_sources(settings: CheckerSettings) -> Tuple[StatusSource, ...]:
    """The full pipeline, followed by the simple fallback if enabled."""
    if settings.enable_fallback:
        return (FeedPipelineSource(), SimpleFeedSource())
    return (FeedPipelineSource(),)


class StatusMonitor:
    """
    Cached, single-flight access to the feed verdict.

    Attributes:
        settings: Freshness window and fetch timeout.
    """

    def __init__(
        self,
        fetch: FetchFn,
        settings: Optional[CheckerSettings] = None,
        sources: Optional[Sequence[StatusSource]] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.settings = settings or CheckerSettings()
        self._fetch = fetch
        self._sources = tuple(sources) if sources is not None else default_sources(self.settings)
        self._clock = clock
        self._now = now

        # Replaced wholesale, never mutated
        self._entry: Optional[CacheEntry] = None
        self._inflight: Optional[asyncio.Task] = None

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry

    @property
    def events(self) -> Tuple[NormalizedEvent, ...]:
        entry = self._entry
        return entry.events if entry else ()

    def reset(self) -> None:
        """Forget the cached verdict. Meant for tests."""
        self._entry = None

    def is_fresh(self, entry: CacheEntry) -> bool:
        age = self._clock() - entry.fetched_at_monotonic
        return age < self.settings.freshness_window

    async def get_status(self, force: bool = False) -> Verdict:
        """
        Return the current verdict.

        Args:
            force: Ignore the freshness window and refetch (an in-flight
                fetch is still shared rather than duplicated).
        """
        entry = self._entry
        if not force and entry is not None and self.is_fresh(entry):
            log.debug("Returning cached status")
            return entry.verdict

        if self._inflight is None:
            log.debug("Fetching fresh status")
            self._inflight = asyncio.ensure_future(self._refresh())
        # Shielded: cancelling one caller must not cancel the shared fetch
        return await asyncio.shield(self._inflight)

    async def _refresh(self) -> Verdict:
        try:
            try:
                assessment = await self._acquire()
            except (NetworkError, ParseError) as exc:
                log.error("Error fetching status: %s", exc)
                return self._fallback(str(exc))
            except Exception as exc:
                log.exception("Unexpected error fetching status")
                return self._fallback(str(exc) or type(exc).__name__)

            self._store(assessment)
            log.info("Successfully fetched status: %s", assessment.verdict.status.value)
            return assessment.verdict
        finally:
            self._inflight = None

    async def _acquire(self) -> Assessment:
        timeout = self.settings.fetch_timeout
        try:
            payload = await asyncio.wait_for(self._fetch(), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise NetworkError(f"Request timed out after {timeout:g}s") from exc

        fetched_at = self._now()
        failure: Optional[ParseError] = None
        for source in self._sources:
            try:
                return source.assess(payload, fetched_at)
            except ParseError as exc:
                log.warning("%s source could not interpret feed: %s", source.name, exc)
                failure = failure or exc
        raise failure or ParseError("No acquisition source configured")

    def _store(self, assessment: Assessment) -> None:
        fetched_at = self._clock()
        previous = self._entry
        if previous is not None and fetched_at < previous.fetched_at_monotonic:
            log.debug("Discarding result older than the cached entry")
            return
        self._entry = CacheEntry(
            verdict=assessment.verdict,
            fetched_at_monotonic=fetched_at,
            events=assessment.events,
        )

    def _fallback(self, reason: str) -> Verdict:
        entry = self._entry
        if entry is not None:
            log.warning("Returning cached status due to error")
            return entry.verdict
        return Verdict(
            VerdictStatus.UNKNOWN,
            self._now(),
            f"Unable to fetch status: {reason}",
        )
