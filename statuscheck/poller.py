"""
Status Poller: a consumer that refreshes the verdict on a schedule.

A new poll is never issued while the previous one is still outstanding,
so one poller contributes at most one concurrent call into the monitor.
After UNKNOWN verdicts the poller backs off exponentially with jitter.
"""

from __future__ import annotations

import asyncio
import random
from typing import Callable, Optional

from statuscheck.models import CheckerSettings, Verdict, VerdictStatus
from statuscheck.monitor import StatusMonitor

VerdictCallback = Callable[[Verdict], None]


class StatusPoller:
    """
    Polls a StatusMonitor and hands every verdict to ``on_verdict``.

    Attributes:
        monitor: Source of verdicts.
        settings: Poll interval and backoff parameters.
    """

    def __init__(
        self,
        monitor: StatusMonitor,
        settings: CheckerSettings,
        on_verdict: Optional[VerdictCallback] = None,
    ) -> None:
        self.monitor = monitor
        self.settings = settings
        self._on_verdict = on_verdict
        self._fetching = False
        self._consecutive_errors = 0
        self._tasks: set = set()
        self.last_verdict: Optional[Verdict] = None

    @property
    def is_fetching(self) -> bool:
        return self._fetching

    @property
    def consecutive_errors(self) -> int:
        return self._consecutive_errors

    async def poll_once(self) -> Optional[Verdict]:
        """
        Ask the monitor for the current verdict.

        Returns None without polling if a previous poll is outstanding.
        """
        if self._fetching:
            return None

        self._fetching = True
        try:
            verdict = await self.monitor.get_status()
        finally:
            self._fetching = False

        if verdict.status is VerdictStatus.UNKNOWN:
            self._consecutive_errors += 1
        else:
            self._consecutive_errors = 0

        self.last_verdict = verdict
        if self._on_verdict:
            self._on_verdict(verdict)
        return verdict

    def next_delay(self) -> float:
        """Seconds to wait before the next poll."""
        if self._consecutive_errors:
            return self._backoff_delay()
        return float(self.settings.poll_interval)

    def _backoff_delay(self) -> float:
        """
        Calculate exponential backoff with jitter.

        delay = base * 2^(attempts-1) + random jitter
        Capped at 5 minutes.
        """
        exp = min(self._consecutive_errors, self.settings.max_retries)
        base_delay = self.settings.base_backoff * (2 ** (exp - 1))
        jitter = random.uniform(0, base_delay * 0.5)
        return min(base_delay + jitter, 300.0)

    async def run(self) -> None:
        """
        Poll until cancelled.

        Polls are started on a timer rather than awaited back to back, so a
        slow fetch overlapping the next tick exercises the reentrancy guard.
        """
        while True:
            task = asyncio.create_task(self.poll_once())
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            try:
                await asyncio.sleep(self.next_delay())
            except asyncio.CancelledError:
                for pending in list(self._tasks):
                    pending.cancel()
                raise
