"""
Main entry point: the StatusChecker orchestrator.

Builds the feed client, the cached StatusMonitor, the JSON endpoint and a
console poller that all share one monitor, runs them in a single asyncio
event loop, and handles graceful shutdown on Ctrl+C.

Usage:
    statuscheck
    python -m statuscheck.main
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import List, Optional

import aiohttp
from aiohttp import web

from statuscheck import notifier
from statuscheck.app import create_app
from statuscheck.client import FeedClient
from statuscheck.config import load_config
from statuscheck.models import CheckerSettings, FeedConfig, Verdict, VerdictStatus
from statuscheck.monitor import StatusMonitor
from statuscheck.poller import StatusPoller


class StatusChecker:
    """
    Top-level orchestrator.

    Manages the shared aiohttp session, the monitor, the web endpoint and
    the console poller.
    """

    def __init__(self, feed: FeedConfig, settings: CheckerSettings) -> None:
        self.feed = feed
        self.settings = settings
        self._tasks: List[asyncio.Task] = []
        self._last_shown: Optional[Verdict] = None
        self._poller: Optional[StatusPoller] = None

    def _on_verdict(self, verdict: Verdict) -> None:
        previous = self._last_shown
        self._last_shown = verdict

        if verdict.status is VerdictStatus.UNKNOWN:
            notifier.print_error(self.feed.name, verdict.details)
            if self._poller is not None:
                notifier.print_retry(
                    self.feed.name,
                    self._poller.consecutive_errors,
                    self._poller.next_delay(),
                )
            return

        if previous == verdict:
            return
        notifier.print_verdict(verdict)
        if verdict.status is VerdictStatus.DEGRADED and self._poller is not None:
            notifier.print_events(self._poller.monitor.events)

    async def run(self) -> None:
        """
        Start the endpoint and the poller, and wait until interrupted.
        """
        notifier.print_banner(self.feed.name)

        # Shared session: connection pooling for every fetch
        connector = aiohttp.TCPConnector(limit_per_host=5)
        async with aiohttp.ClientSession(connector=connector) as session:
            client = FeedClient(session, self.feed, timeout=self.settings.fetch_timeout)
            monitor = StatusMonitor(client.fetch, self.settings)
            self._poller = StatusPoller(monitor, self.settings, self._on_verdict)

            runner = web.AppRunner(create_app(self.feed, self.settings, monitor))
            await runner.setup()
            site = web.TCPSite(runner, self.settings.host, self.settings.port)
            await site.start()

            notifier.print_monitoring_start(
                self.feed.name,
                self.feed.url,
                self.settings.poll_interval,
            )
            notifier.print_serving(self.settings.host, self.settings.port)

            task = asyncio.create_task(self._poller.run(), name="poller")
            self._tasks.append(task)
            try:
                await asyncio.gather(*self._tasks)
            except asyncio.CancelledError:
                pass
            finally:
                await runner.cleanup()

    def shutdown(self) -> None:
        """Cancel all running tasks."""
        for task in self._tasks:
            task.cancel()


def _handle_signals(checker: StatusChecker, loop: asyncio.AbstractEventLoop) -> None:
    """Register signal handlers for graceful shutdown."""
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(
                sig,
                lambda: _do_shutdown(checker),
            )
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass


def _do_shutdown(checker: StatusChecker) -> None:
    """Trigger graceful shutdown."""
    notifier.print_shutdown()
    checker.shutdown()


async def async_main() -> None:
    """Async entry point."""
    feed, settings = load_config()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    checker = StatusChecker(feed, settings)
    loop = asyncio.get_running_loop()
    _handle_signals(checker, loop)
    await checker.run()


def main() -> None:
    """Sync entry point."""
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        # Signal handler already printed shutdown message
        sys.exit(0)


if __name__ == "__main__":
    main()
