"""
JSON endpoint for status consumers.

    GET /api/status  -> {"status": "yes"|"no"|"unknown", "lastUpdated", "details"}
    GET /api/events  -> events behind the cached verdict
    GET /health      -> {"status": "healthy"}
"""

from __future__ import annotations

from typing import AsyncIterator, Optional

import aiohttp
from aiohttp import web

from statuscheck.client import FeedClient
from statuscheck.models import CheckerSettings, FeedConfig
from statuscheck.monitor import StatusMonitor

MONITOR_KEY = web.AppKey("monitor", StatusMonitor)


async def handle_status(request: web.Request) -> web.Response:
    verdict = await request.app[MONITOR_KEY].get_status()
    return web.json_response(verdict.to_dict())


async def handle_events(request: web.Request) -> web.Response:
    events = request.app[MONITOR_KEY].events
    return web.json_response({"events": [event.to_dict() for event in events]})


async def handle_health(request: web.Request) -> web.Response:
    return web.json_response({"status": "healthy"})


def create_app(
    feed: FeedConfig,
    settings: CheckerSettings,
    monitor: Optional[StatusMonitor] = None,
) -> web.Application:
    """
    Build the web application.

    Without a ``monitor`` the app creates one on startup, backed by an
    aiohttp session that lives as long as the app.
    """
    app = web.Application()

    if monitor is not None:
        app[MONITOR_KEY] = monitor
    else:
        async def feed_session(app: web.Application) -> AsyncIterator[None]:
            connector = aiohttp.TCPConnector(limit_per_host=5)
            async with aiohttp.ClientSession(connector=connector) as session:
                client = FeedClient(session, feed, timeout=settings.fetch_timeout)
                app[MONITOR_KEY] = StatusMonitor(client.fetch, settings)
                yield

        app.cleanup_ctx.append(feed_session)

    app.router.add_get("/api/status", handle_status)
    app.router.add_get("/api/events", handle_events)
    app.router.add_get("/health", handle_health)
    return app
