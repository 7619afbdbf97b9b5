"""
Data models for the status checker.

Defines the normalized feed event shape, the tri-state verdict served to
consumers, the cache entry that wraps it, and the configuration objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from dateutil import parser as dateutil_parser


@dataclass(frozen=True)
class EventLogEntry:
    """One update posted on an incident."""

    summary: str = ""
    message: str = ""
    status: int = 0
    timestamp: int = 0


@dataclass(frozen=True)
class ImpactedService:
    """
    Impact level of a single service within an event.

    ``current`` and ``max`` are string-encoded integers, exactly as the
    feed publishes them.
    """

    service_name: str = ""
    current: str = ""
    max: str = ""


@dataclass(frozen=True)
class NormalizedEvent:
    """
    A feed incident with every field populated.

    Attributes:
        date: Start of the event as published (usually epoch seconds).
        arn: Event identifier.
        region_name: Human-readable region.
        status: Event status code as published.
        service: Short service key (e.g. "ec2").
        service_name: Display name of the primary service.
        summary: Incident headline.
        event_log: Ordered updates on the incident.
        impacted_services: Opaque key -> impact of that service.
    """

    date: str = ""
    arn: str = ""
    region_name: str = ""
    status: str = ""
    service: str = ""
    service_name: str = ""
    summary: str = ""
    event_log: Tuple[EventLogEntry, ...] = ()
    impacted_services: Mapping[str, ImpactedService] = field(
        default_factory=dict, hash=False
    )

    def __post_init__(self) -> None:
        # Read-only copy; cached events are shared with every reader
        object.__setattr__(
            self, "impacted_services", MappingProxyType(dict(self.impacted_services))
        )

    @property
    def started_at(self) -> Optional[datetime]:
        """The event's ``date`` as a UTC datetime, or None if unparseable."""
        raw = self.date.strip()
        if not raw:
            return None
        try:
            if raw.isdigit():
                return datetime.fromtimestamp(int(raw), tz=timezone.utc)
            parsed = dateutil_parser.parse(raw)
        except (ValueError, OverflowError, OSError):
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def to_dict(self) -> Dict[str, Any]:
        started = self.started_at
        return {
            "date": self.date,
            "startedAt": format_timestamp(started) if started else None,
            "arn": self.arn,
            "regionName": self.region_name,
            "status": self.status,
            "service": self.service,
            "serviceName": self.service_name,
            "summary": self.summary,
            "eventLog": [
                {
                    "summary": entry.summary,
                    "message": entry.message,
                    "status": entry.status,
                    "timestamp": entry.timestamp,
                }
                for entry in self.event_log
            ],
            "impactedServices": {
                key: {
                    "serviceName": svc.service_name,
                    "current": svc.current,
                    "max": svc.max,
                }
                for key, svc in self.impacted_services.items()
            },
        }


class VerdictStatus(str, Enum):
    """Externally visible health signal ("is it up?")."""

    OPERATIONAL = "yes"
    DEGRADED = "no"
    UNKNOWN = "unknown"


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing "Z"."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Verdict:
    """The derived health signal plus supporting detail text."""

    status: VerdictStatus
    last_updated: datetime
    details: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "status": self.status.value,
            "lastUpdated": format_timestamp(self.last_updated),
            "details": self.details,
        }


@dataclass(frozen=True)
class Assessment:
    """What an acquisition strategy made of one feed payload."""

    verdict: Verdict
    events: Tuple[NormalizedEvent, ...] = ()


@dataclass(frozen=True)
class CacheEntry:
    """The last successful assessment and when it was fetched (monotonic)."""

    verdict: Verdict
    fetched_at_monotonic: float
    events: Tuple[NormalizedEvent, ...] = ()


@dataclass(frozen=True)
class FeedPayload:
    """Raw result of one network call to the feed."""

    body: bytes
    content_type: Optional[str] = None
    content_encoding: Optional[str] = None


@dataclass
class FeedConfig:
    """Where the feed lives and how to ask for it."""

    name: str = "AWS"
    url: str = "https://health.aws.amazon.com/public/currentevents"
    user_agent: str = "Mozilla/5.0 (compatible; statuscheck/1.0)"


@dataclass
class CheckerSettings:
    """Global checker settings."""

    freshness_window: float = 10.0  # seconds a verdict is served from cache
    fetch_timeout: float = 8.0  # seconds
    poll_interval: int = 30  # seconds
    enable_fallback: bool = True
    log_level: str = "INFO"
    max_retries: int = 5
    base_backoff: int = 2
    host: str = "0.0.0.0"
    port: int = 10000
