"""Reduce normalized events into the tri-state verdict."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Set

from statuscheck.feed_parser import parse_impact_level
from statuscheck.models import NormalizedEvent, Verdict, VerdictStatus

ALL_OPERATIONAL = "All services operational"


def impacted_service_names(events: Iterable[NormalizedEvent]) -> Set[str]:
    """Names of services whose current impact level is above zero."""
    names: Set[str] = set()
    for event in events:
        for service in event.impacted_services.values():
            if not service.service_name:
                continue
            level = parse_impact_level(service.current)
            if level is not None and level > 0:
                names.add(service.service_name)
    return names


def describe_impact(count: int) -> str:
    return f"{count} service{'s' if count != 1 else ''} impacted"


def derive_verdict(events: List[NormalizedEvent], fetched_at: datetime) -> Verdict:
    """
    Any service with a current impact level above zero means degraded,
    whatever its region or severity. Events that impact nothing right now
    (recovering, informational) read as operational.

    ``fetched_at`` becomes ``last_updated``; the feed's own timestamps are
    not a reliable "now".
    """
    if not events:
        return Verdict(VerdictStatus.OPERATIONAL, fetched_at, ALL_OPERATIONAL)

    impacted = impacted_service_names(events)
    if impacted:
        return Verdict(
            VerdictStatus.DEGRADED,
            fetched_at,
            describe_impact(len(impacted)),
        )

    return Verdict(VerdictStatus.OPERATIONAL, fetched_at, ALL_OPERATIONAL)
