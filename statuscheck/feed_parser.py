"""
Health Feed Parser.

Turns sanitized feed text into NormalizedEvent objects in two steps:

  - parse_json_array: JSON parsing with a bounded sequence of repairs
    for the stray bytes an encoding mix-up leaves behind
  - normalize_events: coerces loosely-typed records into the strict
    event shape, dropping elements that are not objects

The feed schema is not authoritative. Any field may be missing or of the
wrong type, and none of that is allowed to fail the whole batch.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

from statuscheck.errors import MalformedElementError, ParseError
from statuscheck.models import EventLogEntry, ImpactedService, NormalizedEvent

log = logging.getLogger(__name__)

# Message format used by some JSON parsers (e.g. Jackson, JavaScriptCore).
_UNRECOGNIZED_TOKEN_RE = re.compile(r"Unrecognized token '(.)'")
_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
_LEADING_INT_RE = re.compile(r"\s*([+-]?[0-9]+)")

# Never "repaired" away: removing these would rewrite valid JSON.
_PROTECTED_PUNCTUATION = set('[]{}",:.-+\\')


# ─── Resilient parsing ────────────────────────────────────────


def _offending_char(text: str, exc: json.JSONDecodeError) -> Optional[str]:
    """
    Best guess at the single character that broke parsing.

    Uses the message when it names the token, otherwise the error position.
    Returns None when no character can be removed safely.
    """
    match = _UNRECOGNIZED_TOKEN_RE.search(exc.msg)
    if match:
        char = match.group(1)
    elif 0 <= exc.pos < len(text):
        char = text[exc.pos]
    else:
        return None

    if char.isspace() or char in _PROTECTED_PUNCTUATION:
        return None
    if char.isascii() and char.isalnum():
        return None
    return char


def _remove_offending_char(text: str, exc: json.JSONDecodeError) -> Any:
    char = _offending_char(text, exc)
    if char is None:
        raise exc
    log.warning(
        "Problematic character %r (code: %x) at position %d, removing it",
        char,
        ord(char),
        text.find(char),
    )
    return json.loads(text.replace(char, ""))


def _extract_array(text: str) -> Any:
    match = _ARRAY_RE.search(text)
    if not match:
        raise ParseError("No JSON array found")
    return json.loads(match.group(0))


def parse_json_array(text: str) -> List[Any]:
    """
    Parse feed text that should hold a JSON array.

    Attempts, in order: a plain parse, a parse with the offending
    character removed, and a parse of the span from the first "[" to the
    last "]".

    Raises:
        ParseError: Nothing could be parsed, or the value is not an array.
    """
    if not text.strip():
        raise ParseError("Empty response from feed")

    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        original = str(exc)
        log.warning("JSON parse error: %s", original)
        log.debug("Attempted to parse (first 500 chars): %r", text[:500])
        value = _repair(text, exc, original)
    except RecursionError as exc:
        log.warning("JSON nesting too deep: %s", exc)
        raise ParseError(f"Failed to parse JSON: {exc}") from exc

    if not isinstance(value, list):
        log.error("Expected array, got %s", type(value).__name__)
        raise ParseError("Expected array response from feed")

    return value


def _repair(text: str, exc: json.JSONDecodeError, original: str) -> Any:
    try:
        value = _remove_offending_char(text, exc)
        log.info("Parsed after removing problematic character")
        return value
    except (json.JSONDecodeError, RecursionError) as second:
        log.debug("Character repair did not help: %s", second)

    try:
        value = _extract_array(text)
        log.info("Parsed extracted JSON array")
        return value
    except (json.JSONDecodeError, RecursionError, ParseError) as third:
        log.debug("Array extraction failed: %s", third)

    raise ParseError(f"Failed to parse JSON: {original}")


# ─── Normalization ────────────────────────────────────────────


def _as_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return ""


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if match:
            return int(match.group(1))
    return 0


def parse_impact_level(value: str) -> Optional[int]:
    """
    Read a string-encoded impact level the way a lenient integer parse
    would: leading whitespace and sign allowed, trailing junk ignored.
    Returns None if there is no leading integer.
    """
    match = _LEADING_INT_RE.match(value)
    return int(match.group(1)) if match else None


def _normalize_log_entry(raw: Any) -> EventLogEntry:
    if not isinstance(raw, dict):
        return EventLogEntry()
    return EventLogEntry(
        summary=_as_str(raw.get("summary")),
        message=_as_str(raw.get("message")),
        status=_as_int(raw.get("status")),
        timestamp=_as_int(raw.get("timestamp")),
    )


def _normalize_impacted_service(raw: Any) -> ImpactedService:
    if not isinstance(raw, dict):
        return ImpactedService()
    return ImpactedService(
        service_name=_as_str(raw.get("service_name")),
        current=_as_str(raw.get("current")),
        max=_as_str(raw.get("max")),
    )


def normalize_event(raw: Any) -> NormalizedEvent:
    """
    Coerce one feed record into a fully populated NormalizedEvent.

    Raises:
        MalformedElementError: ``raw`` is not a JSON object.
    """
    if not isinstance(raw, dict):
        raise MalformedElementError(f"Expected object, got {type(raw).__name__}")

    event_log = raw.get("event_log")
    impacted = raw.get("impacted_services")

    services: Dict[str, ImpactedService] = {}
    if isinstance(impacted, dict):
        services = {
            str(key): _normalize_impacted_service(value)
            for key, value in impacted.items()
        }

    return NormalizedEvent(
        date=_as_str(raw.get("date")),
        arn=_as_str(raw.get("arn")),
        region_name=_as_str(raw.get("region_name")),
        status=_as_str(raw.get("status")),
        service=_as_str(raw.get("service")),
        service_name=_as_str(raw.get("service_name")),
        summary=_as_str(raw.get("summary")),
        event_log=tuple(
            _normalize_log_entry(entry)
            for entry in (event_log if isinstance(event_log, list) else [])
        ),
        impacted_services=services,
    )


def normalize_events(items: List[Any]) -> List[NormalizedEvent]:
    """Normalize every element, dropping the ones that are not objects."""
    events: List[NormalizedEvent] = []
    for index, raw in enumerate(items):
        try:
            events.append(normalize_event(raw))
        except MalformedElementError as exc:
            log.debug("Dropping feed element %d: %s", index, exc)
    return events


def parse_feed(text: str) -> List[NormalizedEvent]:
    """Parse sanitized feed text straight into normalized events."""
    return normalize_events(parse_json_array(text))
