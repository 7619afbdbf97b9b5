"""
Acquisition strategies.

Each strategy turns one raw feed payload into an Assessment. The monitor
tries them in order, so a simpler strategy can still answer when the full
pipeline chokes on a payload.
"""

from __future__ import annotations

import locale
import logging
from abc import ABC, abstractmethod
from datetime import datetime

from statuscheck.decoder import decode_payload
from statuscheck.errors import ParseError
from statuscheck.feed_parser import parse_feed
from statuscheck.models import Assessment, FeedPayload
from statuscheck.sanitizer import sanitize_text
from statuscheck.verdict import derive_verdict

log = logging.getLogger(__name__)


class StatusSource(ABC):
    """Interprets a feed payload. Raises ParseError when it cannot."""

    name = "source"

    @abstractmethod
    def assess(self, payload: FeedPayload, fetched_at: datetime) -> Assessment:
        """Return the verdict (and events, if any) for ``payload``."""


class FeedPipelineSource(StatusSource):
    """
    The full pipeline: decode -> sanitize -> parse -> normalize -> verdict.
    """

    name = "pipeline"

    def assess(self, payload: FeedPayload, fetched_at: datetime) -> Assessment:
        content_type = payload.content_type
        if not content_type or "application/json" not in content_type:
            log.warning("Unexpected content-type: %s", content_type)
        if payload.content_encoding:
            log.debug("Content-Encoding: %s", payload.content_encoding)

        raw_text = decode_payload(payload.body, content_type)
        log.debug("Decoded %d characters, first 200: %r", len(raw_text), raw_text[:200])

        clean_text = sanitize_text(raw_text)
        events = parse_feed(clean_text)
        log.info("Parsed %d event(s)", len(events))

        return Assessment(
            verdict=derive_verdict(events, fetched_at),
            events=tuple(events),
        )


class SimpleFeedSource(StatusSource):
    """
    Fallback that does no real parsing.

    An empty body or an empty array is unambiguous: nothing is happening.
    Anything else might or might not be an outage, so it is refused.
    """

    name = "simple"

    def assess(self, payload: FeedPayload, fetched_at: datetime) -> Assessment:
        text = payload.body.decode(locale.getpreferredencoding(False), errors="replace")
        if text.strip() in ("", "[]"):
            return Assessment(verdict=derive_verdict([], fetched_at))
        raise ParseError("Feed reported events that could not be interpreted")
