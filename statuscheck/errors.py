"""Exceptions raised while acquiring the feed."""

from __future__ import annotations


class StatusCheckError(Exception):
    """Base class for acquisition failures."""


class NetworkError(StatusCheckError):
    """Connection failure, timeout, or non-2xx response."""


class ParseError(StatusCheckError):
    """Payload is malformed beyond repair or is not a JSON array."""


class MalformedElementError(StatusCheckError):
    """A single feed element is not an object. Dropped, never surfaced."""
