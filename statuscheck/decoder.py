"""
Byte -> text decoding for the health feed.

The feed's declared encoding cannot be trusted: proxies and CDNs in front
of it have been seen relabelling or re-encoding the body, and UTF-16 data
regularly arrives labelled as UTF-8. Decoding is therefore heuristic:

  1. If the Content-Type names UTF-16, decode UTF-16LE, then UTF-16BE if
     the result does not look like JSON.
  2. Otherwise decode UTF-8. Replacement characters or NUL in the result
     mean 16-bit data went through an 8-bit decoder, so redecode as UTF-16
     using the BOM when there is one, LE-then-BE when there is not.
  3. If any step fails, fall back to the platform's preferred encoding.

Nothing here raises. Garbled output is left for the sanitizer and parser.
"""

from __future__ import annotations

import locale
import logging
import re
from typing import Optional

log = logging.getLogger(__name__)

REPLACEMENT_CHAR = "\ufffd"

_BOM_LE = b"\xff\xfe"
_BOM_BE = b"\xfe\xff"
_JSON_START_RE = re.compile(r"[\[{]")


def looks_like_json(text: str) -> bool:
    """True if the trimmed text, BOM aside, opens a JSON array or object."""
    stripped = text.strip().lstrip("\ufeff").lstrip()
    return stripped.startswith("[") or stripped.startswith("{")


def _looks_garbled(text: str) -> bool:
    return REPLACEMENT_CHAR in text or len(text) < 10


def _decode_declared_utf16(data: bytes) -> str:
    text = data.decode("utf-16-le", errors="replace")
    if not looks_like_json(text):
        log.debug("UTF-16LE did not produce JSON, trying UTF-16BE")
        text = data.decode("utf-16-be", errors="replace")
    return text


def _decode_utf16_guess(data: bytes) -> str:
    head = data[:2]
    if head == _BOM_LE:
        log.debug("Found UTF-16LE byte order mark")
        return data.decode("utf-16-le", errors="replace")
    if head == _BOM_BE:
        log.debug("Found UTF-16BE byte order mark")
        return data.decode("utf-16-be", errors="replace")

    text = data.decode("utf-16-le", errors="replace")
    if _looks_garbled(text) or not looks_like_json(text):
        log.debug("UTF-16LE looks wrong, trying UTF-16BE")
        big_endian = data.decode("utf-16-be", errors="replace")
        # Short payloads such as "[]" trip the length check in both orders.
        if looks_like_json(big_endian) or not looks_like_json(text):
            text = big_endian
    return text


def _decode_sniffed(data: bytes) -> str:
    text = data.decode("utf-8", errors="replace")
    if REPLACEMENT_CHAR not in text and "\x00" not in text:
        return text

    log.debug("UTF-8 decode produced invalid characters, trying UTF-16")
    wide = _decode_utf16_guess(data)
    if not looks_like_json(wide) and looks_like_json(text):
        # A few stray bytes in otherwise valid UTF-8; let the sanitizer
        # deal with them.
        log.debug("UTF-16 guess is not JSON, keeping UTF-8 text")
        return text
    return wide


def _trim_to_json_start(text: str) -> str:
    if looks_like_json(text):
        return text
    match = _JSON_START_RE.search(text)
    if match and match.start() > 0:
        log.debug("Trimmed %d leading characters before JSON", match.start())
        return text[match.start():]
    return text


def decode_payload(data: bytes, content_type: Optional[str] = None) -> str:
    """
    Decode a feed body into text, best-effort.

    Args:
        data: Raw response body.
        content_type: Content-Type header, used as a hint only.

    Returns:
        The decoded text, possibly still carrying a BOM or stray bytes.
    """
    declared_utf16 = bool(content_type) and "utf-16" in content_type.lower()
    try:
        if declared_utf16:
            log.debug("Content-Type declares UTF-16: %s", content_type)
            text = _decode_declared_utf16(data)
        else:
            text = _decode_sniffed(data)
    except (UnicodeDecodeError, LookupError) as exc:
        log.warning("Decoding failed (%s), using platform default", exc)
        text = data.decode(locale.getpreferredencoding(False), errors="replace")

    return _trim_to_json_start(text)
