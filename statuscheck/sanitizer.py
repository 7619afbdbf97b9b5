"""
Text sanitizer.

Cleans decoded feed text so that it is safe to hand to a JSON parser:
byte order marks, NUL bytes, control characters and replacement
characters left behind by a wrong encoding guess are all removed.
"""

from __future__ import annotations

import logging
import re

from statuscheck.decoder import REPLACEMENT_CHAR

log = logging.getLogger(__name__)

# U+FEFF, a byte-swapped U+FEFF, and the UTF-8 BOM read as Latin-1.
_BOMS = ("\ufeff", "\ufffe", "\u00ef\u00bb\u00bf")

_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")

_MIN_SIGNATURE_LENGTH = 10
_NUL_RATIO = 0.3


def strip_bom(text: str) -> str:
    """Remove one leading byte order mark, if any."""
    for bom in _BOMS:
        if text.startswith(bom):
            return text[len(bom):]
    return text


def has_utf16_signature(text: str) -> bool:
    """
    Does the text look like UTF-16 data read through an 8-bit decoder?

    Either it opens with a replacement character, or NUL fills more than
    30% of the odd or of the even positions.
    """
    if text.startswith(REPLACEMENT_CHAR):
        return True
    if len(text) <= _MIN_SIGNATURE_LENGTH:
        return False
    threshold = len(text) * _NUL_RATIO
    odd_nuls = text[1::2].count("\x00")
    even_nuls = text[0::2].count("\x00")
    return odd_nuls > threshold or even_nuls > threshold


def sanitize_text(text: str) -> str:
    """Return ``text`` cleaned for JSON parsing. Never raises."""
    clean = strip_bom(text)

    if has_utf16_signature(clean):
        log.warning("Detected UTF-16 encoding issue, cleaning")
        clean = clean.replace("\x00", "").replace(REPLACEMENT_CHAR, "")
        clean = _CONTROL_RE.sub("", clean)
        log.debug("After UTF-16 cleanup, length: %d", len(clean))
    else:
        clean = _CONTROL_RE.sub("", clean)

    clean = clean.replace(REPLACEMENT_CHAR, "")
    return clean.strip()
