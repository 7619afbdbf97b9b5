"""
Tests for the byte decoder and the text sanitizer.

Covers UTF-8 and UTF-16 payloads with and without byte order marks,
mislabelled content types, and the garbage a wrong guess leaves behind.
"""

import json

from statuscheck.decoder import decode_payload, looks_like_json
from statuscheck.sanitizer import has_utf16_signature, sanitize_text, strip_bom


# ─── Fixtures ─────────────────────────────────────────────────

SAMPLE_JSON = json.dumps(
    [
        {
            "service_name": "Amazon Simple Storage Service",
            "region_name": "N. Virginia",
            "impacted_services": {
                "s3-us-east-1": {"service_name": "S3", "current": "2", "max": "3"}
            },
        }
    ]
)


def _decode_and_clean(data, content_type=None):
    return sanitize_text(decode_payload(data, content_type))


# ─── Decoder ──────────────────────────────────────────────────


class TestLooksLikeJson:
    def test_array(self):
        assert looks_like_json("  [1]")

    def test_object(self):
        assert looks_like_json("{}")

    def test_ignores_leading_bom(self):
        assert looks_like_json("\ufeff[]")

    def test_plain_text(self):
        assert not looks_like_json("hello")


class TestDecodeUtf8:
    def test_plain_utf8(self):
        assert decode_payload(SAMPLE_JSON.encode("utf-8")) == SAMPLE_JSON

    def test_utf8_with_bom_is_cleaned(self):
        data = b"\xef\xbb\xbf" + SAMPLE_JSON.encode("utf-8")
        assert _decode_and_clean(data) == SAMPLE_JSON

    def test_non_ascii_text_survives(self):
        text = '[{"summary": "Zürich région"}]'
        assert decode_payload(text.encode("utf-8")) == text

    def test_stray_byte_keeps_utf8_text(self):
        data = b'[{"a": "x"}\x80]'
        decoded = decode_payload(data)
        assert decoded.startswith('[{"a": "x"}')
        assert _decode_and_clean(data) == '[{"a": "x"}]'


class TestDecodeUtf16Sniffed:
    def test_le_with_bom(self):
        data = b"\xff\xfe" + SAMPLE_JSON.encode("utf-16-le")
        assert _decode_and_clean(data, "application/json") == SAMPLE_JSON

    def test_be_with_bom(self):
        data = b"\xfe\xff" + SAMPLE_JSON.encode("utf-16-be")
        assert _decode_and_clean(data, "application/json") == SAMPLE_JSON

    def test_le_without_bom(self):
        data = SAMPLE_JSON.encode("utf-16-le")
        assert decode_payload(data) == SAMPLE_JSON

    def test_be_without_bom(self):
        data = SAMPLE_JSON.encode("utf-16-be")
        assert decode_payload(data) == SAMPLE_JSON

    def test_short_empty_array_le(self):
        assert decode_payload("[]".encode("utf-16-le")) == "[]"

    def test_short_empty_array_be(self):
        assert decode_payload("[]".encode("utf-16-be")) == "[]"


class TestDecodeUtf16Declared:
    def test_declared_le(self):
        data = SAMPLE_JSON.encode("utf-16-le")
        decoded = decode_payload(data, "application/json; charset=UTF-16")
        assert decoded == SAMPLE_JSON

    def test_declared_but_actually_be(self):
        data = SAMPLE_JSON.encode("utf-16-be")
        decoded = decode_payload(data, "application/json; charset=utf-16")
        assert decoded == SAMPLE_JSON


class TestDecodeNeverFails:
    def test_arbitrary_bytes(self):
        assert isinstance(decode_payload(bytes(range(256))), str)

    def test_empty_body(self):
        assert decode_payload(b"") == ""

    def test_odd_length_utf16_declared(self):
        assert isinstance(decode_payload(b"[\x00]", "text/plain; charset=utf-16"), str)

    def test_leading_text_trimmed_to_array(self):
        assert decode_payload(b"callback([1, 2])") == "[1, 2])"


# ─── Sanitizer ────────────────────────────────────────────────


class TestStripBom:
    def test_unicode_bom(self):
        assert strip_bom("\ufeff[]") == "[]"

    def test_swapped_bom(self):
        assert strip_bom("\ufffe[]") == "[]"

    def test_latin1_rendered_utf8_bom(self):
        assert strip_bom("\u00ef\u00bb\u00bf[]") == "[]"

    def test_only_one_bom_removed(self):
        assert strip_bom("\ufeff\ufeff[]") == "\ufeff[]"

    def test_no_bom(self):
        assert strip_bom("[]") == "[]"


class TestUtf16Signature:
    def test_leading_replacement_char(self):
        assert has_utf16_signature("\ufffd[]")

    def test_odd_positions_nul(self):
        assert has_utf16_signature("[\x00{\x00}\x00,\x00{\x00}\x00]\x00")

    def test_even_positions_nul(self):
        assert has_utf16_signature("\x00[\x00{\x00}\x00,\x00{\x00}\x00]")

    def test_clean_text(self):
        assert not has_utf16_signature('[{"a": "b"}, {"c": "d"}]')

    def test_short_text_is_not_sampled(self):
        assert not has_utf16_signature("[\x00]\x00")


class TestSanitizeText:
    def test_strips_bom_and_whitespace(self):
        assert sanitize_text("\ufeff  [1, 2]\n") == "[1, 2]"

    def test_utf16_misread_cleanup(self):
        text = "[\x00{\x00}\x00,\x00{\x00}\x00]\x00"
        assert sanitize_text(text) == "[{},{}]"

    def test_removes_replacement_characters(self):
        assert sanitize_text('["a\ufffdb"]') == '["ab"]'

    def test_removes_control_characters(self):
        assert sanitize_text("[1,\x07 2\x85]") == "[1, 2]"

    def test_removes_stray_nul(self):
        assert sanitize_text('["a"\x00]') == '["a"]'

    def test_empty(self):
        assert sanitize_text("") == ""

    def test_deterministic(self):
        text = "\ufeff[\x00\ufffd1]"
        assert sanitize_text(text) == sanitize_text(text) == "[1]"
