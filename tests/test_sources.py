"""
Tests for the acquisition strategies, end to end from raw bytes.
"""

import logging
from datetime import datetime, timezone

import pytest

from statuscheck.errors import ParseError
from statuscheck.models import FeedPayload, VerdictStatus
from statuscheck.sources import FeedPipelineSource, SimpleFeedSource

FETCHED_AT = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

DEGRADED_TEXT = (
    '[{"service_name": "Amazon S3", "region_name": "N. Virginia",'
    ' "impacted_services": {"a": {"service_name": "S3", "current": "2", "max": "5"},'
    ' "b": {"service_name": "EC2", "current": "1", "max": "5"}}}]'
)


class TestFeedPipelineSource:
    def test_utf8_payload(self):
        payload = FeedPayload(DEGRADED_TEXT.encode(), "application/json")
        assessment = FeedPipelineSource().assess(payload, FETCHED_AT)
        assert assessment.verdict.status is VerdictStatus.DEGRADED
        assert assessment.verdict.details == "2 services impacted"
        assert assessment.events[0].service_name == "Amazon S3"

    def test_utf16_payload_mislabelled_as_utf8(self):
        body = b"\xff\xfe" + DEGRADED_TEXT.encode("utf-16-le")
        payload = FeedPayload(body, "application/json; charset=utf-8")
        assessment = FeedPipelineSource().assess(payload, FETCHED_AT)
        assert assessment.verdict.status is VerdictStatus.DEGRADED

    def test_utf16_payload_declared(self):
        body = DEGRADED_TEXT.encode("utf-16-be")
        payload = FeedPayload(body, "application/json; charset=utf-16")
        assessment = FeedPipelineSource().assess(payload, FETCHED_AT)
        assert assessment.verdict.details == "2 services impacted"

    def test_stray_bytes_are_survived(self):
        body = DEGRADED_TEXT.encode().replace(b"}}}]", b"}}}\xc2\xa7]")
        payload = FeedPayload(body, "application/json")
        assessment = FeedPipelineSource().assess(payload, FETCHED_AT)
        assert assessment.verdict.status is VerdictStatus.DEGRADED

    def test_empty_array(self):
        payload = FeedPayload(b"[]", "application/json")
        assessment = FeedPipelineSource().assess(payload, FETCHED_AT)
        assert assessment.verdict.status is VerdictStatus.OPERATIONAL
        assert assessment.events == ()

    def test_empty_body_raises(self):
        with pytest.raises(ParseError, match="Empty response"):
            FeedPipelineSource().assess(FeedPayload(b"", "application/json"), FETCHED_AT)

    def test_unexpected_content_type_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="statuscheck.sources"):
            FeedPipelineSource().assess(FeedPayload(b"[]", "text/html"), FETCHED_AT)
        assert "Unexpected content-type" in caplog.text


class TestSimpleFeedSource:
    def test_empty_array_is_operational(self):
        assessment = SimpleFeedSource().assess(FeedPayload(b" [] "), FETCHED_AT)
        assert assessment.verdict.status is VerdictStatus.OPERATIONAL
        assert assessment.verdict.details == "All services operational"
        assert assessment.verdict.last_updated == FETCHED_AT

    def test_agrees_with_pipeline_on_empty_feed(self):
        payload = FeedPayload(b"[]", "application/json")
        simple = SimpleFeedSource().assess(payload, FETCHED_AT)
        pipeline = FeedPipelineSource().assess(payload, FETCHED_AT)
        assert simple.verdict == pipeline.verdict

    def test_empty_body_is_operational(self):
        assessment = SimpleFeedSource().assess(FeedPayload(b""), FETCHED_AT)
        assert assessment.verdict.status is VerdictStatus.OPERATIONAL

    def test_anything_else_is_refused(self):
        with pytest.raises(ParseError):
            SimpleFeedSource().assess(FeedPayload(DEGRADED_TEXT.encode()), FETCHED_AT)
