"""
Tests for console output.
"""

from datetime import datetime, timezone

from statuscheck import notifier
from statuscheck.models import NormalizedEvent, Verdict, VerdictStatus

WHEN = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class TestPrintVerdict:
    def test_degraded_line(self, capsys):
        notifier.print_verdict(Verdict(VerdictStatus.DEGRADED, WHEN, "2 services impacted"))
        out = capsys.readouterr().out
        assert "[2024-01-02 03:04:05]" in out
        assert "NO" in out
        assert "2 services impacted" in out

    def test_operational_line(self, capsys):
        notifier.print_verdict(
            Verdict(VerdictStatus.OPERATIONAL, WHEN, "All services operational")
        )
        assert "YES" in capsys.readouterr().out


class TestPrintEvents:
    def test_event_with_start_and_region(self, capsys):
        event = NormalizedEvent(
            date="1700000000",
            service_name="Amazon S3",
            region_name="N. Virginia",
            summary="Increased Error Rates",
        )
        notifier.print_events([event])
        out = capsys.readouterr().out
        assert "Amazon S3 (N. Virginia)" in out
        assert "since 2023-11-14 22:13" in out
        assert "Increased Error Rates" in out

    def test_event_without_details(self, capsys):
        notifier.print_events([NormalizedEvent()])
        out = capsys.readouterr().out
        assert "Unknown service" in out
        assert "unknown start" in out

    def test_long_summary_is_truncated(self, capsys):
        notifier.print_events([NormalizedEvent(service="s3", summary="x" * 300)])
        assert "x" * 200 + "..." in capsys.readouterr().out


class TestPrintError:
    def test_goes_to_stderr(self, capsys):
        notifier.print_error("AWS", "Unable to fetch status: down")
        captured = capsys.readouterr()
        assert "Unable to fetch status: down" in captured.err
        assert captured.out == ""
