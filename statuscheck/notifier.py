"""
Console Notifier: Clean, structured console output.

Formats verdicts and feed events into timestamped console lines, with
ANSI colors for readability.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from typing import Sequence

from statuscheck.models import NormalizedEvent, Verdict, VerdictStatus

# ANSI color codes for terminal styling
_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RED = "\033[91m"
_GREEN = "\033[92m"
_YELLOW = "\033[93m"
_BLUE = "\033[94m"
_CYAN = "\033[96m"
_WHITE = "\033[97m"
_GRAY = "\033[90m"

_HEADLINES = {
    VerdictStatus.OPERATIONAL: "YES",
    VerdictStatus.DEGRADED: "NO",
    VerdictStatus.UNKNOWN: "UNKNOWN",
}


def _status_color(status: VerdictStatus) -> str:
    """Pick a color based on verdict status."""
    if status is VerdictStatus.OPERATIONAL:
        return _GREEN
    elif status is VerdictStatus.DEGRADED:
        return _RED
    else:
        return _YELLOW


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def print_banner(feed_name: str) -> None:
    """Print the startup banner."""
    title = f"Is {feed_name} up? -- Live Status Checker"
    banner = f"""
{_BOLD}{_CYAN}+------------------------------------------------------------------+
|          {title:<56}|
+------------------------------------------------------------------+{_RESET}
"""
    print(banner)


def print_monitoring_start(feed_name: str, feed_url: str, poll_interval: int) -> None:
    """Print a message when polling begins."""
    print(
        f"  {_BOLD}{_BLUE}> Checking:{_RESET} {_WHITE}{feed_name}{_RESET}"
        f"  {_DIM}({feed_url}){_RESET}"
        f"  {_DIM}[every {poll_interval}s]{_RESET}"
    )


def print_serving(host: str, port: int) -> None:
    print(f"  {_BOLD}{_BLUE}> Serving:{_RESET} {_DIM}http://{host}:{port}/api/status{_RESET}\n")


def print_verdict(verdict: Verdict) -> None:
    """
    Print one verdict line:
    [2025-11-03 14:32:00] NO -- 2 services impacted
    """
    color = _status_color(verdict.status)
    ts = verdict.last_updated.strftime("%Y-%m-%d %H:%M:%S")
    headline = _HEADLINES[verdict.status]
    print(
        f"  {_GRAY}[{ts}]{_RESET} "
        f"{_BOLD}{color}{headline}{_RESET} {_DIM}--{_RESET} {verdict.details}"
    )


def print_events(events: Sequence[NormalizedEvent]) -> None:
    """Print the events behind the current verdict."""
    for event in events:
        started = event.started_at
        when = started.strftime("%Y-%m-%d %H:%M") if started else "unknown start"
        name = event.service_name or event.service or "Unknown service"
        region = f" ({event.region_name})" if event.region_name else ""
        print(f"    {_BOLD}{name}{region}{_RESET} {_DIM}since {when}{_RESET}")
        if event.summary:
            summary = (
                event.summary[:200] + "..."
                if len(event.summary) > 200
                else event.summary
            )
            print(f"      {_DIM}{summary}{_RESET}")


def print_warning(message: str) -> None:
    print(f"{_YELLOW}⚠  {message}{_RESET}")


def print_error(feed_name: str, message: str) -> None:
    """Print an error message."""
    print(
        f"  {_GRAY}[{_now()}]{_RESET} {_RED}ERROR{_RESET} "
        f"{_BOLD}{feed_name}:{_RESET} {message}",
        file=sys.stderr,
    )


def print_retry(feed_name: str, attempt: int, wait: float) -> None:
    """Print a retry message with backoff info."""
    print(
        f"  {_DIM}{feed_name}: Retrying in {wait:.1f}s "
        f"(attempt {attempt})...{_RESET}"
    )


def print_shutdown() -> None:
    """Print shutdown message."""
    print(f"\n{_BOLD}{_CYAN}Checker stopped. Goodbye!{_RESET}\n")
