"""
YAML configuration loader.

Reads config.yaml and produces typed FeedConfig / CheckerSettings objects.
Falls back to sensible defaults if the config file is missing.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Tuple

import yaml

from statuscheck import notifier
from statuscheck.models import CheckerSettings, FeedConfig

# Default path: config.yaml next to the project root
_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def load_config(
    path: str | Path | None = None,
) -> Tuple[FeedConfig, CheckerSettings]:
    """
    Load and parse the YAML configuration file.

    The PORT environment variable, when set, overrides the configured port.

    Returns:
        A tuple of (FeedConfig, CheckerSettings).
    """
    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    if config_path.exists():
        with open(config_path, "r") as fh:
            raw = yaml.safe_load(fh) or {}
    else:
        notifier.print_warning(f"Config file not found at {config_path}, using defaults.")
        raw = {}

    defaults = FeedConfig()
    raw_feed = raw.get("feed") or {}
    feed = FeedConfig(
        name=raw_feed.get("name", defaults.name),
        url=raw_feed.get("url", defaults.url),
        user_agent=raw_feed.get("user_agent", defaults.user_agent),
    )

    base = CheckerSettings()
    raw_settings = raw.get("settings") or {}
    settings = CheckerSettings(
        freshness_window=float(raw_settings.get("freshness_window", base.freshness_window)),
        fetch_timeout=float(raw_settings.get("fetch_timeout", base.fetch_timeout)),
        poll_interval=int(raw_settings.get("poll_interval", base.poll_interval)),
        enable_fallback=bool(raw_settings.get("enable_fallback", base.enable_fallback)),
        log_level=str(raw_settings.get("log_level", base.log_level)).upper(),
        max_retries=int(raw_settings.get("max_retries", base.max_retries)),
        base_backoff=int(raw_settings.get("base_backoff", base.base_backoff)),
        host=raw_settings.get("host", base.host),
        port=int(os.environ.get("PORT", raw_settings.get("port", base.port))),
    )

    return feed, settings
