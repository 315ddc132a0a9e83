"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml: Static tuning constants checked into the repo
#   2. .env file         : Local developer overrides (not committed)
#   3. Environment vars  : Set at deploy time
#
# load_config() reads the YAML file first, then deep-merges the
# environment-derived values on top.  Missing sections fall back to
# DEFAULT_CONFIG so the bot still starts without a YAML file.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml

from src.config.settings import Settings

DEFAULT_CONFIG: dict[str, Any] = {
    "cache": {
        "analysis_ttl": 3600,
        "record_ttl": 86400,
        "url_processing_ttl": 60,
        "claim_ttl": 120,
        "check_period": 600,
        "max_entries": 10000,
    },
    "timeouts": {
        "ai_extraction": 60.0,
        "scrape": 30.0,
        "http": 15.0,
    },
    "calendar": {
        "min_text_length": 10,
    },
    "scraper": {
        "max_content_length": 5000,
    },
    "apify": {
        "actors": {
            "facebook": "apify/facebook-posts-scraper",
            "instagram": "apify/instagram-api-scraper",
            "threads": "apify/threads-scraper",
        },
    },
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file.
        settings: Pre-built settings; a fresh ``Settings()`` is read when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
        _deep_merge(config, yaml_config)

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "llm": {
            "gemini_model": settings.gemini_model,
            "available_providers": settings.get_available_llm_providers(),
        },
        "google": {
            "timezone": settings.google_timezone,
            "configured": settings.is_google_configured(),
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(config, env_overrides)
    return config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
