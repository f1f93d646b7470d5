"""Environment-driven settings for the calculators and the HTTP service."""

from __future__ import annotations

import json
import logging
import os
from typing import List

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_SEARCH_DAYS = 365
MAX_SEARCH_DAYS_LIMIT = 3660
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_CORS_ORIGINS = "*"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _invalid(name: str, value: str, fallback: object) -> None:
    LOGGER.warning(
        json.dumps(
            {"event": "config_invalid", "variable": name, "value": value, "fallback": fallback}
        )
    )


def resolve_search_horizon_days() -> int:
    """Upper bound, in days, for the upcoming-event search."""

    raw = os.environ.get("CELESTIAL_MAX_SEARCH_DAYS")
    if not raw:
        return DEFAULT_MAX_SEARCH_DAYS
    try:
        days = int(raw)
    except ValueError:
        _invalid("CELESTIAL_MAX_SEARCH_DAYS", raw, DEFAULT_MAX_SEARCH_DAYS)
        return DEFAULT_MAX_SEARCH_DAYS
    return max(1, min(MAX_SEARCH_DAYS_LIMIT, days))


def resolve_log_level() -> str:
    raw = os.environ.get("CELESTIAL_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if raw not in _LOG_LEVELS:
        _invalid("CELESTIAL_LOG_LEVEL", raw, DEFAULT_LOG_LEVEL)
        return DEFAULT_LOG_LEVEL
    return raw


def resolve_cors_origins() -> List[str]:
    raw = os.environ.get("CELESTIAL_CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or [DEFAULT_CORS_ORIGINS]
