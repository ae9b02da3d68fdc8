from __future__ import annotations

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

SPIKE_MODES = ("compute", "remark")
MONTH_BUCKETS = ("month_name", "year_month")


def is_dev_env() -> bool:
    return (
        os.getenv("ENV", "").lower() in {"dev", "development", "local"}
        or os.getenv("APP_ENV", "").lower() in {"dev", "development", "local"}
    )


def _choice(name: str, choices: tuple, default: str) -> str:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw not in choices:
        logger.warning("[config] %s=%s is not one of %s; using %s", name, raw, choices, default)
        return default
    return raw


def _override(value: Optional[str], name: str, choices: tuple, default: str) -> str:
    """An explicit argument wins when it is valid; otherwise the env / default applies."""
    if value is None:
        return _choice(name, choices, default)
    raw = value.strip().lower()
    if raw in choices:
        return raw
    fallback = _choice(name, choices, default)
    logger.warning("[config] %r is not one of %s; using %s", value, choices, fallback)
    return fallback


def spike_detection_mode(value: Optional[str] = None) -> str:
    return _override(value, "TTMS_SPIKE_MODE", SPIKE_MODES, "compute")


def month_bucket_mode(value: Optional[str] = None) -> str:
    return _override(value, "TTMS_MONTH_BUCKET", MONTH_BUCKETS, "month_name")
