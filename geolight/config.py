"""Environment driven settings for the HTTP service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

__all__ = ["Settings", "load_settings"]

DEFAULT_CORS_ORIGINS: Tuple[str, ...] = ("http://localhost:3000",)
DEFAULT_MAX_SAMPLES = 500_000


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    cors_origins: Tuple[str, ...] = field(default=DEFAULT_CORS_ORIGINS)
    max_samples: int = DEFAULT_MAX_SAMPLES


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read ``GEOLIGHT_*`` variables from *environ* (default ``os.environ``)."""

    env = os.environ if environ is None else environ

    log_level = env.get("GEOLIGHT_LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"Unknown log level: {log_level}")

    origins = env.get("GEOLIGHT_CORS_ORIGINS")
    cors_origins = (
        tuple(item.strip() for item in origins.split(",") if item.strip())
        if origins
        else DEFAULT_CORS_ORIGINS
    )

    raw_max = env.get("GEOLIGHT_MAX_SAMPLES", str(DEFAULT_MAX_SAMPLES))
    try:
        max_samples = int(raw_max)
    except ValueError as exc:
        raise ValueError(f"GEOLIGHT_MAX_SAMPLES must be an integer: {raw_max!r}") from exc
    if max_samples <= 0:
        raise ValueError("GEOLIGHT_MAX_SAMPLES must be positive")

    return Settings(log_level=log_level, cors_origins=cors_origins, max_samples=max_samples)
