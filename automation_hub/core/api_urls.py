"""Helpers for constructing automation API URLs from the configured base."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from automation_hub.config import CONFIG

DEFAULT_BASE_URL = "http://localhost:3000"


def get_api_base_url(override: Optional[str] = None) -> str:
    """Return the configured API base URL without a trailing slash."""
    raw = (override or getattr(CONFIG, "automations_api_base_url", None) or DEFAULT_BASE_URL).strip()
    base = raw.rstrip("/")

    # Endpoint paths already start with /api
    if base.endswith("/api"):
        logging.getLogger(__name__).warning(
            "AUTOMATIONS_API_BASE_URL should not include '/api'; normalizing value %s",
            raw,
        )
        base = base[: -len("/api")]

    return base or DEFAULT_BASE_URL


def build_api_url(*segments: Iterable[str] | str, base_url: Optional[str] = None) -> str:
    """
    Join the API base URL with the provided path segments.

    Each segment is stripped of leading/trailing slashes to avoid duplicate
    separators. Empty or falsy segments are ignored.
    """
    base = get_api_base_url(base_url)

    parts: list[str] = []
    for segment in segments:
        if not segment:
            continue
        if isinstance(segment, str):
            parts.append(segment.strip("/"))
        else:
            parts.extend(str(item).strip("/") for item in segment if item)

    if not parts:
        return base

    return f"{base}/{'/'.join(parts)}"
