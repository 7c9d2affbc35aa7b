"""Environment-driven runtime settings for the automation dispatcher."""

from __future__ import annotations

import os
from types import SimpleNamespace
from typing import Optional, Sequence, Tuple


def _env_str(
    name: str,
    default: Optional[str] = None,
    *,
    alias: Optional[str] = None,
    empty_to_none: bool = True,
) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None and alias:
        raw = os.getenv(alias)
    if raw is None:
        return default
    value = raw.strip()
    if not value and empty_to_none:
        return None if default is None else default
    return value if value else default


def _env_bool(name: str, default: bool, *, alias: Optional[str] = None) -> bool:
    raw = os.getenv(name)
    if raw is None and alias:
        raw = os.getenv(alias)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float, *, alias: Optional[str] = None) -> float:
    raw = os.getenv(name)
    if raw is None and alias:
        raw = os.getenv(alias)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_tuple(name: str, default: Sequence[str]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return tuple(default)
    items = tuple(part.strip() for part in raw.split(",") if part.strip())
    return items or tuple(default)


class Settings(SimpleNamespace):
    """Simple attribute container used throughout the codebase."""

CONFIG = Settings()


def _compute_values() -> dict[str, object]:
    # -----------------------------------------------------------------------
    # RUNTIME ENVIRONMENT
    # -----------------------------------------------------------------------
    environment = _env_str("ENV", "prod", empty_to_none=False).lower()
    if environment not in {"dev", "test", "prod"}:
        environment = "prod"

    # -----------------------------------------------------------------------
    # SUPABASE (AUTH + INSIGHT HISTORY)
    # -----------------------------------------------------------------------
    supabase_url = _env_str("SUPABASE_URL", None)
    supabase_anon_key = _env_str("SUPABASE_ANON_KEY", None)
    supabase_service_role_key = _env_str("SUPABASE_SERVICE_ROLE_KEY", None)
    supabase_jwt_secret = _env_str("SUPABASE_JWT_SECRET", None)
    supabase_configured = bool(supabase_url) and bool(supabase_service_role_key or supabase_anon_key)
    insights_table = _env_str("INSIGHTS_TABLE", "ai_insights", empty_to_none=False)

    # -----------------------------------------------------------------------
    # AUTOMATION ENDPOINTS
    # -----------------------------------------------------------------------
    automations_api_base_url = _env_str(
        "AUTOMATIONS_API_BASE_URL",
        "http://localhost:3000",
        alias="API_BASE_URL",
        empty_to_none=False,
    )
    automations_request_timeout = _env_float("AUTOMATIONS_REQUEST_TIMEOUT", 60.0)
    auto_detect_lookback_hours = _env_int("AUTO_DETECT_LOOKBACK_HOURS", 24)

    # -----------------------------------------------------------------------
    # HISTORY & TIMELINE
    # -----------------------------------------------------------------------
    insights_page_size = max(_env_int("INSIGHTS_PAGE_SIZE", 20), 1)
    insights_refresh_delay = max(_env_float("INSIGHTS_REFRESH_DELAY_SECONDS", 3.0), 0.0)
    insights_refresh_settle = max(_env_float("INSIGHTS_REFRESH_SETTLE_SECONDS", 0.5), 0.0)
    timeline_preview_size = max(_env_int("TIMELINE_PREVIEW_SIZE", 6), 1)

    # -----------------------------------------------------------------------
    # BILLING / ENTITLEMENTS
    # -----------------------------------------------------------------------
    billing_enabled = _env_bool("BILLING_ENABLED", False, alias="STRIPE_BILLING_ENABLED")

    # -----------------------------------------------------------------------
    # LOGGING & OBSERVABILITY
    # -----------------------------------------------------------------------
    suppress_system_logs = _env_bool("SUPPRESS_SYSTEM_LOGS", True)
    system_log_prefixes = _env_tuple(
        "SYSTEM_LOG_PREFIXES",
        ("[executor]", "[insights]", "[dispatcher]"),
    )

    config_map = {
        "environment": environment,
        "supabase_url": supabase_url,
        "supabase_anon_key": supabase_anon_key,
        "supabase_service_role_key": supabase_service_role_key,
        "supabase_jwt_secret": supabase_jwt_secret,
        "supabase_configured": supabase_configured,
        "insights_table": insights_table,
        "automations_api_base_url": automations_api_base_url,
        "automations_request_timeout": automations_request_timeout,
        "auto_detect_lookback_hours": auto_detect_lookback_hours,
        "insights_page_size": insights_page_size,
        "insights_refresh_delay": insights_refresh_delay,
        "insights_refresh_settle": insights_refresh_settle,
        "timeline_preview_size": timeline_preview_size,
        "billing_enabled": billing_enabled,
        "suppress_system_logs": suppress_system_logs,
        "system_log_prefixes": system_log_prefixes,
    }

    return config_map


def reload_config() -> None:
    CONFIG.__dict__.update(_compute_values())


def load_envs(global_dir: str) -> None:
    """Load environment variables from the project .env file."""
    from dotenv import load_dotenv

    load_dotenv(os.path.join(global_dir, ".env"))

    # Reload configuration after environment changes
    reload_config()


# Load once on import so downstream modules can use CONFIG immediately.
reload_config()
