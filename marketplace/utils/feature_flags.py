"""Feature flag helpers for runtime configuration.

Every flag is on unless its environment variable says otherwise.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Dict


_FLAG_ENV_VARS: Dict[str, str] = {
    "realtime_enabled": "FEATURE_REALTIME_ENABLED",
    "email_notifications_enabled": "FEATURE_EMAIL_NOTIFICATIONS_ENABLED",
    "seller_registration_enabled": "FEATURE_SELLER_REGISTRATION_ENABLED",
}


def _normalize_bool(value: str | None, default: bool = True) -> bool:
    """Return normalized boolean from environment-style value."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"", "0", "false", "no", "off"}:
        return False
    if normalized in {"1", "true", "yes", "on"}:
        return True
    return default


@lru_cache(maxsize=None)
def get_feature_flags() -> Dict[str, bool]:
    """Return the cached feature flag state sourced from the environment."""
    return {key: _normalize_bool(os.getenv(env_var)) for key, env_var in _FLAG_ENV_VARS.items()}


def is_feature_enabled(flag: str) -> bool:
    return get_feature_flags()[flag]


def realtime_enabled() -> bool:
    """Toggle for the new-order event stream."""
    return is_feature_enabled("realtime_enabled")


def email_notifications_enabled() -> bool:
    """Global switch for outgoing transactional email."""
    return is_feature_enabled("email_notifications_enabled")


def seller_registration_enabled() -> bool:
    """Toggle the seller registration (terms/contract/merchant) flow."""
    return is_feature_enabled("seller_registration_enabled")


def refresh_feature_flag_cache() -> None:
    """Invalidate cached feature flag values (useful for tests)."""
    get_feature_flags.cache_clear()
