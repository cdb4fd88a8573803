"""Runtime environment helpers: dev-mode guard and the impersonated dev identity."""

import os
from urllib.parse import urlparse
from typing import Optional, Set, Tuple

DEV_USER_ID = "dev-user"
DEV_USER_EMAIL = "dev@localhost"

_LOCAL_HOSTS: Set[str] = {"localhost", "127.0.0.1", "::1"}


def _hostname_of(url_value: str) -> Optional[str]:
    if not url_value or not url_value.strip():
        return None
    candidate = url_value.strip()
    if "://" not in candidate:
        candidate = f"http://{candidate}"
    return urlparse(candidate).hostname


def _allowed_dev_hosts() -> Set[str]:
    allowed = set(_LOCAL_HOSTS)
    for host in os.getenv("DEV_MODE_ALLOWED_HOSTS", "").split(","):
        if host.strip():
            allowed.add(host.strip().lower())
    return allowed


def dev_mode_requested() -> bool:
    """Return True when DEV_MODE env var is set to a truthy value."""
    return os.getenv("DEV_MODE", "false").lower() == "true"


def dev_mode_active() -> bool:
    """Return True if dev mode is enabled and allowed; raise if misconfigured.

    Dev mode skips the identity provider and signs every request in as
    ``dev@localhost``. It is only honoured when APP_BASE_URL points at a local
    host (or one listed in DEV_MODE_ALLOWED_HOSTS), so a deployed marketplace
    cannot be opened up by a stray environment variable.
    """
    if not dev_mode_requested():
        return False

    hostname = _hostname_of(os.getenv("APP_BASE_URL", ""))
    allowed_hosts = _allowed_dev_hosts()

    if hostname:
        if hostname.lower() not in allowed_hosts:
            raise RuntimeError(
                "DEV_MODE=true is not permitted when APP_BASE_URL points to "
                f"'{hostname}'. Allowed hosts: {sorted(allowed_hosts)}"
            )
    elif os.getenv("ALLOW_DEV_MODE", "false").lower() != "true" and not os.getenv("PYTEST_CURRENT_TEST"):
        raise RuntimeError(
            "DEV_MODE=true requires APP_BASE_URL to be set to a localhost URL "
            "or ALLOW_DEV_MODE=true for non-local execution."
        )

    return True


def dev_identity() -> Tuple[str, str]:
    """Return the (external_user_id, email) pair used while dev mode is active."""
    return DEV_USER_ID, DEV_USER_EMAIL
