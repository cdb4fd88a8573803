"""
Authentication helpers and identity resolution.

Parses identity-provider proxy headers, normalizes emails, and upserts
profiles while supporting admin elevation via ADMIN_EMAILS.
"""
import logging
import os
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from marketplace.db import models
from marketplace.db.repositories import profiles as profile_repo
from marketplace.utils.roles import ROLE_ADMIN

logger = logging.getLogger("marketplace.auth")


def _normalize_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    return email.strip().lower()


def _normalize_list_env(var_name: str) -> set:
    raw = os.getenv(var_name, "")
    values = set()
    for entry in raw.split(","):
        cleaned = entry.strip().strip('"').strip("'")
        if cleaned:
            values.add(cleaned.lower())
    return values


def _admin_emails() -> set:
    return _normalize_list_env("ADMIN_EMAILS")


def resolve_identity_from_headers(
    x_auth_request_user: Optional[str],
    x_auth_request_email: Optional[str],
    x_forwarded_user: Optional[str],
    x_forwarded_email: Optional[str],
) -> Tuple[Optional[str], Optional[str]]:
    user = x_auth_request_user or x_forwarded_user
    email = _normalize_email(x_auth_request_email or x_forwarded_email)
    return user, email


def sync_profile(
    db: Session,
    external_user_id: str,
    email: str,
    display_name: Optional[str] = None,
) -> models.Profile:
    """Return the profile for an identity-provider user, creating it on first sight.

    New profiles start without a role (role selection decides) unless the
    email is listed in ADMIN_EMAILS. The identity provider owns the login
    address, so an existing profile picks up a changed email on its next
    request.
    """
    profile = profile_repo.get_profile_by_external_id(db, external_user_id)
    admins = _admin_emails()
    if not profile:
        role = ROLE_ADMIN if email in admins else None
        profile = profile_repo.create_profile(
            db,
            external_user_id=external_user_id,
            email=email,
            display_name=display_name,
            role=role,
        )
        logger.info("[sync-user] created profile %s role=%s", profile.id, role)
        return profile

    if email and profile.email != email:
        logger.info("[sync-user] profile %s email changed", profile.id)
        profile = profile_repo.update_email(db, profile, email)

    # ADMIN_EMAILS may be configured after the first sign-in
    if profile.role is None and email in admins:
        profile = profile_repo.set_role(db, profile, ROLE_ADMIN)
    return profile
