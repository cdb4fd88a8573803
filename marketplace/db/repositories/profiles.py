"""
Profile repository functions.
"""
from __future__ import annotations

import uuid
from typing import Optional
from sqlalchemy.orm import Session

from marketplace.db import models


def get_profile(db: Session, profile_id: uuid.UUID) -> Optional[models.Profile]:
    return db.query(models.Profile).filter(models.Profile.id == profile_id).first()


def get_profile_by_external_id(db: Session, external_user_id: str) -> Optional[models.Profile]:
    return db.query(models.Profile).filter(models.Profile.external_user_id == external_user_id).first()


def create_profile(
    db: Session,
    external_user_id: str,
    email: str,
    display_name: Optional[str] = None,
    role: Optional[str] = None,
) -> models.Profile:
    profile = models.Profile(
        external_user_id=external_user_id,
        email=email,
        display_name=display_name or email.split("@")[0],
        role=role,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def set_role(db: Session, profile: models.Profile, role: str) -> models.Profile:
    profile.role = role
    db.commit()
    db.refresh(profile)
    return profile


def update_email(db: Session, profile: models.Profile, email: str) -> models.Profile:
    profile.email = email
    db.commit()
    db.refresh(profile)
    return profile
