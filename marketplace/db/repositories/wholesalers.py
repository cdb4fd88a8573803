"""
Wholesaler repository functions.

Onboarding, business settings, approval workflow and the seller
registration checklist. Anonymous vendor codes are allocated here.
"""
from __future__ import annotations

import re
import uuid
from datetime import datetime, UTC
from typing import Optional, List, Dict
from sqlalchemy import text
from sqlalchemy.orm import Session

from marketplace.db import models, schemas
from marketplace.db.database import is_postgres
from marketplace.utils.formatting import format_anonymous_code, format_phone

# Shared with migrations; serialises concurrent code allocation on Postgres
ANONYMOUS_CODE_LOCK_KEY = 123456
_ANONYMOUS_CODE_RE = re.compile(r"^VENDOR-(\d+)$")


def get_wholesaler(db: Session, wholesaler_id: uuid.UUID) -> Optional[models.Wholesaler]:
    return db.query(models.Wholesaler).filter(models.Wholesaler.id == wholesaler_id).first()


def get_wholesaler_by_profile(db: Session, profile_id: uuid.UUID) -> Optional[models.Wholesaler]:
    return db.query(models.Wholesaler).filter(models.Wholesaler.profile_id == profile_id).first()


def list_wholesalers(db: Session, status: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[models.Wholesaler]:
    query = db.query(models.Wholesaler)
    if status:
        query = query.filter(models.Wholesaler.status == status)
    return query.order_by(models.Wholesaler.created_at.desc()).offset(skip).limit(limit).all()


def next_anonymous_code(db: Session) -> str:
    """Allocate the next VENDOR-NNN code.

    On PostgreSQL the scan runs under a transaction-scoped advisory lock so two
    onboarding requests cannot read the same maximum. The UNIQUE constraint on
    ``wholesalers.anonymous_code`` is the final guard.
    """
    if is_postgres(db):
        db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": ANONYMOUS_CODE_LOCK_KEY})
    codes = db.query(models.Wholesaler.anonymous_code).filter(
        models.Wholesaler.anonymous_code.like("VENDOR-%")
    ).all()
    highest = 0
    for (code,) in codes:
        match = _ANONYMOUS_CODE_RE.match(code or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return format_anonymous_code(highest + 1)


def create_wholesaler(
    db: Session,
    profile_id: uuid.UUID,
    payload: schemas.WholesalerOnboarding,
    anonymous_code: Optional[str] = None,
) -> models.Wholesaler:
    bank_account = None
    if payload.bank_name and payload.bank_account_number:
        bank_account = f"{payload.bank_name.strip()} {payload.bank_account_number}"
    wholesaler = models.Wholesaler(
        profile_id=profile_id,
        business_name=payload.business_name,
        business_number=payload.business_number,
        representative=payload.representative.strip(),
        phone=payload.phone,
        address=payload.address.strip(),
        address_detail=(payload.address_detail or "").strip() or None,
        region=payload.region,
        bank_account=bank_account,
        anonymous_code=(anonymous_code or "").strip() or next_anonymous_code(db),
        status='pending',
    )
    db.add(wholesaler)
    db.commit()
    db.refresh(wholesaler)
    return wholesaler


def update_business_settings(
    db: Session, wholesaler: models.Wholesaler, payload: schemas.BusinessSettingsUpdate
) -> models.Wholesaler:
    """Apply only the fields present in the settings form."""
    fields = payload.model_fields_set
    if "business_name" in fields and payload.business_name is not None:
        wholesaler.business_name = payload.business_name.strip()
    if "phone" in fields and payload.phone is not None:
        wholesaler.phone = format_phone(payload.phone)
    if "address" in fields and payload.address is not None:
        wholesaler.address = payload.address.strip()
    if "address_detail" in fields:
        wholesaler.address_detail = (payload.address_detail or "").strip() or None
    if payload.bank_name and payload.bank_account_number:
        wholesaler.bank_account = f"{payload.bank_name} {payload.bank_account_number}"
    wholesaler.updated_at = datetime.now(UTC)
    db.commit()
    db.refresh(wholesaler)
    return wholesaler


def update_notification_preferences(
    db: Session, wholesaler: models.Wholesaler, preferences: Dict[str, Dict[str, bool]]
) -> models.Wholesaler:
    # Reassign so the JSON column is flagged dirty
    wholesaler.notification_preferences = dict(preferences)
    wholesaler.updated_at = datetime.now(UTC)
    db.commit()
    db.refresh(wholesaler)
    return wholesaler


def _refresh_seller_registration(wholesaler: models.Wholesaler) -> None:
    if wholesaler.seller_registered_at is not None:
        return
    if (
        wholesaler.status == 'approved'
        and wholesaler.seller_terms_agreed_at is not None
        and wholesaler.contract_uploaded_at is not None
        and wholesaler.toss_merchant_id
    ):
        wholesaler.seller_registered_at = datetime.now(UTC)


def approve_wholesaler(
    db: Session,
    wholesaler: models.Wholesaler,
    anonymous_id: Optional[str] = None,
    region: Optional[str] = None,
) -> models.Wholesaler:
    wholesaler.status = 'approved'
    wholesaler.rejection_reason = None
    wholesaler.approved_at = datetime.now(UTC)
    if anonymous_id:
        wholesaler.anonymous_id = anonymous_id.strip()
    if region:
        wholesaler.region = region.strip()
    _refresh_seller_registration(wholesaler)
    db.commit()
    db.refresh(wholesaler)
    return wholesaler


def reject_wholesaler(db: Session, wholesaler: models.Wholesaler, reason: str) -> models.Wholesaler:
    wholesaler.status = 'rejected'
    wholesaler.rejection_reason = reason.strip()
    db.commit()
    db.refresh(wholesaler)
    return wholesaler


def suspend_wholesaler(db: Session, wholesaler: models.Wholesaler) -> models.Wholesaler:
    wholesaler.status = 'suspended'
    db.commit()
    db.refresh(wholesaler)
    return wholesaler


def agree_seller_terms(db: Session, wholesaler: models.Wholesaler) -> models.Wholesaler:
    if wholesaler.seller_terms_agreed_at is None:
        wholesaler.seller_terms_agreed_at = datetime.now(UTC)
    _refresh_seller_registration(wholesaler)
    db.commit()
    db.refresh(wholesaler)
    return wholesaler


def upload_contract(db: Session, wholesaler: models.Wholesaler, contract_file_url: str) -> models.Wholesaler:
    wholesaler.contract_file_url = contract_file_url.strip()
    wholesaler.contract_uploaded_at = datetime.now(UTC)
    _refresh_seller_registration(wholesaler)
    db.commit()
    db.refresh(wholesaler)
    return wholesaler


def register_merchant(db: Session, wholesaler: models.Wholesaler, toss_merchant_id: str) -> models.Wholesaler:
    wholesaler.toss_merchant_id = toss_merchant_id.strip()
    _refresh_seller_registration(wholesaler)
    db.commit()
    db.refresh(wholesaler)
    return wholesaler
