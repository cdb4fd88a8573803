"""
Audit trail storage: admin reviews, order status changes, settlement payouts
and inquiry replies.
"""
from __future__ import annotations

import uuid
from datetime import date
from typing import Optional, List
from sqlalchemy.orm import Session

from marketplace.db import schemas, models
from marketplace.db.pagination import apply_date_range


def create_audit_log(db: Session, audit_log: schemas.AuditLogCreate, actor_profile_id: uuid.UUID) -> models.AuditLog:
    fields = audit_log.model_dump(exclude={'metadata'})
    entry = models.AuditLog(
        **fields,
        actor_profile_id=actor_profile_id,
        metadata_json=audit_log.metadata,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def get_audit_logs(
    db: Session,
    actor_profile_id: Optional[uuid.UUID] = None,
    action_type: Optional[str] = None,
    target_type: Optional[str] = None,
    target_id: Optional[uuid.UUID] = None,
    status: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[models.AuditLog]:
    """Newest first. Dates are inclusive calendar days."""
    Audit = models.AuditLog
    query = db.query(Audit)
    for column, value in (
        (Audit.actor_profile_id, actor_profile_id),
        (Audit.action_type, action_type),
        (Audit.target_type, target_type),
        (Audit.target_id, target_id),
        (Audit.status, status),
    ):
        if value not in (None, ""):
            query = query.filter(column == value)
    query = apply_date_range(query, Audit.created_at, start_date, end_date)
    return query.order_by(Audit.created_at.desc()).offset(skip).limit(limit).all()
