"""
Inquiry (1:1 support question) repository functions.
"""
from __future__ import annotations

import uuid
from datetime import datetime, UTC
from typing import Optional, List, Tuple
from sqlalchemy import or_
from sqlalchemy.orm import Session

from marketplace.db import models, schemas
from marketplace.db.pagination import paginate, apply_date_range


def create_inquiry(db: Session, user_id: uuid.UUID, payload: schemas.InquiryCreate) -> models.Inquiry:
    inquiry = models.Inquiry(
        user_id=user_id,
        title=payload.title.strip(),
        content=payload.content.strip(),
        status='open',
    )
    db.add(inquiry)
    db.commit()
    db.refresh(inquiry)
    return inquiry


def get_inquiry(db: Session, inquiry_id: uuid.UUID) -> Optional[models.Inquiry]:
    return db.query(models.Inquiry).filter(models.Inquiry.id == inquiry_id).first()


def list_inquiries(
    db: Session,
    filters: schemas.InquiryFilter,
    user_id: Optional[uuid.UUID] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[models.Inquiry], int]:
    query = db.query(models.Inquiry)
    if user_id:
        query = query.filter(models.Inquiry.user_id == user_id)
    if filters.status:
        query = query.filter(models.Inquiry.status == filters.status)
    query = apply_date_range(query, models.Inquiry.created_at, filters.start_date, filters.end_date)
    if filters.search and filters.search.strip():
        term = f"%{filters.search.strip()}%"
        query = query.filter(or_(models.Inquiry.title.ilike(term), models.Inquiry.content.ilike(term)))
    query = query.order_by(models.Inquiry.created_at.desc(), models.Inquiry.id)
    return paginate(query, page, page_size)


def update_inquiry(db: Session, inquiry: models.Inquiry, payload: schemas.InquiryUpdate) -> models.Inquiry:
    for key, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(inquiry, key, value.strip())
    db.commit()
    db.refresh(inquiry)
    return inquiry


def close_inquiry(db: Session, inquiry: models.Inquiry) -> models.Inquiry:
    inquiry.status = 'closed'
    db.commit()
    db.refresh(inquiry)
    return inquiry


def reply_to_inquiry(db: Session, inquiry: models.Inquiry, admin_reply: str) -> models.Inquiry:
    inquiry.admin_reply = admin_reply.strip()
    inquiry.status = 'answered'
    inquiry.replied_at = datetime.now(UTC)
    db.commit()
    db.refresh(inquiry)
    return inquiry
