"""
1:1 support inquiries from retailers and wholesalers.

Authors only ever see their own inquiries; admins answer them through
/admin/inquiries.
"""
import logging
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import schemas
from marketplace.db.pagination import clamp_page, total_pages
from marketplace.db.repositories import inquiries as inquiry_repo
from marketplace.api.deps import get_current_user_context

logger = logging.getLogger("marketplace.inquiries")

router = APIRouter(prefix="/inquiries", tags=["inquiries"])

INQUIRY_NOT_FOUND = "문의를 찾을 수 없습니다."
INQUIRY_NOT_EDITABLE = "답변이 등록되었거나 종료된 문의는 수정할 수 없습니다."


def inquiry_filter(
    status_filter: Optional[schemas.InquiryStatus] = Query(default=None, alias="status"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
) -> schemas.InquiryFilter:
    return schemas.InquiryFilter(status=status_filter, start_date=start_date, end_date=end_date, search=search)


def inquiry_page(db: Session, filters: schemas.InquiryFilter, user_id, page: int, page_size: int) -> schemas.InquiryPage:
    page, page_size = clamp_page(page, page_size)
    inquiries, total = inquiry_repo.list_inquiries(db, filters, user_id=user_id, page=page, page_size=page_size)
    return schemas.InquiryPage(
        inquiries=[schemas.Inquiry.model_validate(i) for i in inquiries],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


def _own_inquiry(db: Session, inquiry_id: uuid.UUID, profile_id: uuid.UUID):
    inquiry = inquiry_repo.get_inquiry(db, inquiry_id)
    # Someone else's inquiry is reported as missing
    if not inquiry or inquiry.user_id != profile_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=INQUIRY_NOT_FOUND)
    return inquiry


@router.post("", response_model=schemas.Inquiry, status_code=status.HTTP_201_CREATED)
def create_inquiry(
    payload: schemas.InquiryCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    inquiry = inquiry_repo.create_inquiry(db, user.id, payload)
    logger.info("[inquiries] %s opened by %s", inquiry.id, user.id)
    return inquiry


@router.get("", response_model=schemas.InquiryPage)
def list_my_inquiries(
    filters: schemas.InquiryFilter = Depends(inquiry_filter),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1),
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    return inquiry_page(db, filters, user.id, page, page_size)


@router.get("/{inquiry_id}", response_model=schemas.Inquiry)
def get_inquiry(
    inquiry_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    return _own_inquiry(db, inquiry_id, user.id)


@router.patch("/{inquiry_id}", response_model=schemas.Inquiry)
def update_inquiry(
    inquiry_id: uuid.UUID,
    payload: schemas.InquiryUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    inquiry = _own_inquiry(db, inquiry_id, user.id)
    if inquiry.status != 'open':
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=INQUIRY_NOT_EDITABLE)
    return inquiry_repo.update_inquiry(db, inquiry, payload)


@router.post("/{inquiry_id}/close", response_model=schemas.Inquiry)
def close_inquiry(
    inquiry_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    inquiry = _own_inquiry(db, inquiry_id, user.id)
    return inquiry_repo.close_inquiry(db, inquiry)
