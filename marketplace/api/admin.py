"""
Admin back-office endpoints.

Wholesaler review, inquiry replies, settlement payouts, and read-only order
and audit views. Every mutation here writes an audit record; notification
failures are logged and never undo the admin action.
"""
import logging
import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import models, schemas
from marketplace.db.pagination import clamp_page, total_pages
from marketplace.db.repositories import audits as audit_repo
from marketplace.db.repositories import inquiries as inquiry_repo
from marketplace.db.repositories import orders as order_repo
from marketplace.db.repositories import settlements as settlement_repo
from marketplace.db.repositories import wholesalers as wholesaler_repo
from marketplace.api.deps import require_admin
from marketplace.api.inquiries import INQUIRY_NOT_FOUND, inquiry_filter, inquiry_page
from marketplace.api.settlements import settlement_page
from marketplace.audit import AuditAction, log, log_wholesaler
from marketplace.services.notification_service import NotificationService

logger = logging.getLogger("marketplace.admin")

router = APIRouter(prefix="/admin", tags=["admin"])

WHOLESALER_NOT_FOUND = "도매점을 찾을 수 없습니다."
SETTLEMENT_NOT_FOUND = "정산 내역을 찾을 수 없습니다."


def _wholesaler_or_404(db: Session, wholesaler_id: uuid.UUID) -> models.Wholesaler:
    wholesaler = wholesaler_repo.get_wholesaler(db, wholesaler_id)
    if not wholesaler:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=WHOLESALER_NOT_FOUND)
    return wholesaler


# === Wholesaler review ===

@router.get("/wholesalers", response_model=List[schemas.Wholesaler])
def list_wholesalers(
    status_filter: Optional[str] = Query(default=None, alias="status", pattern="^(pending|approved|rejected|suspended)$"),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: models.Profile = Depends(require_admin),
):
    return wholesaler_repo.list_wholesalers(db, status=status_filter, skip=skip, limit=limit)


@router.post("/wholesalers/{wholesaler_id}/approve", response_model=schemas.Wholesaler)
def approve_wholesaler(
    wholesaler_id: uuid.UUID,
    payload: Optional[schemas.WholesalerApprove] = None,
    db: Session = Depends(get_db),
    admin: models.Profile = Depends(require_admin),
):
    wholesaler = _wholesaler_or_404(db, wholesaler_id)
    if wholesaler.status == 'approved':
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="이미 승인된 도매점입니다.")
    payload = payload or schemas.WholesalerApprove()
    previous = wholesaler.status
    wholesaler = wholesaler_repo.approve_wholesaler(
        db, wholesaler, anonymous_id=payload.anonymous_id, region=payload.region
    )
    log_wholesaler(
        db,
        actor_profile_id=admin.id,
        wholesaler_id=wholesaler.id,
        action=AuditAction.WHOLESALER_APPROVE,
        metadata={"previous_status": previous, "anonymous_id": wholesaler.anonymous_id, "region": wholesaler.region},
    )
    logger.info("[admin] %s approved wholesaler %s", admin.email, wholesaler.id)
    return wholesaler


@router.post("/wholesalers/{wholesaler_id}/reject", response_model=schemas.Wholesaler)
def reject_wholesaler(
    wholesaler_id: uuid.UUID,
    payload: schemas.WholesalerReject,
    db: Session = Depends(get_db),
    admin: models.Profile = Depends(require_admin),
):
    wholesaler = _wholesaler_or_404(db, wholesaler_id)
    previous = wholesaler.status
    wholesaler = wholesaler_repo.reject_wholesaler(db, wholesaler, payload.reason)
    log_wholesaler(
        db,
        actor_profile_id=admin.id,
        wholesaler_id=wholesaler.id,
        action=AuditAction.WHOLESALER_REJECT,
        reason=payload.reason,
        metadata={"previous_status": previous},
    )
    logger.info("[admin] %s rejected wholesaler %s", admin.email, wholesaler.id)
    return wholesaler


@router.post("/wholesalers/{wholesaler_id}/suspend", response_model=schemas.Wholesaler)
def suspend_wholesaler(
    wholesaler_id: uuid.UUID,
    db: Session = Depends(get_db),
    admin: models.Profile = Depends(require_admin),
):
    wholesaler = _wholesaler_or_404(db, wholesaler_id)
    previous = wholesaler.status
    wholesaler = wholesaler_repo.suspend_wholesaler(db, wholesaler)
    log_wholesaler(
        db,
        actor_profile_id=admin.id,
        wholesaler_id=wholesaler.id,
        action=AuditAction.WHOLESALER_SUSPEND,
        metadata={"previous_status": previous},
    )
    logger.info("[admin] %s suspended wholesaler %s", admin.email, wholesaler.id)
    return wholesaler


# === Inquiries ===

@router.get("/inquiries", response_model=schemas.InquiryPage)
def list_inquiries(
    filters: schemas.InquiryFilter = Depends(inquiry_filter),
    user_id: Optional[uuid.UUID] = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1),
    db: Session = Depends(get_db),
    admin: models.Profile = Depends(require_admin),
):
    return inquiry_page(db, filters, user_id, page, page_size)


@router.post("/inquiries/{inquiry_id}/reply", response_model=schemas.Inquiry)
def reply_to_inquiry(
    inquiry_id: uuid.UUID,
    payload: schemas.InquiryReply,
    db: Session = Depends(get_db),
    admin: models.Profile = Depends(require_admin),
):
    inquiry = inquiry_repo.get_inquiry(db, inquiry_id)
    if not inquiry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=INQUIRY_NOT_FOUND)
    if inquiry.status == 'closed':
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="종료된 문의에는 답변할 수 없습니다.")

    inquiry = inquiry_repo.reply_to_inquiry(db, inquiry, payload.admin_reply)
    log(
        db,
        action=AuditAction.INQUIRY_REPLY,
        target_type="inquiry",
        target_id=inquiry.id,
        actor_profile_id=admin.id,
    )
    try:
        NotificationService(db).notify_inquiry_answered(inquiry.user, inquiry)
    except Exception as e:
        logger.warning("[admin] inquiry %s answered but notification failed: %s", inquiry.id, e)
    return inquiry


# === Settlements ===

@router.get("/settlements", response_model=schemas.SettlementPage)
def list_settlements(
    status_filter: Optional[str] = Query(default=None, alias="status", pattern="^(pending|completed)$"),
    wholesaler_id: Optional[uuid.UUID] = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1),
    db: Session = Depends(get_db),
    admin: models.Profile = Depends(require_admin),
):
    return settlement_page(db, wholesaler_id, status_filter, None, None, page, page_size)


@router.post("/settlements/{settlement_id}/complete", response_model=schemas.Settlement)
def complete_settlement(
    settlement_id: uuid.UUID,
    db: Session = Depends(get_db),
    admin: models.Profile = Depends(require_admin),
):
    settlement = settlement_repo.get_settlement(db, settlement_id)
    if not settlement:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=SETTLEMENT_NOT_FOUND)
    if settlement.status == 'completed':
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="이미 정산이 완료되었습니다.")

    settlement = settlement_repo.complete_settlement(db, settlement)
    log(
        db,
        action=AuditAction.SETTLEMENT_COMPLETE,
        target_type="settlement",
        target_id=settlement.id,
        actor_profile_id=admin.id,
        metadata={"settlement_amount": settlement.settlement_amount, "order_id": str(settlement.order_id)},
    )
    try:
        NotificationService(db).notify_settlement_completed(settlement.wholesaler, settlement)
    except Exception as e:
        logger.warning("[admin] settlement %s completed but notification failed: %s", settlement.id, e)
    return settlement


# === Read-only views ===

@router.get("/orders", response_model=schemas.OrderPage)
def list_orders(
    status_filter: Optional[schemas.OrderStatus] = Query(default=None, alias="status"),
    search: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1),
    db: Session = Depends(get_db),
    admin: models.Profile = Depends(require_admin),
):
    page, page_size = clamp_page(page, page_size)
    orders, total = order_repo.list_orders(db, status=status_filter, search=search, page=page, page_size=page_size)
    return schemas.OrderPage(
        orders=[schemas.Order.model_validate(o) for o in orders],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


@router.get("/audit-logs", response_model=List[schemas.AuditLog])
def list_audit_logs(
    action_type: Optional[str] = None,
    actor_id: Optional[uuid.UUID] = None,
    target_type: Optional[str] = None,
    target_id: Optional[uuid.UUID] = None,
    audit_status: Optional[str] = Query(default=None, alias="status"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: models.Profile = Depends(require_admin),
):
    """Audit trail, e.g. `?target_type=wholesaler&target_id=...` for one seller's review history."""
    audit_logs = audit_repo.get_audit_logs(
        db,
        actor_profile_id=actor_id,
        action_type=action_type,
        target_type=target_type,
        target_id=target_id,
        status=audit_status,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )
    return [schemas.AuditLog.model_validate(entry) for entry in audit_logs]
