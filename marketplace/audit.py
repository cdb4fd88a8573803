"""
Audit logging helpers and enums.

Centralized helpers to persist normalized audit records for admin actions
and seller order operations.
"""
from __future__ import annotations
import uuid
from enum import Enum
from typing import Any, Optional, Dict
from sqlalchemy.orm import Session

from marketplace.db import schemas
from marketplace.db.repositories import audits as audit_repo


class AuditAction(str, Enum):
    # Wholesaler review
    WHOLESALER_APPROVE = "wholesaler_approve"
    WHOLESALER_REJECT = "wholesaler_reject"
    WHOLESALER_SUSPEND = "wholesaler_suspend"
    # Orders
    ORDER_STATUS_CHANGE = "order_status_change"
    ORDER_BATCH_STATUS_CHANGE = "order_batch_status_change"
    # Money
    SETTLEMENT_COMPLETE = "settlement_complete"
    # Support
    INQUIRY_REPLY = "inquiry_reply"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILURE = "failure"


def log(
    db: Session,
    *,
    action: AuditAction | str,
    status: AuditStatus | str = AuditStatus.SUCCESS,
    target_type: str,
    target_id: Optional[uuid.UUID] = None,
    actor_profile_id: uuid.UUID,
    reason: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
):
    """Central audit logging helper."""
    # Persist plain strings, not Enum reprs
    action_value = action.value if isinstance(action, AuditAction) else str(action)
    status_value = status.value if isinstance(status, AuditStatus) else str(status)
    audit_log = schemas.AuditLogCreate(
        action_type=action_value,
        status=status_value,
        target_type=target_type,
        target_id=target_id,
        reason=reason,
        metadata=metadata or {},
    )
    return audit_repo.create_audit_log(db, audit_log=audit_log, actor_profile_id=actor_profile_id)


def log_wholesaler(db: Session, *, actor_profile_id: uuid.UUID, wholesaler_id: uuid.UUID, action: AuditAction, reason: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None):
    return log(
        db,
        action=action,
        target_type="wholesaler",
        target_id=wholesaler_id,
        actor_profile_id=actor_profile_id,
        reason=reason,
        metadata=metadata,
    )


def log_order_batch(db: Session, *, actor_profile_id: uuid.UUID, new_status: str, success_count: int, failure_count: int, order_ids: list):
    if failure_count == 0:
        status = AuditStatus.SUCCESS
    elif success_count == 0:
        status = AuditStatus.FAILURE
    else:
        status = AuditStatus.PARTIAL
    return log(
        db,
        action=AuditAction.ORDER_BATCH_STATUS_CHANGE,
        status=status,
        target_type="order",
        actor_profile_id=actor_profile_id,
        metadata={
            "status": new_status,
            "order_ids": [str(order_id) for order_id in order_ids],
            "success_count": success_count,
            "failure_count": failure_count,
        },
    )


__all__ = ["AuditAction", "AuditStatus", "log", "log_wholesaler", "log_order_batch"]
