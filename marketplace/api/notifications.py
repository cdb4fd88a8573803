"""
In-app notification inbox for the signed-in profile.

Wholesalers see new orders and settlement payouts here, every role sees inquiry
answers. Channel preferences for sellers live under
/wholesaler/settings/notifications.
"""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import schemas
from marketplace.api.deps import get_current_user_context
from marketplace.services.notification_service import NotificationService


router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=schemas.NotificationListResponse)
def list_inbox(
    unread_only: bool = False,
    event_type: Optional[schemas.NotificationEventType] = None,
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context)
):
    """
    Newest-first inbox.

    - **unread_only**: only unread entries
    - **event_type**: `new_order`, `settlement_completed` or `inquiry_answered`
    - **limit**: page size (default 50)
    """
    profile, _ = user_context
    service = NotificationService(db)
    rows = service.get_user_notifications(
        profile_id=profile.id,
        unread_only=unread_only,
        limit=limit,
        event_type=event_type,
    )
    return schemas.NotificationListResponse(
        notifications=[schemas.Notification.model_validate(n) for n in rows],
        unread_count=service.get_unread_count(profile.id, event_type),
        total_count=len(rows),
    )


@router.post("/read-all", response_model=schemas.MarkAllReadResponse)
def read_all(
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context)
):
    profile, _ = user_context
    return schemas.MarkAllReadResponse(updated_count=NotificationService(db).mark_all_read(profile.id))


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
def read_one(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context)
):
    profile, _ = user_context
    if not NotificationService(db).mark_notification_read(notification_id, profile.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="알림을 찾을 수 없습니다.")


@router.get("/stats", response_model=schemas.NotificationStatsResponse)
def inbox_stats(
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context)
):
    """Badge counts for the header bell plus the five latest entries."""
    profile, _ = user_context
    service = NotificationService(db)
    latest = service.get_user_notifications(profile_id=profile.id, limit=5)
    return schemas.NotificationStatsResponse(
        unread_count=service.get_unread_count(profile.id),
        total_notifications=service.count_notifications(profile.id),
        unread_by_event=service.get_unread_counts_by_event(profile.id),
        recent_notifications=[schemas.Notification.model_validate(n) for n in latest],
    )
