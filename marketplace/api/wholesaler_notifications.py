"""
Seller notification bell: unread order count, latest orders, mark-as-read,
and the live order event stream.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import models, schemas
from marketplace.api.deps import get_current_wholesaler
from marketplace.services.order_events import event_stream, get_order_event_broker
from marketplace.services.order_notifications import (
    RECENT_NOTIFICATION_LIMIT,
    OrderNotificationError,
    get_recent_order_notifications,
    get_unread_orders_count,
    mark_all_orders_as_read,
)
from marketplace.utils.feature_flags import realtime_enabled

logger = logging.getLogger("marketplace.notifications")

router = APIRouter(prefix="/wholesaler/notifications", tags=["wholesaler-notifications"])


def _error_response(e: OrderNotificationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "알림 정보를 불러오는 중 오류가 발생했습니다.", "message": str(e)},
    )


@router.get("/unread-count", response_model=schemas.UnreadOrdersCount)
def unread_count(
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    try:
        return schemas.UnreadOrdersCount(count=get_unread_orders_count(db, wholesaler.id))
    except OrderNotificationError as e:
        return _error_response(e)


@router.get("/recent", response_model=schemas.RecentOrderNotifications)
def recent_notifications(
    limit: int = Query(default=RECENT_NOTIFICATION_LIMIT, ge=1, le=50),
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    try:
        recent = get_recent_order_notifications(db, wholesaler.id, limit=limit)
        unread = get_unread_orders_count(db, wholesaler.id)
    except OrderNotificationError as e:
        return _error_response(e)

    notifications = [
        schemas.OrderNotification(**schemas.Order.model_validate(order).model_dump(), is_read=is_read)
        for order, is_read in recent
    ]
    return schemas.RecentOrderNotifications(
        notifications=notifications,
        unread_count=unread,
        has_new_notifications=unread > 0,
    )


@router.post("/mark-read", response_model=schemas.MarkOrdersReadResult)
def mark_read(
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    try:
        updated = mark_all_orders_as_read(db, wholesaler.id)
    except OrderNotificationError as e:
        return _error_response(e)
    return schemas.MarkOrdersReadResult(updated_count=updated)


@router.get("/stream")
async def stream_order_events(
    request: Request,
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    """Server-Sent Events feed of new orders and status changes for this seller."""
    if not realtime_enabled():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    logger.info("[realtime] stream opened wholesaler=%s", wholesaler.id)
    return StreamingResponse(
        event_stream(get_order_event_broker(), wholesaler.id, request=request),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
