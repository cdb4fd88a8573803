"""
Seller order management: list, detail, single and batch status changes.
"""
import logging
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import models, schemas
from marketplace.db.pagination import clamp_page, total_pages
from marketplace.db.repositories import orders as order_repo
from marketplace.api.deps import get_current_wholesaler
from marketplace.audit import AuditAction, log, log_order_batch
from marketplace.services.order_service import (
    ORDER_NOT_FOUND,
    OrderStatusError,
    batch_update_order_status,
    update_order_status,
)

logger = logging.getLogger("marketplace.orders")

router = APIRouter(prefix="/wholesaler/orders", tags=["wholesaler-orders"])


@router.get("", response_model=schemas.OrderPage)
def list_orders(
    status_filter: Optional[schemas.OrderStatus] = Query(default=None, alias="status"),
    search: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1),
    sort_by: str = "created_at",
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    page, page_size = clamp_page(page, page_size)
    orders, total = order_repo.list_wholesaler_orders(
        db,
        wholesaler.id,
        status=status_filter,
        search=search,
        start_date=start_date,
        end_date=end_date,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return schemas.OrderPage(
        orders=[schemas.Order.model_validate(o) for o in orders],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


@router.get("/{order_id}", response_model=schemas.Order)
def get_order(
    order_id: uuid.UUID,
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    order = order_repo.get_wholesaler_order(db, wholesaler.id, order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ORDER_NOT_FOUND)
    return order


@router.patch("/{order_id}/status", response_model=schemas.Order)
def change_order_status(
    order_id: uuid.UUID,
    payload: schemas.OrderStatusUpdate,
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    try:
        order = update_order_status(db, wholesaler.id, order_id, payload.status)
    except OrderStatusError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    try:
        log(
            db,
            action=AuditAction.ORDER_STATUS_CHANGE,
            target_type="order",
            target_id=order.id,
            actor_profile_id=wholesaler.profile_id,
            metadata={"status": order.status, "order_number": order.order_number},
        )
    except Exception as e:
        logger.warning("[audit] order status audit failed order=%s: %s", order.id, e)
    return order


@router.post("/batch-status", response_model=schemas.BatchStatusResult)
def batch_change_order_status(
    payload: schemas.BatchStatusUpdate,
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    """
    Apply one status to several orders.

    Each order is processed independently; the response lists the orders
    that could not be changed together with the reason.
    """
    result = batch_update_order_status(db, wholesaler.id, payload.order_ids, payload.status)
    if payload.order_ids:
        try:
            log_order_batch(
                db,
                actor_profile_id=wholesaler.profile_id,
                new_status=payload.status,
                success_count=result["success_count"],
                failure_count=result["failure_count"],
                order_ids=payload.order_ids,
            )
        except Exception as e:
            logger.warning("[audit] batch status audit failed: %s", e)
    return result
