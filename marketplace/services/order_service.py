"""
Order lifecycle: checkout from cart, seller status transitions, and batch
status updates.

Status graph::

    pending -> confirmed | cancelled
    confirmed -> shipped | cancelled
    shipped -> completed

Completing an order books its settlement; cancelling returns the stock and
cancels the pending payment.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.db import models, schemas
from marketplace.db.repositories import orders as order_repo
from marketplace.db.repositories import retailers as retailer_repo
from marketplace.db.repositories import settlements as settlement_repo
from marketplace.services.order_events import (
    EVENT_ORDER_CREATED,
    EVENT_ORDER_STATUS_CHANGED,
    get_order_event_broker,
)
from marketplace.utils.feature_flags import realtime_enabled

logger = logging.getLogger("marketplace.orders")

ALLOWED_TRANSITIONS: Dict[str, frozenset] = {
    'pending': frozenset({'confirmed', 'cancelled'}),
    'confirmed': frozenset({'shipped', 'cancelled'}),
    'shipped': frozenset({'completed'}),
    'completed': frozenset(),
    'cancelled': frozenset(),
}

STATUS_LABELS = {
    'pending': '주문접수',
    'confirmed': '주문확인',
    'shipped': '배송중',
    'completed': '배송완료',
    'cancelled': '주문취소',
}

NO_ORDERS_SELECTED = "주문이 선택되지 않았습니다."
ORDER_UPDATE_FAILED = "주문 상태 변경 중 오류가 발생했습니다."
ORDER_NOT_FOUND = "주문을 찾을 수 없습니다."


class OrderServiceError(Exception):
    """Business rule violation; carries the user-facing message and HTTP status."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class OrderStatusError(OrderServiceError):
    pass


class CheckoutError(OrderServiceError):
    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message, status_code=400)
        self.errors = errors or []


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def _stock_holder(product: models.Product, variant: Optional[models.ProductVariant]):
    return variant if variant is not None else product


def _restore_stock(order: models.Order) -> None:
    holder = _stock_holder(order.product, order.variant)
    if holder is not None:
        holder.stock_quantity = holder.stock_quantity + order.quantity


def _publish(wholesaler_id, event_type: str, order: models.Order) -> None:
    if not realtime_enabled():
        return
    get_order_event_broker().publish(wholesaler_id, event_type, {
        "order_id": str(order.id),
        "order_number": order.order_number,
        "status": order.status,
        "total_amount": order.total_amount,
        "created_at": order.created_at.isoformat() if order.created_at else None,
    })


def update_order_status(db: Session, wholesaler_id: uuid.UUID, order_id: uuid.UUID, new_status: str) -> models.Order:
    """Move one of the wholesaler's orders to ``new_status``."""
    order = order_repo.get_wholesaler_order(db, wholesaler_id, order_id)
    if not order:
        raise OrderStatusError(ORDER_NOT_FOUND, status_code=404)
    if order.status == new_status:
        raise OrderStatusError(f"이미 '{STATUS_LABELS[new_status]}' 상태인 주문입니다.", status_code=409)
    if not can_transition(order.status, new_status):
        raise OrderStatusError(
            f"'{STATUS_LABELS.get(order.status, order.status)}' 상태의 주문은 "
            f"'{STATUS_LABELS.get(new_status, new_status)}'(으)로 변경할 수 없습니다.",
            status_code=409,
        )

    previous = order.status
    try:
        order.status = new_status
        order.updated_at = datetime.now(UTC)
        if new_status == 'completed':
            settlement_repo.build_settlement_for_order(db, order)
        elif new_status == 'cancelled':
            _restore_stock(order)
            order_repo.cancel_pending_payments(db, order.id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(order)
    logger.info("[order-status] %s %s -> %s", order.order_number, previous, new_status)
    _publish(wholesaler_id, EVENT_ORDER_STATUS_CHANGED, order)
    return order


def batch_update_order_status(
    db: Session, wholesaler_id: uuid.UUID, order_ids: Sequence[uuid.UUID], new_status: str
) -> Dict[str, Any]:
    """Apply a status to several orders one at a time.

    There is no transaction across the batch: orders updated before a failure
    stay updated, and every failure is reported next to its order id.
    """
    if not order_ids:
        return {
            "success": False,
            "success_count": 0,
            "failure_count": 0,
            "errors": [{"order_id": "", "error": NO_ORDERS_SELECTED}],
        }

    success_count = 0
    errors: List[Dict[str, str]] = []
    for order_id in order_ids:
        try:
            update_order_status(db, wholesaler_id, order_id, new_status)
            success_count += 1
        except OrderStatusError as e:
            errors.append({"order_id": str(order_id), "error": e.message})
        except Exception as e:
            logger.error("[batch-order-action] order=%s failed: %r", order_id, e)
            errors.append({"order_id": str(order_id), "error": ORDER_UPDATE_FAILED})

    failure_count = len(errors)
    logger.info(
        "[batch-order-action] status=%s success=%d failure=%d", new_status, success_count, failure_count
    )
    return {
        "success": failure_count == 0,
        "success_count": success_count,
        "failure_count": failure_count,
        "errors": errors or None,
    }


def _validate_cart_line(item: models.CartItem) -> Optional[str]:
    product = item.product
    if product is None or not product.is_active:
        return "판매 중지된 상품입니다."
    if product.wholesaler is None or product.wholesaler.status != 'approved':
        return "현재 주문할 수 없는 판매자의 상품입니다."
    if item.variant_id is not None and (item.variant is None or not item.variant.is_active):
        return "선택한 옵션을 주문할 수 없습니다."
    if item.quantity < product.moq:
        return f"최소 주문 수량은 {product.moq}개입니다."
    stock = _stock_holder(product, item.variant).stock_quantity
    if item.quantity > stock:
        return f"재고가 부족합니다. (남은 수량 {stock}개)"
    return None


def _default_delivery_address(retailer: models.Retailer) -> str:
    if retailer.address_detail:
        return f"{retailer.address} {retailer.address_detail}"
    return retailer.address


def checkout(db: Session, retailer: models.Retailer, payload: schemas.CheckoutRequest) -> List[models.Order]:
    """Turn the retailer's cart into one pending order per line.

    Every line is validated first; if any fails nothing is written.
    """
    items = retailer_repo.list_cart_items(db, retailer.id)
    if not items:
        raise CheckoutError("장바구니가 비어 있습니다.")

    errors = []
    for item in items:
        problem = _validate_cart_line(item)
        if problem:
            errors.append({"cart_item_id": item.id, "product_id": item.product_id, "error": problem})
    if errors:
        raise CheckoutError("주문할 수 없는 상품이 있습니다.", errors=errors)

    delivery_address = payload.delivery_address or _default_delivery_address(retailer)
    orders: List[models.Order] = []
    try:
        for item in items:
            product, variant = item.product, item.variant
            order = order_repo.build_order(
                retailer_id=retailer.id,
                wholesaler_id=product.wholesaler_id,
                product_id=product.id,
                variant_id=item.variant_id,
                quantity=item.quantity,
                unit_price=variant.price if variant is not None else product.price,
                delivery_method=item.delivery_method,
                delivery_address=delivery_address,
                delivery_request=payload.delivery_request,
            )
            db.add(order)
            db.add(order_repo.build_payment(order, payload.payment_method))
            holder = _stock_holder(product, variant)
            holder.stock_quantity = holder.stock_quantity - item.quantity
            orders.append(order)
        retailer_repo.clear_cart(db, retailer.id, commit=False)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    for order in orders:
        db.refresh(order)
    logger.info("[checkout] retailer=%s created %d orders", retailer.id, len(orders))
    announce_new_orders(db, orders)
    return orders


def announce_new_orders(db: Session, orders: Sequence[models.Order]) -> None:
    """Push realtime events and seller notifications for freshly placed orders."""
    from marketplace.services.notification_service import NotificationService

    service = None
    for order in orders:
        _publish(order.wholesaler_id, EVENT_ORDER_CREATED, order)
        try:
            if service is None:
                service = NotificationService(db)
            service.notify_new_order(order.wholesaler, order)
        except Exception as e:
            # The order is already committed; a notification failure must not undo it
            logger.warning("[order-notify] order=%s notification failed: %s", order.order_number, e)
