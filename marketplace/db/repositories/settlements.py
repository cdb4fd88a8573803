"""
Settlement repository functions.

One settlement per completed order; the platform fee is withheld from the
order amount and the remainder is paid out on the scheduled date.
"""
from __future__ import annotations

import os
import uuid
from datetime import date, datetime, timedelta, UTC
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, List, Tuple, Dict
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from marketplace.db import models
from marketplace.db.pagination import paginate, apply_date_range

DEFAULT_PLATFORM_FEE_RATE = "0.05"
DEFAULT_PAYOUT_DAYS = 7


def platform_fee_rate() -> Decimal:
    return Decimal(os.getenv("PLATFORM_FEE_RATE", DEFAULT_PLATFORM_FEE_RATE))


def payout_days() -> int:
    return int(os.getenv("SETTLEMENT_PAYOUT_DAYS", str(DEFAULT_PAYOUT_DAYS)))


def calculate_fee(order_amount: int, rate: Decimal) -> int:
    return int((Decimal(order_amount) * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def get_settlement(db: Session, settlement_id: uuid.UUID) -> Optional[models.Settlement]:
    return (
        db.query(models.Settlement)
        .options(joinedload(models.Settlement.order))
        .filter(models.Settlement.id == settlement_id)
        .first()
    )


def get_settlement_for_order(db: Session, order_id: uuid.UUID) -> Optional[models.Settlement]:
    return db.query(models.Settlement).filter(models.Settlement.order_id == order_id).first()


def build_settlement_for_order(db: Session, order: models.Order) -> models.Settlement:
    """Return the order's settlement, creating it if needed (no commit)."""
    existing = get_settlement_for_order(db, order.id)
    if existing:
        return existing
    rate = platform_fee_rate()
    fee = calculate_fee(order.total_amount, rate)
    settlement = models.Settlement(
        order_id=order.id,
        wholesaler_id=order.wholesaler_id,
        order_amount=order.total_amount,
        platform_fee_rate=rate,
        platform_fee=fee,
        settlement_amount=order.total_amount - fee,
        status='pending',
        scheduled_payout_at=datetime.now(UTC) + timedelta(days=payout_days()),
    )
    db.add(settlement)
    return settlement


def _settlement_query(db: Session, wholesaler_id: Optional[uuid.UUID], status: Optional[str]):
    query = db.query(models.Settlement).options(joinedload(models.Settlement.order))
    if wholesaler_id:
        query = query.filter(models.Settlement.wholesaler_id == wholesaler_id)
    if status:
        query = query.filter(models.Settlement.status == status)
    return query


def list_settlements(
    db: Session,
    wholesaler_id: Optional[uuid.UUID] = None,
    status: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[models.Settlement], int]:
    query = apply_date_range(
        _settlement_query(db, wholesaler_id, status), models.Settlement.created_at, start_date, end_date
    )
    query = query.order_by(models.Settlement.created_at.desc(), models.Settlement.id)
    return paginate(query, page, page_size)


def settlement_totals(db: Session, wholesaler_id: Optional[uuid.UUID] = None) -> Dict[str, int]:
    query = db.query(models.Settlement.status, func.coalesce(func.sum(models.Settlement.settlement_amount), 0))
    if wholesaler_id:
        query = query.filter(models.Settlement.wholesaler_id == wholesaler_id)
    rows = query.group_by(models.Settlement.status).all()
    totals = {"pending_amount": 0, "completed_amount": 0}
    for status, amount in rows:
        totals[f"{status}_amount"] = int(amount or 0)
    return totals


def complete_settlement(db: Session, settlement: models.Settlement) -> models.Settlement:
    settlement.status = 'completed'
    settlement.completed_at = datetime.now(UTC)
    db.commit()
    db.refresh(settlement)
    return settlement
