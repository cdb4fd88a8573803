"""
Retailer and cart repository functions.

Cart lines are unique per (product, variant); adding the same pair again
merges into the existing line.
"""
from __future__ import annotations

import uuid
from datetime import datetime, UTC
from typing import Optional, List, Dict
from sqlalchemy.orm import Session, joinedload

from marketplace.db import models, schemas


def get_retailer_by_profile(db: Session, profile_id: uuid.UUID) -> Optional[models.Retailer]:
    return db.query(models.Retailer).filter(models.Retailer.profile_id == profile_id).first()


def create_retailer(db: Session, profile_id: uuid.UUID, payload: schemas.RetailerOnboarding) -> models.Retailer:
    retailer = models.Retailer(
        profile_id=profile_id,
        business_name=payload.business_name,
        phone=payload.phone,
        address=payload.address.strip(),
        address_detail=(payload.address_detail or "").strip() or None,
    )
    db.add(retailer)
    db.commit()
    db.refresh(retailer)
    return retailer


def list_cart_items(db: Session, retailer_id: uuid.UUID) -> List[models.CartItem]:
    return (
        db.query(models.CartItem)
        .options(joinedload(models.CartItem.product), joinedload(models.CartItem.variant))
        .filter(models.CartItem.retailer_id == retailer_id)
        .order_by(models.CartItem.created_at.asc())
        .all()
    )


def get_cart_item(db: Session, retailer_id: uuid.UUID, item_id: uuid.UUID) -> Optional[models.CartItem]:
    return db.query(models.CartItem).filter(
        models.CartItem.id == item_id,
        models.CartItem.retailer_id == retailer_id,
    ).first()


def find_cart_line(
    db: Session, retailer_id: uuid.UUID, product_id: uuid.UUID, variant_id: Optional[uuid.UUID]
) -> Optional[models.CartItem]:
    query = db.query(models.CartItem).filter(
        models.CartItem.retailer_id == retailer_id,
        models.CartItem.product_id == product_id,
    )
    if variant_id is None:
        query = query.filter(models.CartItem.variant_id.is_(None))
    else:
        query = query.filter(models.CartItem.variant_id == variant_id)
    return query.first()


def add_cart_item(
    db: Session,
    retailer_id: uuid.UUID,
    payload: schemas.CartItemCreate,
    unit_price: int,
) -> models.CartItem:
    """Insert a cart line or merge into the existing one.

    Merging adds the quantity and takes the latest unit price and delivery
    method.
    """
    existing = find_cart_line(db, retailer_id, payload.product_id, payload.variant_id)
    if existing:
        existing.quantity = existing.quantity + payload.quantity
        existing.unit_price = unit_price
        existing.delivery_method = payload.delivery_method
        existing.updated_at = datetime.now(UTC)
        item = existing
    else:
        item = models.CartItem(
            retailer_id=retailer_id,
            product_id=payload.product_id,
            variant_id=payload.variant_id,
            quantity=payload.quantity,
            unit_price=unit_price,
            delivery_method=payload.delivery_method,
        )
        db.add(item)
    db.commit()
    db.refresh(item)
    return item


def update_cart_item(
    db: Session, item: models.CartItem, payload: schemas.CartItemUpdate, unit_price: int
) -> models.CartItem:
    update_data = payload.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in update_data.items():
        setattr(item, key, value)
    item.unit_price = unit_price
    item.updated_at = datetime.now(UTC)
    db.commit()
    db.refresh(item)
    return item


def delete_cart_item(db: Session, item: models.CartItem) -> None:
    db.delete(item)
    db.commit()


def clear_cart(db: Session, retailer_id: uuid.UUID, commit: bool = True) -> int:
    count = db.query(models.CartItem).filter(
        models.CartItem.retailer_id == retailer_id
    ).delete(synchronize_session=False)
    if commit:
        db.commit()
    return count


def summarize_cart(items: List[models.CartItem]) -> Dict[str, int]:
    """Totals shown under the cart; shipping is not charged separately."""
    total_product_price = sum(item.unit_price * item.quantity for item in items)
    return {
        "total_product_price": total_product_price,
        "total_price": total_product_price,
        "item_count": len(items),
    }
