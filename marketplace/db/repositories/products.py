"""
Product repository functions.

Covers the retailer-facing catalogue search (active products of approved
sellers only) and the wholesaler's own product management.
"""
from __future__ import annotations

import uuid
from datetime import datetime, UTC
from typing import Optional, List, Tuple, Dict, Any
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from marketplace.db import models, schemas
from marketplace.db.pagination import paginate

CATALOG_SORT_FIELDS = ("created_at", "price", "standardized_name")


def _dawn_available(delivery_options: Optional[Dict[str, Any]]) -> bool:
    return bool((delivery_options or {}).get("dawn_delivery_available"))


def _sort_column(sort_by: str):
    if sort_by == "price":
        return models.Product.price
    if sort_by == "standardized_name":
        return func.coalesce(models.Product.standardized_name, models.Product.original_name, models.Product.name)
    return models.Product.created_at


def search_catalog(
    db: Session,
    page: int = 1,
    page_size: int = 12,
    category: Optional[str] = None,
    search: Optional[str] = None,
    dawn_delivery: bool = False,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> Tuple[List[models.Product], int]:
    query = (
        db.query(models.Product)
        .join(models.Wholesaler, models.Wholesaler.id == models.Product.wholesaler_id)
        .options(joinedload(models.Product.wholesaler), selectinload(models.Product.variants))
        .filter(models.Product.is_active.is_(True))
        .filter(models.Wholesaler.status == 'approved')
    )
    if category:
        query = query.filter(models.Product.category == category)
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(or_(
            models.Product.name.ilike(term),
            models.Product.original_name.ilike(term),
            models.Product.standardized_name.ilike(term),
            models.Product.category.ilike(term),
        ))
    if dawn_delivery:
        query = query.filter(models.Product.delivery_dawn_available.is_(True))

    column = _sort_column(sort_by if sort_by in CATALOG_SORT_FIELDS else "created_at")
    ordering = column.asc() if sort_order == "asc" else column.desc()
    query = query.order_by(ordering, models.Product.id)
    return paginate(query, page, page_size)


def get_catalog_product(db: Session, product_id: uuid.UUID) -> Optional[models.Product]:
    return (
        db.query(models.Product)
        .join(models.Wholesaler, models.Wholesaler.id == models.Product.wholesaler_id)
        .options(joinedload(models.Product.wholesaler), selectinload(models.Product.variants))
        .filter(models.Product.id == product_id)
        .filter(models.Product.is_active.is_(True))
        .filter(models.Wholesaler.status == 'approved')
        .first()
    )


def get_wholesaler_product(db: Session, wholesaler_id: uuid.UUID, product_id: uuid.UUID) -> Optional[models.Product]:
    return (
        db.query(models.Product)
        .options(selectinload(models.Product.variants))
        .filter(models.Product.id == product_id, models.Product.wholesaler_id == wholesaler_id)
        .first()
    )


def list_wholesaler_products(
    db: Session,
    wholesaler_id: uuid.UUID,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[models.Product], int]:
    query = (
        db.query(models.Product)
        .options(selectinload(models.Product.variants))
        .filter(models.Product.wholesaler_id == wholesaler_id)
    )
    if status == "active":
        query = query.filter(models.Product.is_active.is_(True))
    elif status == "inactive":
        query = query.filter(models.Product.is_active.is_(False))
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(or_(models.Product.name.ilike(term), models.Product.original_name.ilike(term)))
    query = query.order_by(models.Product.created_at.desc(), models.Product.id)
    return paginate(query, page, page_size)


def create_product(db: Session, wholesaler_id: uuid.UUID, payload: schemas.ProductCreate) -> models.Product:
    data = payload.model_dump(exclude={"variants"})
    product = models.Product(
        **data,
        wholesaler_id=wholesaler_id,
        delivery_dawn_available=_dawn_available(payload.delivery_options),
    )
    if not product.original_name:
        product.original_name = payload.name
    for variant in payload.variants:
        product.variants.append(models.ProductVariant(**variant.model_dump()))
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def update_product(db: Session, product: models.Product, payload: schemas.ProductUpdate) -> models.Product:
    update_data = payload.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(product, key, value)
    if "delivery_options" in update_data:
        product.delivery_dawn_available = _dawn_available(product.delivery_options)
    product.updated_at = datetime.now(UTC)
    db.commit()
    db.refresh(product)
    return product


def deactivate_product(db: Session, product: models.Product) -> models.Product:
    product.is_active = False
    product.updated_at = datetime.now(UTC)
    db.commit()
    db.refresh(product)
    return product


def get_variant(db: Session, product_id: uuid.UUID, variant_id: uuid.UUID) -> Optional[models.ProductVariant]:
    return db.query(models.ProductVariant).filter(
        models.ProductVariant.id == variant_id,
        models.ProductVariant.product_id == product_id,
    ).first()


def create_variant(db: Session, product: models.Product, payload: schemas.ProductVariantCreate) -> models.ProductVariant:
    variant = models.ProductVariant(product_id=product.id, **payload.model_dump())
    db.add(variant)
    db.commit()
    db.refresh(variant)
    return variant


def update_variant(
    db: Session, variant: models.ProductVariant, payload: schemas.ProductVariantUpdate
) -> models.ProductVariant:
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(variant, key, value)
    db.commit()
    db.refresh(variant)
    return variant


def list_low_stock_products(
    db: Session, wholesaler_id: uuid.UUID, threshold: int, limit: int = 10
) -> List[models.Product]:
    return (
        db.query(models.Product)
        .filter(models.Product.wholesaler_id == wholesaler_id)
        .filter(models.Product.is_active.is_(True))
        .filter(models.Product.stock_quantity <= threshold)
        .order_by(models.Product.stock_quantity.asc(), models.Product.created_at.desc())
        .limit(limit)
        .all()
    )
