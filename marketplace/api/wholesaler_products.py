import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import models, schemas
from marketplace.db.pagination import clamp_page, total_pages
from marketplace.db.repositories import products as product_repo
from marketplace.api.deps import get_approved_wholesaler, get_current_wholesaler

logger = logging.getLogger("marketplace.products")

router = APIRouter(prefix="/wholesaler/products", tags=["wholesaler-products"])

PRODUCT_NOT_FOUND = "상품을 찾을 수 없습니다."
VARIANT_NOT_FOUND = "옵션을 찾을 수 없습니다."


def _own_product(db: Session, wholesaler: models.Wholesaler, product_id: uuid.UUID) -> models.Product:
    product = product_repo.get_wholesaler_product(db, wholesaler.id, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PRODUCT_NOT_FOUND)
    return product


@router.get("", response_model=schemas.ProductPage)
def list_products(
    status_filter: Optional[str] = Query(default=None, alias="status", pattern="^(active|inactive)$"),
    search: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1),
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    page, page_size = clamp_page(page, page_size)
    products, total = product_repo.list_wholesaler_products(
        db, wholesaler.id, status=status_filter, search=search, page=page, page_size=page_size
    )
    return schemas.ProductPage(
        products=[schemas.Product.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


@router.post("", response_model=schemas.Product, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: schemas.ProductCreate,
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_approved_wholesaler),
):
    product = product_repo.create_product(db, wholesaler.id, payload)
    logger.info("[products] wholesaler=%s created product %s", wholesaler.id, product.id)
    return product


@router.get("/{product_id}", response_model=schemas.Product)
def get_product(
    product_id: uuid.UUID,
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    return _own_product(db, wholesaler, product_id)


@router.put("/{product_id}", response_model=schemas.Product)
def update_product(
    product_id: uuid.UUID,
    payload: schemas.ProductUpdate,
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_approved_wholesaler),
):
    product = _own_product(db, wholesaler, product_id)
    return product_repo.update_product(db, product, payload)


@router.delete("/{product_id}", response_model=schemas.Product)
def deactivate_product(
    product_id: uuid.UUID,
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    """Take a product off sale. Rows are kept so past orders still resolve."""
    product = _own_product(db, wholesaler, product_id)
    product = product_repo.deactivate_product(db, product)
    logger.info("[products] wholesaler=%s deactivated product %s", wholesaler.id, product.id)
    return product


@router.post("/{product_id}/variants", response_model=schemas.ProductVariant, status_code=status.HTTP_201_CREATED)
def create_variant(
    product_id: uuid.UUID,
    payload: schemas.ProductVariantCreate,
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_approved_wholesaler),
):
    product = _own_product(db, wholesaler, product_id)
    return product_repo.create_variant(db, product, payload)


@router.patch("/{product_id}/variants/{variant_id}", response_model=schemas.ProductVariant)
def update_variant(
    product_id: uuid.UUID,
    variant_id: uuid.UUID,
    payload: schemas.ProductVariantUpdate,
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_approved_wholesaler),
):
    product = _own_product(db, wholesaler, product_id)
    variant = product_repo.get_variant(db, product.id, variant_id)
    if not variant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=VARIANT_NOT_FOUND)
    return product_repo.update_variant(db, variant, payload)
