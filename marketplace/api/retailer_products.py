"""
Product catalogue for retailers.

Sellers are shown only by their anonymous code and region; business names
and contact details never leave the wholesaler tables through these routes.
"""
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import models, schemas
from marketplace.db.pagination import clamp_page, total_pages
from marketplace.db.repositories import products as product_repo
from marketplace.api.deps import require_retailer_profile

logger = logging.getLogger("marketplace.catalog")

router = APIRouter(prefix="/retailer/products", tags=["catalog"])


def to_catalog_product(product: models.Product) -> schemas.CatalogProduct:
    wholesaler = product.wholesaler
    return schemas.CatalogProduct(
        id=product.id,
        name=product.name,
        display_name=product.display_name,
        standardized_name=product.standardized_name,
        category=product.category,
        specification=product.specification,
        description=product.description,
        price=product.price,
        moq=product.moq,
        stock_quantity=product.stock_quantity,
        delivery_options=product.delivery_options,
        delivery_dawn_available=bool(product.delivery_dawn_available),
        image_url=product.image_url,
        created_at=product.created_at,
        wholesaler_anonymous_code=wholesaler.anonymous_code if wholesaler else None,
        wholesaler_region=wholesaler.region if wholesaler else None,
        variants=[schemas.ProductVariant.model_validate(v) for v in product.variants if v.is_active],
    )


@router.get("", response_model=schemas.CatalogPage)
def search_products(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=12, ge=1),
    category: Optional[str] = None,
    search: Optional[str] = None,
    dawn_delivery: bool = False,
    sort_by: str = "created_at",
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    profile: models.Profile = Depends(require_retailer_profile),
):
    """
    Search the catalogue.

    A failing query is logged and answered with an empty page so the
    product list still renders.
    """
    page, page_size = clamp_page(page, page_size)
    try:
        products, total = product_repo.search_catalog(
            db,
            page=page,
            page_size=page_size,
            category=category,
            search=search,
            dawn_delivery=dawn_delivery,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[catalog-search] query failed: %s", e)
        products, total = [], 0

    return schemas.CatalogPage(
        products=[to_catalog_product(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


@router.get("/{product_id}", response_model=schemas.CatalogProduct)
def get_product(
    product_id: uuid.UUID,
    db: Session = Depends(get_db),
    profile: models.Profile = Depends(require_retailer_profile),
):
    product = product_repo.get_catalog_product(db, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="상품을 찾을 수 없습니다.")
    return to_catalog_product(product)
