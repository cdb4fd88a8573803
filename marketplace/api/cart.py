"""
Retailer cart endpoints.

Prices are always taken from the product (or the chosen variant) whenever a
line is added or changed; the client never sets them.
"""
import logging
import uuid
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import models, schemas
from marketplace.db.repositories import products as product_repo
from marketplace.db.repositories import retailers as retailer_repo
from marketplace.api.deps import get_current_retailer

logger = logging.getLogger("marketplace.cart")

router = APIRouter(prefix="/retailer/cart", tags=["cart"])

CART_ITEM_NOT_FOUND = "장바구니 상품을 찾을 수 없습니다."
PRODUCT_UNAVAILABLE = "구매할 수 없는 상품입니다."
VARIANT_UNAVAILABLE = "선택한 옵션을 구매할 수 없습니다."


def _to_cart_item(item: models.CartItem) -> schemas.CartItem:
    product, variant = item.product, item.variant
    stock = variant.stock_quantity if variant is not None else product.stock_quantity
    return schemas.CartItem(
        id=item.id,
        product_id=item.product_id,
        variant_id=item.variant_id,
        product_name=product.display_name,
        variant_name=variant.name if variant is not None else None,
        quantity=item.quantity,
        unit_price=item.unit_price,
        line_total=item.unit_price * item.quantity,
        delivery_method=item.delivery_method,
        moq=product.moq,
        stock_quantity=stock,
    )


def _cart_response(db: Session, retailer_id: uuid.UUID) -> schemas.CartResponse:
    items = retailer_repo.list_cart_items(db, retailer_id)
    return schemas.CartResponse(
        items=[_to_cart_item(item) for item in items],
        summary=schemas.CartSummary(**retailer_repo.summarize_cart(items)),
    )


def _check_quantity(
    product: models.Product,
    variant: Optional[models.ProductVariant],
    quantity: int,
    total_quantity: Optional[int] = None,
) -> None:
    if quantity < product.moq:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"최소 주문 수량은 {product.moq}개입니다.",
        )
    stock = variant.stock_quantity if variant is not None else product.stock_quantity
    if (total_quantity if total_quantity is not None else quantity) > stock:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"재고가 부족합니다. (남은 수량 {stock}개)",
        )


def _purchasable(
    db: Session, product_id: uuid.UUID, variant_id: Optional[uuid.UUID]
) -> Tuple[models.Product, Optional[models.ProductVariant]]:
    product = product_repo.get_catalog_product(db, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PRODUCT_UNAVAILABLE)
    variant = None
    if variant_id is not None:
        variant = product_repo.get_variant(db, product.id, variant_id)
        if not variant or not variant.is_active:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=VARIANT_UNAVAILABLE)
    return product, variant


def _unit_price(product: models.Product, variant: Optional[models.ProductVariant]) -> int:
    return variant.price if variant is not None else product.price


@router.get("", response_model=schemas.CartResponse)
def get_cart(
    db: Session = Depends(get_db),
    retailer: models.Retailer = Depends(get_current_retailer),
):
    return _cart_response(db, retailer.id)


@router.post("", response_model=schemas.CartResponse, status_code=status.HTTP_201_CREATED)
def add_to_cart(
    payload: schemas.CartItemCreate,
    db: Session = Depends(get_db),
    retailer: models.Retailer = Depends(get_current_retailer),
):
    """Add a product to the cart, merging with an existing line for the same product and option."""
    product, variant = _purchasable(db, payload.product_id, payload.variant_id)

    existing = retailer_repo.find_cart_line(db, retailer.id, product.id, payload.variant_id)
    merged_quantity = payload.quantity + (existing.quantity if existing else 0)
    _check_quantity(product, variant, payload.quantity, merged_quantity)

    item = retailer_repo.add_cart_item(db, retailer.id, payload, _unit_price(product, variant))
    logger.info("[cart] retailer=%s line=%s quantity=%d", retailer.id, item.id, item.quantity)
    return _cart_response(db, retailer.id)


@router.patch("/{item_id}", response_model=schemas.CartResponse)
def update_cart_item(
    item_id: uuid.UUID,
    payload: schemas.CartItemUpdate,
    db: Session = Depends(get_db),
    retailer: models.Retailer = Depends(get_current_retailer),
):
    """Change quantity or delivery method; the line is repriced from the current catalog."""
    item = retailer_repo.get_cart_item(db, retailer.id, item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CART_ITEM_NOT_FOUND)
    product, variant = _purchasable(db, item.product_id, item.variant_id)
    if payload.quantity is not None:
        _check_quantity(product, variant, payload.quantity)
    retailer_repo.update_cart_item(db, item, payload, _unit_price(product, variant))
    return _cart_response(db, retailer.id)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_cart_item(
    item_id: uuid.UUID,
    db: Session = Depends(get_db),
    retailer: models.Retailer = Depends(get_current_retailer),
):
    item = retailer_repo.get_cart_item(db, retailer.id, item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CART_ITEM_NOT_FOUND)
    retailer_repo.delete_cart_item(db, item)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_cart(
    db: Session = Depends(get_db),
    retailer: models.Retailer = Depends(get_current_retailer),
):
    removed = retailer_repo.clear_cart(db, retailer.id)
    logger.info("[cart] retailer=%s cleared %d lines", retailer.id, removed)
