import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import models, schemas
from marketplace.db.pagination import clamp_page, total_pages
from marketplace.db.repositories import orders as order_repo
from marketplace.api.deps import get_current_retailer
from marketplace.services.order_service import CheckoutError, checkout

logger = logging.getLogger("marketplace.orders")

router = APIRouter(prefix="/retailer/orders", tags=["retailer-orders"])


@router.post("/checkout", response_model=schemas.CheckoutResponse, status_code=status.HTTP_201_CREATED)
def checkout_cart(
    payload: schemas.CheckoutRequest,
    db: Session = Depends(get_db),
    retailer: models.Retailer = Depends(get_current_retailer),
):
    """
    Place orders for everything in the cart.

    One order is created per cart line. If any line cannot be ordered the
    response is 400 with the failing lines and nothing is written.
    """
    try:
        orders = checkout(db, retailer, payload)
    except CheckoutError as e:
        logger.info("[checkout] retailer=%s rejected: %s", retailer.id, e.message)
        raise HTTPException(
            status_code=e.status_code,
            detail={"message": e.message, "errors": jsonable_encoder(e.errors)},
        )
    return schemas.CheckoutResponse(
        orders=[schemas.Order.model_validate(o) for o in orders],
        total_amount=sum(o.total_amount for o in orders),
    )


@router.get("", response_model=schemas.OrderPage)
def list_my_orders(
    status_filter: Optional[schemas.OrderStatus] = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1),
    db: Session = Depends(get_db),
    retailer: models.Retailer = Depends(get_current_retailer),
):
    page, page_size = clamp_page(page, page_size)
    orders, total = order_repo.list_retailer_orders(
        db, retailer.id, status=status_filter, page=page, page_size=page_size
    )
    return schemas.OrderPage(
        orders=[schemas.Order.model_validate(o) for o in orders],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )
