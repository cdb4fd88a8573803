"""
Seller dashboard widgets.

Each endpoint degrades to a 500 with ``{"error", "message"}`` so the
dashboard can show a per-widget error instead of failing the whole page.
"""
import logging
import os

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import models, schemas
from marketplace.db.repositories import dashboard as dashboard_repo
from marketplace.db.repositories import products as product_repo
from marketplace.api.deps import get_current_wholesaler

logger = logging.getLogger("marketplace.dashboard")

router = APIRouter(prefix="/api/wholesaler/dashboard", tags=["dashboard"])

STATS_ERROR = "통계 데이터를 불러오는 중 오류가 발생했습니다."
RECENT_ORDERS_ERROR = "최근 주문을 불러오는 중 오류가 발생했습니다."
LOW_STOCK_ERROR = "재고 부족 상품을 불러오는 중 오류가 발생했습니다."


def low_stock_threshold() -> int:
    try:
        return int(os.getenv("LOW_STOCK_THRESHOLD", "10"))
    except ValueError:
        return 10


def _failure(error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": error, "message": str(exc)},
    )


@router.get("/stats", response_model=schemas.DashboardStats)
def get_stats(
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    try:
        stats = dashboard_repo.get_stats(db, wholesaler.id, low_stock_threshold())
    except Exception as e:
        logger.exception("[dashboard] stats failed wholesaler=%s", wholesaler.id)
        return _failure(STATS_ERROR, e)
    return schemas.DashboardStats(**stats)


@router.get("/recent-orders", response_model=schemas.RecentOrdersResponse)
def get_recent_orders(
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    try:
        orders = dashboard_repo.get_recent_orders(db, wholesaler.id)
    except Exception as e:
        logger.exception("[dashboard] recent orders failed wholesaler=%s", wholesaler.id)
        return _failure(RECENT_ORDERS_ERROR, e)
    return schemas.RecentOrdersResponse(orders=[schemas.Order.model_validate(o) for o in orders])


@router.get("/low-stock", response_model=schemas.LowStockResponse)
def get_low_stock(
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    try:
        products = product_repo.list_low_stock_products(db, wholesaler.id, low_stock_threshold())
    except Exception as e:
        logger.exception("[dashboard] low stock failed wholesaler=%s", wholesaler.id)
        return _failure(LOW_STOCK_ERROR, e)
    return schemas.LowStockResponse(products=[schemas.LowStockProduct.model_validate(p) for p in products])
