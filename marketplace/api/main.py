"""
FastAPI app assembly: logging, middleware and router wiring.
"""
import logging
import os
import time

from fastapi import FastAPI, Depends, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)


from marketplace.db.database import get_db
from marketplace.api.profiles import router as profiles_router
from marketplace.api.wholesaler import router as wholesaler_router
from marketplace.api.wholesaler_products import router as wholesaler_products_router
from marketplace.api.wholesaler_orders import router as wholesaler_orders_router
from marketplace.api.wholesaler_notifications import router as wholesaler_notifications_router
from marketplace.api.settlements import router as settlements_router
from marketplace.api.dashboard import router as dashboard_router
from marketplace.api.retailer import router as retailer_router
from marketplace.api.retailer_products import router as retailer_products_router
from marketplace.api.retailer_orders import router as retailer_orders_router
from marketplace.api.cart import router as cart_router
from marketplace.api.notifications import router as notifications_router
from marketplace.api.inquiries import router as inquiries_router
from marketplace.api.admin import router as admin_router
from marketplace.utils.feature_flags import get_feature_flags

# Database schema is managed by Alembic migrations.

SERVICE_NAME = "farmtobiz-marketplace"
INTERNAL_ERROR = "서버 오류가 발생했습니다."

app = FastAPI(
    title="FarmToBiz Marketplace Service",
    description="API for the agricultural wholesale marketplace connecting wholesalers and retailers.",
    version="1.0.0",
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False


def _allowed_origins():
    raw = os.getenv("ALLOWED_ORIGINS")
    if raw:
        return [origin.strip() for origin in raw.split(",") if origin.strip()]
    return [
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:8000",
    ]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR, "message": str(exc)},
    )


app.include_router(profiles_router)
app.include_router(wholesaler_router)
app.include_router(wholesaler_products_router)
app.include_router(wholesaler_orders_router)
app.include_router(wholesaler_notifications_router)
app.include_router(settlements_router)
app.include_router(dashboard_router)
app.include_router(retailer_router)
app.include_router(retailer_products_router)
app.include_router(retailer_orders_router)
app.include_router(cart_router)
app.include_router(notifications_router)
app.include_router(inquiries_router)
app.include_router(admin_router)


@app.get("/")
def root():
    return {
        "service": SERVICE_NAME,
        "status": "running",
        "features": get_feature_flags(),
    }


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    started = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("health_check: database unreachable: %s", e)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "service": SERVICE_NAME, "database": "unreachable"},
        )
    latency_ms = round((time.perf_counter() - started) * 1000, 2)
    return {"status": "ok", "service": SERVICE_NAME, "database": "ok", "latency_ms": latency_ms}
