import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Configuration read at import time must be in place before the app loads
os.environ.setdefault("PYTEST_RUNNING", "1")
os.environ.setdefault("ADMIN_EMAILS", "admin@farmtobiz.test")
os.environ.setdefault("APP_BASE_URL", "https://app.farmtobiz.test")

from fastapi.testclient import TestClient

import marketplace.db.database as db_module
from marketplace.db import models
from marketplace.api.main import app
from marketplace.services import order_events, transactional_email_service
from marketplace.utils.feature_flags import refresh_feature_flag_cache


_FLAG_ENV = (
    "FEATURE_REALTIME_ENABLED",
    "FEATURE_EMAIL_NOTIFICATIONS_ENABLED",
    "FEATURE_SELLER_REGISTRATION_ENABLED",
)


@pytest.fixture(autouse=True)
def _isolated_runtime(monkeypatch):
    """Reset env-driven singletons so one test cannot leak state into the next."""
    for name in _FLAG_ENV:
        monkeypatch.delenv(name, raising=False)
    for name in ("DEV_MODE", "EMAIL_PROVIDER", "RESEND_API_KEY", "MAILGUN_API_KEY", "FROM_EMAIL", "FROM_NAME", "EMAIL_SUBJECT_PREFIX"):
        monkeypatch.delenv(name, raising=False)
    refresh_feature_flag_cache()
    transactional_email_service.reset_transactional_email_service_for_tests()
    monkeypatch.setattr(order_events, "_broker", None)
    yield
    refresh_feature_flag_cache()
    transactional_email_service.reset_transactional_email_service_for_tests()


# Per-test in-memory database (fresh schema, nothing shared between tests)
@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    models.Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


# Backwards compatibility: some tests read better with a 'db' fixture name
@pytest.fixture
def db(db_session):
    return db_session


@pytest.fixture
def client(db_session):
    """TestClient whose requests share the test's session."""

    def _override_get_db():
        yield db_session

    app.dependency_overrides[db_module.get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(db_module.get_db, None)


@pytest.fixture
def make_profile(db_session):
    def _make(email: str, role=None, external_user_id=None):
        profile = models.Profile(
            external_user_id=external_user_id or email,
            email=email,
            display_name=email.split("@")[0],
            role=role,
        )
        db_session.add(profile)
        db_session.commit()
        db_session.refresh(profile)
        return profile

    return _make


@pytest.fixture
def make_wholesaler(db_session, make_profile):
    counter = {"n": 0}

    def _make(email: str = None, status: str = "approved", region: str = "서울", **overrides):
        counter["n"] += 1
        n = counter["n"]
        profile = make_profile(email or f"seller{n}@farm.test", role="wholesaler")
        wholesaler = models.Wholesaler(
            profile_id=profile.id,
            business_name=overrides.pop("business_name", f"가락청과{n}"),
            business_number=overrides.pop("business_number", "123-45-67890"),
            representative=overrides.pop("representative", "홍길동"),
            phone=overrides.pop("phone", "010-1234-5678"),
            address=overrides.pop("address", "서울시 송파구 양재대로 932"),
            anonymous_code=overrides.pop("anonymous_code", f"VENDOR-{n:03d}"),
            region=region,
            status=status,
            **overrides,
        )
        db_session.add(wholesaler)
        db_session.commit()
        db_session.refresh(wholesaler)
        return wholesaler

    return _make


@pytest.fixture
def make_retailer(db_session, make_profile):
    counter = {"n": 0}

    def _make(email: str = None):
        counter["n"] += 1
        n = counter["n"]
        profile = make_profile(email or f"shop{n}@store.test", role="retailer")
        retailer = models.Retailer(
            profile_id=profile.id,
            business_name=f"동네마트{n}",
            phone="02-123-4567",
            address="서울시 마포구 월드컵로 1",
            address_detail="1층",
        )
        db_session.add(retailer)
        db_session.commit()
        db_session.refresh(retailer)
        return retailer

    return _make


@pytest.fixture
def make_product(db_session):
    def _make(wholesaler, name="사과", price=10000, stock=100, moq=1, category="과일", **overrides):
        product = models.Product(
            wholesaler_id=wholesaler.id,
            name=name,
            original_name=overrides.pop("original_name", name),
            category=category,
            price=price,
            moq=moq,
            stock_quantity=stock,
            **overrides,
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return _make


@pytest.fixture
def make_order(db_session):
    counter = {"n": 0}

    def _make(retailer, product, quantity=2, status="pending", read=False, **overrides):
        counter["n"] += 1
        order = models.Order(
            order_number=overrides.pop("order_number", f"ORD-20251001-{counter['n']:06d}"),
            retailer_id=retailer.id,
            wholesaler_id=product.wholesaler_id,
            product_id=product.id,
            quantity=quantity,
            unit_price=product.price,
            total_amount=product.price * quantity,
            status=status,
            delivery_method="courier",
            **overrides,
        )
        if read:
            order.wholesaler_read_at = models.now_utc()
        db_session.add(order)
        db_session.commit()
        db_session.refresh(order)
        return order

    return _make
