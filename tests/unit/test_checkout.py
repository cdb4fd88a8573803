from marketplace.db import models


def _h(user, email):
    return {"x-auth-request-user": user, "x-auth-request-email": email}


def _headers(retailer):
    email = retailer.profile.email
    return _h(email, email)


def _add(client, retailer, product, quantity, **extra):
    body = {"product_id": str(product.id), "quantity": quantity, **extra}
    r = client.post("/retailer/cart", json=body, headers=_headers(retailer))
    assert r.status_code == 201
    return r


def test_checkout_creates_one_order_per_line(client, db_session, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    seller_a = make_wholesaler()
    seller_b = make_wholesaler()
    apple = make_product(seller_a, name="사과", price=10000, stock=20)
    kale = make_product(seller_b, name="케일", price=3000, stock=5)
    _add(client, retailer, apple, 3)
    _add(client, retailer, kale, 5, delivery_method="dawn")

    r = client.post(
        "/retailer/orders/checkout",
        json={"delivery_request": "문 앞에 놓아주세요", "payment_method": "card"},
        headers=_headers(retailer),
    )
    assert r.status_code == 201
    body = r.json()
    assert body["total_amount"] == 3 * 10000 + 5 * 3000
    assert len(body["orders"]) == 2
    for order in body["orders"]:
        assert order["status"] == "pending"
        assert order["order_number"].startswith("ORD-")
        assert order["wholesaler_read_at"] is None
        assert order["delivery_address"] == "서울시 마포구 월드컵로 1 1층"
        assert order["delivery_request"] == "문 앞에 놓아주세요"

    db_session.expire_all()
    assert db_session.get(models.Product, apple.id).stock_quantity == 17
    assert db_session.get(models.Product, kale.id).stock_quantity == 0
    payments = db_session.query(models.Payment).all()
    assert len(payments) == 2
    assert {p.status for p in payments} == {"pending"}
    assert {p.method for p in payments} == {"card"}
    assert db_session.query(models.CartItem).count() == 0
    assert {o.wholesaler_id for o in db_session.query(models.Order)} == {seller_a.id, seller_b.id}


def test_checkout_decrements_variant_stock(client, db_session, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    product = make_product(make_wholesaler(), price=10000, stock=100)
    variant = models.ProductVariant(product_id=product.id, name="10kg", price=45000, stock_quantity=4)
    db_session.add(variant)
    db_session.commit()
    _add(client, retailer, product, 3, variant_id=str(variant.id))

    body = client.post("/retailer/orders/checkout", json={}, headers=_headers(retailer)).json()
    assert body["orders"][0]["unit_price"] == 45000
    assert body["orders"][0]["variant"]["name"] == "10kg"

    db_session.expire_all()
    assert db_session.get(models.ProductVariant, variant.id).stock_quantity == 1
    assert db_session.get(models.Product, product.id).stock_quantity == 100


def test_checkout_with_empty_cart(client, make_retailer):
    retailer = make_retailer()
    r = client.post("/retailer/orders/checkout", json={}, headers=_headers(retailer))
    assert r.status_code == 400
    assert r.json()["detail"]["message"] == "장바구니가 비어 있습니다."


def test_checkout_is_all_or_nothing(client, db_session, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    wholesaler = make_wholesaler()
    fine = make_product(wholesaler, name="배", stock=10)
    short = make_product(wholesaler, name="귤", stock=10)
    _add(client, retailer, fine, 2)
    _add(client, retailer, short, 8)

    # Stock sold elsewhere after the line was added
    short.stock_quantity = 5
    db_session.commit()

    r = client.post("/retailer/orders/checkout", json={}, headers=_headers(retailer))
    assert r.status_code == 400
    detail = r.json()["detail"]
    assert detail["message"] == "주문할 수 없는 상품이 있습니다."
    assert len(detail["errors"]) == 1
    assert detail["errors"][0]["product_id"] == str(short.id)
    assert detail["errors"][0]["error"] == "재고가 부족합니다. (남은 수량 5개)"

    db_session.expire_all()
    assert db_session.query(models.Order).count() == 0
    assert db_session.query(models.Payment).count() == 0
    assert db_session.query(models.CartItem).count() == 2
    assert db_session.get(models.Product, fine.id).stock_quantity == 10


def test_checkout_rejects_products_taken_off_sale(client, db_session, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    wholesaler = make_wholesaler()
    product = make_product(wholesaler)
    _add(client, retailer, product, 1)
    wholesaler.status = "suspended"
    db_session.commit()

    r = client.post("/retailer/orders/checkout", json={}, headers=_headers(retailer))
    assert r.status_code == 400
    assert r.json()["detail"]["errors"][0]["error"] == "현재 주문할 수 없는 판매자의 상품입니다."


def test_checkout_notifies_seller(client, db_session, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    wholesaler = make_wholesaler()
    product = make_product(wholesaler)
    _add(client, retailer, product, 2)
    client.post("/retailer/orders/checkout", json={}, headers=_headers(retailer))

    notification = db_session.query(models.Notification).one()
    assert notification.profile_id == wholesaler.profile_id
    assert notification.event_type == "new_order"
    email_log = db_session.query(models.EmailNotificationLog).one()
    # No provider configured in tests
    assert email_log.status == "failed"


def test_checkout_survives_notification_failure(client, db_session, make_retailer, make_wholesaler, make_product, monkeypatch):
    from marketplace.services import notification_service

    def _explode(self, wholesaler, order):
        raise RuntimeError("mail relay down")

    monkeypatch.setattr(notification_service.NotificationService, "notify_new_order", _explode)
    retailer = make_retailer()
    product = make_product(make_wholesaler())
    _add(client, retailer, product, 1)
    r = client.post("/retailer/orders/checkout", json={}, headers=_headers(retailer))
    assert r.status_code == 201
    assert db_session.query(models.Order).count() == 1


def test_retailer_order_history(client, make_retailer, make_wholesaler, make_product, make_order):
    retailer = make_retailer()
    other = make_retailer()
    product = make_product(make_wholesaler())
    make_order(retailer, product, status="pending")
    make_order(retailer, product, status="completed")
    make_order(other, product)

    body = client.get("/retailer/orders", headers=_headers(retailer)).json()
    assert body["total"] == 2
    completed = client.get("/retailer/orders?status=completed", headers=_headers(retailer)).json()
    assert [o["status"] for o in completed["orders"]] == ["completed"]
