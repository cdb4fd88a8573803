import uuid

from marketplace.db import models


def _h(user, email):
    return {"x-auth-request-user": user, "x-auth-request-email": email}


def _retailer_headers(retailer):
    email = retailer.profile.email
    return _h(email, email)


def test_add_to_cart_uses_server_price(client, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    product = make_product(make_wholesaler(), price=12000, stock=50)
    r = client.post(
        "/retailer/cart",
        json={"product_id": str(product.id), "quantity": 3, "unit_price": 1},
        headers=_retailer_headers(retailer),
    )
    assert r.status_code == 201
    body = r.json()
    assert len(body["items"]) == 1
    item = body["items"][0]
    assert item["unit_price"] == 12000
    assert item["line_total"] == 36000
    assert item["product_name"] == "사과"
    assert body["summary"] == {"total_product_price": 36000, "total_price": 36000, "item_count": 1}


def test_adding_same_product_merges_line(client, db_session, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    product = make_product(make_wholesaler(), stock=10)
    headers = _retailer_headers(retailer)
    client.post("/retailer/cart", json={"product_id": str(product.id), "quantity": 4}, headers=headers)
    r = client.post(
        "/retailer/cart",
        json={"product_id": str(product.id), "quantity": 5, "delivery_method": "dawn"},
        headers=headers,
    )
    items = r.json()["items"]
    assert len(items) == 1
    assert items[0]["quantity"] == 9
    assert items[0]["delivery_method"] == "dawn"
    assert db_session.query(models.CartItem).count() == 1


def test_moq_and_stock_checked(client, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    product = make_product(make_wholesaler(), stock=6, moq=3)
    headers = _retailer_headers(retailer)

    below_moq = client.post("/retailer/cart", json={"product_id": str(product.id), "quantity": 2}, headers=headers)
    assert below_moq.status_code == 400
    assert below_moq.json()["detail"] == "최소 주문 수량은 3개입니다."

    assert client.post(
        "/retailer/cart", json={"product_id": str(product.id), "quantity": 4}, headers=headers
    ).status_code == 201

    # Merged total would exceed stock
    over = client.post("/retailer/cart", json={"product_id": str(product.id), "quantity": 3}, headers=headers)
    assert over.status_code == 400
    assert over.json()["detail"] == "재고가 부족합니다. (남은 수량 6개)"


def test_variant_price_and_stock(client, db_session, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    product = make_product(make_wholesaler(), price=10000, stock=100)
    variant = models.ProductVariant(product_id=product.id, name="5kg", price=18000, stock_quantity=2)
    db_session.add(variant)
    db_session.commit()
    headers = _retailer_headers(retailer)

    r = client.post(
        "/retailer/cart",
        json={"product_id": str(product.id), "variant_id": str(variant.id), "quantity": 2},
        headers=headers,
    )
    item = r.json()["items"][0]
    assert item["unit_price"] == 18000
    assert item["variant_name"] == "5kg"
    assert item["stock_quantity"] == 2

    over = client.post(
        "/retailer/cart",
        json={"product_id": str(product.id), "variant_id": str(variant.id), "quantity": 1},
        headers=headers,
    )
    assert over.status_code == 400


def test_inactive_variant_rejected(client, db_session, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    product = make_product(make_wholesaler())
    variant = models.ProductVariant(product_id=product.id, name="특품", price=20000, stock_quantity=5, is_active=False)
    db_session.add(variant)
    db_session.commit()
    r = client.post(
        "/retailer/cart",
        json={"product_id": str(product.id), "variant_id": str(variant.id), "quantity": 1},
        headers=_retailer_headers(retailer),
    )
    assert r.status_code == 404
    assert r.json()["detail"] == "선택한 옵션을 구매할 수 없습니다."


def test_unavailable_products_cannot_be_added(client, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    headers = _retailer_headers(retailer)
    inactive = make_product(make_wholesaler(), is_active=False)
    pending_seller = make_product(make_wholesaler(status="pending"))

    for product_id in (inactive.id, pending_seller.id, uuid.uuid4()):
        r = client.post("/retailer/cart", json={"product_id": str(product_id), "quantity": 1}, headers=headers)
        assert r.status_code == 404
        assert r.json()["detail"] == "구매할 수 없는 상품입니다."


def test_update_remove_and_clear(client, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    wholesaler = make_wholesaler()
    apple = make_product(wholesaler, name="사과", price=1000, stock=10)
    pear = make_product(wholesaler, name="배", price=2000, stock=10)
    headers = _retailer_headers(retailer)
    client.post("/retailer/cart", json={"product_id": str(apple.id), "quantity": 1}, headers=headers)
    body = client.post("/retailer/cart", json={"product_id": str(pear.id), "quantity": 1}, headers=headers).json()
    apple_line = next(i for i in body["items"] if i["product_id"] == str(apple.id))

    r = client.patch(f"/retailer/cart/{apple_line['id']}", json={"quantity": 5}, headers=headers)
    assert r.status_code == 200
    assert r.json()["summary"]["total_price"] == 5 * 1000 + 2000

    too_many = client.patch(f"/retailer/cart/{apple_line['id']}", json={"quantity": 11}, headers=headers)
    assert too_many.status_code == 400

    assert client.delete(f"/retailer/cart/{apple_line['id']}", headers=headers).status_code == 204
    assert client.delete(f"/retailer/cart/{apple_line['id']}", headers=headers).status_code == 404
    assert len(client.get("/retailer/cart", headers=headers).json()["items"]) == 1

    assert client.delete("/retailer/cart", headers=headers).status_code == 204
    assert client.get("/retailer/cart", headers=headers).json()["summary"]["item_count"] == 0


def test_cart_lines_are_private(client, make_retailer, make_wholesaler, make_product):
    owner = make_retailer()
    other = make_retailer()
    product = make_product(make_wholesaler())
    body = client.post(
        "/retailer/cart", json={"product_id": str(product.id), "quantity": 1}, headers=_retailer_headers(owner)
    ).json()
    line_id = body["items"][0]["id"]
    r = client.patch(f"/retailer/cart/{line_id}", json={"quantity": 2}, headers=_retailer_headers(other))
    assert r.status_code == 404
    assert r.json()["detail"] == "장바구니 상품을 찾을 수 없습니다."


def test_retailer_onboarding(client, make_profile):
    make_profile("mart@store.test", role="retailer")
    headers = _h("mart@store.test", "mart@store.test")
    assert client.get("/retailer/me", headers=headers).status_code == 404
    r = client.post(
        "/retailer/onboarding",
        json={"business_name": "행복마트", "phone": "0212345678", "address": "서울시 마포구"},
        headers=headers,
    )
    assert r.status_code == 201
    assert r.json()["phone"] == "02-1234-5678"
    assert client.get("/retailer/me", headers=headers).json()["business_name"] == "행복마트"
    again = client.post(
        "/retailer/onboarding",
        json={"business_name": "행복마트", "phone": "0212345678", "address": "서울시 마포구"},
        headers=headers,
    )
    assert again.status_code == 409


def test_patch_reprices_line_from_current_catalog(client, db_session, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    product = make_product(make_wholesaler(), price=1000, stock=20)
    headers = _retailer_headers(retailer)
    line_id = client.post(
        "/retailer/cart", json={"product_id": str(product.id), "quantity": 1}, headers=headers
    ).json()["items"][0]["id"]

    product.price = 3000
    db_session.commit()
    r = client.patch(f"/retailer/cart/{line_id}", json={"quantity": 2}, headers=headers)
    assert r.status_code == 200
    line = r.json()["items"][0]
    assert line["unit_price"] == 3000
    assert line["line_total"] == 6000

    product.price = 2500
    db_session.commit()
    method_only = client.patch(f"/retailer/cart/{line_id}", json={"delivery_method": "dawn"}, headers=headers)
    assert method_only.json()["items"][0]["unit_price"] == 2500


def test_patch_rejects_deactivated_product(client, db_session, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    product = make_product(make_wholesaler())
    headers = _retailer_headers(retailer)
    line_id = client.post(
        "/retailer/cart", json={"product_id": str(product.id), "quantity": 1}, headers=headers
    ).json()["items"][0]["id"]

    product.is_active = False
    db_session.commit()
    r = client.patch(f"/retailer/cart/{line_id}", json={"quantity": 2}, headers=headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "구매할 수 없는 상품입니다."
    assert db_session.get(models.CartItem, uuid.UUID(line_id)).quantity == 1
