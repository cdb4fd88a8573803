from sqlalchemy.exc import OperationalError

from marketplace.db import models
from marketplace.db.repositories import products as product_repo


def _h(user, email):
    return {"x-auth-request-user": user, "x-auth-request-email": email}


def _headers(retailer):
    email = retailer.profile.email
    return _h(email, email)


def test_catalog_shows_only_active_products_of_approved_sellers(client, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    approved = make_wholesaler(region="경기")
    visible = make_product(approved, name="감자", category="근채류")
    make_product(approved, name="양파", is_active=False)
    make_product(make_wholesaler(status="pending"), name="당근")
    make_product(make_wholesaler(status="suspended"), name="무")

    r = client.get("/retailer/products", headers=_headers(retailer))
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 1
    assert body["page"] == 1 and body["page_size"] == 12 and body["total_pages"] == 1
    product = body["products"][0]
    assert product["id"] == str(visible.id)
    assert product["wholesaler_anonymous_code"] == approved.anonymous_code
    assert product["wholesaler_region"] == "경기"
    assert "business_name" not in product
    assert "wholesaler_id" not in product


def test_catalog_filters_and_sorting(client, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    wholesaler = make_wholesaler()
    make_product(wholesaler, name="부사 사과", price=30000, category="과일")
    make_product(wholesaler, name="청경채", price=5000, category="엽채류", delivery_dawn_available=True)
    make_product(wholesaler, name="배", price=20000, category="과일", standardized_name="신고배")
    headers = _headers(retailer)

    fruits = client.get("/retailer/products?category=과일&sort_by=price&sort_order=asc", headers=headers).json()
    assert [p["price"] for p in fruits["products"]] == [20000, 30000]
    assert fruits["products"][0]["display_name"] == "신고배"

    searched = client.get("/retailer/products?search=사과", headers=headers).json()
    assert [p["name"] for p in searched["products"]] == ["부사 사과"]

    by_standard_name = client.get("/retailer/products?search=신고", headers=headers).json()
    assert by_standard_name["total"] == 1

    dawn = client.get("/retailer/products?dawn_delivery=true", headers=headers).json()
    assert [p["name"] for p in dawn["products"]] == ["청경채"]

    bad_order = client.get("/retailer/products?sort_order=sideways", headers=headers)
    assert bad_order.status_code == 422


def test_catalog_pagination(client, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    wholesaler = make_wholesaler()
    for i in range(5):
        make_product(wholesaler, name=f"상품{i}", price=1000 + i)
    body = client.get("/retailer/products?page=2&page_size=2&sort_by=price&sort_order=asc", headers=_headers(retailer)).json()
    assert body["total"] == 5
    assert body["total_pages"] == 3
    assert [p["price"] for p in body["products"]] == [1002, 1003]


def test_catalog_hides_inactive_variants(client, db_session, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    product = make_product(make_wholesaler())
    db_session.add_all([
        models.ProductVariant(product_id=product.id, name="3kg", price=9000, stock_quantity=5),
        models.ProductVariant(product_id=product.id, name="10kg", price=25000, stock_quantity=5, is_active=False),
    ])
    db_session.commit()
    body = client.get(f"/retailer/products/{product.id}", headers=_headers(retailer)).json()
    assert [v["name"] for v in body["variants"]] == ["3kg"]


def test_catalog_detail_404_for_hidden_product(client, make_retailer, make_wholesaler, make_product):
    retailer = make_retailer()
    product = make_product(make_wholesaler(status="rejected"))
    r = client.get(f"/retailer/products/{product.id}", headers=_headers(retailer))
    assert r.status_code == 404
    assert r.json()["detail"] == "상품을 찾을 수 없습니다."


def test_catalog_query_failure_returns_empty_page(client, make_retailer, monkeypatch):
    retailer = make_retailer()
    headers = _headers(retailer)

    def _fail(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("statement timeout"))

    monkeypatch.setattr(product_repo, "search_catalog", _fail)
    r = client.get("/retailer/products", headers=headers)
    assert r.status_code == 200
    assert r.json()["products"] == []
    assert r.json()["total"] == 0


def test_catalog_requires_retailer_role(client, make_wholesaler):
    make_wholesaler(email="seller@farm.test")
    r = client.get("/retailer/products", headers=_h("seller@farm.test", "seller@farm.test"))
    assert r.status_code == 403


def test_wholesaler_product_management(client, db_session, make_wholesaler):
    make_wholesaler(email="mgr@farm.test")
    headers = _h("mgr@farm.test", "mgr@farm.test")
    payload = {
        "name": "유기농 딸기",
        "category": "과일",
        "price": 15000,
        "moq": 2,
        "stock_quantity": 40,
        "delivery_options": {"dawn_delivery_available": True},
        "variants": [{"name": "1kg", "price": 15000, "stock_quantity": 20}],
    }
    created = client.post("/wholesaler/products", json=payload, headers=headers)
    assert created.status_code == 201
    product = created.json()
    assert product["original_name"] == "유기농 딸기"
    assert product["delivery_dawn_available"] is True
    assert len(product["variants"]) == 1

    bad_category = client.post("/wholesaler/products", json=dict(payload, category="장난감"), headers=headers)
    assert bad_category.status_code == 422

    updated = client.put(f"/wholesaler/products/{product['id']}", json={"price": 14000}, headers=headers)
    assert updated.json()["price"] == 14000

    variant = client.post(
        f"/wholesaler/products/{product['id']}/variants",
        json={"name": "2kg", "price": 27000, "stock_quantity": 5},
        headers=headers,
    )
    assert variant.status_code == 201
    patched = client.patch(
        f"/wholesaler/products/{product['id']}/variants/{variant.json()['id']}",
        json={"is_active": False},
        headers=headers,
    )
    assert patched.json()["is_active"] is False

    removed = client.delete(f"/wholesaler/products/{product['id']}", headers=headers)
    assert removed.json()["is_active"] is False
    assert db_session.query(models.Product).count() == 1

    inactive = client.get("/wholesaler/products?status=inactive", headers=headers).json()
    assert inactive["total"] == 1


def test_pending_wholesaler_cannot_create_products(client, make_wholesaler):
    make_wholesaler(email="pending@farm.test", status="pending")
    r = client.post(
        "/wholesaler/products",
        json={"name": "쌀", "category": "기타", "price": 50000},
        headers=_h("pending@farm.test", "pending@farm.test"),
    )
    assert r.status_code == 403
    assert r.json()["detail"] == "승인된 도매점만 이용할 수 있습니다."


def test_other_wholesalers_products_are_not_visible(client, make_wholesaler, make_product):
    make_wholesaler(email="a@farm.test")
    other_product = make_product(make_wholesaler())
    r = client.get(f"/wholesaler/products/{other_product.id}", headers=_h("a@farm.test", "a@farm.test"))
    assert r.status_code == 404


def test_product_update_rejects_cleared_required_fields(client, db_session, make_wholesaler, make_product):
    wholesaler = make_wholesaler(email="nulls@farm.test")
    product = make_product(wholesaler, price=9000, description="당도 높은 사과")
    variant = models.ProductVariant(product_id=product.id, name="5kg", price=30000, stock_quantity=3)
    db_session.add(variant)
    db_session.commit()
    headers = _h("nulls@farm.test", "nulls@farm.test")

    r = client.put(f"/wholesaler/products/{product.id}", json={"price": None}, headers=headers)
    assert r.status_code == 422
    assert client.put(f"/wholesaler/products/{product.id}", json={"name": None}, headers=headers).status_code == 422
    cleared = client.put(f"/wholesaler/products/{product.id}", json={"description": None}, headers=headers)
    assert cleared.status_code == 200
    assert cleared.json()["description"] is None
    assert cleared.json()["price"] == 9000

    variant_r = client.patch(
        f"/wholesaler/products/{product.id}/variants/{variant.id}", json={"stock_quantity": None}, headers=headers
    )
    assert variant_r.status_code == 422
    db_session.refresh(variant)
    assert variant.stock_quantity == 3
