from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from marketplace.api.deps import require_role
from marketplace.db import models
from marketplace.db.database import get_db


def _h(user, email):
    return {"x-auth-request-user": user, "x-auth-request-email": email}


def test_me_requires_identity_headers(client):
    r = client.get("/auth/me")
    assert r.status_code == 401
    assert r.json()["detail"] == "인증이 필요합니다. 다시 로그인해주세요."


def test_first_sign_in_creates_profile_without_role(client, db_session):
    r = client.get("/auth/me", headers=_h("idp-1", "New.User@Example.com"))
    assert r.status_code == 200
    body = r.json()
    assert body["profile"]["role"] is None
    assert body["profile"]["email"] == "new.user@example.com"
    assert body["redirect_to"] == "/role-selection"

    profile = db_session.query(models.Profile).filter_by(external_user_id="idp-1").one()
    assert profile.email == "new.user@example.com"


def test_email_only_proxy_keys_profile_on_email(client, db_session):
    r = client.get("/auth/me", headers={"x-forwarded-email": "solo@example.com"})
    assert r.status_code == 200
    profile = db_session.query(models.Profile).filter_by(email="solo@example.com").one()
    assert profile.external_user_id == "solo@example.com"


def test_later_sign_in_refreshes_email(client, db_session, make_profile):
    profile = make_profile("stored@example.com", external_user_id="idp-7")
    r = client.get("/auth/me", headers=_h("idp-7", "New@Example.com"))
    assert r.status_code == 200
    assert r.json()["profile"]["email"] == "new@example.com"
    db_session.refresh(profile)
    assert profile.email == "new@example.com"
    assert db_session.query(models.Profile).filter_by(external_user_id="idp-7").count() == 1


def test_role_selection_once(client):
    headers = _h("idp-2", "shop@example.com")
    r = client.post("/auth/role", json={"role": "retailer"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["profile"]["role"] == "retailer"
    assert r.json()["redirect_to"] == "/retailer/dashboard"

    again = client.post("/auth/role", json={"role": "wholesaler"}, headers=headers)
    assert again.status_code == 409
    assert again.json()["detail"] == "이미 역할이 설정되어 있습니다."


def test_admin_role_cannot_be_self_selected(client):
    r = client.post("/auth/role", json={"role": "admin"}, headers=_h("idp-3", "x@example.com"))
    assert r.status_code == 403


def test_invalid_role_rejected(client):
    r = client.post("/auth/role", json={"role": "farmer"}, headers=_h("idp-4", "y@example.com"))
    assert r.status_code == 422


def test_admin_emails_get_admin_role(client):
    r = client.get("/auth/me", headers=_h("idp-admin", "Admin@FarmToBiz.test"))
    assert r.status_code == 200
    assert r.json()["profile"]["role"] == "admin"
    assert r.json()["redirect_to"] == "/admin/dashboard"


def test_roleless_profile_promoted_when_listed_later(client, make_profile):
    make_profile("admin@farmtobiz.test", external_user_id="idp-late")
    r = client.get("/auth/me", headers=_h("idp-late", "admin@farmtobiz.test"))
    assert r.json()["profile"]["role"] == "admin"


def test_redirect_for_anonymous_and_each_role(client, make_profile):
    assert client.get("/auth/redirect").json()["redirect_to"] == "/"

    make_profile("w@example.com", role="wholesaler")
    r = client.get("/auth/redirect", headers=_h("w@example.com", "w@example.com"))
    assert r.json()["redirect_to"] == "/wholesaler/dashboard"

    r = client.get("/auth/redirect", headers=_h("fresh", "fresh@example.com"))
    assert r.json()["redirect_to"] == "/role-selection"


def test_role_guard_blocks_other_roles(client, make_retailer):
    retailer = make_retailer()
    email = retailer.profile.email
    r = client.get("/wholesaler/me", headers=_h(email, email))
    assert r.status_code == 403
    assert r.json()["detail"] == "도매점 회원만 사용할 수 있는 기능입니다."


def test_dev_mode_signs_in_dev_user(client, monkeypatch):
    monkeypatch.setenv("DEV_MODE", "true")
    monkeypatch.setenv("APP_BASE_URL", "http://localhost:3000")
    r = client.get("/auth/me")
    assert r.status_code == 200
    assert r.json()["profile"]["email"] == "dev@localhost"


def _guarded_app(db_session, guard):
    app = FastAPI()

    @app.get("/guarded")
    def guarded(profile=Depends(guard)):
        return {"role": profile.role}

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)


def test_require_role_admits_any_listed_role(db_session, make_profile):
    make_profile("buyer@example.com", role="retailer")
    make_profile("seller@example.com", role="wholesaler")
    make_profile("boss@example.com", role="admin")
    guarded = _guarded_app(db_session, require_role("retailer", "wholesaler"))

    assert guarded.get("/guarded", headers=_h("buyer@example.com", "buyer@example.com")).json() == {"role": "retailer"}
    assert guarded.get("/guarded", headers=_h("seller@example.com", "seller@example.com")).json() == {"role": "wholesaler"}

    denied = guarded.get("/guarded", headers=_h("boss@example.com", "boss@example.com"))
    assert denied.status_code == 403
    assert denied.json()["detail"] == "접근 권한이 없습니다."


def test_require_role_single_role_keeps_specific_message(db_session, make_profile):
    make_profile("buyer@example.com", role="retailer")
    guarded = _guarded_app(db_session, require_role("wholesaler"))
    r = guarded.get("/guarded", headers=_h("buyer@example.com", "buyer@example.com"))
    assert r.status_code == 403
    assert r.json()["detail"] == "도매점 회원만 사용할 수 있는 기능입니다."
