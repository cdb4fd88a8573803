import uuid
from datetime import UTC, datetime

from marketplace.db import models
from marketplace.services import notification_service


ADMIN = {"x-auth-request-user": "admin-1", "x-auth-request-email": "admin@farmtobiz.test"}


def _h(user, email):
    return {"x-auth-request-user": user, "x-auth-request-email": email}


def _admin_profile(db_session):
    return db_session.query(models.Profile).filter_by(email="admin@farmtobiz.test").one()


def test_non_admin_is_forbidden(client, make_retailer):
    retailer = make_retailer()
    email = retailer.profile.email
    r = client.get("/admin/wholesalers", headers=_h(email, email))
    assert r.status_code == 403
    assert r.json()["detail"] == "관리자만 접근할 수 있습니다."


def test_list_wholesalers_by_status(client, make_wholesaler):
    make_wholesaler(status="pending")
    make_wholesaler(status="approved")
    pending = client.get("/admin/wholesalers?status=pending", headers=ADMIN).json()
    assert [w["status"] for w in pending] == ["pending"]
    assert len(client.get("/admin/wholesalers", headers=ADMIN).json()) == 2


def test_approve_wholesaler(client, db_session, make_wholesaler):
    wholesaler = make_wholesaler(status="pending", region=None)
    r = client.post(
        f"/admin/wholesalers/{wholesaler.id}/approve",
        json={"anonymous_id": "과일왕", "region": "부산"},
        headers=ADMIN,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "approved"
    assert body["approved_at"] is not None
    assert body["anonymous_id"] == "과일왕"
    assert body["region"] == "부산"

    audit = db_session.query(models.AuditLog).filter_by(action_type="wholesaler_approve").one()
    assert audit.target_id == wholesaler.id
    assert audit.actor_profile_id == _admin_profile(db_session).id
    assert audit.metadata_json["previous_status"] == "pending"

    again = client.post(f"/admin/wholesalers/{wholesaler.id}/approve", headers=ADMIN)
    assert again.status_code == 409


def test_approve_without_body(client, make_wholesaler):
    wholesaler = make_wholesaler(status="rejected")
    r = client.post(f"/admin/wholesalers/{wholesaler.id}/approve", headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["rejection_reason"] is None


def test_reject_and_suspend(client, db_session, make_wholesaler):
    pending = make_wholesaler(status="pending")
    r = client.post(f"/admin/wholesalers/{pending.id}/reject", json={"reason": " 서류 미비 "}, headers=ADMIN)
    assert r.json()["status"] == "rejected"
    assert r.json()["rejection_reason"] == "서류 미비"

    active = make_wholesaler()
    assert client.post(f"/admin/wholesalers/{active.id}/suspend", headers=ADMIN).json()["status"] == "suspended"

    actions = {a.action_type for a in db_session.query(models.AuditLog)}
    assert actions == {"wholesaler_reject", "wholesaler_suspend"}
    reject_audit = db_session.query(models.AuditLog).filter_by(action_type="wholesaler_reject").one()
    assert reject_audit.reason == " 서류 미비 "

    missing = client.post(f"/admin/wholesalers/{uuid.uuid4()}/suspend", headers=ADMIN)
    assert missing.status_code == 404


def test_reply_notifies_author(client, db_session):
    author = _h("u1", "asker@store.test")
    created = client.post("/inquiries", json={"title": "환불 문의", "content": "환불 가능한가요?"}, headers=author).json()

    r = client.post(f"/admin/inquiries/{created['id']}/reply", json={"admin_reply": "가능합니다."}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["status"] == "answered"
    assert r.json()["replied_at"] is not None

    notification = db_session.query(models.Notification).one()
    assert notification.event_type == "inquiry_answered"
    assert notification.profile_id == uuid.UUID(created["user_id"])
    assert db_session.query(models.AuditLog).filter_by(action_type="inquiry_reply").count() == 1

    # The author sees the reply
    mine = client.get(f"/inquiries/{created['id']}", headers=author).json()
    assert mine["admin_reply"] == "가능합니다."


def test_reply_to_closed_inquiry_conflicts(client):
    author = _h("u1", "asker@store.test")
    created = client.post("/inquiries", json={"title": "문의", "content": "내용"}, headers=author).json()
    client.post(f"/inquiries/{created['id']}/close", headers=author)
    r = client.post(f"/admin/inquiries/{created['id']}/reply", json={"admin_reply": "답변"}, headers=ADMIN)
    assert r.status_code == 409


def test_reply_survives_notification_failure(client, monkeypatch):
    def _explode(self, profile, inquiry):
        raise RuntimeError("smtp down")

    monkeypatch.setattr(notification_service.NotificationService, "notify_inquiry_answered", _explode)
    created = client.post("/inquiries", json={"title": "문의", "content": "내용"}, headers=_h("u1", "a@store.test")).json()
    r = client.post(f"/admin/inquiries/{created['id']}/reply", json={"admin_reply": "답변"}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["status"] == "answered"


def test_admin_lists_all_inquiries(client):
    client.post("/inquiries", json={"title": "A", "content": "a"}, headers=_h("u1", "a@store.test"))
    created = client.post("/inquiries", json={"title": "B", "content": "b"}, headers=_h("u2", "b@store.test")).json()
    assert client.get("/admin/inquiries", headers=ADMIN).json()["total"] == 2
    by_user = client.get(f"/admin/inquiries?user_id={created['user_id']}", headers=ADMIN).json()
    assert [i["title"] for i in by_user["inquiries"]] == ["B"]


def test_complete_settlement(client, db_session, make_wholesaler, make_retailer, make_product, make_order):
    from marketplace.services.order_service import update_order_status

    wholesaler = make_wholesaler()
    order = make_order(make_retailer(), make_product(wholesaler, price=20000), quantity=1, status="shipped")
    update_order_status(db_session, wholesaler.id, order.id, "completed")
    settlement = db_session.query(models.Settlement).one()

    listing = client.get("/admin/settlements?status=pending", headers=ADMIN).json()
    assert listing["total"] == 1
    assert listing["totals"] == {"pending_amount": 19000, "completed_amount": 0}

    r = client.post(f"/admin/settlements/{settlement.id}/complete", headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["status"] == "completed"
    assert r.json()["completed_at"] is not None

    # settlement_completed defaults to email only
    assert db_session.query(models.Notification).filter_by(event_type="settlement_completed").count() == 0
    email_log = db_session.query(models.EmailNotificationLog).filter_by(event_type="settlement_completed").one()
    assert email_log.email_address == wholesaler.profile.email

    again = client.post(f"/admin/settlements/{settlement.id}/complete", headers=ADMIN)
    assert again.status_code == 409
    assert client.post(f"/admin/settlements/{uuid.uuid4()}/complete", headers=ADMIN).status_code == 404


def test_admin_orders_and_audit_logs(client, make_wholesaler, make_retailer, make_product, make_order):
    product = make_product(make_wholesaler())
    make_order(make_retailer(), product)
    make_order(make_retailer(), product, status="completed")
    assert client.get("/admin/orders", headers=ADMIN).json()["total"] == 2
    assert client.get("/admin/orders?status=completed", headers=ADMIN).json()["total"] == 1

    pending = make_wholesaler(status="pending")
    client.post(f"/admin/wholesalers/{pending.id}/suspend", headers=ADMIN)
    logs = client.get("/admin/audit-logs?action_type=wholesaler_suspend", headers=ADMIN).json()
    assert len(logs) == 1
    assert logs[0]["target_type"] == "wholesaler"
    assert logs[0]["data"]["previous_status"] == "pending"


def test_audit_logs_filter_by_target_and_day(client, make_wholesaler):
    first = make_wholesaler(status="pending")
    second = make_wholesaler(status="pending")
    client.post(f"/admin/wholesalers/{first.id}/approve", headers=ADMIN)
    client.post(f"/admin/wholesalers/{second.id}/suspend", headers=ADMIN)

    history = client.get(f"/admin/audit-logs?target_type=wholesaler&target_id={first.id}", headers=ADMIN).json()
    assert [entry["action_type"] for entry in history] == ["wholesaler_approve"]

    today = datetime.now(UTC).date().isoformat()
    assert len(client.get(f"/admin/audit-logs?start_date={today}", headers=ADMIN).json()) == 2
    assert client.get("/admin/audit-logs?end_date=2000-01-01", headers=ADMIN).json() == []
    assert len(client.get("/admin/audit-logs?status=success", headers=ADMIN).json()) == 2
