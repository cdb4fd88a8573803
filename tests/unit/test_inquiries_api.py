import uuid

from marketplace.db import models


def _h(user, email):
    return {"x-auth-request-user": user, "x-auth-request-email": email}


def _open(client, headers, title="배송 문의", content="새벽배송 가능 지역이 궁금합니다."):
    r = client.post("/inquiries", json={"title": title, "content": content}, headers=headers)
    assert r.status_code == 201
    return r.json()


def test_create_and_list_own_inquiries(client):
    mine = _h("u1", "one@store.test")
    theirs = _h("u2", "two@store.test")
    created = _open(client, mine, title="  결제 문의  ")
    assert created["status"] == "open"
    assert created["title"] == "결제 문의"
    _open(client, theirs)

    listed = client.get("/inquiries", headers=mine).json()
    assert listed["total"] == 1
    assert listed["inquiries"][0]["id"] == created["id"]


def test_other_users_inquiry_is_404(client):
    created = _open(client, _h("u1", "one@store.test"))
    other = _h("u2", "two@store.test")
    r = client.get(f"/inquiries/{created['id']}", headers=other)
    assert r.status_code == 404
    assert r.json()["detail"] == "문의를 찾을 수 없습니다."
    assert client.post(f"/inquiries/{created['id']}/close", headers=other).status_code == 404


def test_edit_only_while_open(client, db_session):
    headers = _h("u1", "one@store.test")
    created = _open(client, headers)

    r = client.patch(f"/inquiries/{created['id']}", json={"content": " 수정된 내용 "}, headers=headers)
    assert r.status_code == 200
    assert r.json()["content"] == "수정된 내용"
    assert r.json()["title"] == "배송 문의"

    inquiry = db_session.get(models.Inquiry, uuid.UUID(created["id"]))
    inquiry.status = "answered"
    db_session.commit()

    blocked = client.patch(f"/inquiries/{created['id']}", json={"title": "다시"}, headers=headers)
    assert blocked.status_code == 409
    assert blocked.json()["detail"] == "답변이 등록되었거나 종료된 문의는 수정할 수 없습니다."


def test_close_inquiry(client):
    headers = _h("u1", "one@store.test")
    created = _open(client, headers)
    r = client.post(f"/inquiries/{created['id']}/close", headers=headers)
    assert r.json()["status"] == "closed"
    closed = client.get("/inquiries?status=closed", headers=headers).json()
    assert closed["total"] == 1
    assert client.get("/inquiries?status=open", headers=headers).json()["total"] == 0


def test_search_inquiries(client):
    headers = _h("u1", "one@store.test")
    _open(client, headers, title="세금계산서 발행", content="발행 요청드립니다.")
    _open(client, headers, title="배송 문의", content="언제 도착하나요?")
    found = client.get("/inquiries?search=세금계산서", headers=headers).json()
    assert [i["title"] for i in found["inquiries"]] == ["세금계산서 발행"]


def test_blank_title_rejected(client):
    r = client.post("/inquiries", json={"title": "", "content": "내용"}, headers=_h("u1", "one@store.test"))
    assert r.status_code == 422
