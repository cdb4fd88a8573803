import asyncio
from datetime import timedelta

import pytest

from marketplace.db import models
from marketplace.services import transactional_email_service
from marketplace.services.notification_service import (
    DEFAULT_PREFERENCES,
    NotificationService,
    merge_preferences,
)
from marketplace.utils.feature_flags import refresh_feature_flag_cache


class _FakeEmailService:
    def __init__(self, result=None, raise_on_render=False):
        self.result = result or {"success": True, "message_id": "msg-1"}
        self.raise_on_render = raise_on_render
        self.sent = []

    def render_template(self, template_name, context):
        if self.raise_on_render:
            raise RuntimeError("template missing")
        return f"<p>{template_name}</p>", template_name

    async def send_email(self, to_email, subject, html_content, text_content=None, tag=None):
        self.sent.append({"to": to_email, "subject": subject, "html": html_content, "tag": tag})
        return self.result


def test_merge_preferences_overlays_defaults():
    merged = merge_preferences({"new_order": {"email": False}, "unknown": {"push": True}, "inquiry_answered": "bad"})
    assert merged["new_order"] == {"email": False, "push": True}
    assert merged["inquiry_answered"] == DEFAULT_PREFERENCES["inquiry_answered"]
    assert "unknown" not in merged
    assert merge_preferences(None) == DEFAULT_PREFERENCES


def test_new_order_creates_notification_and_sends_email(db_session, make_wholesaler, make_retailer, make_product, make_order):
    wholesaler = make_wholesaler()
    order = make_order(make_retailer(), make_product(wholesaler, name="샤인머스캣"))
    email = _FakeEmailService()

    result = NotificationService(db_session, email_service=email).notify_new_order(wholesaler, order)

    notification = result["in_app_notification"]
    assert notification.profile_id == wholesaler.profile_id
    assert order.order_number in notification.message
    assert notification.action_url.endswith(f"/wholesaler/orders/{order.id}")
    assert email.sent[0]["to"] == wholesaler.profile.email
    assert email.sent[0]["subject"] == f"[팜투비즈] 새 주문 {order.order_number}"
    assert email.sent[0]["tag"] == "new_order"
    log = db_session.get(models.EmailNotificationLog, result["email_log"].id)
    assert log.status == "sent"
    assert log.provider_message_id == "msg-1"
    assert log.sent_at is not None
    assert log.notification_id == notification.id


def test_push_disabled_skips_in_app_notification(db_session, make_wholesaler, make_retailer, make_product, make_order):
    wholesaler = make_wholesaler(notification_preferences={"new_order": {"email": True, "push": False}})
    order = make_order(make_retailer(), make_product(wholesaler))
    email = _FakeEmailService()

    result = NotificationService(db_session, email_service=email).notify_new_order(wholesaler, order)

    assert "in_app_notification" not in result
    assert db_session.query(models.Notification).count() == 0
    assert len(email.sent) == 1


def test_email_disabled_by_preference_or_flag(db_session, make_wholesaler, make_retailer, make_product, make_order, monkeypatch):
    wholesaler = make_wholesaler(notification_preferences={"new_order": {"email": False, "push": True}})
    order = make_order(make_retailer(), make_product(wholesaler))
    email = _FakeEmailService()
    NotificationService(db_session, email_service=email).notify_new_order(wholesaler, order)
    assert email.sent == []

    other = make_wholesaler()
    other_order = make_order(make_retailer(), make_product(other))
    monkeypatch.setenv("FEATURE_EMAIL_NOTIFICATIONS_ENABLED", "false")
    refresh_feature_flag_cache()
    NotificationService(db_session, email_service=email).notify_new_order(other, other_order)
    assert email.sent == []
    assert db_session.query(models.EmailNotificationLog).count() == 0


def test_provider_failure_marks_log_failed(db_session, make_wholesaler, make_retailer, make_product, make_order):
    wholesaler = make_wholesaler()
    order = make_order(make_retailer(), make_product(wholesaler))
    email = _FakeEmailService(result={"success": False, "error": "rate limited"})

    result = NotificationService(db_session, email_service=email).notify_new_order(wholesaler, order)

    log = db_session.get(models.EmailNotificationLog, result["email_log"].id)
    assert log.status == "failed"
    assert log.error_message == "rate limited"


def test_render_error_marks_log_failed(db_session, make_wholesaler, make_retailer, make_product, make_order):
    wholesaler = make_wholesaler()
    order = make_order(make_retailer(), make_product(wholesaler))
    email = _FakeEmailService(raise_on_render=True)

    result = NotificationService(db_session, email_service=email).notify_new_order(wholesaler, order)

    assert result["email_result"]["success"] is False
    log = db_session.get(models.EmailNotificationLog, result["email_log"].id)
    assert log.status == "failed"
    assert "template missing" in log.error_message


def test_unconfigured_provider_never_raises(db_session, make_wholesaler, make_retailer, make_product, make_order):
    wholesaler = make_wholesaler()
    order = make_order(make_retailer(), make_product(wholesaler))

    result = NotificationService(db_session).notify_new_order(wholesaler, order)

    assert result["email_result"]["success"] is False
    assert db_session.get(models.EmailNotificationLog, result["email_log"].id).status == "failed"


def test_retailer_gets_default_preferences(db_session, make_retailer):
    retailer = make_retailer()
    prefs = NotificationService(db_session, email_service=_FakeEmailService()).get_preferences(retailer.profile)
    assert prefs == DEFAULT_PREFERENCES


def test_mark_read_and_counts(db_session, make_profile):
    profile = make_profile("reader@store.test")
    service = NotificationService(db_session, email_service=_FakeEmailService())
    first = service.create_notification(profile.id, "inquiry_answered", "t1", "m1")
    service.create_notification(profile.id, "inquiry_answered", "t2", "m2")
    service.create_notification(profile.id, "inquiry_answered", "old", "m3", expires_days=-1)

    assert service.get_unread_count(profile.id) == 2
    assert len(service.get_user_notifications(profile.id)) == 2
    assert service.mark_notification_read(first.id, profile.id) is True
    assert service.get_unread_count(profile.id) == 1
    assert service.mark_all_read(profile.id) == 2


def test_email_config_reports_missing_keys(monkeypatch):
    monkeypatch.setenv("EMAIL_PROVIDER", "mailgun")
    config = transactional_email_service.TransactionalEmailConfig()
    assert config.is_configured() is False
    assert "MAILGUN_API_KEY is required for Mailgun provider" in config.validate()
    assert config.sender == "팜투비즈 <noreply@farmtobiz.com>"


def test_templates_render_korean_content():
    service = transactional_email_service.TransactionalEmailService()
    html, text = service.render_template("inquiry_answered", {
        "user_name": "동네마트",
        "inquiry_title": "배송 문의",
        "admin_reply": "내일 도착합니다.",
        "inquiry_url": "https://app.farmtobiz.test/inquiries/1",
    })
    assert "배송 문의" in html
    assert "내일 도착합니다." in text


def test_unconfigured_service_send_reports_failure():
    service = transactional_email_service.TransactionalEmailService()
    result = asyncio.run(service.send_email("a@b.test", "s", "<p>x</p>"))
    assert result["success"] is False


def test_subject_prefix_is_added_once(monkeypatch):
    config = transactional_email_service.TransactionalEmailConfig()
    assert config.decorate_subject("정산 완료") == "[팜투비즈] 정산 완료"
    assert config.decorate_subject("[팜투비즈] 정산 완료") == "[팜투비즈] 정산 완료"
    monkeypatch.setenv("EMAIL_SUBJECT_PREFIX", "")
    assert transactional_email_service.TransactionalEmailConfig().decorate_subject("정산 완료") == "정산 완료"


def test_strip_html_keeps_line_breaks():
    text = transactional_email_service.strip_html("<h1>주문 알림</h1><p>사과 &amp; 배</p><br/>감사합니다")
    assert text == "주문 알림\n사과 & 배\n감사합니다"
