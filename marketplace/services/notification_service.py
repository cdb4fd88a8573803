"""
Notification service: in-app notifications, channel preferences, and email dispatch.
Centralizes the "who hears about what, and how" rules for marketplace events.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, UTC
from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import and_, desc, func

from marketplace.db import models
from marketplace.utils.feature_flags import email_notifications_enabled
from marketplace.utils.formatting import format_price
from marketplace.utils.urls import build_app_url

logger = logging.getLogger("marketplace.notifications")

# Event type constants
EVENT_NEW_ORDER = 'new_order'
EVENT_SETTLEMENT_COMPLETED = 'settlement_completed'
EVENT_INQUIRY_ANSWERED = 'inquiry_answered'

EVENT_TYPES = (EVENT_NEW_ORDER, EVENT_SETTLEMENT_COMPLETED, EVENT_INQUIRY_ANSWERED)

# Template names match files in marketplace/templates/email
TEMPLATE_NEW_ORDER = 'new_order'
TEMPLATE_SETTLEMENT_COMPLETED = 'settlement_completed'
TEMPLATE_INQUIRY_ANSWERED = 'inquiry_answered'

# `push` drives the in-app notification, `email` the transactional email
DEFAULT_PREFERENCES: Dict[str, Dict[str, bool]] = {
    EVENT_NEW_ORDER: {'email': True, 'push': True},
    EVENT_SETTLEMENT_COMPLETED: {'email': True, 'push': False},
    EVENT_INQUIRY_ANSWERED: {'email': True, 'push': True},
}


def merge_preferences(stored: Optional[Dict[str, Any]]) -> Dict[str, Dict[str, bool]]:
    """Overlay stored per-event channel flags on the defaults."""
    merged = {event: dict(channels) for event, channels in DEFAULT_PREFERENCES.items()}
    for event, channels in (stored or {}).items():
        if event in merged and isinstance(channels, dict):
            for channel in ('email', 'push'):
                if channel in channels:
                    merged[event][channel] = bool(channels[channel])
    return merged


class NotificationService:
    """Service class for handling all notification operations."""

    def __init__(self, db: Session, email_service: Optional[Any] = None):
        self.db = db
        # Resolve lazily so tests can patch get_transactional_email_service
        if email_service is not None:
            self.email_service = email_service
        else:
            from marketplace.services import transactional_email_service
            self.email_service = transactional_email_service.get_transactional_email_service()

    # === Preferences ===

    def get_preferences(self, profile: models.Profile) -> Dict[str, Dict[str, bool]]:
        """Channel preferences for a profile.

        Wholesalers keep their choices on the wholesaler row; every other
        profile gets the defaults.
        """
        wholesaler = self.db.query(models.Wholesaler).filter(
            models.Wholesaler.profile_id == profile.id
        ).first()
        return merge_preferences(wholesaler.notification_preferences if wholesaler else None)

    # === In-App Notification Management ===

    def create_notification(
        self,
        profile_id: uuid.UUID,
        event_type: str,
        title: str,
        message: str,
        action_url: Optional[str] = None,
        action_text: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        expires_days: int = 30
    ) -> models.Notification:
        """
        Create an in-app notification for a profile.

        Args:
            profile_id: The recipient profile ID
            event_type: One of EVENT_TYPES
            title: Short notification title
            message: Detailed notification message
            action_url: Optional URL for action button
            action_text: Text for action button
            metadata: Additional event-specific data
            expires_days: Days until notification expires (default 30)
        """
        notification = models.Notification(
            profile_id=profile_id,
            event_type=event_type,
            title=title,
            message=message,
            action_url=action_url,
            action_text=action_text,
            metadata_json=metadata,
            expires_at=datetime.now(UTC) + timedelta(days=expires_days),
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def _live(self, profile_id: uuid.UUID, event_type: Optional[str] = None):
        query = self.db.query(models.Notification).filter(
            models.Notification.profile_id == profile_id,
            models.Notification.expires_at > datetime.now(UTC),
        )
        if event_type:
            query = query.filter(models.Notification.event_type == event_type)
        return query

    def get_user_notifications(
        self,
        profile_id: uuid.UUID,
        unread_only: bool = False,
        limit: int = 50,
        event_type: Optional[str] = None,
    ) -> List[models.Notification]:
        """Non-expired notifications for a profile, most recent first."""
        query = self._live(profile_id, event_type)
        if unread_only:
            query = query.filter(models.Notification.is_read.is_(False))
        return query.order_by(desc(models.Notification.created_at)).limit(limit).all()

    def count_notifications(self, profile_id: uuid.UUID, event_type: Optional[str] = None) -> int:
        return self._live(profile_id, event_type).count()

    def mark_notification_read(self, notification_id: uuid.UUID, profile_id: uuid.UUID) -> bool:
        """
        Mark a notification as read for a specific profile.
        Returns False if the notification is missing or belongs to someone else.
        """
        notification = self.db.query(models.Notification).filter(
            and_(
                models.Notification.id == notification_id,
                models.Notification.profile_id == profile_id
            )
        ).first()
        if not notification:
            return False
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(UTC)
            self.db.commit()
        return True

    def mark_all_read(self, profile_id: uuid.UUID) -> int:
        count = self.db.query(models.Notification).filter(
            models.Notification.profile_id == profile_id,
            models.Notification.is_read.is_(False),
        ).update(
            {models.Notification.is_read: True, models.Notification.read_at: datetime.now(UTC)},
            synchronize_session=False,
        )
        self.db.commit()
        return count

    def get_unread_count(self, profile_id: uuid.UUID, event_type: Optional[str] = None) -> int:
        return self._live(profile_id, event_type).filter(models.Notification.is_read.is_(False)).count()

    def get_unread_counts_by_event(self, profile_id: uuid.UUID) -> Dict[str, int]:
        """Unread badge counts keyed by event type, zero-filled for every known type."""
        rows = (
            self._live(profile_id)
            .filter(models.Notification.is_read.is_(False))
            .with_entities(models.Notification.event_type, func.count(models.Notification.id))
            .group_by(models.Notification.event_type)
            .all()
        )
        counts = {event: 0 for event in EVENT_TYPES}
        counts.update({event: total for event, total in rows})
        return counts

    # === Email Notification Management ===

    def create_email_notification_log(
        self,
        notification_id: Optional[uuid.UUID],
        profile_id: uuid.UUID,
        email_address: str,
        event_type: str,
        subject: str,
        status: str = 'pending'
    ) -> models.EmailNotificationLog:
        email_log = models.EmailNotificationLog(
            notification_id=notification_id,
            profile_id=profile_id,
            email_address=email_address,
            event_type=event_type,
            subject=subject,
            status=status
        )
        self.db.add(email_log)
        self.db.commit()
        self.db.refresh(email_log)
        return email_log

    def update_email_status(
        self,
        email_log_id: uuid.UUID,
        status: str,
        provider_message_id: Optional[str] = None,
        error_message: Optional[str] = None
    ) -> bool:
        """
        Update the status of an email notification ('sent' or 'failed').

        Returns:
            True if update successful, False if log not found
        """
        email_log = self.db.query(models.EmailNotificationLog).filter(
            models.EmailNotificationLog.id == email_log_id
        ).first()
        if not email_log:
            return False

        email_log.status = status
        if provider_message_id:
            email_log.provider_message_id = provider_message_id
        if error_message:
            email_log.error_message = error_message
        if status == 'sent':
            email_log.sent_at = datetime.now(UTC)
        self.db.commit()
        return True

    async def send_email_notification(
        self,
        email_log: models.EmailNotificationLog,
        template_name: str,
        template_context: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Render the template, send it, and record the outcome on the log row."""
        try:
            html_content, text_content = self.email_service.render_template(template_name, template_context)
            result = await self.email_service.send_email(
                to_email=email_log.email_address,
                subject=email_log.subject,
                html_content=html_content,
                text_content=text_content,
                tag=email_log.event_type,
            )
        except Exception as e:
            error_msg = f"Failed to send email: {str(e)}"
            self.update_email_status(email_log.id, 'failed', error_message=error_msg)
            return {'success': False, 'email_log_id': email_log.id, 'error': error_msg}

        if result.get('success'):
            self.update_email_status(email_log.id, 'sent', provider_message_id=result.get('message_id'))
            return {'success': True, 'email_log_id': email_log.id, 'message_id': result.get('message_id')}

        self.update_email_status(email_log.id, 'failed', error_message=result.get('error', 'Unknown error'))
        return {'success': False, 'email_log_id': email_log.id, 'error': result.get('error')}

    def _deliver(
        self,
        profile: models.Profile,
        event_type: str,
        *,
        title: str,
        message: str,
        subject: str,
        template_name: str,
        template_context: Dict[str, Any],
        action_url: Optional[str] = None,
        action_text: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Fan an event out to the channels the recipient has enabled."""
        prefs = self.get_preferences(profile).get(event_type, DEFAULT_PREFERENCES[event_type])
        result: Dict[str, Any] = {}

        if prefs['push']:
            result['in_app_notification'] = self.create_notification(
                profile_id=profile.id,
                event_type=event_type,
                title=title,
                message=message,
                action_url=action_url,
                action_text=action_text,
                metadata=metadata,
            )

        if prefs['email'] and email_notifications_enabled() and profile.email:
            notification = result.get('in_app_notification')
            email_log = self.create_email_notification_log(
                notification_id=notification.id if notification else None,
                profile_id=profile.id,
                email_address=profile.email,
                event_type=event_type,
                subject=subject,
            )
            result['email_log'] = email_log
            if not self.email_service:
                self.update_email_status(email_log.id, 'failed', error_message='No email service configured')
            else:
                result['email_result'] = asyncio.run(
                    self.send_email_notification(email_log, template_name, template_context)
                )
        return result

    # === High-Level Notification Methods ===

    def notify_new_order(self, wholesaler: models.Wholesaler, order: models.Order) -> Dict[str, Any]:
        product_name = order.product.display_name if order.product else ''
        variant_name = order.variant.name if order.variant else None
        order_url = build_app_url(f"/wholesaler/orders/{order.id}")
        return self._deliver(
            wholesaler.profile,
            EVENT_NEW_ORDER,
            title="새 주문이 도착했습니다",
            message=f"{product_name} {order.quantity}개 주문이 접수되었습니다. (주문번호 {order.order_number})",
            subject=f"[팜투비즈] 새 주문 {order.order_number}",
            template_name=TEMPLATE_NEW_ORDER,
            template_context={
                'business_name': wholesaler.business_name,
                'order_number': order.order_number,
                'product_name': product_name,
                'variant_name': variant_name,
                'quantity': order.quantity,
                'total_amount': format_price(order.total_amount),
                'order_url': order_url,
            },
            action_url=order_url,
            action_text="주문 확인",
            metadata={'order_id': str(order.id), 'order_number': order.order_number},
        )

    def notify_settlement_completed(self, wholesaler: models.Wholesaler, settlement: models.Settlement) -> Dict[str, Any]:
        order_number = settlement.order.order_number if settlement.order else ''
        settlements_url = build_app_url("/wholesaler/settlements")
        return self._deliver(
            wholesaler.profile,
            EVENT_SETTLEMENT_COMPLETED,
            title="정산이 완료되었습니다",
            message=f"주문 {order_number}의 정산금 {format_price(settlement.settlement_amount)}이 지급되었습니다.",
            subject=f"[팜투비즈] 정산 완료 안내 ({order_number})",
            template_name=TEMPLATE_SETTLEMENT_COMPLETED,
            template_context={
                'business_name': wholesaler.business_name,
                'order_number': order_number,
                'order_amount': format_price(settlement.order_amount),
                'platform_fee': format_price(settlement.platform_fee),
                'settlement_amount': format_price(settlement.settlement_amount),
                'settlements_url': settlements_url,
            },
            action_url=settlements_url,
            action_text="정산 내역",
            metadata={'settlement_id': str(settlement.id)},
        )

    def notify_inquiry_answered(self, profile: models.Profile, inquiry: models.Inquiry) -> Dict[str, Any]:
        inquiry_url = build_app_url(f"/inquiries/{inquiry.id}")
        return self._deliver(
            profile,
            EVENT_INQUIRY_ANSWERED,
            title="문의에 답변이 등록되었습니다",
            message=f"'{inquiry.title}' 문의에 답변이 등록되었습니다.",
            subject="[팜투비즈] 문의 답변 안내",
            template_name=TEMPLATE_INQUIRY_ANSWERED,
            template_context={
                'user_name': profile.display_name or profile.email.split('@')[0],
                'inquiry_title': inquiry.title,
                'admin_reply': inquiry.admin_reply,
                'inquiry_url': inquiry_url,
            },
            action_url=inquiry_url,
            action_text="답변 보기",
            metadata={'inquiry_id': str(inquiry.id)},
        )
