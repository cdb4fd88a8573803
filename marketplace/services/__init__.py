"""Business logic services package with public service helpers."""

from .order_events import OrderEventBroker, get_order_event_broker
from .transactional_email_service import (
    TransactionalEmailConfig,
    TransactionalEmailService,
    get_transactional_email_service,
    reset_transactional_email_service_for_tests,
)

__all__ = [
    "OrderEventBroker",
    "get_order_event_broker",
    "TransactionalEmailConfig",
    "TransactionalEmailService",
    "get_transactional_email_service",
    "reset_transactional_email_service_for_tests",
]
