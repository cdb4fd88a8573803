"""
Domain-split SQLAlchemy models.

Exposes `Base`, `now_utc`, and all ORM classes from one import path.
"""

from .base import Base, now_utc  # re-export

# Domain models
from .profiles import Profile
from .wholesalers import Wholesaler
from .retailers import Retailer, CartItem
from .products import Product, ProductVariant
from .orders import Order, Payment
from .settlements import Settlement
from .inquiries import Inquiry
from .notifications import Notification, EmailNotificationLog
from .audit import AuditLog

__all__ = [
    # base
    "Base",
    "now_utc",
    # accounts
    "Profile",
    "Wholesaler",
    "Retailer",
    # catalogue/cart
    "Product",
    "ProductVariant",
    "CartItem",
    # orders/money
    "Order",
    "Payment",
    "Settlement",
    # support
    "Inquiry",
    # notifications
    "Notification",
    "EmailNotificationLog",
    # audit
    "AuditLog",
]
