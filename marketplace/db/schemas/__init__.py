"""
Domain-split Pydantic schemas re-exported under `marketplace.db.schemas`.
"""

from .profiles import Profile, CurrentProfileResponse, RoleSelection, RedirectResponse
from .wholesalers import (
    WholesalerOnboarding,
    Wholesaler,
    BusinessSettingsUpdate,
    ChannelPreference,
    NotificationPreferencesUpdate,
    EmailUpdate,
    ActionResult,
    SellerRegistrationStatus,
    ContractUpload,
    MerchantRegistration,
    WholesalerApprove,
    WholesalerReject,
)
from .retailers import (
    RetailerOnboarding,
    Retailer,
    CartItemCreate,
    CartItemUpdate,
    CartItem,
    CartSummary,
    CartResponse,
)
from .products import (
    ProductVariantCreate,
    ProductVariantUpdate,
    ProductVariant,
    ProductCreate,
    ProductUpdate,
    Product,
    ProductPage,
    CatalogProduct,
    CatalogPage,
)
from .orders import (
    OrderStatus,
    Order,
    OrderPage,
    OrderStatusUpdate,
    BatchStatusUpdate,
    BatchItemError,
    BatchStatusResult,
    CheckoutRequest,
    CheckoutLineError,
    CheckoutResponse,
    OrderNotification,
    UnreadOrdersCount,
    RecentOrderNotifications,
    MarkOrdersReadResult,
)
from .settlements import Settlement, SettlementTotals, SettlementPage
from .inquiries import InquiryStatus, InquiryCreate, InquiryUpdate, InquiryReply, InquiryFilter, Inquiry, InquiryPage
from .notifications import (
    NotificationEventType,
    Notification,
    NotificationListResponse,
    NotificationStatsResponse,
    MarkAllReadResponse,
)
from .audits import AuditLogCreate, AuditLog
from .dashboard import DashboardStats, RecentOrdersResponse, LowStockProduct, LowStockResponse

__all__ = [
    # profiles
    "Profile", "CurrentProfileResponse", "RoleSelection", "RedirectResponse",
    # wholesalers
    "WholesalerOnboarding", "Wholesaler", "BusinessSettingsUpdate", "ChannelPreference",
    "NotificationPreferencesUpdate", "EmailUpdate", "ActionResult", "SellerRegistrationStatus",
    "ContractUpload", "MerchantRegistration", "WholesalerApprove", "WholesalerReject",
    # retailers/cart
    "RetailerOnboarding", "Retailer", "CartItemCreate", "CartItemUpdate", "CartItem",
    "CartSummary", "CartResponse",
    # products
    "ProductVariantCreate", "ProductVariantUpdate", "ProductVariant", "ProductCreate",
    "ProductUpdate", "Product", "ProductPage", "CatalogProduct", "CatalogPage",
    # orders
    "OrderStatus", "Order", "OrderPage", "OrderStatusUpdate", "BatchStatusUpdate",
    "BatchItemError", "BatchStatusResult", "CheckoutRequest", "CheckoutLineError",
    "CheckoutResponse", "OrderNotification", "UnreadOrdersCount",
    "RecentOrderNotifications", "MarkOrdersReadResult",
    # settlements
    "Settlement", "SettlementTotals", "SettlementPage",
    # inquiries
    "InquiryStatus", "InquiryCreate", "InquiryUpdate", "InquiryReply", "InquiryFilter", "Inquiry", "InquiryPage",
    # notifications
    "NotificationEventType", "Notification", "NotificationListResponse", "NotificationStatsResponse", "MarkAllReadResponse",
    # audit
    "AuditLogCreate", "AuditLog",
    # dashboard
    "DashboardStats", "RecentOrdersResponse", "LowStockProduct", "LowStockResponse",
]
