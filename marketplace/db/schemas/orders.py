import uuid
from datetime import datetime
from typing import Optional, List, Literal
from pydantic import BaseModel, ConfigDict, Field

OrderStatus = Literal["pending", "confirmed", "shipped", "completed", "cancelled"]


class OrderProductSummary(BaseModel):
    id: uuid.UUID
    name: str
    display_name: str
    specification: Optional[str] = None
    image_url: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class OrderVariantSummary(BaseModel):
    id: uuid.UUID
    name: str
    model_config = ConfigDict(from_attributes=True)


class Order(BaseModel):
    id: uuid.UUID
    order_number: str
    retailer_id: uuid.UUID
    wholesaler_id: uuid.UUID
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None
    quantity: int
    unit_price: int
    total_amount: int
    status: str
    delivery_method: str
    delivery_address: Optional[str] = None
    delivery_request: Optional[str] = None
    wholesaler_read_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    product: Optional[OrderProductSummary] = None
    variant: Optional[OrderVariantSummary] = None
    model_config = ConfigDict(from_attributes=True)


class OrderPage(BaseModel):
    orders: List[Order]
    total: int
    page: int
    page_size: int
    total_pages: int


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class BatchStatusUpdate(BaseModel):
    order_ids: List[uuid.UUID]
    status: OrderStatus


class BatchItemError(BaseModel):
    order_id: str
    error: str


class BatchStatusResult(BaseModel):
    success: bool
    success_count: int
    failure_count: int
    errors: Optional[List[BatchItemError]] = None


class CheckoutRequest(BaseModel):
    delivery_address: Optional[str] = Field(default=None, max_length=500)
    delivery_request: Optional[str] = Field(default=None, max_length=500)
    payment_method: Optional[str] = Field(default=None, max_length=20)


class CheckoutLineError(BaseModel):
    cart_item_id: uuid.UUID
    product_id: uuid.UUID
    error: str


class CheckoutResponse(BaseModel):
    orders: List[Order]
    total_amount: int


class OrderNotification(Order):
    is_read: bool


class UnreadOrdersCount(BaseModel):
    count: int


class RecentOrderNotifications(BaseModel):
    notifications: List[OrderNotification]
    unread_count: int
    has_new_notifications: bool


class MarkOrdersReadResult(BaseModel):
    success: bool = True
    updated_count: int
