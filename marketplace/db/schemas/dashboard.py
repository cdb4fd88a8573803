import uuid
from typing import List, Optional
from pydantic import BaseModel, ConfigDict

from .orders import Order


class DashboardStats(BaseModel):
    today_orders: int
    pending_orders: int
    weekly_sales: int
    low_stock_count: int
    unread_orders: int


class RecentOrdersResponse(BaseModel):
    orders: List[Order]


class LowStockProduct(BaseModel):
    id: uuid.UUID
    name: str
    standardized_name: Optional[str] = None
    category: str
    stock_quantity: int
    moq: int
    model_config = ConfigDict(from_attributes=True)


class LowStockResponse(BaseModel):
    products: List[LowStockProduct]
