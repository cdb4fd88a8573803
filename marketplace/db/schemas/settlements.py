import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, ConfigDict


class SettlementOrderSummary(BaseModel):
    id: uuid.UUID
    order_number: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class Settlement(BaseModel):
    id: uuid.UUID
    order_id: uuid.UUID
    wholesaler_id: uuid.UUID
    order_amount: int
    platform_fee_rate: Decimal
    platform_fee: int
    settlement_amount: int
    status: str
    scheduled_payout_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    order: Optional[SettlementOrderSummary] = None
    model_config = ConfigDict(from_attributes=True)


class SettlementTotals(BaseModel):
    pending_amount: int
    completed_amount: int


class SettlementPage(BaseModel):
    settlements: List[Settlement]
    totals: SettlementTotals
    total: int
    page: int
    page_size: int
    total_pages: int
