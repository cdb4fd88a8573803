import uuid
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator

from marketplace.utils import validation
from marketplace.utils.formatting import format_phone


class RetailerOnboarding(BaseModel):
    business_name: str
    phone: str
    address: str = Field(min_length=1)
    address_detail: Optional[str] = None

    @field_validator("business_name")
    @classmethod
    def _business_name(cls, v: str) -> str:
        return validation.validate_business_name(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return format_phone(validation.validate_phone(v))


class Retailer(BaseModel):
    id: uuid.UUID
    profile_id: uuid.UUID
    business_name: str
    phone: str
    address: str
    address_detail: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class CartItemCreate(BaseModel):
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None
    quantity: int = Field(gt=0)
    delivery_method: str = "courier"

    @field_validator("delivery_method")
    @classmethod
    def _delivery_method(cls, v: str) -> str:
        return validation.validate_delivery_method(v)


class CartItemUpdate(BaseModel):
    quantity: Optional[int] = Field(default=None, gt=0)
    delivery_method: Optional[str] = None

    @field_validator("delivery_method")
    @classmethod
    def _delivery_method(cls, v: Optional[str]) -> Optional[str]:
        return validation.validate_delivery_method(v) if v is not None else None


class CartItem(BaseModel):
    id: uuid.UUID
    product_id: uuid.UUID
    variant_id: Optional[uuid.UUID] = None
    product_name: str
    variant_name: Optional[str] = None
    quantity: int
    unit_price: int
    line_total: int
    delivery_method: str
    moq: int
    stock_quantity: int


class CartSummary(BaseModel):
    total_product_price: int
    total_price: int
    item_count: int


class CartResponse(BaseModel):
    items: List[CartItem]
    summary: CartSummary
