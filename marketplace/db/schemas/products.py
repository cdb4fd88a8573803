import uuid
from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from marketplace.utils import validation


def _reject_cleared(model: BaseModel, fields: tuple) -> None:
    cleared = [name for name in fields if name in model.model_fields_set and getattr(model, name) is None]
    if cleared:
        raise ValueError(f"다음 항목은 비울 수 없습니다: {', '.join(cleared)}")


class ProductVariantBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    price: int = Field(gt=0)
    stock_quantity: int = Field(default=0, ge=0)


class ProductVariantCreate(ProductVariantBase):
    pass


class ProductVariantUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    price: Optional[int] = Field(default=None, gt=0)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def _required_columns(self):
        _reject_cleared(self, ("name", "price", "stock_quantity", "is_active"))
        return self


class ProductVariant(ProductVariantBase):
    id: uuid.UUID
    product_id: uuid.UUID
    is_active: bool
    model_config = ConfigDict(from_attributes=True)


class ProductBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    category: str
    specification: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    price: int = Field(gt=0)
    moq: int = Field(default=1, ge=1)
    stock_quantity: int = Field(default=0, ge=0)
    delivery_options: Optional[Dict[str, Any]] = None
    image_url: Optional[str] = None

    @field_validator("category")
    @classmethod
    def _category(cls, v: str) -> str:
        return validation.validate_category(v)


class ProductCreate(ProductBase):
    original_name: Optional[str] = Field(default=None, max_length=100)
    variants: List[ProductVariantCreate] = []


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    original_name: Optional[str] = Field(default=None, max_length=100)
    category: Optional[str] = None
    specification: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    price: Optional[int] = Field(default=None, gt=0)
    moq: Optional[int] = Field(default=None, ge=1)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    delivery_options: Optional[Dict[str, Any]] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("category")
    @classmethod
    def _category(cls, v: Optional[str]) -> Optional[str]:
        return validation.validate_category(v) if v is not None else None

    @model_validator(mode="after")
    def _required_columns(self):
        _reject_cleared(self, ("name", "category", "price", "moq", "stock_quantity", "is_active"))
        return self


class Product(ProductBase):
    id: uuid.UUID
    wholesaler_id: uuid.UUID
    original_name: Optional[str] = None
    standardized_name: Optional[str] = None
    delivery_dawn_available: bool
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    variants: List[ProductVariant] = []
    model_config = ConfigDict(from_attributes=True)


class ProductPage(BaseModel):
    products: List[Product]
    total: int
    page: int
    page_size: int
    total_pages: int


class CatalogProduct(BaseModel):
    """Product as shown to retailers; the seller is only identified by alias."""
    id: uuid.UUID
    name: str
    display_name: str
    standardized_name: Optional[str] = None
    category: str
    specification: Optional[str] = None
    description: Optional[str] = None
    price: int
    moq: int
    stock_quantity: int
    delivery_options: Optional[Dict[str, Any]] = None
    delivery_dawn_available: bool
    image_url: Optional[str] = None
    created_at: datetime
    wholesaler_anonymous_code: Optional[str] = None
    wholesaler_region: Optional[str] = None
    variants: List[ProductVariant] = []


class CatalogPage(BaseModel):
    products: List[CatalogProduct]
    total: int
    page: int
    page_size: int
    total_pages: int
