import uuid
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class Product(Base):
    __tablename__ = 'products'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    wholesaler_id = Column(UUID(as_uuid=True), ForeignKey('wholesalers.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(100), nullable=False)
    # Name as entered by the seller; standardized_name is the catalogue name
    original_name = Column(String(100), nullable=True)
    standardized_name = Column(String(100), nullable=True)
    category = Column(String(20), nullable=False)
    specification = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    price = Column(Integer, nullable=False)
    moq = Column(Integer, nullable=False, default=1)
    stock_quantity = Column(Integer, nullable=False, default=0)
    delivery_options = Column(JSONB, nullable=True)
    delivery_dawn_available = Column(Boolean, nullable=False, default=False)
    image_url = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    wholesaler = relationship("Wholesaler", back_populates="products")
    variants = relationship("ProductVariant", back_populates="product", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint('price > 0', name='products_price_check'),
        CheckConstraint('moq >= 1', name='products_moq_check'),
        CheckConstraint('stock_quantity >= 0', name='products_stock_check'),
        Index('idx_products_wholesaler_id', 'wholesaler_id'),
        Index('idx_products_category', 'category'),
        Index('idx_products_is_active_created_at', 'is_active', 'created_at'),
    )

    @property
    def display_name(self) -> str:
        return self.standardized_name or self.original_name or self.name


class ProductVariant(Base):
    __tablename__ = 'product_variants'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    product_id = Column(UUID(as_uuid=True), ForeignKey('products.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(100), nullable=False)
    price = Column(Integer, nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    product = relationship("Product", back_populates="variants")

    __table_args__ = (
        CheckConstraint('price > 0', name='product_variants_price_check'),
        Index('idx_product_variants_product_id', 'product_id'),
    )
