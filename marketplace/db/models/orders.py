import uuid
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Index, CheckConstraint, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class Order(Base):
    __tablename__ = 'orders'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_number = Column(String(32), nullable=False, unique=True)
    retailer_id = Column(UUID(as_uuid=True), ForeignKey('retailers.id'), nullable=False)
    wholesaler_id = Column(UUID(as_uuid=True), ForeignKey('wholesalers.id'), nullable=False)
    product_id = Column(UUID(as_uuid=True), ForeignKey('products.id'), nullable=False)
    variant_id = Column(UUID(as_uuid=True), ForeignKey('product_variants.id'), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=False)
    total_amount = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default='pending')
    delivery_method = Column(String(20), nullable=False, default='courier')
    delivery_address = Column(Text, nullable=True)
    delivery_request = Column(Text, nullable=True)
    # Set when the seller has seen the order in the notification bell
    wholesaler_read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    retailer = relationship("Retailer")
    wholesaler = relationship("Wholesaler")
    product = relationship("Product")
    variant = relationship("ProductVariant")
    payments = relationship("Payment", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'shipped', 'completed', 'cancelled')",
            name='orders_status_check',
        ),
        CheckConstraint(
            "delivery_method IN ('courier', 'direct', 'dawn')",
            name='orders_delivery_method_check',
        ),
        CheckConstraint('quantity > 0', name='orders_quantity_check'),
        Index('idx_orders_wholesaler_id_created_at', 'wholesaler_id', 'created_at'),
        Index('idx_orders_retailer_id_created_at', 'retailer_id', 'created_at'),
        Index('idx_orders_status', 'status'),
        Index(
            'idx_orders_wholesaler_unread',
            'wholesaler_id',
            postgresql_where=text('wholesaler_read_at IS NULL'),
            sqlite_where=text('wholesaler_read_at IS NULL'),
        ),
    )


class Payment(Base):
    __tablename__ = 'payments'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    amount = Column(Integer, nullable=False)
    method = Column(String(20), nullable=True)
    status = Column(String(20), nullable=False, default='pending')
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    order = relationship("Order", back_populates="payments")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'paid', 'failed', 'cancelled', 'refunded')",
            name='payments_status_check',
        ),
        Index('idx_payments_order_id', 'order_id'),
    )
