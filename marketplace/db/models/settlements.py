import uuid
from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class Settlement(Base):
    __tablename__ = 'settlements'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, unique=True)
    wholesaler_id = Column(UUID(as_uuid=True), ForeignKey('wholesalers.id'), nullable=False)
    order_amount = Column(Integer, nullable=False)
    platform_fee_rate = Column(Numeric(5, 4), nullable=False)
    platform_fee = Column(Integer, nullable=False)
    settlement_amount = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default='pending')
    scheduled_payout_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    order = relationship("Order")
    wholesaler = relationship("Wholesaler")

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'completed')", name='settlements_status_check'),
        Index('idx_settlements_wholesaler_id_created_at', 'wholesaler_id', 'created_at'),
        Index('idx_settlements_status', 'status'),
    )
