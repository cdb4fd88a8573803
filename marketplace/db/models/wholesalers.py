import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class Wholesaler(Base):
    __tablename__ = 'wholesalers'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    profile_id = Column(UUID(as_uuid=True), ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False, unique=True)
    business_name = Column(String(100), nullable=False)
    business_number = Column(String(20), nullable=False)
    representative = Column(String(50), nullable=False)
    phone = Column(String(20), nullable=False)
    address = Column(Text, nullable=False)
    address_detail = Column(Text, nullable=True)
    bank_account = Column(String(100), nullable=True)
    region = Column(String(50), nullable=True)
    # Public seller alias shown to retailers, e.g. VENDOR-007
    anonymous_code = Column(String(20), nullable=False, unique=True)
    anonymous_id = Column(String(50), nullable=True, unique=True)
    status = Column(String(20), nullable=False, default='pending')
    rejection_reason = Column(Text, nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    notification_preferences = Column(JSONB, nullable=True)
    # Seller registration
    seller_terms_agreed_at = Column(DateTime(timezone=True), nullable=True)
    toss_merchant_id = Column(String(100), nullable=True)
    contract_file_url = Column(Text, nullable=True)
    contract_uploaded_at = Column(DateTime(timezone=True), nullable=True)
    seller_registered_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    profile = relationship("Profile")
    products = relationship("Product", back_populates="wholesaler")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'suspended')",
            name='wholesalers_status_check',
        ),
        Index('idx_wholesalers_status', 'status'),
        Index('idx_wholesalers_region', 'region'),
    )
