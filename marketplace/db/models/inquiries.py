import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class Inquiry(Base):
    __tablename__ = 'inquiries'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default='open')
    admin_reply = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    replied_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("Profile")

    __table_args__ = (
        CheckConstraint("status IN ('open', 'answered', 'closed')", name='inquiries_status_check'),
        Index('idx_inquiries_user_id_created_at', 'user_id', 'created_at'),
        Index('idx_inquiries_status', 'status'),
    )
