import uuid
from sqlalchemy import Column, String, DateTime, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from .base import Base, now_utc


class Profile(Base):
    __tablename__ = 'profiles'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Stable subject forwarded by the identity provider
    external_user_id = Column(String, nullable=False, unique=True, index=True)
    email = Column(String, nullable=False, index=True)
    display_name = Column(String, nullable=True)
    # NULL until the user picks retailer/wholesaler on the role selection page
    role = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        CheckConstraint(
            "role IS NULL OR role IN ('retailer', 'wholesaler', 'admin')",
            name='profiles_role_check',
        ),
    )
