import uuid
from datetime import datetime
from typing import Optional, Dict, Any, List, Literal
from pydantic import BaseModel, ConfigDict, Field


NotificationEventType = Literal["new_order", "settlement_completed", "inquiry_answered"]


class Notification(BaseModel):
    id: uuid.UUID
    profile_id: uuid.UUID
    event_type: str
    title: str
    message: str
    action_url: Optional[str] = None
    action_text: Optional[str] = None
    # ORM attribute is metadata_json; `metadata` is reserved on declarative models
    data: Optional[Dict[str, Any]] = Field(default=None, validation_alias="metadata_json")
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime
    expires_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    notifications: List[Notification]
    unread_count: int
    total_count: int


class NotificationStatsResponse(BaseModel):
    unread_count: int
    total_notifications: int
    unread_by_event: Dict[str, int] = Field(default_factory=dict)
    recent_notifications: List[Notification]


class MarkAllReadResponse(BaseModel):
    updated_count: int
