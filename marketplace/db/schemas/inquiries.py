import uuid
from datetime import datetime, date
from typing import Optional, List, Literal
from pydantic import BaseModel, ConfigDict, Field

InquiryStatus = Literal["open", "answered", "closed"]


class InquiryCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1, max_length=5000)


class InquiryUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1, max_length=5000)


class InquiryReply(BaseModel):
    admin_reply: str = Field(min_length=1, max_length=5000)


class InquiryFilter(BaseModel):
    status: Optional[InquiryStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    search: Optional[str] = None


class Inquiry(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    content: str
    status: str
    admin_reply: Optional[str] = None
    created_at: datetime
    replied_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class InquiryPage(BaseModel):
    inquiries: List[Inquiry]
    total: int
    page: int
    page_size: int
    total_pages: int
