import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from marketplace.utils.roles import RoleEnum


class Profile(BaseModel):
    id: uuid.UUID
    external_user_id: str
    email: str
    display_name: Optional[str] = None
    role: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class CurrentProfileResponse(BaseModel):
    profile: Profile
    redirect_to: str


class RoleSelection(BaseModel):
    role: RoleEnum


class RedirectResponse(BaseModel):
    redirect_to: str
