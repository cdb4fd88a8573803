import uuid
from datetime import datetime
from typing import Optional, Dict
from pydantic import BaseModel, ConfigDict, Field, field_validator

from marketplace.utils import validation
from marketplace.utils.formatting import format_phone


class WholesalerOnboarding(BaseModel):
    business_name: str
    business_number: str
    representative: str = Field(min_length=1, max_length=50)
    phone: str
    address: str = Field(min_length=1)
    address_detail: Optional[str] = None
    region: Optional[str] = None
    bank_name: Optional[str] = None
    bank_account_number: Optional[str] = None

    @field_validator("business_name")
    @classmethod
    def _business_name(cls, v: str) -> str:
        return validation.validate_business_name(v)

    @field_validator("business_number")
    @classmethod
    def _business_number(cls, v: str) -> str:
        return validation.validate_business_number(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return format_phone(validation.validate_phone(v))

    @field_validator("bank_account_number")
    @classmethod
    def _bank_account_number(cls, v: Optional[str]) -> Optional[str]:
        return validation.validate_bank_account_number(v) if v is not None else None


class Wholesaler(BaseModel):
    id: uuid.UUID
    profile_id: uuid.UUID
    business_name: str
    business_number: str
    representative: str
    phone: str
    address: str
    address_detail: Optional[str] = None
    bank_account: Optional[str] = None
    region: Optional[str] = None
    anonymous_code: str
    anonymous_id: Optional[str] = None
    status: str
    rejection_reason: Optional[str] = None
    approved_at: Optional[datetime] = None
    notification_preferences: Optional[Dict[str, Dict[str, bool]]] = None
    seller_registered_at: Optional[datetime] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class BusinessSettingsUpdate(BaseModel):
    """Partial update of the business settings form."""
    business_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    address_detail: Optional[str] = None
    bank_name: Optional[str] = None
    bank_account_number: Optional[str] = None

    @field_validator("business_name")
    @classmethod
    def _business_name(cls, v: Optional[str]) -> Optional[str]:
        return validation.validate_business_name(v) if v is not None else None

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: Optional[str]) -> Optional[str]:
        return validation.validate_phone(v) if v is not None else None

    @field_validator("bank_name")
    @classmethod
    def _bank_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("은행명을 입력해주세요.")
        return v.strip() if v is not None else None

    @field_validator("bank_account_number")
    @classmethod
    def _bank_account_number(cls, v: Optional[str]) -> Optional[str]:
        return validation.validate_bank_account_number(v) if v is not None else None


class ChannelPreference(BaseModel):
    email: bool
    push: bool


class NotificationPreferencesUpdate(BaseModel):
    new_order: ChannelPreference
    settlement_completed: ChannelPreference
    inquiry_answered: ChannelPreference


class EmailUpdate(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return validation.validate_email(v)


class ActionResult(BaseModel):
    success: bool = True
    message: str


class SellerRegistrationStatus(BaseModel):
    status: str
    terms_agreed: bool
    contract_uploaded: bool
    merchant_registered: bool
    seller_terms_agreed_at: Optional[datetime] = None
    contract_uploaded_at: Optional[datetime] = None
    toss_merchant_id: Optional[str] = None
    seller_registered_at: Optional[datetime] = None


class ContractUpload(BaseModel):
    contract_file_url: str = Field(min_length=1, max_length=2000)


class MerchantRegistration(BaseModel):
    toss_merchant_id: str = Field(min_length=1, max_length=100)


class WholesalerApprove(BaseModel):
    anonymous_id: Optional[str] = Field(default=None, max_length=50)
    region: Optional[str] = Field(default=None, max_length=50)


class WholesalerReject(BaseModel):
    reason: str = Field(min_length=1, max_length=1000)
