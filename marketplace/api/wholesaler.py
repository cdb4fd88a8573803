"""
Wholesaler account endpoints: onboarding, business settings, notification
preferences, contact email, and the seller registration checklist.
"""
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import models, schemas
from marketplace.db.repositories import profiles as profile_repo
from marketplace.db.repositories import wholesalers as wholesaler_repo
from marketplace.api.deps import get_current_wholesaler, require_wholesaler_profile
from marketplace.services.notification_service import merge_preferences
from marketplace.utils.feature_flags import seller_registration_enabled
from marketplace.utils.roles import ROLE_HOME_PATHS, ROLE_WHOLESALER

logger = logging.getLogger("marketplace.wholesaler")

router = APIRouter(prefix="/wholesaler", tags=["wholesaler"])


@router.get("", include_in_schema=False)
def wholesaler_home():
    return RedirectResponse(url=ROLE_HOME_PATHS[ROLE_WHOLESALER], status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.post("/onboarding", response_model=schemas.Wholesaler, status_code=status.HTTP_201_CREATED)
def onboard_wholesaler(
    payload: schemas.WholesalerOnboarding,
    db: Session = Depends(get_db),
    profile: models.Profile = Depends(require_wholesaler_profile),
):
    """Register business details; the account then waits for admin approval."""
    if wholesaler_repo.get_wholesaler_by_profile(db, profile.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="이미 도매점 정보가 등록되어 있습니다.")
    wholesaler = wholesaler_repo.create_wholesaler(db, profile.id, payload)
    logger.info("[wholesaler-onboarding] %s registered as %s", wholesaler.id, wholesaler.anonymous_code)
    return wholesaler


@router.get("/me", response_model=schemas.Wholesaler)
def get_my_wholesaler(wholesaler: models.Wholesaler = Depends(get_current_wholesaler)):
    return wholesaler


@router.put("/settings/business", response_model=schemas.ActionResult)
def update_business_settings(
    payload: schemas.BusinessSettingsUpdate,
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    wholesaler_repo.update_business_settings(db, wholesaler, payload)
    return schemas.ActionResult(message="사업자 정보가 수정되었습니다.")


@router.get("/settings/notifications")
def get_notification_preferences(
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
) -> Dict[str, Dict[str, bool]]:
    return merge_preferences(wholesaler.notification_preferences)


@router.put("/settings/notifications", response_model=schemas.ActionResult)
def update_notification_preferences(
    payload: schemas.NotificationPreferencesUpdate,
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    wholesaler_repo.update_notification_preferences(db, wholesaler, payload.model_dump())
    return schemas.ActionResult(message="알림 설정이 저장되었습니다.")


@router.put("/settings/email", response_model=schemas.ActionResult)
def update_email(
    payload: schemas.EmailUpdate,
    db: Session = Depends(get_db),
    profile: models.Profile = Depends(require_wholesaler_profile),
):
    if payload.email == (profile.email or "").lower():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="현재 사용 중인 이메일과 동일합니다.")
    profile_repo.update_email(db, profile, payload.email)
    return schemas.ActionResult(
        message=f"이메일이 {payload.email}로 변경되었습니다. 로그인 계정의 이메일도 변경하려면 사용자 메뉴에서 변경해주세요."
    )


# === Seller registration ===

def _registration_status(wholesaler: models.Wholesaler) -> schemas.SellerRegistrationStatus:
    return schemas.SellerRegistrationStatus(
        status=wholesaler.status,
        terms_agreed=wholesaler.seller_terms_agreed_at is not None,
        contract_uploaded=wholesaler.contract_uploaded_at is not None,
        merchant_registered=bool(wholesaler.toss_merchant_id),
        seller_terms_agreed_at=wholesaler.seller_terms_agreed_at,
        contract_uploaded_at=wholesaler.contract_uploaded_at,
        toss_merchant_id=wholesaler.toss_merchant_id,
        seller_registered_at=wholesaler.seller_registered_at,
    )


def _ensure_registration_enabled() -> None:
    if not seller_registration_enabled():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")


@router.get("/seller-registration", response_model=schemas.SellerRegistrationStatus)
def get_seller_registration(wholesaler: models.Wholesaler = Depends(get_current_wholesaler)):
    _ensure_registration_enabled()
    return _registration_status(wholesaler)


@router.post("/seller-registration/terms", response_model=schemas.SellerRegistrationStatus)
def agree_seller_terms(
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    _ensure_registration_enabled()
    return _registration_status(wholesaler_repo.agree_seller_terms(db, wholesaler))


@router.post("/seller-registration/contract", response_model=schemas.SellerRegistrationStatus)
def upload_contract(
    payload: schemas.ContractUpload,
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    _ensure_registration_enabled()
    return _registration_status(wholesaler_repo.upload_contract(db, wholesaler, payload.contract_file_url))


@router.post("/seller-registration/merchant", response_model=schemas.SellerRegistrationStatus)
def register_merchant(
    payload: schemas.MerchantRegistration,
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    _ensure_registration_enabled()
    return _registration_status(wholesaler_repo.register_merchant(db, wholesaler, payload.toss_merchant_id))
