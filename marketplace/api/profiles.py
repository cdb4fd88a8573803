"""
Profile and role-selection endpoints.

Signing in happens at the identity provider; these routes let the frontend
learn who is signed in, pick a marketplace role once, and find the page the
user belongs on.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import schemas
from marketplace.db.repositories import profiles as profile_repo
from marketplace.api.deps import get_current_user_context, get_optional_user_context
from marketplace.utils.roles import redirect_path_for, is_self_selectable

logger = logging.getLogger("marketplace.auth")

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=schemas.CurrentProfileResponse)
def get_me(user_context=Depends(get_current_user_context)):
    profile, _ = user_context
    return schemas.CurrentProfileResponse(
        profile=schemas.Profile.model_validate(profile),
        redirect_to=redirect_path_for(profile.role),
    )


@router.post("/role", response_model=schemas.CurrentProfileResponse)
def select_role(
    payload: schemas.RoleSelection,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    """Pick retailer or wholesaler. A role can only be chosen once."""
    profile, _ = user_context
    if profile.role is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="이미 역할이 설정되어 있습니다.")
    if not is_self_selectable(payload.role.value):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="선택할 수 없는 역할입니다.")
    profile = profile_repo.set_role(db, profile, payload.role.value)
    logger.info("[role-selection] profile=%s role=%s", profile.id, profile.role)
    return schemas.CurrentProfileResponse(
        profile=schemas.Profile.model_validate(profile),
        redirect_to=redirect_path_for(profile.role),
    )


@router.get("/redirect", response_model=schemas.RedirectResponse)
def get_redirect(user_context=Depends(get_optional_user_context)):
    if user_context is None:
        return schemas.RedirectResponse(redirect_to=redirect_path_for(None, authenticated=False))
    profile, _ = user_context
    return schemas.RedirectResponse(redirect_to=redirect_path_for(profile.role))
