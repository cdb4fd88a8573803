"""
API dependency helpers.

Resolves the signed-in profile from identity-provider headers and guards
routes by marketplace role.
"""
from typing import Optional, Tuple, Dict, Any

from fastapi import Header, HTTPException, status, Depends
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.api.auth import resolve_identity_from_headers, sync_profile
from marketplace.db import models
from marketplace.db.repositories import wholesalers as wholesaler_repo
from marketplace.db.repositories import retailers as retailer_repo
from marketplace.utils.roles import ROLE_ADMIN, ROLE_RETAILER, ROLE_WHOLESALER
from marketplace.utils.runtime import dev_mode_active, dev_identity

AUTH_REQUIRED = "인증이 필요합니다. 다시 로그인해주세요."
FORBIDDEN = "접근 권한이 없습니다."
ROLE_FORBIDDEN_MESSAGES = {
    ROLE_WHOLESALER: "도매점 회원만 사용할 수 있는 기능입니다.",
    ROLE_RETAILER: "소매점 회원만 사용할 수 있는 기능입니다.",
    ROLE_ADMIN: "관리자만 접근할 수 있습니다.",
}
WHOLESALER_NOT_FOUND = "도매점 정보를 찾을 수 없습니다."
RETAILER_NOT_FOUND = "소매점 정보를 찾을 수 없습니다."
WHOLESALER_NOT_APPROVED = "승인된 도매점만 이용할 수 있습니다."


def _resolve_identity(
    x_auth_request_user: Optional[str],
    x_auth_request_email: Optional[str],
    x_forwarded_user: Optional[str],
    x_forwarded_email: Optional[str],
) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """Return (external_user_id, email, display_name); ids are None when anonymous."""
    if dev_mode_active():
        external_id, email = dev_identity()
        return external_id, email, "Development User"
    external_id, email = resolve_identity_from_headers(
        x_auth_request_user=x_auth_request_user,
        x_auth_request_email=x_auth_request_email,
        x_forwarded_user=x_forwarded_user,
        x_forwarded_email=x_forwarded_email,
    )
    if not email:
        return None, None, None
    # Some proxies forward only the email; it is stable enough to key on
    return external_id or email, email, None


def _context_for(profile: models.Profile) -> Dict[str, Any]:
    return {
        "id": profile.id,
        "email": profile.email,
        "display_name": profile.display_name,
        "role": profile.role,
        "is_admin": profile.role == ROLE_ADMIN,
    }


# Contract:
# Returns (Profile ORM object, current_user_context_dict)
# Raises 401 if identity cannot be resolved.
def get_current_user_context(
    db: Session = Depends(get_db),
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
) -> Tuple[models.Profile, Dict[str, Any]]:
    external_id, email, name = _resolve_identity(
        x_auth_request_user, x_auth_request_email, x_forwarded_user, x_forwarded_email
    )
    if not email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=AUTH_REQUIRED)
    profile = sync_profile(db, external_user_id=external_id, email=email, display_name=name)
    return profile, _context_for(profile)


def get_optional_user_context(
    db: Session = Depends(get_db),
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
) -> Optional[Tuple[models.Profile, Dict[str, Any]]]:
    """Like get_current_user_context, but anonymous visitors yield None."""
    external_id, email, name = _resolve_identity(
        x_auth_request_user, x_auth_request_email, x_forwarded_user, x_forwarded_email
    )
    if not email:
        return None
    profile = sync_profile(db, external_user_id=external_id, email=email, display_name=name)
    return profile, _context_for(profile)


def require_role(*roles: str):
    """Build a dependency that admits only profiles holding one of ``roles``."""
    allowed = frozenset(roles)
    detail = ROLE_FORBIDDEN_MESSAGES.get(roles[0], FORBIDDEN) if len(roles) == 1 else FORBIDDEN

    def _dependency(user_context=Depends(get_current_user_context)) -> models.Profile:
        profile, _ = user_context
        if profile.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return profile

    return _dependency


require_admin = require_role(ROLE_ADMIN)
require_wholesaler_profile = require_role(ROLE_WHOLESALER)
require_retailer_profile = require_role(ROLE_RETAILER)


def get_current_wholesaler(
    profile: models.Profile = Depends(require_wholesaler_profile),
    db: Session = Depends(get_db),
) -> models.Wholesaler:
    wholesaler = wholesaler_repo.get_wholesaler_by_profile(db, profile.id)
    if not wholesaler:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=WHOLESALER_NOT_FOUND)
    return wholesaler


def get_approved_wholesaler(
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
) -> models.Wholesaler:
    if wholesaler.status != 'approved':
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=WHOLESALER_NOT_APPROVED)
    return wholesaler


def get_current_retailer(
    profile: models.Profile = Depends(require_retailer_profile),
    db: Session = Depends(get_db),
) -> models.Retailer:
    retailer = retailer_repo.get_retailer_by_profile(db, profile.id)
    if not retailer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=RETAILER_NOT_FOUND)
    return retailer
