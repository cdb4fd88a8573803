import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import models, schemas
from marketplace.db.repositories import retailers as retailer_repo
from marketplace.api.deps import get_current_retailer, require_retailer_profile
from marketplace.utils.roles import ROLE_HOME_PATHS, ROLE_RETAILER

logger = logging.getLogger("marketplace.retailer")

router = APIRouter(prefix="/retailer", tags=["retailer"])


@router.get("", include_in_schema=False)
def retailer_home():
    return RedirectResponse(url=ROLE_HOME_PATHS[ROLE_RETAILER], status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.post("/onboarding", response_model=schemas.Retailer, status_code=status.HTTP_201_CREATED)
def onboard_retailer(
    payload: schemas.RetailerOnboarding,
    db: Session = Depends(get_db),
    profile: models.Profile = Depends(require_retailer_profile),
):
    if retailer_repo.get_retailer_by_profile(db, profile.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="이미 소매점 정보가 등록되어 있습니다.")
    retailer = retailer_repo.create_retailer(db, profile.id, payload)
    logger.info("[retailer-onboarding] %s registered for profile %s", retailer.id, profile.id)
    return retailer


@router.get("/me", response_model=schemas.Retailer)
def get_my_retailer(retailer: models.Retailer = Depends(get_current_retailer)):
    return retailer
