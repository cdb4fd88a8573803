from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.db.database import get_db
from marketplace.db import models, schemas
from marketplace.db.pagination import clamp_page, total_pages
from marketplace.db.repositories import settlements as settlement_repo
from marketplace.api.deps import get_current_wholesaler

router = APIRouter(prefix="/wholesaler/settlements", tags=["settlements"])


def settlement_page(db: Session, wholesaler_id, status_filter, start_date, end_date, page, page_size):
    page, page_size = clamp_page(page, page_size)
    settlements, total = settlement_repo.list_settlements(
        db,
        wholesaler_id=wholesaler_id,
        status=status_filter,
        start_date=start_date,
        end_date=end_date,
        page=page,
        page_size=page_size,
    )
    return schemas.SettlementPage(
        settlements=[schemas.Settlement.model_validate(s) for s in settlements],
        totals=schemas.SettlementTotals(**settlement_repo.settlement_totals(db, wholesaler_id)),
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


@router.get("", response_model=schemas.SettlementPage)
def list_settlements(
    status_filter: Optional[str] = Query(default=None, alias="status", pattern="^(pending|completed)$"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1),
    db: Session = Depends(get_db),
    wholesaler: models.Wholesaler = Depends(get_current_wholesaler),
):
    """Settlements of the current seller with pending and paid-out totals."""
    return settlement_page(db, wholesaler.id, status_filter, start_date, end_date, page, page_size)
