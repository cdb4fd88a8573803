"""Offset pagination and date-range helpers shared by list queries."""
from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, UTC
from typing import Optional, Tuple, List, Any

MAX_PAGE_SIZE = 100


def clamp_page(page: int, page_size: int) -> Tuple[int, int]:
    page = max(1, int(page or 1))
    page_size = min(MAX_PAGE_SIZE, max(1, int(page_size or 1)))
    return page, page_size


def paginate(query, page: int, page_size: int) -> Tuple[List[Any], int]:
    """Return (rows, total) for the requested 1-based page."""
    page, page_size = clamp_page(page, page_size)
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * page_size).limit(page_size).all()
    return rows, total


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size else 0


def day_start(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=UTC)


def day_end_exclusive(value: date) -> datetime:
    return day_start(value + timedelta(days=1))


def apply_date_range(query, column, start_date: Optional[date], end_date: Optional[date]):
    if start_date:
        query = query.filter(column >= day_start(start_date))
    if end_date:
        query = query.filter(column < day_end_exclusive(end_date))
    return query
