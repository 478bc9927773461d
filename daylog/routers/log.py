"""
Log router.

GET  /log          — raw log rows (all, or one date)
GET  /log/day      — form values for one date (logged, default, calculated)
POST /save-log     — upsert / clear one day of values
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from daylog.db.base import get_db
from daylog.routers.deps import get_owner_id, utc_today
from daylog.schemas.log import DayValueResponse, LogRowResponse, SaveLogRequest, SaveLogResponse
from daylog.services import row_store
from daylog.services.day_values import get_day_values
from daylog.services.row_store import SaveEntry

router = APIRouter(tags=["log"])


@router.get(
    "/log",
    response_model=list[LogRowResponse],
    summary="Logged values",
)
def list_log(
    day: Optional[date] = Query(
        alias="date",
        default=None,
        description="Only rows for this date (YYYY-MM-DD). Omit for all rows.",
        examples=["2026-02-20"],
    ),
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    rows = row_store.list_logs(db, owner_id, on=day)
    return [
        LogRowResponse(date=str(r.date), metric_id=r.metric_id, value=r.value)
        for r in rows
    ]


@router.get(
    "/log/day",
    response_model=list[DayValueResponse],
    summary="Form values for one day",
)
def day_values(
    day: Optional[date] = Query(
        alias="date",
        default=None,
        description="Day to load. Defaults to today (UTC).",
        examples=["2026-02-20"],
    ),
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """
    One item per active metric: the logged value, else `default_value`
    (flagged `is_default`), and for calculated metrics the evaluated
    expression (null when it cannot be evaluated).
    """
    values = get_day_values(db, owner_id, day or utc_today())
    return [DayValueResponse(**v.to_dict()) for v in values]


@router.post(
    "/save-log",
    response_model=SaveLogResponse,
    summary="Save one day of values",
)
def save_log(
    payload: SaveLogRequest,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """
    - non-null values are upserted (last write wins)
    - null values delete that day's row
    - metrics without a `start_date` get this date as their start
    """
    result = row_store.save_log(
        db, owner_id, payload.date,
        [SaveEntry(metric_id=e.metric_id, value=e.value) for e in payload.entries],
    )
    return SaveLogResponse(upserted=result.upserted, deleted=result.deleted)
