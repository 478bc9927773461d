"""
Derived statistics router.

GET /date-hints   — completion tracking + suggested next date
GET /summary-7d   — per-metric 7-day window summary
GET /stats        — lifetime, streak and recent-window tables
GET /ma           — moving average series for one metric
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from daylog.core.config import settings
from daylog.db.base import get_db
from daylog.routers.deps import get_owner_id, get_today
from daylog.schemas.common import ErrorResponse
from daylog.schemas.log import LogRowResponse
from daylog.schemas.stats import (
    DateHintsResponse,
    MovingAveragePointResponse,
    MovingAverageResponse,
    StatsResponse,
    SummaryRowResponse,
)
from daylog.services.aggregates import get_stats, get_summary_7d
from daylog.services.date_hints import get_date_hints
from daylog.services.moving_average import get_moving_average

router = APIRouter(tags=["stats"])


@router.get(
    "/date-hints",
    response_model=DateHintsResponse,
    summary="Completion tracking and suggested date",
)
def date_hints(
    today: date = Depends(get_today),
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """
    A day is *complete* when every active, required metric has a row.

    Returns the last logged day, the last complete day, how many days are
    missing since then, and the day the form should open on
    (`suggested_date`, never after `today`).
    """
    return DateHintsResponse(**get_date_hints(db, owner_id, today).to_dict())


@router.get(
    "/summary-7d",
    response_model=list[SummaryRowResponse],
    summary="7-day summary per metric",
)
def summary_7d(
    day: Optional[date] = Query(
        alias="date",
        default=None,
        description="Last day of the window; clamped to today. Defaults to today.",
        examples=["2026-02-21"],
    ),
    today: date = Depends(get_today),
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """
    Window `[end - 6, end]`. Active, non-private metrics only; metrics with
    no rows in the window still get a row (`n_rows = 0`).
    """
    rows = get_summary_7d(db, owner_id, day, today)
    return [SummaryRowResponse(**r.to_dict()) for r in rows]


@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Lifetime, streak and recent-window stats",
)
def stats(
    today: date = Depends(get_today),
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    tables = get_stats(db, owner_id, today)
    return StatsResponse(**{
        name: [row.to_dict() for row in rows]
        for name, rows in tables.items()
    })


@router.get(
    "/ma",
    response_model=MovingAverageResponse,
    summary="Moving average for one metric",
    responses={
        400: {"model": ErrorResponse, "description": "period outside 1–3650."},
        404: {"model": ErrorResponse, "description": "No such metric for this owner."},
    },
)
def moving_average(
    metric_id: str = Query(description="Metric to average.", examples=["weight"]),
    period: Optional[int] = Query(
        default=None,
        description=f"Window in days. Defaults to {settings.DEFAULT_MA_PERIOD}.",
    ),
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    ma, raw = get_moving_average(
        db, owner_id, metric_id,
        period if period is not None else settings.DEFAULT_MA_PERIOD,
    )
    return MovingAverageResponse(
        ma=[MovingAveragePointResponse(**p.to_dict()) for p in ma],
        raw=[LogRowResponse(date=str(r.date), metric_id=r.metric_id, value=r.value) for r in raw],
    )
