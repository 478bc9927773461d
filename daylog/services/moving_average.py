"""
Trailing moving averages over a metric's logged values.

For each logged date d, ma_value is the mean of the finite values dated in
[d - period + 1, d]. The window is measured in calendar days; days without
a row are skipped rather than counted as zero.
"""
from __future__ import annotations

import statistics
from collections import deque
from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from daylog.core.errors import InvalidPeriodError
from daylog.services import row_store
from daylog.services.rows import LogRow, to_log_rows

MAX_PERIOD = 3650
DEFAULT_PERIODS = [7, 30, 90, 365]


@dataclass
class MovingAveragePoint:
    metric_id: str
    period: int
    date: date
    ma_value: Optional[float]

    def to_dict(self) -> dict:
        out = asdict(self)
        out["date"] = self.date.isoformat()
        return out


def parse_ma_periods(csv: Optional[str]) -> list[int]:
    """Positive integers from "7, 30,x" -> [7, 30]; blank -> DEFAULT_PERIODS."""
    if not csv or not csv.strip():
        return list(DEFAULT_PERIODS)
    periods = []
    for part in csv.split(","):
        part = part.strip()
        if part.isdigit() and int(part) > 0:
            periods.append(int(part))
    return periods


def validate_period(period: int) -> int:
    if period < 1 or period > MAX_PERIOD:
        raise InvalidPeriodError(period=period, max_period=MAX_PERIOD)
    return period


def moving_average(metric_id: str, rows: list[LogRow], period: int) -> list[MovingAveragePoint]:
    if period < 1:
        return []
    ordered = sorted((r for r in rows if r.value is not None), key=lambda r: r.date)

    window: deque[LogRow] = deque()
    out: list[MovingAveragePoint] = []
    for row in ordered:
        window.append(row)
        cutoff = row.date - timedelta(days=period - 1)
        while window[0].date < cutoff:
            window.popleft()
        out.append(MovingAveragePoint(
            metric_id=metric_id,
            period=period,
            date=row.date,
            ma_value=statistics.fmean(r.value for r in window),
        ))
    return out


def get_moving_average(
    db: Session,
    owner_id: str,
    metric_id: str,
    period: int,
) -> tuple[list[MovingAveragePoint], list[LogRow]]:
    """(ma series, raw rows) for one of the owner's metrics."""
    validate_period(period)
    row_store.get_config(db, owner_id, metric_id)
    raw = to_log_rows(row_store.list_logs(db, owner_id, metric_ids=[metric_id]))
    return moving_average(metric_id, raw, period), raw
