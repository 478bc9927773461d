"""
Completion / date-hint engine.

Definitions
-----------
Required set     = active, required, non-calculated metrics.
Required start   = min over the required set of (required_since ?? start_date).
Complete day     = a date >= required start on which every required metric
                   has a log row.

Outputs (DateHints)
-------------------
last_log_date                 latest date with any row, any metric
last_required_complete_date   latest complete day
missing_required_days         calendar days strictly between the last
                              complete day and today
suggested_date                day after the last complete day, else the
                              last logged day, else today; never after today
required_days_completed       complete days in [required start, today]
required_days_possible        inclusive day count of [required start, today]

All arithmetic is on datetime.date (whole calendar days). Ordering of
date objects matches lexical YYYY-MM-DD ordering.

Public API
----------
compute_date_hints(today, metrics, logs)  -> DateHints   (pure)
get_date_hints(db, owner_id, today)       -> DateHints
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from daylog.services import row_store
from daylog.services.rows import LogRow, MetricRow, to_log_rows, to_metric_rows

logger = logging.getLogger(__name__)


@dataclass
class DateHints:
    today: date
    last_log_date: Optional[date]
    last_required_complete_date: Optional[date]
    suggested_date: date
    missing_required_days: int
    required_days_completed: int
    required_days_possible: int

    def to_dict(self) -> dict:
        out = asdict(self)
        for key, value in out.items():
            if isinstance(value, date):
                out[key] = value.isoformat()
        return out


def required_metrics(metrics: list[MetricRow]) -> list[MetricRow]:
    return [m for m in metrics if m.active and m.required and not m.is_calculated]


def effective_required_start(required: list[MetricRow]) -> Optional[date]:
    starts = [m.effective_required_start for m in required if m.effective_required_start]
    return min(starts) if starts else None


def _suggest(today: date, last_complete: Optional[date], last_log: Optional[date]) -> date:
    if last_complete is not None:
        return min(last_complete + timedelta(days=1), today)
    if last_log is not None:
        return min(last_log, today)
    return today


def compute_date_hints(
    today: date,
    metrics: list[MetricRow],
    logs: list[LogRow],
    last_log_date: Optional[date] = None,
) -> DateHints:
    """
    `metrics` may be the owner's full config; only the required set is used.
    `logs` must cover every required metric from the required start onward.
    `last_log_date` lets the caller pass the latest date of any metric when
    `logs` was narrowed to the required set.
    """
    candidates = [r.date for r in logs]
    if last_log_date is not None:
        candidates.append(last_log_date)
    last_log = max(candidates, default=None)
    required = required_metrics(metrics)

    if not required:
        return DateHints(
            today=today,
            last_log_date=last_log,
            last_required_complete_date=None,
            suggested_date=today,
            missing_required_days=0,
            required_days_completed=0,
            required_days_possible=0,
        )

    start = effective_required_start(required)
    last_complete: Optional[date] = None
    missing = 0
    completed = 0
    possible = 0

    if start is not None:
        required_ids = {m.metric_id for m in required}
        by_date: dict[date, set[str]] = {}
        for row in logs:
            if row.date >= start and row.metric_id in required_ids:
                by_date.setdefault(row.date, set()).add(row.metric_id)

        complete_days = sorted(d for d, ids in by_date.items() if len(ids) == len(required_ids))
        if complete_days:
            last_complete = complete_days[-1]
            missing = max(0, (today - last_complete).days - 1)

        if start <= today:
            possible = (today - start).days + 1
            completed = sum(1 for d in complete_days if d <= today)
    else:
        logger.debug("date_hints: no required metric has a start date; skipping completion")

    return DateHints(
        today=today,
        last_log_date=last_log,
        last_required_complete_date=last_complete,
        suggested_date=_suggest(today, last_complete, last_log),
        missing_required_days=missing,
        required_days_completed=completed,
        required_days_possible=possible,
    )


def get_date_hints(db: Session, owner_id: str, today: date) -> DateHints:
    """Load the owner's config and the rows the engine needs, then compute."""
    metrics = to_metric_rows(row_store.list_configs(db, owner_id, active=True, required=True))
    required = required_metrics(metrics)

    logs: list[LogRow] = []
    start = effective_required_start(required)
    if start is not None:
        logs = to_log_rows(row_store.list_logs(
            db, owner_id,
            date_from=start,
            metric_ids=[m.metric_id for m in required],
        ))

    return compute_date_hints(
        today, metrics, logs,
        last_log_date=row_store.last_log_date(db, owner_id),
    )
