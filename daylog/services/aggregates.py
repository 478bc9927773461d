"""
Aggregation engine — 7-day summary, lifetime and recent-window stats.

Every metric in scope produces exactly one row per table (one per window
for the recent table), with nulls/zeros when it has no data, so callers
can render a stable table.

Conventions
-----------
- checkbox "true" = non-zero value; numeric types = number, time, hhmm.
- stddev is the SAMPLE standard deviation (n-1); null below two values.
- min/max dates are the earliest date that attains the extreme.
- pct_true_lifetime is a fraction in [0, 1].

Public API
----------
summary_7d(metrics, logs, requested_date, today)       -> list[SummaryRow]
checkbox_lifetime(metrics, logs)                       -> list[CheckboxLifetime]
numeric_lifetime(metrics, logs)                        -> list[NumericLifetime]
numeric_recent(metrics, logs, today, windows)          -> list[NumericRecent]
get_summary_7d(db, owner_id, requested_date, today)    -> list[SummaryRow]
get_stats(db, owner_id, today)                         -> dict[str, list]
"""
from __future__ import annotations

import statistics
from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from daylog.core.config import settings
from daylog.services import row_store
from daylog.services.rows import LogRow, MetricRow, group_by_metric, to_log_rows, to_metric_rows
from daylog.services.streaks import compute_checkbox_streaks

SUMMARY_WINDOW_DAYS = 7


def _isoformat_dates(d: dict) -> dict:
    return {k: (v.isoformat() if isinstance(v, date) else v) for k, v in d.items()}


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class SummaryRow:
    metric_id: str
    type: str
    n_rows: int
    sum_7d: Optional[float]
    count_true_7d: Optional[int]
    avg_7d: Optional[float]

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CheckboxLifetime:
    metric_id: str
    metric_name: Optional[str]
    private: Optional[bool]
    active: Optional[bool]
    first_date: Optional[date] = None
    last_date: Optional[date] = None
    days_on_record: Optional[int] = None
    days_tracked: int = 0
    total_true: int = 0
    total_false: int = 0
    pct_true_lifetime: Optional[float] = None
    avg_days_between_true: Optional[float] = None

    def to_dict(self) -> dict:
        return _isoformat_dates(asdict(self))


@dataclass
class NumericLifetime:
    metric_id: str
    metric_name: Optional[str]
    private: Optional[bool]
    active: Optional[bool]
    first_date: Optional[date] = None
    last_date: Optional[date] = None
    days_on_record: Optional[int] = None
    days_tracked: int = 0
    value_count: int = 0
    avg_value: Optional[float] = None
    stddev_value: Optional[float] = None
    min_value: Optional[float] = None
    min_value_date: Optional[date] = None
    max_value: Optional[float] = None
    max_value_date: Optional[date] = None

    def to_dict(self) -> dict:
        return _isoformat_dates(asdict(self))


@dataclass
class NumericRecent:
    metric_id: str
    metric_name: Optional[str]
    private: Optional[bool]
    active: Optional[bool]
    window_days: int
    days_tracked_recent: int = 0
    value_count_recent: int = 0
    avg_value_recent: Optional[float] = None
    stddev_value_recent: Optional[float] = None
    min_value_recent: Optional[float] = None
    max_value_recent: Optional[float] = None
    first_date_recent: Optional[date] = None
    last_date_recent: Optional[date] = None

    def to_dict(self) -> dict:
        return _isoformat_dates(asdict(self))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _finite(rows: list[LogRow]) -> list[LogRow]:
    return [r for r in rows if r.value is not None]


def _stddev(values: list[float]) -> Optional[float]:
    return statistics.stdev(values) if len(values) >= 2 else None


def _extreme(rows: list[LogRow], pick) -> tuple[Optional[float], Optional[date]]:
    """(value, earliest date attaining it); rows must be sorted by date."""
    if not rows:
        return None, None
    target = pick(r.value for r in rows)
    for r in rows:
        if r.value == target:
            return target, r.date
    return target, None


def _span(rows: list[LogRow]) -> tuple[Optional[date], Optional[date], Optional[int], int]:
    """first_date, last_date, days_on_record, days_tracked"""
    if not rows:
        return None, None, None, 0
    first, last = rows[0].date, rows[-1].date
    return first, last, (last - first).days + 1, len({r.date for r in rows})


# ---------------------------------------------------------------------------
# 7-day summary
# ---------------------------------------------------------------------------

def summary_window(requested_date: Optional[date], today: date) -> tuple[date, date]:
    """[end - 6, end] with end = min(requested, today)."""
    end = today if requested_date is None or requested_date > today else requested_date
    return end - timedelta(days=SUMMARY_WINDOW_DAYS - 1), end


def summary_7d(
    metrics: list[MetricRow],
    logs: list[LogRow],
    requested_date: Optional[date],
    today: date,
) -> list[SummaryRow]:
    start, end = summary_window(requested_date, today)
    in_window = [r for r in logs if start <= r.date <= end]
    by_metric = group_by_metric(in_window)

    out: list[SummaryRow] = []
    for m in metrics:
        if not m.active or m.private:
            continue
        rows = by_metric.get(m.metric_id, [])

        if m.is_checkbox:
            count_true = sum(1 for r in rows if r.is_true)
            out.append(SummaryRow(
                metric_id=m.metric_id,
                type=m.type,
                n_rows=count_true,
                sum_7d=None,
                count_true_7d=count_true if rows else None,
                avg_7d=None,
            ))
            continue

        values = [r.value for r in _finite(rows)]
        n = len(values)
        total = sum(values) if n else None
        out.append(SummaryRow(
            metric_id=m.metric_id,
            type=m.type,
            n_rows=n,
            sum_7d=total,
            count_true_7d=None,
            avg_7d=total / n if n else None,
        ))

    out.sort(key=lambda r: (r.type, r.metric_id))
    return out


# ---------------------------------------------------------------------------
# Lifetime
# ---------------------------------------------------------------------------

def _checkbox_lifetime_row(m: MetricRow, rows: list[LogRow]) -> CheckboxLifetime:
    first, last, on_record, tracked = _span(rows)
    true_dates = sorted({r.date for r in rows if r.is_true})
    total_true = sum(1 for r in rows if r.is_true)
    total_false = len(rows) - total_true

    avg_gap = None
    if len(true_dates) >= 2:
        avg_gap = (true_dates[-1] - true_dates[0]).days / (len(true_dates) - 1)

    return CheckboxLifetime(
        metric_id=m.metric_id,
        metric_name=m.metric_name,
        private=m.private,
        active=m.active,
        first_date=first,
        last_date=last,
        days_on_record=on_record,
        days_tracked=tracked,
        total_true=total_true,
        total_false=total_false,
        pct_true_lifetime=total_true / tracked if tracked else None,
        avg_days_between_true=avg_gap,
    )


def checkbox_lifetime(metrics: list[MetricRow], logs: list[LogRow]) -> list[CheckboxLifetime]:
    by_metric = group_by_metric(logs)
    return [
        _checkbox_lifetime_row(m, by_metric.get(m.metric_id, []))
        for m in sorted(metrics, key=lambda m: m.metric_id)
        if m.is_checkbox
    ]


def _numeric_lifetime_row(m: MetricRow, rows: list[LogRow]) -> NumericLifetime:
    first, last, on_record, tracked = _span(rows)
    valued = _finite(rows)
    values = [r.value for r in valued]
    min_value, min_date = _extreme(valued, min)
    max_value, max_date = _extreme(valued, max)

    return NumericLifetime(
        metric_id=m.metric_id,
        metric_name=m.metric_name,
        private=m.private,
        active=m.active,
        first_date=first,
        last_date=last,
        days_on_record=on_record,
        days_tracked=tracked,
        value_count=len(values),
        avg_value=statistics.fmean(values) if values else None,
        stddev_value=_stddev(values),
        min_value=min_value,
        min_value_date=min_date,
        max_value=max_value,
        max_value_date=max_date,
    )


def numeric_lifetime(metrics: list[MetricRow], logs: list[LogRow]) -> list[NumericLifetime]:
    by_metric = group_by_metric(logs)
    return [
        _numeric_lifetime_row(m, by_metric.get(m.metric_id, []))
        for m in sorted(metrics, key=lambda m: m.metric_id)
        if m.is_numeric
    ]


# ---------------------------------------------------------------------------
# Recent windows
# ---------------------------------------------------------------------------

def numeric_recent(
    metrics: list[MetricRow],
    logs: list[LogRow],
    today: date,
    windows: list[int],
) -> list[NumericRecent]:
    by_metric = group_by_metric(logs)
    out: list[NumericRecent] = []
    for m in sorted(metrics, key=lambda m: m.metric_id):
        if not m.is_numeric:
            continue
        rows = by_metric.get(m.metric_id, [])
        for window in sorted(windows):
            start = today - timedelta(days=window - 1)
            recent = [r for r in rows if start <= r.date <= today]
            values = [r.value for r in _finite(recent)]
            out.append(NumericRecent(
                metric_id=m.metric_id,
                metric_name=m.metric_name,
                private=m.private,
                active=m.active,
                window_days=window,
                days_tracked_recent=len({r.date for r in recent}),
                value_count_recent=len(values),
                avg_value_recent=statistics.fmean(values) if values else None,
                stddev_value_recent=_stddev(values),
                min_value_recent=min(values) if values else None,
                max_value_recent=max(values) if values else None,
                first_date_recent=recent[0].date if recent else None,
                last_date_recent=recent[-1].date if recent else None,
            ))
    return out


# ---------------------------------------------------------------------------
# Public — DB-backed helpers
# ---------------------------------------------------------------------------

def get_summary_7d(
    db: Session,
    owner_id: str,
    requested_date: Optional[date],
    today: date,
) -> list[SummaryRow]:
    metrics = to_metric_rows(row_store.list_configs(db, owner_id, active=True, private=False))
    if not metrics:
        return []
    start, end = summary_window(requested_date, today)
    logs = to_log_rows(row_store.list_logs(
        db, owner_id,
        date_from=start,
        date_to=end,
        metric_ids=[m.metric_id for m in metrics],
    ))
    return summary_7d(metrics, logs, requested_date, today)


def get_stats(db: Session, owner_id: str, today: date) -> dict[str, list]:
    """The four stat tables, each ordered by metric_id."""
    metrics = to_metric_rows(row_store.list_configs(db, owner_id))
    logs = to_log_rows(row_store.list_logs(db, owner_id, date_to=today))
    return {
        "checkbox_lifetime": checkbox_lifetime(metrics, logs),
        "checkbox_streaks": compute_checkbox_streaks(metrics, logs, today),
        "numeric_lifetime": numeric_lifetime(metrics, logs),
        "numeric_recent": numeric_recent(metrics, logs, today, settings.recent_windows_list),
    }
