"""
Checkbox streak engine.

Walks every calendar day from the metric's earliest relevant date to
today. A day is "true" when a non-zero value is logged; a false row and a
day with no row at all both count as false. The walk is O(days on record)
per metric, which is what makes absent days count.

Public API
----------
compute_streak(metric_id, rows, today, start_date)   -> StreakStats   (pure)
compute_checkbox_streaks(metrics, logs, today)       -> list[StreakStats]
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Optional

from daylog.services.rows import LogRow, MetricRow, group_by_metric


@dataclass
class StreakStats:
    metric_id: str
    current_streak_true: int = 0
    longest_streak_true: int = 0
    current_streak_false: int = 0
    longest_streak_false: int = 0
    last_true_date: Optional[date] = None
    days_since_last_true: Optional[int] = None
    metric_name: Optional[str] = None
    private: Optional[bool] = None
    active: Optional[bool] = None

    def to_dict(self) -> dict:
        out = asdict(self)
        if self.last_true_date is not None:
            out["last_true_date"] = self.last_true_date.isoformat()
        return out


def compute_streak(
    metric_id: str,
    rows: list[LogRow],
    today: date,
    start_date: Optional[date] = None,
) -> StreakStats:
    stats = StreakStats(metric_id=metric_id)
    if not rows:
        return stats

    true_days = {r.date for r in rows if r.is_true}
    earliest = min(r.date for r in rows)
    if start_date is not None and start_date < earliest:
        earliest = start_date

    run_true = run_false = 0
    day = earliest
    one = timedelta(days=1)
    while day <= today:
        if day in true_days:
            run_true += 1
            run_false = 0
            stats.last_true_date = day
            stats.longest_streak_true = max(stats.longest_streak_true, run_true)
        else:
            run_true = 0
            run_false += 1
            stats.longest_streak_false = max(stats.longest_streak_false, run_false)
        day += one

    stats.current_streak_true = run_true
    stats.current_streak_false = run_false
    if stats.last_true_date is not None:
        stats.days_since_last_true = (today - stats.last_true_date).days
    return stats


def compute_checkbox_streaks(
    metrics: list[MetricRow],
    logs: list[LogRow],
    today: date,
) -> list[StreakStats]:
    by_metric = group_by_metric(logs)
    out = []
    for m in sorted(metrics, key=lambda m: m.metric_id):
        if not m.is_checkbox or m.is_calculated:
            continue
        stats = compute_streak(m.metric_id, by_metric.get(m.metric_id, []), today, m.start_date)
        stats.metric_name = m.metric_name
        stats.private = m.private
        stats.active = m.active
        out.append(stats)
    return out
