"""
Values for the daily logging form.

Each active metric gets its logged value for the day, or its default_value
when nothing is logged. Calculated metrics are evaluated over that same
context and are never pre-filled from defaults.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from daylog.services import row_store
from daylog.services.calc_expr import compute_calculated_values
from daylog.services.rows import LogRow, MetricRow, to_log_rows, to_metric_rows


@dataclass
class DayValue:
    metric_id: str
    type: str
    value: Optional[float]
    is_default: bool
    is_calculated: bool

    def to_dict(self) -> dict:
        return asdict(self)


def compute_day_values(metrics: list[MetricRow], day_rows: list[LogRow]) -> list[DayValue]:
    logged = {r.metric_id: r.value for r in day_rows if r.value is not None}
    active = [m for m in metrics if m.active]

    values: dict[str, Optional[float]] = {}
    defaults: set[str] = set()
    for m in active:
        if m.is_calculated:
            continue
        if m.metric_id in logged:
            values[m.metric_id] = logged[m.metric_id]
        elif m.default_value is not None:
            values[m.metric_id] = m.default_value
            defaults.add(m.metric_id)

    calculated = compute_calculated_values(active, values)

    out = []
    for m in active:
        out.append(DayValue(
            metric_id=m.metric_id,
            type=m.type,
            value=calculated[m.metric_id] if m.is_calculated else values.get(m.metric_id),
            is_default=m.metric_id in defaults,
            is_calculated=m.is_calculated,
        ))
    return out


def get_day_values(db: Session, owner_id: str, day: date) -> list[DayValue]:
    metrics = to_metric_rows(row_store.list_configs(db, owner_id, active=True))
    rows = to_log_rows(row_store.list_logs(db, owner_id, on=day))
    return compute_day_values(metrics, rows)
