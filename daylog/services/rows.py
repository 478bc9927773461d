"""
Typed rows handed to the pure engines.

The engines never see ORM objects or raw dicts: the row store converts
whatever it loaded into these frozen dataclasses first. Malformed input
(unparsable date, non-numeric value) is normalised here to None so the
engines can treat it as "not logged".
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from daylog.models.log_entry import LogEntry
from daylog.models.metric_config import NUMERIC_TYPES, MetricConfig, MetricType


def coerce_date(value: Any) -> Optional[date]:
    """Accept a date or a YYYY-MM-DD string; anything else becomes None."""
    if value is None:
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def coerce_number(value: Any) -> Optional[float]:
    """Finite float or None. Booleans count as 0/1."""
    if value is None:
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(num):
        return None
    return num


@dataclass(frozen=True)
class MetricRow:
    metric_id: str
    metric_name: str = ""
    type: str = MetricType.number.value
    active: bool = True
    private: bool = False
    required: bool = False
    required_since: Optional[date] = None
    start_date: Optional[date] = None
    default_value: Optional[float] = None
    is_calculated: bool = False
    calc_expr: Optional[str] = None
    show_ma: bool = False
    ma_periods_csv: Optional[str] = None

    @property
    def is_checkbox(self) -> bool:
        return self.type == MetricType.checkbox.value

    @property
    def is_numeric(self) -> bool:
        return self.type in NUMERIC_TYPES

    @property
    def effective_required_start(self) -> Optional[date]:
        return self.required_since or self.start_date

    @classmethod
    def from_model(cls, cfg: MetricConfig) -> "MetricRow":
        return cls(
            metric_id=cfg.metric_id,
            metric_name=cfg.metric_name or "",
            type=cfg.type.value if hasattr(cfg.type, "value") else str(cfg.type),
            active=bool(cfg.active),
            private=bool(cfg.private),
            required=bool(cfg.required),
            required_since=coerce_date(cfg.required_since),
            start_date=coerce_date(cfg.start_date),
            default_value=coerce_number(cfg.default_value),
            is_calculated=bool(cfg.is_calculated),
            calc_expr=cfg.calc_expr,
            show_ma=bool(cfg.show_ma),
            ma_periods_csv=cfg.ma_periods_csv,
        )


@dataclass(frozen=True)
class LogRow:
    date: date
    metric_id: str
    value: Optional[float]

    @property
    def is_true(self) -> bool:
        return self.value is not None and self.value != 0

    @classmethod
    def from_model(cls, entry: LogEntry) -> Optional["LogRow"]:
        day = coerce_date(entry.date)
        if day is None:
            return None
        return cls(date=day, metric_id=entry.metric_id, value=coerce_number(entry.value))


def to_metric_rows(configs: list[MetricConfig]) -> list[MetricRow]:
    return [MetricRow.from_model(c) for c in configs]


def to_log_rows(entries: list[LogEntry]) -> list[LogRow]:
    """Convert ORM rows, dropping any whose date cannot be parsed."""
    rows = []
    for entry in entries:
        row = LogRow.from_model(entry)
        if row is not None:
            rows.append(row)
    return rows


def group_by_metric(rows: list[LogRow]) -> dict[str, list[LogRow]]:
    """metric_id -> rows sorted by date."""
    grouped: dict[str, list[LogRow]] = {}
    for row in rows:
        grouped.setdefault(row.metric_id, []).append(row)
    for bucket in grouped.values():
        bucket.sort(key=lambda r: r.date)
    return grouped
