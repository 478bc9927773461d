"""
Row store: owner-scoped access to the `config` and `log` tables.

Every query filters on owner_id. Data-access failures are re-raised as
RowStoreError so the boundary can answer with an error envelope; nothing
here swallows a database error.

Public API
----------
list_configs(db, owner_id, ...)                   -> list[MetricConfig]
get_config(db, owner_id, metric_id)               -> MetricConfig
create_metric(db, owner_id, metric_id, fields)    -> MetricConfig
update_metric(db, owner_id, metric_id, fields)    -> MetricConfig
list_logs(db, owner_id, ...)                      -> list[LogEntry]
last_log_date(db, owner_id)                       -> date | None
save_log(db, owner_id, day, entries)              -> SaveResult
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from daylog.core.errors import MetricAlreadyExistsError, MetricNotFoundError, RowStoreError
from daylog.models.log_entry import LogEntry
from daylog.models.metric_config import MetricConfig

logger = logging.getLogger(__name__)


# Fields a caller may set on create/update (metric_id is create-only).
CONFIG_FIELDS = frozenset({
    "metric_name", "type", "private", "active", "required", "required_since",
    "show_ma", "ma_periods_csv", "default_value", "min_value", "max_value",
    "disallowed_values", "preset_values_csv", "start_date", "group",
    "group_order", "metric_order", "is_calculated", "calc_expr",
})
# NOT NULL columns: an explicit null in an update leaves them unchanged.
_NON_NULLABLE = frozenset({
    "metric_name", "type", "private", "active", "required", "show_ma", "is_calculated",
})


@dataclass
class SaveEntry:
    """One field of the day form; value None clears the logged row."""
    metric_id: str
    value: Optional[float]


@dataclass
class SaveResult:
    upserted: int
    deleted: int
    start_dates_set: int


def _ev(v):
    return v.value if hasattr(v, "value") else v


def _store_error(operation: str, owner_id: str, exc: SQLAlchemyError, **context: Any) -> RowStoreError:
    """Log the driver error server-side; the client only sees the operation name."""
    logger.error(
        "%s failed for owner %s: %s", operation, owner_id, exc,
        extra={"extra_fields": {"operation": operation, "owner_id": owner_id, **context}},
    )
    return RowStoreError(operation)


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------

def list_configs(
    db: Session,
    owner_id: str,
    active: Optional[bool] = None,
    required: Optional[bool] = None,
    private: Optional[bool] = None,
    type: Optional[str] = None,
) -> list[MetricConfig]:
    """Owner's metric definitions in display order."""
    q = db.query(MetricConfig).filter(MetricConfig.owner_id == owner_id)
    if active is not None:
        q = q.filter(MetricConfig.active == active)
    if required is not None:
        q = q.filter(MetricConfig.required == required)
    if private is not None:
        q = q.filter(MetricConfig.private == private)
    if type is not None:
        q = q.filter(MetricConfig.type == _ev(type))
    q = q.order_by(
        MetricConfig.group_order.asc().nulls_first(),
        MetricConfig.group.asc().nulls_first(),
        MetricConfig.metric_order.asc().nulls_first(),
        MetricConfig.metric_id.asc(),
    )
    try:
        return q.all()
    except SQLAlchemyError as exc:
        raise _store_error("list_configs", owner_id, exc) from exc


def get_config(db: Session, owner_id: str, metric_id: str) -> MetricConfig:
    try:
        cfg = (
            db.query(MetricConfig)
            .filter(MetricConfig.owner_id == owner_id, MetricConfig.metric_id == metric_id)
            .first()
        )
    except SQLAlchemyError as exc:
        raise _store_error("get_config", owner_id, exc, metric_id=metric_id) from exc
    if cfg is None:
        raise MetricNotFoundError(metric_id)
    return cfg


def create_metric(db: Session, owner_id: str, metric_id: str, fields: dict[str, Any]) -> MetricConfig:
    values = {
        k: _ev(v) for k, v in fields.items()
        if k in CONFIG_FIELDS and not (v is None and k in _NON_NULLABLE)
    }
    cfg = MetricConfig(owner_id=owner_id, metric_id=metric_id, **values)
    db.add(cfg)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise MetricAlreadyExistsError(metric_id) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise _store_error("create_metric", owner_id, exc, metric_id=metric_id) from exc
    db.refresh(cfg)
    logger.info(
        "owner %s created metric %s", owner_id, metric_id,
        extra={"extra_fields": {"owner_id": owner_id, "metric_id": metric_id}},
    )
    return cfg


def update_metric(db: Session, owner_id: str, metric_id: str, fields: dict[str, Any]) -> MetricConfig:
    cfg = get_config(db, owner_id, metric_id)
    for key, value in fields.items():
        if key not in CONFIG_FIELDS:
            continue
        if value is None and key in _NON_NULLABLE:
            continue
        setattr(cfg, key, _ev(value))
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise _store_error("update_metric", owner_id, exc, metric_id=metric_id) from exc
    db.refresh(cfg)
    return cfg


# ---------------------------------------------------------------------------
# log
# ---------------------------------------------------------------------------

def list_logs(
    db: Session,
    owner_id: str,
    on: Optional[date] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    metric_ids: Optional[Iterable[str]] = None,
) -> list[LogEntry]:
    """Owner's log rows sorted by (date, metric_id)."""
    q = db.query(LogEntry).filter(LogEntry.owner_id == owner_id)
    if on is not None:
        q = q.filter(LogEntry.date == on)
    if date_from is not None:
        q = q.filter(LogEntry.date >= date_from)
    if date_to is not None:
        q = q.filter(LogEntry.date <= date_to)
    if metric_ids is not None:
        ids = list(metric_ids)
        if not ids:
            return []
        q = q.filter(LogEntry.metric_id.in_(ids))
    q = q.order_by(LogEntry.date.asc(), LogEntry.metric_id.asc())
    try:
        return q.all()
    except SQLAlchemyError as exc:
        raise _store_error("list_logs", owner_id, exc) from exc


def last_log_date(db: Session, owner_id: str) -> Optional[date]:
    try:
        return (
            db.query(func.max(LogEntry.date))
            .filter(LogEntry.owner_id == owner_id)
            .scalar()
        )
    except SQLAlchemyError as exc:
        raise _store_error("last_log_date", owner_id, exc) from exc


def save_log(db: Session, owner_id: str, day: date, entries: list[SaveEntry]) -> SaveResult:
    """
    Persist one day of the form in a single transaction:
      - non-null values are upserted on (owner_id, date, metric_id)
      - null values delete the row
      - metrics without a start_date get `day` as their start_date
    Concurrent saves for the same key are last-write-wins.
    """
    to_upsert = [e for e in entries if e.value is not None]
    to_delete = [e.metric_id for e in entries if e.value is None]

    try:
        existing = {
            row.metric_id: row
            for row in db.query(LogEntry).filter(
                LogEntry.owner_id == owner_id,
                LogEntry.date == day,
                LogEntry.metric_id.in_([e.metric_id for e in to_upsert]),
            )
        } if to_upsert else {}

        for e in to_upsert:
            row = existing.get(e.metric_id)
            if row is None:
                row = LogEntry(owner_id=owner_id, date=day, metric_id=e.metric_id, value=e.value)
                db.add(row)
                existing[e.metric_id] = row
            else:
                row.value = e.value

        deleted = 0
        if to_delete:
            deleted = (
                db.query(LogEntry)
                .filter(
                    LogEntry.owner_id == owner_id,
                    LogEntry.date == day,
                    LogEntry.metric_id.in_(to_delete),
                )
                .delete(synchronize_session=False)
            )

        start_dates_set = 0
        if to_upsert:
            start_dates_set = (
                db.query(MetricConfig)
                .filter(
                    MetricConfig.owner_id == owner_id,
                    MetricConfig.start_date.is_(None),
                    MetricConfig.metric_id.in_({e.metric_id for e in to_upsert}),
                )
                .update({MetricConfig.start_date: day}, synchronize_session=False)
            )

        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise _store_error("save_log", owner_id, exc, day=day.isoformat()) from exc

    logger.info(
        "owner %s saved %s: upserted=%d deleted=%d",
        owner_id, day, len(to_upsert), deleted,
        extra={"extra_fields": {
            "owner_id": owner_id,
            "day": day.isoformat(),
            "upserted": len(to_upsert),
            "deleted": deleted,
        }},
    )
    return SaveResult(upserted=len(to_upsert), deleted=deleted, start_dates_set=start_dates_set)
