"""
MetricConfig — one row per metric definition per owner (table `config`).

metric_id is immutable once created and unique within an owner's set.
`time` and `hhmm` metrics store minutes since midnight; `checkbox`
metrics store 0/1 in the log table.
"""
import datetime as dt
import enum

from sqlalchemy import Boolean, Date, DateTime, Float, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from daylog.db.base import Base


class MetricType(str, enum.Enum):
    checkbox = "checkbox"
    number = "number"
    time = "time"
    hhmm = "hhmm"


NUMERIC_TYPES = frozenset({MetricType.number.value, MetricType.time.value, MetricType.hhmm.value})


class MetricConfig(Base):
    __tablename__ = "config"
    __table_args__ = (
        UniqueConstraint("owner_id", "metric_id", name="uq_config_owner_metric"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    metric_id: Mapped[str] = mapped_column(String(64), nullable=False)
    metric_name: Mapped[str] = mapped_column(String(128), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default=MetricType.number.value)

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    required_since: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    start_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)

    default_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    min_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    disallowed_values: Mapped[str | None] = mapped_column(String(256), nullable=True)
    preset_values_csv: Mapped[str | None] = mapped_column(String(256), nullable=True)

    show_ma: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ma_periods_csv: Mapped[str | None] = mapped_column(String(64), nullable=True)

    group: Mapped[str | None] = mapped_column(String(64), nullable=True)
    group_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    metric_order: Mapped[int | None] = mapped_column(Integer, nullable=True)

    is_calculated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    calc_expr: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
