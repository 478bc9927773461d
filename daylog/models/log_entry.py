"""
LogEntry — one value per (owner, date, metric), table `log`.

Sparse: no row means "not logged", which is different from a logged 0.
Saving upserts on (owner_id, date, metric_id); clearing a field deletes
the row.
"""
import datetime as dt

from sqlalchemy import Date, DateTime, Float, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from daylog.db.base import Base


class LogEntry(Base):
    __tablename__ = "log"
    __table_args__ = (
        UniqueConstraint("owner_id", "date", "metric_id", name="uq_log_owner_date_metric"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    metric_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
