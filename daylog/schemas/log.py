"""
Log schemas.

GET  /log          → list[LogRowResponse]
GET  /log/day      → list[DayValueResponse]
POST /save-log     → SaveLogRequest → SaveLogResponse
"""
from __future__ import annotations

import datetime as dt
from typing import Annotated, Optional

from pydantic import BaseModel, Field, field_validator


class LogRowResponse(BaseModel):
    date: str
    metric_id: str
    value: Optional[float]


class DayValueResponse(BaseModel):
    metric_id: str
    type: str
    value: Optional[float] = Field(description="Logged value, default, or calculated result.")
    is_default: bool = Field(description="True when value comes from default_value.")
    is_calculated: bool


class SaveLogEntry(BaseModel):
    metric_id: Annotated[str, Field(min_length=1, max_length=64)]
    value: Optional[float] = Field(
        description="null clears the logged value for this day.",
    )


class SaveLogRequest(BaseModel):
    date: dt.date
    entries: list[SaveLogEntry]

    @field_validator("entries")
    @classmethod
    def unique_metric_ids(cls, v: list[SaveLogEntry]) -> list[SaveLogEntry]:
        seen = set()
        for e in v:
            if e.metric_id in seen:
                raise ValueError(f"duplicate metric_id {e.metric_id!r} in entries")
            seen.add(e.metric_id)
        return v


class SaveLogResponse(BaseModel):
    ok: bool = True
    upserted: int
    deleted: int
