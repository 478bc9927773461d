"""
Metric definition schemas.

GET   /config                  → list[MetricConfigResponse]
POST  /metrics                 → MetricCreateRequest → MetricConfigResponse
PATCH /metrics/{metric_id}     → MetricUpdateRequest → MetricConfigResponse
"""
from __future__ import annotations

from datetime import date
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from daylog.models.metric_config import MetricType


class MetricUpdateRequest(BaseModel):
    """Partial update; only the fields present in the body are written."""
    model_config = ConfigDict(use_enum_values=True, extra="forbid")

    metric_name: Optional[Annotated[str, Field(min_length=1, max_length=128)]] = None
    type: Optional[MetricType] = None
    private: Optional[bool] = None
    active: Optional[bool] = None
    required: Optional[bool] = None
    required_since: Optional[date] = None
    start_date: Optional[date] = None
    show_ma: Optional[bool] = None
    ma_periods_csv: Optional[str] = None
    default_value: Optional[float] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    disallowed_values: Optional[str] = None
    preset_values_csv: Optional[str] = None
    group: Optional[str] = None
    group_order: Optional[int] = None
    metric_order: Optional[int] = None
    is_calculated: Optional[bool] = None
    calc_expr: Optional[str] = None


class MetricCreateRequest(MetricUpdateRequest):
    metric_id: Annotated[str, Field(
        min_length=1,
        max_length=64,
        pattern=r"^[A-Za-z0-9_]+$",
        description="Use letters, numbers, and underscores only. Immutable.",
        examples=["sleep_hours"],
    )]
    metric_name: Annotated[str, Field(min_length=1, max_length=128)]
    type: MetricType
    private: bool = False
    active: bool = True
    show_ma: bool = False
    required: bool = False
    is_calculated: bool = False

    @field_validator("metric_name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class MetricConfigResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    metric_id: str
    metric_name: str
    type: str
    active: bool
    private: bool
    required: bool
    required_since: Optional[str] = None
    start_date: Optional[str] = None
    default_value: Optional[float] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    disallowed_values: Optional[str] = None
    preset_values_csv: Optional[str] = None
    show_ma: bool
    ma_periods_csv: Optional[str] = None
    ma_periods: list[int] = Field(
        default_factory=list,
        description="Parsed ma_periods_csv (defaults when blank).",
    )
    group: Optional[str] = None
    group_order: Optional[int] = None
    metric_order: Optional[int] = None
    is_calculated: bool
    calc_expr: Optional[str] = None
