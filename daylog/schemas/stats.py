"""
Derived-statistics schemas.

GET /date-hints   → DateHintsResponse
GET /summary-7d   → list[SummaryRowResponse]
GET /stats        → StatsResponse
GET /ma           → MovingAverageResponse
"""
from typing import Optional

from pydantic import BaseModel, Field

from daylog.schemas.log import LogRowResponse


class DateHintsResponse(BaseModel):
    today: str
    last_log_date: Optional[str] = None
    last_required_complete_date: Optional[str] = Field(
        default=None,
        description="Latest day on which every required metric was logged.",
    )
    suggested_date: str = Field(description="Next day to log; never after today.")
    missing_required_days: int = Field(
        description="Days strictly between the last complete day and today."
    )
    required_days_completed: int
    required_days_possible: int


class SummaryRowResponse(BaseModel):
    metric_id: str
    type: str
    n_rows: int
    sum_7d: Optional[float] = None
    count_true_7d: Optional[int] = None
    avg_7d: Optional[float] = None


class _MetricStatBase(BaseModel):
    metric_id: str
    metric_name: Optional[str] = None
    private: Optional[bool] = None
    active: Optional[bool] = None


class CheckboxLifetimeResponse(_MetricStatBase):
    first_date: Optional[str] = None
    last_date: Optional[str] = None
    days_on_record: Optional[int] = None
    days_tracked: int
    total_true: int
    total_false: int
    pct_true_lifetime: Optional[float] = Field(default=None, description="Fraction 0.0–1.0.")
    avg_days_between_true: Optional[float] = None


class CheckboxStreakResponse(_MetricStatBase):
    current_streak_true: int
    longest_streak_true: int
    current_streak_false: int
    longest_streak_false: int
    last_true_date: Optional[str] = None
    days_since_last_true: Optional[int] = None


class NumericLifetimeResponse(_MetricStatBase):
    first_date: Optional[str] = None
    last_date: Optional[str] = None
    days_on_record: Optional[int] = None
    days_tracked: int
    value_count: int
    avg_value: Optional[float] = None
    stddev_value: Optional[float] = Field(default=None, description="Sample standard deviation.")
    min_value: Optional[float] = None
    min_value_date: Optional[str] = None
    max_value: Optional[float] = None
    max_value_date: Optional[str] = None


class NumericRecentResponse(_MetricStatBase):
    window_days: int
    days_tracked_recent: int
    value_count_recent: int
    avg_value_recent: Optional[float] = None
    stddev_value_recent: Optional[float] = None
    min_value_recent: Optional[float] = None
    max_value_recent: Optional[float] = None
    first_date_recent: Optional[str] = None
    last_date_recent: Optional[str] = None


class StatsResponse(BaseModel):
    checkbox_lifetime: list[CheckboxLifetimeResponse]
    checkbox_streaks: list[CheckboxStreakResponse]
    numeric_lifetime: list[NumericLifetimeResponse]
    numeric_recent: list[NumericRecentResponse]


class MovingAveragePointResponse(BaseModel):
    metric_id: str
    period: int
    date: str
    ma_value: Optional[float] = None


class MovingAverageResponse(BaseModel):
    ma: list[MovingAveragePointResponse]
    raw: list[LogRowResponse]
