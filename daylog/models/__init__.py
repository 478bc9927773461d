from .metric_config import MetricConfig, MetricType
from .log_entry import LogEntry

__all__ = [
    "MetricConfig",
    "MetricType",
    "LogEntry",
]
