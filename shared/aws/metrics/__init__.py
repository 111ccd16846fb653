"""CloudWatch 메트릭 배치 조회 (GetMetricData API)."""

from .batch_metrics import (
    MAX_METRIC_DATA_QUERIES,
    METRIC_PERIOD_SECONDS,
    MetricQuery,
    MetricsFetcher,
    Statistic,
    batch_ids,
    parse_query_index,
)

__all__ = [
    "MAX_METRIC_DATA_QUERIES",
    "METRIC_PERIOD_SECONDS",
    "MetricQuery",
    "MetricsFetcher",
    "Statistic",
    "batch_ids",
    "parse_query_index",
]
