from __future__ import annotations

from prometheus_client import Counter, Histogram

forecast_requests_total = Counter(
    "forecast_requests_total",
    "Total point forecast HTTP attempts",
    labelnames=["model"],
)

forecast_errors_total = Counter(
    "forecast_errors_total",
    "Total failed point forecast attempts",
    labelnames=["model", "error_type"],
)

forecast_retries_total = Counter(
    "forecast_retries_total",
    "Point forecast attempts scheduled after a failure",
    labelnames=["model"],
)

forecast_latency_seconds = Histogram(
    "forecast_latency_seconds",
    "Latency of point forecast HTTP attempts",
    labelnames=["model"],
    buckets=(0.1, 0.3, 0.5, 1, 2, 5, 10, 20, 30),
)

forecast_points_total = Counter(
    "forecast_points_total",
    "Points settled by batch enrichment",
    labelnames=["outcome"],
)

forecast_batch_duration_seconds = Histogram(
    "forecast_batch_duration_seconds",
    "Wall time of one batch enrichment run",
    buckets=(0.5, 1, 2, 5, 10, 20, 30, 60, 120),
)
