"""Prometheus metrics for HTTP traffic.

Labels deliberately exclude the path to keep cardinality bounded.
"""

from prometheus_client import Counter, Histogram

http_requests_total = Counter(
    "saas_core_http_requests_total",
    "Total HTTP requests handled",
    ["method", "status_code"]
)

http_request_duration_seconds = Histogram(
    "saas_core_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

http_errors_total = Counter(
    "saas_core_http_errors_total",
    "Total failed HTTP requests by error kind",
    ["kind"]  # kind: ErrorKind value, e.g. not_found|validation|internal
)


def record_request(method: str, status_code: int, duration_seconds: float) -> None:
    http_requests_total.labels(method=method, status_code=str(status_code)).inc()
    http_request_duration_seconds.labels(method=method).observe(duration_seconds)
