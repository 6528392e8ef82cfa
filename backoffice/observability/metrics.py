"""Prometheus metrics for Backoffice."""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "backoffice_request_count_total",
    "Total number of HTTP requests processed",
    labelnames=["method", "route", "status"],
)

REQUEST_LATENCY = Histogram(
    "backoffice_request_latency_seconds",
    "HTTP request latency in seconds",
    labelnames=["method", "route"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

SETTINGS_CACHE_LOOKUPS = Counter(
    "backoffice_settings_cache_lookups_total",
    "Settings cache lookups",
    labelnames=["result"],
)

SETTINGS_UPDATED = Counter(
    "backoffice_settings_updated_total",
    "Setting keys written through PUT /settings",
)

AUDIT_LOG_WRITES = Counter(
    "backoffice_audit_log_writes_total",
    "Audit log write attempts",
    labelnames=["outcome"],
)

HISTORY_REVERTS = Counter(
    "backoffice_history_reverts_total",
    "Revert attempts against data history entries",
    labelnames=["outcome"],
)

FEATURE_FLAG_FETCHES = Counter(
    "backoffice_feature_flag_fetches_total",
    "Feature flag lookups by the source that answered them",
    labelnames=["source"],
)
