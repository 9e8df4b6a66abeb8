"""Custom Prometheus metrics for the Daily Commit job.

These metrics are exposed at /metrics endpoint and should be scraped by Prometheus.
Alert rules should be configured for:
- job_invocations_total{outcome="failure"} (job not landing commits)
- retry_exhausted_total (backend instability)
- metrics_flushes_total{outcome="failure"} (aggregated metrics being dropped)
- rate_limit_rejections_total (HTTP trigger abuse)
"""

from prometheus_client import Counter, Histogram

# === Invocation Metrics ===

job_invocations_total = Counter(
    "job_invocations_total",
    "Total job invocations by trigger and outcome",
    ["trigger", "outcome"],
)
"""
Job invocations by trigger and outcome.

Labels:
- trigger: http (POST /commit), schedule (Celery beat)
- outcome: success, failure, rate_limited
"""

job_duration_seconds = Histogram(
    "job_duration_seconds",
    "Job invocation duration in seconds",
    ["trigger"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

# === Retry Metrics ===

retries_total = Counter(
    "retries_total",
    "Total retries scheduled by operation",
    ["operation"],
)
"""
Retries scheduled by the retry executor.

Labels:
- operation: credential_fetch, file_rewrite, scm_publish

Alert thresholds:
- WARN: retries on > 10% of invocations
"""

retry_exhausted_total = Counter(
    "retry_exhausted_total",
    "Operations that gave up after retrying",
    ["operation"],
)

# === Credential Cache Metrics ===

credential_cache_requests_total = Counter(
    "credential_cache_requests_total",
    "Credential cache lookups by result",
    ["result"],
)
"""
Labels:
- result: hit, miss
"""

# === Metrics Aggregator ===

metrics_flushes_total = Counter(
    "metrics_flushes_total",
    "Aggregated metric batch flushes by outcome",
    ["outcome"],
)
"""
Labels:
- outcome: success, failure (batch dropped)
"""

# === Rate Limiting ===

rate_limit_rejections_total = Counter(
    "rate_limit_rejections_total",
    "Requests rejected by the fixed-window rate limiter",
)
