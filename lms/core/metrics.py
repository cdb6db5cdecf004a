"""Prometheus metric inventory for lms-service.

All metrics are declared here; the modules that own a behaviour import
the metric and increment/observe it at the point of action.

  HTTP           filled in by MetricsMiddleware for every request.
  Aggregation    one observation per Progress Aggregator call, labelled
                   by scope (student / course / all_students /
                   course_summary / dashboard).  Slow dashboard
                   aggregations show up here before they show up as
                   request latency.
  Completion     module completion toggles, split by direction.
  Rate limiting  429s on login/signup.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Progress metrics
# ---------------------------------------------------------------------------

AGGREGATION_COUNT = Counter(
    "progress_aggregations_total",
    "Progress aggregations computed, by scope",
    ["scope"],
)

AGGREGATION_DURATION = Histogram(
    "progress_aggregation_duration_seconds",
    "Time spent fetching rows and aggregating progress, by scope",
    ["scope"],
    # Dashboard and all-student scopes read whole tables.
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

COMPLETION_UPDATES = Counter(
    "module_completion_updates_total",
    "Module completion toggles applied",
    ["completed"],  # "true" or "false"
)

RATE_LIMIT_HITS = Counter(
    "rate_limit_hits_total",
    "Requests rejected by rate limiting (429s)",
    ["key_type"],  # "user" or "ip"
)
