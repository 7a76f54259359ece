from __future__ import annotations

from prometheus_client import Counter, Histogram

RECONCILE_TOTAL = Counter(
    "scheduled_cronjob_reconcile_total",
    "Number of reconciliations",
    labelnames=("kind", "result"),
)

RECONCILE_DURATION = Histogram(
    "scheduled_cronjob_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    labelnames=("kind",),
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
)

API_REQUESTS_TOTAL = Counter(
    "scheduled_cronjob_api_requests_total",
    "Requests sent to the Kubernetes API server",
    labelnames=("kind", "verb", "result"),
)

EVENTS_TOTAL = Counter(
    "scheduled_cronjob_events_total",
    "Audit events submitted, by outcome",
    labelnames=("result",),
)

STATUS_UPDATES_TOTAL = Counter(
    "scheduled_cronjob_status_updates_total",
    "Status subresource updates, by outcome",
    labelnames=("result",),
)

STATUS_CONFLICTS_TOTAL = Counter(
    "scheduled_cronjob_status_conflicts_total",
    "Status replaces rejected with a resourceVersion conflict",
)
