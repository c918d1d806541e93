"""Prometheus metrics for the BasicAuthenticator Operator."""

from prometheus_client import Counter, Gauge, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "basic_auth_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "basic_auth_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

requeue_total = Counter(
    "basic_auth_operator_requeue_total",
    "Total number of requeues requested by reconciliations",
    ["kind", "reason"],
)

error_total = Counter(
    "basic_auth_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

# Dependent object metrics
object_writes_total = Counter(
    "basic_auth_operator_object_writes_total",
    "Total number of writes to dependent objects",
    ["object_kind", "operation"],
)

drift_detected_total = Counter(
    "basic_auth_operator_drift_detected_total",
    "Total number of configuration drift detections",
    ["kind", "resource_type"],
)

sidecar_injections_total = Counter(
    "basic_auth_operator_sidecar_injections_total",
    "Total number of sidecar injections into target workloads",
    ["result"],
)

ready_replicas = Gauge(
    "basic_auth_operator_ready_replicas",
    "Ready proxy replicas observed per BasicAuthenticator",
    ["namespace", "name"],
)

resource_status_total = Counter(
    "basic_auth_operator_resource_status_total",
    "Resource status transitions written by the operator",
    ["kind", "status"],
)

# API call metrics
api_call_total = Counter(
    "basic_auth_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "basic_auth_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "basic_auth_operator_rate_limit_hits_total",
    "Total number of rate limit hits",
    ["api_type"],
)
