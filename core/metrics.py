"""
Prometheus metrics for the license service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Gauge, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Client-facing flows
license_activations_total = Counter(
    "license_activations_total",
    "Activation requests by outcome",
    ["outcome"],
)

license_validations_total = Counter(
    "license_validations_total",
    "Validation heartbeats by outcome",
    ["outcome"],
)

license_keys_imported_total = Counter(
    "license_keys_imported_total",
    "Correctly signed keys imported on first activation",
    ["tier"],
)

binding_conflicts_total = Counter(
    "license_binding_conflicts_total",
    "Concurrent binding attempts rejected by the live-activation constraint",
)

# Admin flows
license_keys_generated_total = Counter(
    "license_keys_generated_total",
    "License keys generated by admins",
    ["tier"],
)

admin_actions_total = Counter(
    "license_admin_actions_total",
    "Admin override actions",
    ["action"],
)

# Current state metrics
live_activations = Gauge(
    "license_live_activations",
    "Number of machines currently bound to a key",
)
