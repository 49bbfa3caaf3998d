"""Prometheus metric inventory.

Every metric the service exports is declared here; the modules that own
the behavior import the metric and increment/observe it in place.

HTTP metrics are filled by MetricsMiddleware. The credential metrics
answer the operational questions specific to this service:

  - How many issuances / verifications / revocations, and how do they end?
  - Is the content store running in degraded mirror mode right now?
    (content_store_mirror_writes_total rising = yes)
  - Which external collaborator is slow?
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
# Credential workflow metrics
# ---------------------------------------------------------------------------

CREDENTIAL_OPERATIONS = Counter(
    "credential_operations_total",
    "Credential workflow operations by outcome",
    # operation: issue|verify|revoke
    # outcome:   issue/revoke -> success|failure
    #            verify       -> valid|invalid|revoked|not_found
    ["operation", "outcome"],
)

CONTENT_STORE_MIRROR_WRITES = Counter(
    "content_store_mirror_writes_total",
    "Documents stored through the degraded mirror content store",
)

EXTERNAL_CALL_DURATION = Histogram(
    "external_call_duration_seconds",
    "Duration of calls to external collaborators during issuance",
    ["collaborator"],  # content_store|ledger|proof_artifact
    # Network round-trips to IPFS / a ledger node; QR rendering is ~ms.
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)
