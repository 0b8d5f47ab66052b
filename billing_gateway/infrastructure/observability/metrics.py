"""Prometheus metrics for invoice generation, status changes, deletions and external calls"""

from prometheus_client import Counter, Histogram

# Lifecycle metrics
invoices_generated_counter = Counter(
    "billing_invoices_generated_total",
    "Invoices generated from contracts",
    ["contract_type"],  # single | installment
)

status_transition_counter = Counter(
    "billing_status_transitions_total",
    "Explicit status changes",
    ["entity", "status"],  # contract | invoice, resulting status
)

cascade_deletion_counter = Counter(
    "billing_deleted_records_total",
    "Records removed by deletes, cascades included",
    ["entity"],  # client | contract | invoice
)

# External services
external_failure_counter = Counter(
    "billing_external_failures_total",
    "Failed calls to external services",
    ["service"],  # address | report
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_invoice_generation(contract_type: str, count: int) -> None:
    invoices_generated_counter.labels(contract_type=contract_type).inc(count)


def record_status_transition(entity: str, status: str) -> None:
    status_transition_counter.labels(entity=entity, status=status).inc()


def record_deletion(clients: int = 0, contracts: int = 0, invoices: int = 0) -> None:
    """Count removed records per entity, skipping entities with nothing removed"""
    for entity, count in (("client", clients), ("contract", contracts), ("invoice", invoices)):
        if count:
            cascade_deletion_counter.labels(entity=entity).inc(count)
