from prometheus_client import Counter, Histogram, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        # Try to create it
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # If it already exists, retrieve it from the registry
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "todo_requests_total",
    "Total API requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "todo_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

VALIDATIONS_TOTAL = get_or_create_metric(
    "todo_validations_total",
    "Todo text validations by resulting status",
    Counter,
    labelnames=["status"],
)

TODOS_CREATED_TOTAL = get_or_create_metric(
    "todo_inserts_total", "Todos inserted into the store", Counter, labelnames=["source"]
)


def record_request(endpoint: str, status: str, started: float, now: float) -> None:
    """Best-effort request accounting; metrics never fail a request."""
    try:
        REQUESTS_TOTAL.labels(endpoint=endpoint, status=status).inc()
        REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(now - started)
    except Exception:
        pass
