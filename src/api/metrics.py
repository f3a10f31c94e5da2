from prometheus_client import Counter, Histogram, Gauge, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # If it already exists, retrieve it from the registry
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "workbench_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "workbench_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

PROVIDER_SELECTED_TOTAL = get_or_create_metric(
    "workbench_provider_selected_total",
    "AI provider selections",
    Counter,
    labelnames=["provider"],
)

CALENDAR_EVENTS_TOTAL = get_or_create_metric(
    "workbench_calendar_events_total",
    "Calendar event creation attempts",
    Counter,
    labelnames=["outcome"],
)

ACTIVE_SESSIONS = get_or_create_metric(
    "workbench_active_sessions", "Sessions holding calendar credentials", Gauge
)
