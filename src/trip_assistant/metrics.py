"""Prometheus metrics for the trip assistant core."""

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

# Registry for isolated metric collection
CUSTOM_REGISTRY = CollectorRegistry()

TRIPS_CREATED = Counter("trips_created_total", "Total trips created", registry=CUSTOM_REGISTRY)
TRIPS_DELETED = Counter("trips_deleted_total", "Total trips deleted", registry=CUSTOM_REGISTRY)
MESSAGES_ADDED = Counter(
    "messages_added_total", "Total messages appended by role", ["role"], registry=CUSTOM_REGISTRY
)
TURNS_COMPLETED = Counter("turns_completed_total", "Total completed turns", registry=CUSTOM_REGISTRY)
SENDS_IGNORED = Counter(
    "sends_ignored_total", "Sends dropped before a turn started", ["reason"], registry=CUSTOM_REGISTRY
)
TURN_DURATION = Histogram(
    "turn_duration_seconds", "Wall time of a full turn", registry=CUSTOM_REGISTRY
)


def render_metrics() -> bytes:
    """Provides Prometheus metrics in text exposition format"""
    return generate_latest(CUSTOM_REGISTRY)
