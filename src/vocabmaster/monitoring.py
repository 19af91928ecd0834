"""Monitoring configuration for the lesson bot."""
from prometheus_client import Counter, Gauge, Histogram, start_http_server

# Session metrics
active_sessions = Gauge(
    "vocabmaster_active_sessions",
    "Number of lesson sessions currently loaded",
)

lessons_loaded = Counter(
    "vocabmaster_lessons_loaded_total",
    "Total number of lessons loaded into a session",
)

lessons_not_found = Counter(
    "vocabmaster_lessons_not_found_total",
    "Total number of lesson loads that ended in the not-found state",
)

words_learned = Counter(
    "vocabmaster_words_learned_total",
    "Total number of words marked as learned",
)

practice_answers = Counter(
    "vocabmaster_practice_answers_total",
    "Total number of practice answers recorded",
)

lessons_completed = Counter(
    "vocabmaster_lessons_completed_total",
    "Total number of lessons completed by learners",
)

# Error metrics
completion_failures = Counter(
    "vocabmaster_completion_failures_total",
    "Total number of completion notifications lost to transport failures",
)

invalid_invocations = Counter(
    "vocabmaster_invalid_invocations_total",
    "Total number of session operations called in the wrong state",
    ["operation"],
)

# Performance metrics
request_duration = Histogram(
    "vocabmaster_request_duration_seconds",
    "Duration of lesson backend requests in seconds",
    ["endpoint"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
