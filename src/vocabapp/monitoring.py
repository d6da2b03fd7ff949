"""Monitoring configuration for the vocabulary backend."""
from prometheus_client import Counter, Histogram, start_http_server

# Progress metrics
reviews_completed = Counter(
    "vocabapp_reviews_completed_total",
    "Total number of word reviews recorded",
)

memory_level_reached = Histogram(
    "vocabapp_memory_level_reached",
    "Memory level of a word after a review",
    buckets=[1, 2, 3, 4, 5],
)

progress_upserts = Counter(
    "vocabapp_progress_upserts_total",
    "Total number of progress records set directly",
    ["operation_type"],
)

update_conflicts = Counter(
    "vocabapp_update_conflicts_total",
    "Total number of concurrent updates detected on progress records",
)

# Quiz metrics
quiz_questions_generated = Counter(
    "vocabapp_quiz_questions_generated_total",
    "Total number of quiz questions generated",
)

quizzes_created = Counter(
    "vocabapp_quizzes_created_total",
    "Total number of quizzes created",
    ["quiz_kind"],
)

# Error metrics
error_count = Counter(
    "vocabapp_errors_total",
    "Total number of errors encountered",
    ["error_type"],
)

# Database metrics
db_errors = Counter(
    "vocabapp_db_errors_total",
    "Total number of database errors",
    ["error_type"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
