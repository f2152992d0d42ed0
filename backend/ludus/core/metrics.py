"""
Prometheus instrumentation for the booking path.
Exposed at the /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'ludus_booking_attempts_total',
    'Total booking admission attempts',
    ['outcome']  # created, capacity_exceeded, not_found, rule_violation, busy
)

booking_latency = Histogram(
    'ludus_booking_latency_seconds',
    'Booking admission latency, lock wait included',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

booking_status_changes = Counter(
    'ludus_booking_status_changes_total',
    'Booking status transitions',
    ['status']
)

# Admission lock metrics
admission_lock_requests = Counter(
    'ludus_admission_lock_requests_total',
    'Admission lock acquisitions',
    ['strategy', 'result']  # acquired, timeout, degraded
)

admission_lock_wait = Histogram(
    'ludus_admission_lock_wait_seconds',
    'Time spent waiting for the per-key admission lock',
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0]
)

redis_lock_errors = Counter(
    'ludus_redis_lock_errors_total',
    'Redis errors while taking or releasing admission locks'
)

# Cache metrics
cache_operations = Counter(
    'ludus_cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(outcome: str):
    booking_attempts.labels(outcome=outcome).inc()


def record_status_change(status: str):
    booking_status_changes.labels(status=status).inc()


def record_admission_lock(strategy: str, result: str):
    admission_lock_requests.labels(strategy=strategy, result=result).inc()


def record_cache_operation(operation: str, hit: bool):
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
