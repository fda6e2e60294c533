from prometheus_client import Counter, Histogram, generate_latest
from fastapi import Response

# HTTP requests
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Enrollment workflow
enrollment_transitions_total = Counter(
    'enrollment_transitions_total',
    'Enrollment state transitions',
    ['transition']
)

# Outcome is one of: sent, failed, user_missing
notifications_total = Counter(
    'notifications_total',
    'Notification dispatch attempts by outcome',
    ['outcome']
)

db_queries_total = Counter('db_queries_total', 'Total database queries')

def metrics_endpoint():
    """Endpoint for Prometheus metrics"""
    return Response(content=generate_latest(), media_type="text/plain")
