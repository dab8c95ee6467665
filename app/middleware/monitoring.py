"""
Monitoring & Observability Middleware
Request tracking, structured request logs and Prometheus metrics.
"""

import time
import uuid
from typing import Any, Callable

import structlog
from fastapi import Request, Response
from prometheus_client import Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.settings import get_settings

settings = get_settings()

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        (
            structlog.processors.JSONRenderer()
            if settings.monitoring.LOG_FORMAT == "json"
            else structlog.dev.ConsoleRenderer()
        ),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

struct_logger = structlog.get_logger(__name__)


class PrometheusMetrics:
    """Prometheus metrics collection"""

    def __init__(self) -> None:
        # HTTP metrics
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
        )

        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "HTTP request latency",
            ["method", "endpoint"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
        )

        self.errors_total = Counter(
            "errors_total", "Total unhandled application errors", ["error_type", "endpoint"]
        )

        # Business metrics
        self.events_created_total = Counter(
            "events_created_total", "Total events created"
        )
        self.tickets_created_total = Counter(
            "tickets_created_total", "Total tickets created"
        )
        self.tickets_used_total = Counter("tickets_used_total", "Total tickets used")

    def record_request(
        self, method: str, endpoint: str, status_code: int, duration: float
    ) -> None:
        """Record HTTP request metrics"""
        self.http_requests_total.labels(
            method=method, endpoint=endpoint, status_code=status_code
        ).inc()
        self.http_request_duration_seconds.labels(
            method=method, endpoint=endpoint
        ).observe(duration)

    def record_error(self, error_type: str, endpoint: str) -> None:
        """Record unhandled application error"""
        self.errors_total.labels(error_type=error_type, endpoint=endpoint).inc()


# Collectors register globally, so there is exactly one instance per process
metrics = PrometheusMetrics()


def _route_template(request: Request) -> str:
    """Label requests by route path (/events/{event_id}) to keep label cardinality bounded."""
    route = request.scope.get("route")
    return str(getattr(route, "path", request.url.path))


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return str(forwarded.split(",")[0].strip())
    return str(request.client.host) if request.client else "unknown"


class MonitoringMiddleware(BaseHTTPMiddleware):
    """
    Monitoring middleware providing:
    - Request IDs and response timing headers
    - Structured request logging
    - Prometheus request metrics
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self.metrics = metrics
        self.slow_threshold = settings.monitoring.SLOW_REQUEST_THRESHOLD

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        client_ip = _client_ip(request)

        struct_logger.info(
            "request_started",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=client_ip,
        )

        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            self.metrics.record_error(e.__class__.__name__, _route_template(request))
            struct_logger.error(
                "request_failed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                duration=duration,
                error=str(e),
                error_type=e.__class__.__name__,
                client_ip=client_ip,
            )
            raise

        duration = time.time() - start_time
        self.metrics.record_request(
            request.method, _route_template(request), response.status_code, duration
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        struct_logger.info(
            "request_completed",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=duration,
            client_ip=client_ip,
        )
        if duration > self.slow_threshold:
            struct_logger.warning(
                "slow_request",
                request_id=request_id,
                path=request.url.path,
                duration=duration,
            )

        return response


async def get_prometheus_metrics() -> str:
    """Get Prometheus metrics"""
    return str(generate_latest().decode("utf-8"))
