"""
Prometheus Metrics Collection for the Workspace Collaboration Backend

HTTP request metrics come from the middleware below; realtime, AI and
invitation metrics are updated by the code paths that own them.
Each process keeps its own registry, scraped independently.
"""

import logging
import re
import time
from contextlib import contextmanager
from importlib.metadata import version as get_version
from typing import Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# =============================================================================
# Application Info Metrics
# =============================================================================

try:
    APP_VERSION = get_version("workspace-collab")
except Exception:
    APP_VERSION = "unknown"

app_info = Info("workspace_collab_app", "Application information")
app_info.info(
    {
        "version": APP_VERSION,
        "app_name": "Workspace Collab",
    }
)

# =============================================================================
# HTTP Request Metrics
# =============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method", "endpoint"],
)

# =============================================================================
# Realtime Metrics
# =============================================================================

ws_connections_active = Gauge(
    "ws_connections_active",
    "Number of admitted WebSocket connections",
)

ws_handshake_failures_total = Counter(
    "ws_handshake_failures_total",
    "Refused WebSocket handshakes by reason",
    ["reason"],
)

ws_messages_total = Counter(
    "ws_messages_total",
    "Inbound WebSocket events by event name and result",
    ["event", "result"],
)

# =============================================================================
# AI Metrics
# =============================================================================

ai_requests_total = Counter(
    "ai_requests_total",
    "Generative backend calls by provider and outcome",
    ["provider", "outcome"],
)

ai_retries_total = Counter(
    "ai_retries_total",
    "AI retries by classified error type",
    ["error_type"],
)

ai_request_duration_seconds = Histogram(
    "ai_request_duration_seconds",
    "Generative backend call duration in seconds",
    ["provider"],
    buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0, 60.0),
)

# =============================================================================
# Auth / Invitation Metrics
# =============================================================================

auth_token_validations_total = Counter(
    "auth_token_validations_total",
    "Total token validations by result",
    ["result"],
)

auth_login_attempts_total = Counter(
    "auth_login_attempts_total",
    "Total login attempts by status",
    ["status"],
)

invitations_total = Counter(
    "invitations_total",
    "Invitation workflow transitions by action",
    ["action"],
)

# =============================================================================
# System Metrics
# =============================================================================

uptime_seconds = Gauge(
    "uptime_seconds",
    "Application uptime in seconds",
)

startup_time = time.time()


def update_uptime():
    """Update the uptime metric."""
    uptime_seconds.set(time.time() - startup_time)


# =============================================================================
# Prometheus Metrics Endpoint
# =============================================================================


async def metrics_endpoint(request: Request) -> Response:
    """Prometheus metrics endpoint. Not meant to be exposed publicly."""
    update_uptime()
    metrics_output = generate_latest(REGISTRY)
    return Response(content=metrics_output, media_type=CONTENT_TYPE_LATEST)


# =============================================================================
# Middleware for HTTP Metrics
# =============================================================================


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to automatically collect HTTP request metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        endpoint = self._normalize_path(request.url.path)

        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()
        start_time = time.time()
        status = 500

        try:
            response = await call_next(request)
            status = response.status_code
        except Exception as e:
            logger.error(f"Error in PrometheusMiddleware: {e}")
            raise
        finally:
            duration = time.time() - start_time
            http_request_duration_seconds.labels(
                method=method, endpoint=endpoint
            ).observe(duration)
            http_requests_total.labels(
                method=method, endpoint=endpoint, status=status
            ).inc()
            http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()

        return response

    def _normalize_path(self, path: str) -> str:
        """
        Normalize URL paths to prevent cardinality explosion.

        Examples:
          /api/v1/projects/550e8400-e29b-41d4-a716-446655440000 -> /api/v1/projects/{id}
        """
        path = re.sub(
            r"/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
            "/{id}",
            path,
            flags=re.IGNORECASE,
        )
        path = re.sub(r"/\d+", "/{id}", path)
        return path


# =============================================================================
# Helper Functions for Application Code
# =============================================================================


def track_ai_call(provider: str):
    """Context manager to track a single generative backend call."""

    @contextmanager
    def _tracker():
        start_time = time.time()
        try:
            yield
            ai_requests_total.labels(provider=provider, outcome="success").inc()
        except Exception:
            ai_requests_total.labels(provider=provider, outcome="error").inc()
            raise
        finally:
            ai_request_duration_seconds.labels(provider=provider).observe(
                time.time() - start_time
            )

    return _tracker()
