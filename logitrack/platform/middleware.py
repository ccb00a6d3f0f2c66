"""
Name: HTTP Middleware

Responsibilities:
  - Generate and propagate request_id (UUID)
  - Set request context for logging
  - Time every request and attribute it to a logical endpoint group
  - Record one metrics observation per request, success or failure

Collaborators:
  - context.py: ContextVars for request-scoped data
  - metrics.py: RequestMetrics aggregate and Prometheus export
  - logger.py: Structured logging

Constraints:
  - Must be the outermost application middleware so that requests rejected
    by the access gate (401/403) and unmatched routes (404) are counted
  - Endpoint resolution never raises; it degrades to UNKNOWN_ENDPOINT
  - Handler exceptions are re-raised after recording

Notes:
  - The endpoint group is the first tag of the matched FastAPI route
  - Uses Starlette middleware pattern (BaseHTTPMiddleware)
"""

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match
from starlette.types import ASGIApp

from .context import clear_context, http_method_var, http_path_var, request_id_var
from .logger import logger
from .metrics import PrometheusMetrics, RequestMetrics

UNKNOWN_ENDPOINT = "UnknownController"


def _match_route(request: Request):
    """R: Re-run route matching when the router did not record the route."""
    app = request.scope.get("app")
    router = getattr(app, "router", None)
    for route in getattr(router, "routes", []):
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return route
    return None


def resolve_endpoint_name(request: Request) -> str:
    """R: Logical endpoint group for the matched route (never raises)."""
    try:
        route = request.scope.get("route") or _match_route(request)
        if route is None:
            return UNKNOWN_ENDPOINT
        tags = getattr(route, "tags", None) or []
        if tags:
            return str(tags[0])
        name = getattr(route, "name", None)
        return str(name) if name else UNKNOWN_ENDPOINT
    except Exception:
        return UNKNOWN_ENDPOINT


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    R: Middleware that establishes request context and records metrics.
    """

    def __init__(
        self,
        app: ASGIApp,
        metrics: RequestMetrics,
        prometheus: PrometheusMetrics | None = None,
    ) -> None:
        super().__init__(app)
        self._metrics = metrics
        self._prometheus = prometheus

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = str(uuid.uuid4())

        request_id_var.set(request_id)
        http_method_var.set(request.method)
        http_path_var.set(request.url.path)
        request.state.request_id = request_id

        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-Id"] = request_id
            return response
        except Exception:
            logger.exception("request failed")
            raise
        finally:
            latency_seconds = time.perf_counter() - start_time
            latency_ms = latency_seconds * 1000
            endpoint = resolve_endpoint_name(request)

            self._metrics.record(endpoint, latency_ms)
            if self._prometheus is not None:
                self._prometheus.observe(
                    endpoint=endpoint,
                    method=request.method,
                    status_code=status_code,
                    latency_seconds=latency_seconds,
                )

            logger.info(
                "request completed",
                extra={
                    "status_code": status_code,
                    "latency_ms": round(latency_ms, 2),
                    "endpoint": endpoint,
                },
            )

            # R: Clear context to prevent leaks
            clear_context()
