"""
Prometheus Metrics

Collectors exposed on GET /metrics (all prefixed ``cvbuilder_``):

    http_request_duration_seconds{method, route, status}
    http_requests_total{method, route, status}
    http_requests_in_progress{method, route}
    cache_lookups_total{layer, result}      response / cv_extraction / job_offer
    rate_limit_rejections_total{scope}      api / ai
    ai_completion_seconds{operation}
    pdf_render_seconds{document}            cv / cover_letter

Routes are labelled by their template (``/api/cvs/{cv_id}``), never the
raw path, so label cardinality stays bounded.

Usage:
    from cvbuilder.middleware.metrics import setup_metrics

    app = FastAPI()
    setup_metrics(app)
"""

import logging
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

logger = logging.getLogger(__name__)

NAMESPACE = "cvbuilder"
METRICS_PATH = "/metrics"

# PDF export and AI-backed routes sit in the upper buckets
HTTP_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "route", "status"],
    namespace=NAMESPACE,
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)

HTTP_REQUESTS = Counter(
    "http_requests_total",
    "HTTP requests handled",
    ["method", "route", "status"],
    namespace=NAMESPACE,
)

HTTP_IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "HTTP requests currently being handled",
    ["method", "route"],
    namespace=NAMESPACE,
)

CACHE_LOOKUPS = Counter(
    "cache_lookups_total",
    "Cache lookups by layer and result",
    ["layer", "result"],
    namespace=NAMESPACE,
)

RATE_LIMIT_REJECTIONS = Counter(
    "rate_limit_rejections_total",
    "Requests answered with 429",
    ["scope"],
    namespace=NAMESPACE,
)

AI_COMPLETION_LATENCY = Histogram(
    "ai_completion_seconds",
    "Latency of successful chat completions",
    ["operation"],
    namespace=NAMESPACE,
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0, 60.0),
)

PDF_RENDER_LATENCY = Histogram(
    "pdf_render_seconds",
    "HTML to PDF conversion time",
    ["document"],
    namespace=NAMESPACE,
    buckets=(0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0),
)


def route_template(request: Request) -> str:
    """Path template of the route serving ``request``, or the raw path when none matches."""
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", request.url.path)
    return request.url.path


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == METRICS_PATH:
            return await call_next(request)

        method = request.method
        route = route_template(request)
        status = "500"

        in_progress = HTTP_IN_PROGRESS.labels(method=method, route=route)
        in_progress.inc()
        start = time.perf_counter()
        try:
            response = await call_next(request)
            status = str(response.status_code)
            return response
        finally:
            HTTP_LATENCY.labels(method=method, route=route, status=status).observe(time.perf_counter() - start)
            HTTP_REQUESTS.labels(method=method, route=route, status=status).inc()
            in_progress.dec()


async def metrics_endpoint(request: Request) -> Response:
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


def setup_metrics(app: FastAPI) -> None:
    """Install the request middleware and the scrape route."""
    app.add_middleware(PrometheusMiddleware)
    app.add_route(METRICS_PATH, metrics_endpoint, methods=["GET"])
    logger.info(f"Prometheus metrics exposed on {METRICS_PATH}")


def record_cache_hit(layer: str) -> None:
    CACHE_LOOKUPS.labels(layer=layer, result="hit").inc()


def record_cache_miss(layer: str) -> None:
    CACHE_LOOKUPS.labels(layer=layer, result="miss").inc()


def record_rate_limit_rejection(scope: str) -> None:
    RATE_LIMIT_REJECTIONS.labels(scope=scope).inc()


def record_ai_latency(operation: str, duration: float) -> None:
    AI_COMPLETION_LATENCY.labels(operation=operation).observe(duration)


def record_pdf_render(document: str, duration: float) -> None:
    PDF_RENDER_LATENCY.labels(document=document).observe(duration)
