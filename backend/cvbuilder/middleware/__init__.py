"""
Middleware Package

- metrics: Prometheus request metrics and the /metrics route
- performance: rate limiting, response caching and response timing
"""

from cvbuilder.middleware.metrics import PrometheusMiddleware, setup_metrics
from cvbuilder.middleware.performance import (
    PerformanceCache,
    PerformanceMonitorMiddleware,
    RateLimitMiddleware,
    ResponseCacheMiddleware,
    performance_cache,
)

__all__ = [
    "PrometheusMiddleware",
    "setup_metrics",
    "PerformanceCache",
    "PerformanceMonitorMiddleware",
    "RateLimitMiddleware",
    "ResponseCacheMiddleware",
    "performance_cache",
]
