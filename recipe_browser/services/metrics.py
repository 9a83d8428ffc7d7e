"""
Request-scoped and aggregate metrics for image cache lookups and remote fetches.
Uses contextvars for request-scoped state (async-safe).
"""
import logging
from contextvars import ContextVar
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Request-scoped metrics (reset per request)
_request_metrics_var: ContextVar["RequestMetrics | None"] = ContextVar(
    "request_metrics", default=None
)


@dataclass
class RequestMetrics:
    """Metrics for a single request."""

    fetch_ms: float = 0.0
    fetch_count: int = 0
    cache_hits: int = 0
    cache_misses: int = 0

    def to_dict(self) -> dict:
        return {
            "fetch_ms": round(self.fetch_ms, 2),
            "fetch_count": self.fetch_count,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
        }


def start_request_metrics() -> RequestMetrics:
    """Start tracking metrics for a new request. Call at the beginning of each API handler."""
    m = RequestMetrics()
    _request_metrics_var.set(m)
    return m


def current_metrics() -> RequestMetrics | None:
    """Return metrics for the current request, or None if not started."""
    return _request_metrics_var.get()


def record_fetch(elapsed_ms: float) -> None:
    """Record a remote GET duration. Used as the fetcher's on_request_done callback."""
    m = _request_metrics_var.get()
    if m is not None:
        m.fetch_ms += elapsed_ms
        m.fetch_count += 1


def record_cache_hit() -> None:
    """Record an image served from the disk cache."""
    m = _request_metrics_var.get()
    if m is not None:
        m.cache_hits += 1


def record_cache_miss() -> None:
    """Record an image that had to be fetched."""
    m = _request_metrics_var.get()
    if m is not None:
        m.cache_misses += 1


@dataclass
class AggregateMetrics:
    """Aggregate metrics across all requests (for /api/metrics endpoint)."""

    fetch_count: int = 0
    fetch_total_ms: float = 0.0
    cache_hits: int = 0
    cache_misses: int = 0

    def record(self, m: RequestMetrics) -> None:
        self.fetch_count += m.fetch_count
        self.fetch_total_ms += m.fetch_ms
        self.cache_hits += m.cache_hits
        self.cache_misses += m.cache_misses
        if m.fetch_count or m.cache_hits or m.cache_misses:
            logger.debug(
                "Request metrics: fetches=%d fetch=%.2fms hits=%d misses=%d",
                m.fetch_count,
                m.fetch_ms,
                m.cache_hits,
                m.cache_misses,
            )

    def reset(self) -> None:
        self.fetch_count = 0
        self.fetch_total_ms = 0.0
        self.cache_hits = 0
        self.cache_misses = 0

    def to_dict(self) -> dict:
        total_cache_ops = self.cache_hits + self.cache_misses
        hit_rate = (
            round(100 * self.cache_hits / total_cache_ops, 2)
            if total_cache_ops > 0
            else 0
        )
        return {
            "fetch": {
                "count": self.fetch_count,
                "total_ms": round(self.fetch_total_ms, 2),
                "avg_ms": round(self.fetch_total_ms / self.fetch_count, 2)
                if self.fetch_count > 0
                else 0,
            },
            "cache": {
                "hits": self.cache_hits,
                "misses": self.cache_misses,
                "hit_rate_percent": hit_rate,
            },
        }


aggregate_metrics = AggregateMetrics()
