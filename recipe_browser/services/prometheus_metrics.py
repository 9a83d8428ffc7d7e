"""
Prometheus metrics for image cache performance and remote fetches.
Exposed via /metrics endpoint for Prometheus scraping.
"""

from prometheus_client import Counter, Histogram

# Image cache metrics
cache_hits_total = Counter(
    "recipe_browser_image_cache_hits_total",
    "Total image cache hits (disk)",
)
cache_misses_total = Counter(
    "recipe_browser_image_cache_misses_total",
    "Total image cache misses (disk)",
)
cache_flushes_total = Counter(
    "recipe_browser_image_cache_flushes_total",
    "Times the image cache was flushed for exceeding its bounds",
)

# Remote fetch duration (seconds)
remote_fetch_duration_seconds = Histogram(
    "recipe_browser_remote_fetch_duration_seconds",
    "Remote GET duration in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0),
)

# Remote fetch success/failure
remote_fetch_total = Counter(
    "recipe_browser_remote_fetch_total",
    "Remote fetches by resource and status",
    ["resource", "status"],  # recipes/image, success/failure
)

# Recipe searches by scope
recipe_search_total = Counter(
    "recipe_browser_search_total",
    "Recipe search requests by scope",
    ["scope"],
)


def record_cache_hit() -> None:
    cache_hits_total.inc()


def record_cache_miss() -> None:
    cache_misses_total.inc()


def record_cache_flush() -> None:
    cache_flushes_total.inc()


def record_fetch_duration(seconds: float) -> None:
    """Record remote GET duration."""
    remote_fetch_duration_seconds.observe(seconds)


def record_remote_fetch(resource: str, success: bool) -> None:
    """Record remote fetch result for the given resource (recipes or image)."""
    status = "success" if success else "failure"
    remote_fetch_total.labels(resource=resource, status=status).inc()


def record_recipe_search(scope: str) -> None:
    recipe_search_total.labels(scope=scope).inc()
