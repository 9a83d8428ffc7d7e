"""
Image fetching with a disk cache in front of the network.
"""

import logging

from recipe_browser.core.abstractions import BlobCache, RemoteSource
from recipe_browser.errors import NetworkError
from recipe_browser.services import metrics, prometheus_metrics

logger = logging.getLogger(__name__)


class ImageCacheService:
    """Cache-first image fetcher. Misses are fetched and written through."""

    def __init__(self, cache: BlobCache, source: RemoteSource) -> None:
        self._cache = cache
        self._source = source

    def fetch_image(self, url: str) -> bytes:
        """
        Return image bytes for url. A cache hit makes no network call.
        Fetch errors and write-through errors are raised to the caller.
        """
        cached = self._cache.get(url)
        if cached is not None:
            logger.debug("Cache hit for: %s", url)
            metrics.record_cache_hit()
            prometheus_metrics.record_cache_hit()
            return cached

        logger.debug("Cache miss for: %s", url)
        metrics.record_cache_miss()
        prometheus_metrics.record_cache_miss()
        try:
            data = self._source.fetch_bytes(url)
        except NetworkError:
            prometheus_metrics.record_remote_fetch("image", success=False)
            raise
        prometheus_metrics.record_remote_fetch("image", success=True)

        self._cache.put(url, data)
        return data
