"""
HTTP fetcher for the recipe list and recipe images.
One GET per call, following redirects: no retries. Non-200 statuses
and decode failures are mapped onto the NetworkError taxonomy.
"""

import logging
import time
from typing import Callable, Optional, Type
from urllib.parse import urlsplit

import httpx
from pydantic import ValidationError

from recipe_browser.core.abstractions import ModelT
from recipe_browser.errors import InvalidData, InvalidResponse, InvalidURL, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def _check_url(url: str) -> str:
    """Return url stripped, or raise InvalidURL if it does not parse as http(s)."""
    if not url or not str(url).strip():
        raise InvalidURL(url)
    cleaned = str(url).strip()
    try:
        parts = urlsplit(cleaned)
    except ValueError:
        raise InvalidURL(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidURL(url)
    return cleaned


class HttpFetcher:
    """RemoteSource backed by httpx."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        on_request_done: Optional[Callable[[float], None]] = None,
    ):
        self.timeout = timeout
        self._on_request_done = on_request_done

    def _record_timing(self, elapsed_ms: float) -> None:
        """Call timing callback if configured."""
        if self._on_request_done is not None:
            try:
                self._on_request_done(elapsed_ms)
            except Exception as e:
                logger.debug("Timing callback error: %s", e)

    def _get(self, url: str) -> httpx.Response:
        url = _check_url(url)
        start = time.perf_counter()
        try:
            with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                response = client.get(url)
        except httpx.InvalidURL as e:
            raise InvalidURL(url) from e
        except httpx.HTTPError as e:
            logger.warning("GET %s failed without a response: %s", url, e)
            raise InvalidResponse() from e
        finally:
            self._record_timing((time.perf_counter() - start) * 1000)

        if not isinstance(response, httpx.Response):
            raise InvalidResponse()
        if response.status_code != 200:
            logger.warning("GET %s returned HTTP %s", url, response.status_code)
            raise NetworkError.for_status(response.status_code)
        return response

    def fetch_bytes(self, url: str) -> bytes:
        """GET url and return the body bytes."""
        return self._get(url).content

    def fetch_json(self, url: str, model: Type[ModelT]) -> ModelT:
        """GET url and validate the JSON body into model."""
        response = self._get(url)
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning("Could not decode %s from %s: %s", model.__name__, url, e)
            raise InvalidData() from e
