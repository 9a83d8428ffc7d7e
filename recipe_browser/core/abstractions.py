"""
Abstractions for remote fetching and blob caching.
Enables component swapping and testability via dependency injection.
"""

from typing import Optional, Protocol, Type, TypeVar

from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


class RemoteSource(Protocol):
    """Abstract interface for a single-GET remote fetcher."""

    def fetch_bytes(self, url: str) -> bytes:
        """GET url and return the raw body. Raises NetworkError."""
        ...

    def fetch_json(self, url: str, model: Type[ModelT]) -> ModelT:
        """GET url and decode the JSON body into model. Raises NetworkError."""
        ...


class BlobCache(Protocol):
    """Abstract interface for a key-addressed binary cache."""

    def get(self, key: str) -> Optional[bytes]:
        """Return the stored blob, or None on miss or unreadable entry."""
        ...

    def put(self, key: str, value: bytes) -> None:
        """Store value under key. Raises CacheError."""
        ...

    def reset(self) -> None:
        """Drop every entry and zero the counters."""
        ...
