"""
Error taxonomy for remote fetches and the image cache.
Errors propagate unchanged to the caller; nothing here retries.
"""

from __future__ import annotations

from typing import Optional


class RecipeBrowserError(Exception):
    pass


class NetworkError(RecipeBrowserError):
    kind = "invalid_response"
    default_message = "The response from the server is invalid."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or self.default_message)
        self.status_code = status_code

    @staticmethod
    def for_status(status_code: int) -> "NetworkError":
        """Map a non-200 HTTP status code to its error."""
        if status_code == 400:
            return BadRequest(status_code=status_code)
        if status_code == 401:
            return Unauthorized(status_code=status_code)
        if status_code == 403:
            return Forbidden(status_code=status_code)
        if status_code == 404:
            return NotFound(status_code=status_code)
        if 500 <= status_code <= 599:
            return ServerError(status_code=status_code)
        return InvalidResponse(status_code=status_code)


class InvalidURL(NetworkError):
    kind = "invalid_url"
    default_message = "The URL is invalid."

    def __init__(self, url: str = ""):
        super().__init__(f"The URL is invalid: {url!r}")
        self.url = url


class InvalidData(NetworkError):
    kind = "invalid_data"
    default_message = "The data received is invalid."


class InvalidResponse(NetworkError):
    kind = "invalid_response"
    default_message = "The response from the server is invalid."


class BadRequest(NetworkError):
    kind = "bad_request"
    default_message = "Bad request. Please try again."


class Unauthorized(NetworkError):
    kind = "unauthorized"
    default_message = "Unauthorized access. Please check your credentials."


class Forbidden(NetworkError):
    kind = "forbidden"
    default_message = "Access forbidden. You do not have permission to access this resource."


class NotFound(NetworkError):
    kind = "not_found"
    default_message = "Resource not found. Please check the URL."


class ServerError(NetworkError):
    kind = "server_error"
    default_message = "Server error. Please try again later."


class CacheError(RecipeBrowserError):
    kind = "cache_error"


class DirectoryUnavailable(CacheError):
    kind = "directory_unavailable"

    def __init__(self, message: str = "Cache directory could not be found or created."):
        super().__init__(message)


class WriteFailed(CacheError):
    kind = "write_failed"

    def __init__(self, cause: BaseException):
        super().__init__(f"Failed to write data to cache: {cause}")
        self.cause = cause
