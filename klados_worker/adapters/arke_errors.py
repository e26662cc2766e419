"""Project-native typed exceptions for Arke API failures."""

from __future__ import annotations


class ArkeApiError(Exception):
    """Base exception for adapter-level Arke API failures.

    Attributes:
        status_code: HTTP status code when the failure came from a response.
        response_body: Decoded error body when available.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: object | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class ArkeApiConnectionError(ArkeApiError, ConnectionError):
    """Transport-level connectivity failure during Arke API communication."""


class ArkeApiTimeoutError(ArkeApiError, TimeoutError):
    """Transport timeout while waiting for an Arke API response."""


class ArkeRequestError(ArkeApiError, ValueError):
    """Arke rejected the request with a 4xx status."""


class ArkeNotFoundError(ArkeRequestError):
    """Requested entity does not exist (`404`)."""


class ArkePermissionError(ArkeRequestError):
    """Agent key is missing, invalid, or lacks permission (`401`/`403`)."""


class ArkeServerError(ArkeApiError, RuntimeError):
    """Arke failed with a 5xx status or returned an unusable payload."""
