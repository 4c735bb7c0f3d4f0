"""Error hierarchy for the export pipeline.

All pipeline errors inherit from ExportError.
Use `is_retryable` property to determine if an error can be retried.
"""

from __future__ import annotations

from typing import Any


class ExportError(Exception):
    """Base error for all export errors.

    Attributes:
        message: Error description
        url: Request URL (if applicable)
        resource: Resource type being exported (if applicable)
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        resource: str | None = None,
    ) -> None:
        self.url = url
        self.resource = resource
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether this error can be retried."""
        return False

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "url": self.url,
            "resource": self.resource,
            "is_retryable": self.is_retryable,
        }


class ConfigurationError(ExportError):
    """Invalid or missing configuration.

    Raised at construction time, never retried.
    """


class TransientTransportError(ExportError):
    """Timeout, connection reset or other transport-level failure.

    This is retryable - the network or server might recover.
    """

    def __init__(
        self,
        message: str = "Transport error",
        *,
        timeout_seconds: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.timeout_seconds = timeout_seconds

    @property
    def is_retryable(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["timeout_seconds"] = self.timeout_seconds
        return d


class HttpError(ExportError):
    """Non-2xx HTTP response.

    Attributes:
        status: HTTP status code
        body: Excerpt of the response body
    """

    def __init__(
        self,
        message: str,
        *,
        status: int,
        body: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status = status
        self.body = body

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["status"] = self.status
        d["body"] = self.body
        return d


class RateLimitedError(HttpError):
    """Remote service answered HTTP 429.

    Retryable with backoff; counts against the same retry budget as
    transport errors.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        status: int = 429,
        retry_after: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, status=status, **kwargs)
        self.retry_after = retry_after

    @property
    def is_retryable(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["retry_after"] = self.retry_after
        return d


class ClientError(HttpError):
    """4xx response other than 429 (bad credentials, unknown domain...).

    This is NOT retryable.
    """


class ServerError(HttpError):
    """5xx response.

    NOT retryable by default; the requester can opt in.
    """


class PaginationProtocolError(ExportError):
    """Response body has no interpretable item batch shape.

    This is NOT retryable - the payload format is unexpected.
    """

    def __init__(
        self,
        message: str = "Unrecognized response shape",
        *,
        body_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.body_type = body_type

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["body_type"] = self.body_type
        return d


def classify_status(
    status: int,
    *,
    url: str | None = None,
    body: str | None = None,
    retry_after: float | None = None,
) -> HttpError:
    """Map an error status code to the matching HttpError subclass.

    Args:
        status: HTTP status code (>= 400)
        url: Request URL for context
        body: Response body excerpt
        retry_after: Parsed Retry-After header (429 only)

    Returns:
        RateLimitedError, ClientError or ServerError
    """
    if status == 429:
        return RateLimitedError(
            f"HTTP 429 rate limited: {url}",
            url=url,
            body=body,
            retry_after=retry_after,
        )
    if status >= 500:
        return ServerError(f"HTTP {status} server error: {url}", status=status, url=url, body=body)
    return ClientError(f"HTTP {status} client error: {url}", status=status, url=url, body=body)
