"""Service error hierarchy for upstream fetches, aggregation and filtering.

This module defines the exception hierarchy for service-level errors:
- ServiceError: Base for all service errors
- TransientError: Retryable errors (network, rate limits, timeouts)
- PermanentError: Non-retryable errors (authentication, validation)
"""


class ServiceError(Exception):
    """Base exception for all service errors."""

    pass


class TransientError(ServiceError):
    """Transient error that may succeed on retry.

    Examples:
    - Network timeouts
    - Rate limit exceeded (429)
    - Service unavailable (5xx)
    """

    pass


class PermanentError(ServiceError):
    """Permanent error that will not succeed on retry.

    Examples:
    - Authentication failures (401, 403)
    - Unexpected response shapes
    - Configuration errors
    """

    pass


# Upstream API errors (WordPress, OpenSea, Objkt)
class UpstreamError(ServiceError):
    """Base exception for upstream API errors.

    Attributes:
        source: Name of the upstream that failed ("wordpress", "opensea", "objkt")
    """

    def __init__(self, message: str, source: str = "unknown"):
        super().__init__(message)
        self.source = source


class RateLimitError(UpstreamError, TransientError):
    """Rate limit exceeded (429)."""

    pass


class UpstreamUnavailableError(UpstreamError, TransientError):
    """Network failure, timeout or 5xx response."""

    pass


class FetchTimeoutError(UpstreamUnavailableError):
    """A single fetch exceeded its time budget."""

    pass


class UpstreamAuthError(UpstreamError, PermanentError):
    """Authentication failure (401, 403)."""

    pass


class UpstreamResponseError(UpstreamError, PermanentError):
    """Bad request, unexpected status or malformed payload."""

    pass


# CMS parsing errors
class ReferenceParseError(PermanentError):
    """CMS record does not have the expected artwork shape."""

    pass


# Aggregation errors
class AggregationError(ServiceError):
    """One of the fan-out fetches failed, failing the whole aggregation."""

    pass


class GalleryError(ServiceError):
    """Generic failure surfaced to gallery callers."""

    pass


class InvalidSectionError(PermanentError):
    """Requested gallery section does not exist."""

    pass


# Filter engine errors
class FilterNotFoundError(PermanentError):
    """No visible filter option carries the requested label."""

    pass
