"""Shared request/response handling for the upstream API clients.

Every upstream (WordPress, OpenSea, Objkt) classifies failures the same way
so the aggregator can tell retryable errors from permanent ones.
"""

from typing import Any

import httpx
import structlog

from omentejovem.services.exceptions import (
    RateLimitError,
    UpstreamAuthError,
    UpstreamResponseError,
    UpstreamUnavailableError,
)

logger = structlog.get_logger(__name__)


def raise_for_upstream_status(response: httpx.Response, source: str) -> None:
    """Translate a non-2xx response into the service error hierarchy.

    Raises:
        RateLimitError: 429
        UpstreamUnavailableError: 5xx
        UpstreamAuthError: 401, 403
        UpstreamResponseError: any other non-2xx status
    """
    status_code = response.status_code
    if 200 <= status_code < 300:
        return

    body = response.text[:200]
    if status_code == 429:
        raise RateLimitError(f"Rate limit exceeded: {body}", source=source)
    elif status_code >= 500:
        raise UpstreamUnavailableError(f"Service unavailable ({status_code}): {body}", source=source)
    elif status_code in (401, 403):
        raise UpstreamAuthError(
            f"Unauthorized ({status_code}): check the {source} API key", source=source
        )
    raise UpstreamResponseError(f"Unexpected status {status_code}: {body}", source=source)


async def send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    source: str,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request and classify transport and status failures.

    Args:
        client: Shared async HTTP client
        method: HTTP method
        url: Absolute URL
        source: Upstream name used in errors and logs
        **kwargs: Passed through to ``httpx.AsyncClient.request``

    Returns:
        Response with a 2xx status
    """
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        logger.warning("upstream.timeout", source=source, url=url, error=str(e))
        raise UpstreamUnavailableError(f"Request timeout: {e}", source=source) from e
    except httpx.HTTPError as e:
        logger.warning("upstream.network_error", source=source, url=url, error=str(e))
        raise UpstreamUnavailableError(f"Network error: {e}", source=source) from e

    if not response.is_success:
        logger.warning(
            "upstream.request_failed",
            source=source,
            url=url,
            status_code=response.status_code,
        )
    raise_for_upstream_status(response, source)
    return response


def decode_json(response: httpx.Response, source: str) -> Any:
    """Decode a JSON body, classifying malformed payloads as permanent errors."""
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamResponseError(f"Malformed JSON from {source}: {e}", source=source) from e
