"""HTTP client utilities and helpers."""

from typing import Any

import httpx

from balance_exporter.helpers.constants import (
    DEFAULT_TIMEOUT,
    MAX_CONNECTIONS,
    MAX_KEEPALIVE_CONNECTIONS,
)
from balance_exporter.helpers.errors import (
    NotFoundError,
    UpstreamMalformedError,
    UpstreamUnavailableError,
)
from balance_exporter.helpers.logging import get_logger


logger = get_logger(__name__)


def create_http_client(
    timeout: float = DEFAULT_TIMEOUT, **kwargs: Any
) -> httpx.AsyncClient:
    """Create a configured httpx AsyncClient.

    Args:
        timeout: Default timeout in seconds (default: DEFAULT_TIMEOUT)
        **kwargs: Additional httpx.AsyncClient kwargs

    Returns:
        Configured AsyncClient instance

    Example:
        ```python
        from balance_exporter.helpers.http import create_http_client

        async with create_http_client(timeout=10.0) as client:
            response = await client.get("http://agora-cl-node:3500/eth/v1/node/health")
        ```
    """
    kwargs.setdefault(
        "limits",
        httpx.Limits(
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            max_connections=MAX_CONNECTIONS,
        ),
    )
    return httpx.AsyncClient(timeout=timeout, **kwargs)


async def _get(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    timeout: float | None = None,
) -> httpx.Response:
    logger.debug("GET %s", url)
    try:
        if timeout is None:
            response = await client.get(url, params=params)
        else:
            response = await client.get(url, params=params, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 404:
            msg = f"Not found: {url}"
            raise NotFoundError(msg) from e
        msg = f"HTTP {e.response.status_code} from {url}"
        raise UpstreamUnavailableError(msg) from e
    except httpx.TimeoutException as e:
        msg = f"Timeout requesting {url}"
        raise UpstreamUnavailableError(msg) from e
    except httpx.HTTPError as e:
        msg = f"HTTP error requesting {url}: {e}"
        raise UpstreamUnavailableError(msg) from e
    return response


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    timeout: float | None = None,
) -> Any:
    """Fetch and decode a JSON document.

    Args:
        client: HTTP client instance
        url: URL to fetch
        params: Optional query parameters
        timeout: Optional timeout override

    Returns:
        Decoded JSON value

    Raises:
        NotFoundError: On HTTP 404
        UpstreamUnavailableError: On network errors, timeouts and other error statuses
        UpstreamMalformedError: If the body is not valid JSON
    """
    response = await _get(client, url, params=params, timeout=timeout)
    try:
        return response.json()
    except ValueError as e:
        msg = f"Invalid JSON from {url}"
        raise UpstreamMalformedError(msg) from e


async def get_text(
    client: httpx.AsyncClient,
    url: str,
    *,
    timeout: float | None = None,
) -> str:
    """Fetch a plain-text document.

    Raises:
        NotFoundError: On HTTP 404
        UpstreamUnavailableError: On network errors, timeouts and other error statuses
    """
    response = await _get(client, url, timeout=timeout)
    return response.text


__all__ = [
    "create_http_client",
    "get_json",
    "get_text",
]
