"""
Shared plumbing for calls to the third-party APIs.

Both upstream clients POST a single request, wait for the full response and
turn every transport or HTTP failure into an UpstreamError. Nothing is
retried.
"""

import logging
from typing import Any, Dict, Optional, Sequence

import httpx

from .errors import UpstreamError

logger = logging.getLogger(__name__)


def describe_http_error(response: httpx.Response, detail_keys: Sequence[str]) -> str:
    """
    Build a readable message from a non-2xx upstream response.

    Uses the first populated field from `detail_keys` when the body is a
    JSON object, otherwise falls back to the reason phrase.

    Example:
        HTTP 401: invalid_access_token/
    """
    detail: Any = None
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in detail_keys:
            if body.get(key):
                detail = body[key]
                break

    if detail is None:
        text = response.text.strip()
        detail = text[:200] if text else response.reason_phrase

    return f"HTTP {response.status_code}: {detail}"


async def post_upstream(
    service: str,
    url: str,
    *,
    headers: Dict[str, str],
    timeout: Optional[float],
    detail_keys: Sequence[str],
    json: Optional[Dict[str, Any]] = None,
    content: Optional[bytes] = None,
) -> httpx.Response:
    """
    POST to an upstream API and return the successful response.

    Args:
        service: Service label used in logs and errors ("pdfshift", "dropbox")
        url: Endpoint URL
        headers: Request headers
        timeout: Seconds to wait, or None to wait indefinitely
        detail_keys: JSON fields that carry the service's error text
        json: JSON body
        content: Raw body

    Returns:
        The 2xx httpx.Response

    Raises:
        UpstreamError: On timeouts, transport errors and non-2xx responses
    """
    try:
        async with httpx.AsyncClient(timeout=timeout) as http_client:
            response = await http_client.post(url, headers=headers, json=json, content=content)
            response.raise_for_status()
            return response

    except httpx.TimeoutException as e:
        logger.error(f"Timeout calling {service}: {e}")
        raise UpstreamError(f"{service} request timed out: {e}", service=service) from e

    except httpx.HTTPStatusError as e:
        error_msg = describe_http_error(e.response, detail_keys)
        logger.error(f"HTTP error from {service}: {error_msg}")
        raise UpstreamError(
            error_msg,
            service=service,
            upstream_status=e.response.status_code,
        ) from e

    except httpx.HTTPError as e:
        logger.error(f"Request to {service} failed: {e}")
        raise UpstreamError(f"{service} request failed: {e}", service=service) from e
