"""
HTTP plumbing shared by the transfer and minting relays.

One POST per call, no session reuse, no retry. The body is always read as
text first so error paths never depend on the upstream sending JSON.
"""

import json
import logging
from typing import Any, Dict, Type

import requests

from cardano.errors import InvalidResponseError, UpstreamApiError

logger = logging.getLogger(__name__)

# Upstream timeouts and unreachable hosts surface as gateway errors
TIMEOUT_STATUS = 504
CONNECTION_STATUS = 502


def post_json(
    url: str,
    payload: Dict[str, Any],
    timeout: float,
    error_cls: Type[UpstreamApiError],
) -> requests.Response:
    """
    POST a JSON payload to an external service.

    Raises:
        error_cls: with status 504 on timeout, 502 on any other transport failure
    """
    try:
        return requests.post(
            url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
    except requests.exceptions.Timeout:
        logger.warning(f"Request to {url} timed out after {timeout}s")
        raise error_cls(TIMEOUT_STATUS, f"request timed out after {timeout:g}s")
    except requests.exceptions.RequestException as e:
        logger.warning(f"Request to {url} failed: {e}")
        raise error_cls(CONNECTION_STATUS, f"request failed: {e}")


def _extract_error_detail(body: str) -> str:
    try:
        parsed = json.loads(body)
    except ValueError:
        return body

    if isinstance(parsed, dict):
        return parsed.get("error") or parsed.get("message") or body
    return body


def read_service_response(
    response: requests.Response,
    error_cls: Type[UpstreamApiError],
) -> Dict[str, Any]:
    """
    Read an external service response into a dict.

    Args:
        response: Response from post_json
        error_cls: Error raised for non-2xx status codes

    Returns:
        Parsed JSON object from a 2xx response

    Raises:
        error_cls: upstream status code plus the extracted error message or raw body
        InvalidResponseError: 2xx status with a body that is not a JSON object
    """
    body = response.text or ""
    logger.info(f"Upstream responded {response.status_code} ({len(body)} bytes)")

    if not 200 <= response.status_code < 300:
        raise error_cls(response.status_code, _extract_error_detail(body))

    try:
        data = json.loads(body)
    except ValueError:
        raise InvalidResponseError(body)

    if not isinstance(data, dict):
        raise InvalidResponseError(body)

    return data
