"""Shared HTTP request utilities for the API and session clients."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .exceptions import APIError, ConnectivityError, FieldError, Problem

logger = logging.getLogger(__name__)

CSRF_HEADER = "X-CSRF-Token"


def build_headers(token: Optional[str] = None, csrf_token: Optional[str] = None) -> dict[str, str]:
    """Build request headers with bearer and CSRF authentication where given."""
    headers = {"Accept": "application/json"}

    if token:
        headers["Authorization"] = f"Bearer {token}"
    if csrf_token:
        headers[CSRF_HEADER] = csrf_token

    return headers


def send(client: httpx.Client, method: str, url: str, **kwargs: Any) -> httpx.Response:
    """Send a request, converting transport failures into ConnectivityError."""
    logger.debug("request %s %s", method, url)
    try:
        response = client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        raise ConnectivityError(f"request to {url} timed out") from e
    except httpx.TransportError as e:
        raise ConnectivityError(f"unable to reach {url}: {e}") from e
    logger.debug("response %s %s -> %d", method, url, response.status_code)
    return response


def parse_problem(response: httpx.Response) -> Problem:
    """Decode the API error body, degrading to an empty Problem."""
    if not response.content.strip():
        return Problem()
    try:
        data = response.json()
    except ValueError:
        return Problem()
    if not isinstance(data, dict):
        return Problem()

    details = []
    for item in data.get("details") or []:
        if isinstance(item, dict):
            details.append(FieldError(field=str(item.get("field", "")), message=str(item.get("message", ""))))
    return Problem(
        code=str(data.get("code") or ""),
        message=str(data.get("message") or ""),
        details=details,
    )


def handle_response(response: httpx.Response) -> Any:
    """Process HTTP response, raising APIError for non-2xx statuses."""
    if response.status_code < 200 or response.status_code >= 300:
        raise APIError(response.status_code, parse_problem(response), response=response)

    if response.status_code == 204 or not response.content:
        return {}
    try:
        return response.json()
    except ValueError as e:
        raise APIError(
            response.status_code,
            Problem(code="invalid_response", message=f"decode response: {e}"),
            response=response,
        ) from e
