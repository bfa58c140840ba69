"""Shared HTTP plumbing for the upload and registration endpoints."""

from __future__ import annotations

import logging
from typing import Any

import requests

from bundleforge.core.errors import UploadError

logger = logging.getLogger(__name__)


def bearer_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def post(
    session: requests.Session,
    url: str,
    *,
    timeout: float,
    **kwargs: Any,
) -> requests.Response:
    """POST once and return a 2xx response.

    Raises
    ------
    UploadError
        On a transport failure (``status_code=None``) or a non-2xx status.
    """
    try:
        response = session.post(url, timeout=timeout, **kwargs)
    except requests.RequestException as exc:
        logger.error("POST %s failed: %s", url, exc)
        raise UploadError(url, None, str(exc)) from exc

    if not response.ok:
        raise UploadError(url, response.status_code, response.text)
    return response


def json_body(response: requests.Response) -> Any:
    """Decode a response body as JSON, returning ``None`` if it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return None
