"""Bundle registrar — record a published bundle with the management API.

The API reports failures on two channels: the HTTP status (transport) and a
``code`` field in the JSON body (application).  A 2xx response is only a
success when ``code`` is ``0``.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from bundleforge.core.errors import RegistrationError
from bundleforge.core.http import bearer_headers, json_body, post
from bundleforge.models.bundle import BundleRecord

logger = logging.getLogger(__name__)


class BundleRegistrar:
    """POSTs a :class:`BundleRecord` as JSON with bearer authentication."""

    def __init__(
        self,
        session: requests.Session,
        url: str,
        token: str,
        *,
        timeout: float = 120.0,
    ) -> None:
        self._session = session
        self._url = url
        self._token = token
        self._timeout = timeout

    def register(self, record: BundleRecord) -> Any:
        """Register *record* and return the response's ``data`` field."""
        logger.info(
            "Registering %s %s (%d) for commit %s",
            record.app_name,
            record.version_name,
            record.version_code,
            record.commit_hash,
        )
        headers = bearer_headers(self._token)
        headers["Content-Type"] = "application/json"
        response = post(
            self._session,
            self._url,
            timeout=self._timeout,
            headers=headers,
            json=record.model_dump(mode="json"),
        )

        body = json_body(response)
        if not isinstance(body, dict):
            raise RegistrationError(None, response.text)
        code = body.get("code")
        # bool is an int subclass; ``True`` is not a success code
        if isinstance(code, bool) or code != 0:
            raise RegistrationError(code, response.text)

        data = body.get("data")
        logger.info("Bundle registered successfully: %s", data)
        return data
