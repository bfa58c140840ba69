"""Artifact uploader — send bundle bytes to storage, get back a download URL."""

from __future__ import annotations

import logging

import requests

from bundleforge.core.errors import MalformedUploadResponseError
from bundleforge.core.http import bearer_headers, json_body, post
from bundleforge.models.bundle import BuildArtifact

logger = logging.getLogger(__name__)


class ArtifactUploader:
    """Uploads an artifact as a multipart ``file`` part.

    Parameters
    ----------
    session:
        HTTP session used for the request.
    url:
        Upload endpoint; the storage path is added as the ``name`` query
        parameter.
    token:
        Bearer token for the endpoint.
    timeout:
        Seconds to wait on connect and read.
    """

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

    def upload(self, artifact: BuildArtifact, storage_path: str) -> str:
        """Upload *artifact* to *storage_path* and return its public URL."""
        logger.info("Uploading %s (%d bytes)", storage_path, artifact.size_bytes)
        response = post(
            self._session,
            self._url,
            timeout=self._timeout,
            params={"name": storage_path},
            headers=bearer_headers(self._token),
            files={
                "file": (
                    artifact.path.name,
                    artifact.content,
                    "application/octet-stream",
                ),
            },
        )

        body = json_body(response)
        data = body.get("data") if isinstance(body, dict) else None
        url = data.get("url") if isinstance(data, dict) else None
        if not isinstance(url, str) or not url:
            raise MalformedUploadResponseError(response.text)

        logger.info("Bundle uploaded successfully: %s", url)
        return url
