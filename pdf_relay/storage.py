"""
Object Store client - uploads PDF bytes to Dropbox.

Uploads never overwrite: Dropbox is asked to add the file and to rename it
automatically on conflict, so two uploads with the same name both succeed.
"""

import json
import logging
from typing import Any, Dict, Optional

from .config import DROPBOX_UPLOAD_URL, RelaySettings
from .errors import UpstreamError
from .upstream import post_upstream

logger = logging.getLogger(__name__)


def build_upload_path(folder: str, file_name: str) -> str:
    """
    Build the Dropbox path for an upload.

    The file name is used verbatim.

    Example:
        >>> build_upload_path("/Reports", "x.pdf")
        "/Reports/x.pdf"
    """
    return f"{folder.rstrip('/')}/{file_name}"


class ObjectStore:
    """Async client for the Dropbox files/upload API."""

    service = "dropbox"

    def __init__(
        self,
        access_token: Optional[str],
        folder: str,
        upload_url: str = DROPBOX_UPLOAD_URL,
        timeout: Optional[float] = None,
    ):
        self.access_token = access_token
        self.folder = folder
        self.upload_url = upload_url
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: RelaySettings) -> "ObjectStore":
        return cls(
            access_token=settings.dropbox_token,
            folder=settings.dropbox_folder,
            upload_url=settings.dropbox_upload_url,
            timeout=settings.upstream_timeout_seconds,
        )

    def build_api_arg(self, file_name: str) -> str:
        """
        Dropbox-API-Arg header value.

        json.dumps escapes non-ASCII characters, which keeps the header
        valid for file names with accents.
        """
        return json.dumps({
            "path": build_upload_path(self.folder, file_name),
            "mode": "add",
            "autorename": True,
            "mute": False,
        })

    async def upload(self, content: bytes, file_name: str) -> Dict[str, Any]:
        """
        Upload a PDF into the configured folder.

        Args:
            content: PDF bytes
            file_name: Name of the file inside the folder

        Returns:
            Dropbox file metadata, untouched

        Raises:
            UpstreamError: If Dropbox cannot be reached, rejects the upload
                or answers with something that is not JSON
        """
        path = build_upload_path(self.folder, file_name)
        logger.info(f"Uploading PDF to Dropbox: {path} ({len(content)} bytes)")

        response = await post_upstream(
            self.service,
            self.upload_url,
            headers={
                "Authorization": f"Bearer {self.access_token or ''}",
                "Dropbox-API-Arg": self.build_api_arg(file_name),
                "Content-Type": "application/octet-stream",
            },
            timeout=self.timeout,
            detail_keys=("error_summary", "error"),
            content=content,
        )

        try:
            metadata = response.json()
        except ValueError as e:
            logger.error(f"Dropbox returned a non-JSON body for {path}")
            raise UpstreamError(
                f"Invalid response from dropbox: {e}",
                service=self.service,
                upstream_status=response.status_code,
            ) from e

        logger.info(f"PDF uploaded to Dropbox: {path}")
        return metadata
