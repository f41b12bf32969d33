"""
Document Converter client - renders HTML markup to PDF through PDFShift.
"""

import logging
from typing import Any, Dict, Optional

from .config import PDFSHIFT_CONVERT_URL, RelaySettings
from .upstream import post_upstream

logger = logging.getLogger(__name__)

# Fixed layout: portrait, print media, 20px margins on every side
PAGE_MARGIN = "20"


class DocumentConverter:
    """Async client for the PDFShift conversion API."""

    service = "pdfshift"

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str = PDFSHIFT_CONVERT_URL,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: RelaySettings) -> "DocumentConverter":
        return cls(
            api_key=settings.pdfshift_api_key,
            api_url=settings.pdfshift_api_url,
            timeout=settings.upstream_timeout_seconds,
        )

    def build_payload(self, html: str) -> Dict[str, Any]:
        """Conversion request body with the fixed layout options."""
        return {
            "source": html,
            "landscape": False,
            "use_print": True,
            "margin": {
                "top": PAGE_MARGIN,
                "right": PAGE_MARGIN,
                "bottom": PAGE_MARGIN,
                "left": PAGE_MARGIN,
            },
        }

    async def convert(self, html: str) -> bytes:
        """
        Render HTML to PDF.

        Args:
            html: HTML markup to render

        Returns:
            Raw PDF bytes exactly as returned by PDFShift

        Raises:
            UpstreamError: If PDFShift cannot be reached or rejects the request
        """
        logger.info(f"Converting HTML to PDF ({len(html)} chars)")

        response = await post_upstream(
            self.service,
            self.api_url,
            headers={
                "X-API-Key": self.api_key or "",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            detail_keys=("error", "errors", "message"),
            json=self.build_payload(html),
        )

        pdf_bytes = response.content
        logger.info(f"PDF generated ({len(pdf_bytes)} bytes)")
        return pdf_bytes
