"""
Error types for the PDF relay.

Every error knows its HTTP status and how to render itself into the
`{success: false, message, error}` envelope returned to clients.
"""

from typing import Any, Dict, Optional


class RelayError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON error envelope."""
        body: Dict[str, Any] = {"success": False, "message": self.message}
        if self.error is not None:
            body["error"] = self.error
        return body


class ValidationError(RelayError):
    """Required field missing or request body unreadable."""

    status_code = 400


class PayloadTooLargeError(RelayError):
    """Request body exceeds the configured ceiling."""

    status_code = 413


class UpstreamError(RelayError):
    """
    Failure talking to the Document Converter or the Object Store.

    Covers network errors, timeouts, auth failures and API-level errors.
    `message` holds the upstream error text; `upstream_status` is the HTTP
    status returned by the service, when there was a response at all.
    Routes wrap it in OperationFailedError; if one escapes unwrapped it
    still renders as a 500 envelope through the inherited status_code.
    """

    def __init__(
        self,
        message: str,
        service: str,
        upstream_status: Optional[int] = None,
    ):
        super().__init__(message)
        self.service = service
        self.upstream_status = upstream_status

    def __str__(self) -> str:
        return self.message


class OperationFailedError(RelayError):
    """An endpoint's upstream sequence aborted; `error` carries the cause."""

    status_code = 500
