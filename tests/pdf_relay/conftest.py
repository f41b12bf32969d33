"""
Pytest fixtures for PDF relay tests.

Upstream services are never contacted: httpx.AsyncClient is patched with a
fake that plays both PDFShift and Dropbox and records every call.
"""

import json as json_module
import os
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, patch

# Set environment BEFORE importing pdf_relay so the module-level app is
# built from predictable settings.
os.environ["ENVIRONMENT"] = "development"
os.environ["CORS_ORIGINS"] = "*"

import httpx
import pytest
from fastapi.testclient import TestClient

from pdf_relay.config import DROPBOX_UPLOAD_URL, PDFSHIFT_CONVERT_URL, RelaySettings

TEST_FOLDER = "/Necropsia"
TEST_TOKEN = "sl.test-dropbox-token-1234567890"
TEST_API_KEY = "test-pdfshift-key"
FAKE_PDF = b"%PDF-1.4 fake pdf content"

RELAY_ENV_VARS = (
    "DROPBOX_TOKEN",
    "DROPBOX_FOLDER",
    "DROPBOX_UPLOAD_URL",
    "PDFSHIFT_API_KEY",
    "PDFSHIFT_API_URL",
    "UPSTREAM_TIMEOUT_SECONDS",
    "PORT",
    "HOST",
    "MAX_BODY_BYTES",
    "SERVICE_NAME",
    "LOG_LEVEL",
)


class FakeUpstream:
    """
    Stand-in for PDFShift and Dropbox behind a patched httpx.AsyncClient.

    By default conversion returns `pdf_bytes` and uploads echo back the
    Dropbox path they were given. Set `convert_failure` / `upload_failure`
    to an exception or a (status, body) tuple to simulate errors.
    """

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.pdf_bytes = FAKE_PDF
        self.upload_result: Optional[Dict[str, Any]] = None
        self.convert_failure: Optional[Any] = None
        self.upload_failure: Optional[Any] = None
        self.mock_httpx = None

    @property
    def convert_calls(self) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["url"] == PDFSHIFT_CONVERT_URL]

    @property
    def upload_calls(self) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["url"] == DROPBOX_UPLOAD_URL]

    def _fail(self, failure: Any, request: httpx.Request) -> httpx.Response:
        if isinstance(failure, Exception):
            raise failure
        status, body = failure
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body, request=request)
        return httpx.Response(status, text=body, request=request)

    async def post(self, url, headers=None, json=None, content=None):
        self.calls.append({"url": url, "headers": headers or {}, "json": json, "content": content})
        request = httpx.Request("POST", url)

        if url == PDFSHIFT_CONVERT_URL:
            if self.convert_failure is not None:
                return self._fail(self.convert_failure, request)
            return httpx.Response(200, content=self.pdf_bytes, request=request)

        if url == DROPBOX_UPLOAD_URL:
            if self.upload_failure is not None:
                return self._fail(self.upload_failure, request)
            path = self.upload_arg(self.calls[-1])["path"]
            body = self.upload_result or {
                "id": "id:fake",
                "name": path.rsplit("/", 1)[-1],
                "path_display": path,
            }
            return httpx.Response(200, json=body, request=request)

        raise AssertionError(f"Unexpected upstream URL: {url}")

    @staticmethod
    def upload_arg(call: Dict[str, Any]) -> Dict[str, Any]:
        """Decode the Dropbox-API-Arg header of a recorded upload call."""
        return json_module.loads(call["headers"]["Dropbox-API-Arg"])


def make_settings(**overrides) -> RelaySettings:
    """Settings with test credentials, ignoring any local .env file."""
    values = {
        "dropbox_token": TEST_TOKEN,
        "dropbox_folder": TEST_FOLDER,
        "pdfshift_api_key": TEST_API_KEY,
    }
    values.update(overrides)
    return RelaySettings(_env_file=None, **values)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep real credentials and local overrides out of the tests."""
    for name in RELAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "development")


@pytest.fixture
def settings_factory():
    """Build settings with test credentials plus overrides."""
    return make_settings


@pytest.fixture
def settings() -> RelaySettings:
    return make_settings()


@pytest.fixture
def client(settings):
    """Test client for the module-level app with test settings injected."""
    from pdf_relay.app import app
    from pdf_relay.config import get_settings

    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def upstream():
    """Patch httpx.AsyncClient with a FakeUpstream."""
    fake = FakeUpstream()
    with patch("httpx.AsyncClient") as mock_httpx:
        mock_http_client = AsyncMock()
        mock_http_client.__aenter__.return_value.post = AsyncMock(side_effect=fake.post)
        mock_httpx.return_value = mock_http_client
        fake.mock_httpx = mock_httpx
        yield fake
