"""
PDF Relay Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are read once at startup; handlers receive the
settings through FastAPI dependency injection instead of reading os.environ.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

PDFSHIFT_CONVERT_URL = "https://api.pdfshift.io/v3/convert/pdf"
DROPBOX_UPLOAD_URL = "https://content.dropboxapi.com/2/files/upload"
DEFAULT_MAX_BODY_BYTES = 50 * 1024 * 1024  # 50MB, JSON and url-encoded bodies


class RelaySettings(BaseSettings):
    """
    Relay service configuration with validation.

    All settings can be overridden via environment variables (or a local
    .env file). Instances are immutable.
    """

    # === Object Store (Dropbox) ===
    dropbox_token: Optional[str] = Field(
        default=None,
        description="Dropbox access token used for uploads"
    )
    dropbox_folder: str = Field(
        default="",
        description="Dropbox folder that receives uploaded PDFs"
    )
    dropbox_upload_url: str = Field(
        default=DROPBOX_UPLOAD_URL,
        description="Dropbox files/upload endpoint"
    )

    # === Document Converter (PDFShift) ===
    pdfshift_api_key: Optional[str] = Field(
        default=None,
        description="PDFShift API key"
    )
    pdfshift_api_url: str = Field(
        default=PDFSHIFT_CONVERT_URL,
        description="PDFShift HTML to PDF endpoint"
    )

    # === Upstream calls ===
    upstream_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Timeout for upstream calls in seconds (unset waits indefinitely)"
    )

    # === Server ===
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, ge=1, le=65535, description="Listening port")
    max_body_bytes: int = Field(
        default=DEFAULT_MAX_BODY_BYTES,
        ge=1,
        description="Maximum accepted request body size in bytes"
    )
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )
    service_name: str = Field(default="PDF Relay", description="Name reported by /health")
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "frozen": True,
    }

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one the logging module knows."""
        v_upper = v.upper()
        if v_upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return v_upper

    @field_validator("upstream_timeout_seconds", mode="before")
    @classmethod
    def blank_timeout_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("pdfshift_api_url", "dropbox_upload_url")
    @classmethod
    def validate_url_format(cls, v: str) -> str:
        """Basic URL format validation."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid URL format: {v}")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def redacted_token(self) -> str:
        """Short token prefix that is safe to log."""
        if not self.dropbox_token:
            return "<not set>"
        return f"{self.dropbox_token[:8]}..."

    def missing_credentials(self) -> List[str]:
        """
        List the upstream credentials that are not configured.

        Missing credentials never stop the service: /health keeps answering
        and the affected endpoints fail with an upstream error instead.
        """
        missing = []
        if not self.dropbox_token:
            missing.append("DROPBOX_TOKEN")
        if not self.dropbox_folder:
            missing.append("DROPBOX_FOLDER")
        if not self.pdfshift_api_key:
            missing.append("PDFSHIFT_API_KEY")
        return missing


@lru_cache()
def get_settings() -> RelaySettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached; routes depend on this function so
    tests can swap it through app.dependency_overrides.
    """
    return RelaySettings()


def validate_config_on_startup(settings: RelaySettings) -> None:
    """
    Log the effective configuration at startup.

    Warns about missing credentials without raising.
    """
    for name in settings.missing_credentials():
        level = logging.ERROR if settings.environment == "production" else logging.WARNING
        logger.log(level, f"{name} is not configured")

    logger.info(f"Configuration loaded: environment={settings.environment}")
    logger.info(f"  listening on {settings.host}:{settings.port}")
    logger.info(f"  dropbox_folder={settings.dropbox_folder or '/'}")
    logger.info(f"  dropbox_token={settings.redacted_token}")
    logger.info(f"  pdfshift_api_key={'*****' if settings.pdfshift_api_key else '<not set>'}")
    logger.info(f"  max_body_bytes={settings.max_body_bytes}")
