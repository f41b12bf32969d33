"""
Pydantic models for the relay's API requests and responses.

Field names follow the wire format used by existing clients (camelCase).
Request fields are optional at the model level: presence is checked by the
handlers so that a missing field yields the relay's own 400 envelope.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "OK"
    message: str


# === Requests ===

class SavePDFRequest(BaseModel):
    """Request body for storing an already rendered PDF."""

    pdfBlob: Optional[str] = Field(None, description="PDF content, base64 encoded")
    fileName: Optional[str] = Field(None, description="File name inside the storage folder")


class GeneratePDFRequest(BaseModel):
    """Request body for rendering HTML to PDF."""

    htmlContent: Optional[str] = Field(None, description="HTML markup to render")


class GenerateAndSavePDFRequest(BaseModel):
    """Request body for rendering HTML to PDF and storing the result."""

    htmlContent: Optional[str] = Field(None, description="HTML markup to render")
    fileName: Optional[str] = Field(None, description="File name inside the storage folder")


# === Responses ===

class SavePDFResponse(BaseModel):
    """Response after storing a PDF."""

    success: bool = True
    message: str
    data: Dict[str, Any] = Field(..., description="Object store response, verbatim")


class GeneratePDFResponse(BaseModel):
    """Response carrying a rendered PDF."""

    success: bool = True
    message: str
    pdfBlob: str = Field(..., description="Rendered PDF, base64 encoded")


class GenerateAndSavePDFResponse(BaseModel):
    """Response after rendering and storing a PDF."""

    success: bool = True
    message: str
    pdfBlob: str = Field(..., description="Rendered PDF, base64 encoded")
    dropboxData: Dict[str, Any] = Field(..., description="Object store response, verbatim")


class ErrorResponse(BaseModel):
    """Error envelope shared by every endpoint."""

    success: bool = False
    message: str
    error: Optional[str] = None
