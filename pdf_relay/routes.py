"""
PDF relay endpoints.

Each handler is one linear sequence: validate the body, transcode, call the
upstream service(s), shape the response. Any upstream failure aborts the
whole request with a 500; nothing is retried or rolled back.
"""

import logging
from typing import Any, Dict, Type, TypeVar

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .config import RelaySettings, get_settings
from .converter import DocumentConverter
from .errors import OperationFailedError, PayloadTooLargeError, UpstreamError, ValidationError
from .models import (
    ErrorResponse,
    GenerateAndSavePDFRequest,
    GenerateAndSavePDFResponse,
    GeneratePDFRequest,
    GeneratePDFResponse,
    SavePDFRequest,
    SavePDFResponse,
)
from .payloads import decode_pdf_blob, encode_pdf_blob
from .storage import ObjectStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["pdf"],
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)

RequestModel = TypeVar("RequestModel", bound=BaseModel)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


# ============================================================================
# Dependencies
# ============================================================================

async def read_request_body(
    request: Request,
    settings: RelaySettings = Depends(get_settings),
) -> Dict[str, Any]:
    """
    Read a JSON or url-encoded body into a dict, enforcing the size ceiling.

    An empty body reads as an empty dict so the handlers report the missing
    fields themselves.
    """
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > settings.max_body_bytes:
        raise PayloadTooLargeError("Request body too large")

    raw = await request.body()
    if len(raw) > settings.max_body_bytes:
        raise PayloadTooLargeError("Request body too large")
    if not raw.strip():
        return {}

    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type == FORM_CONTENT_TYPE:
        form = await request.form()
        return {key: value for key, value in form.items()}

    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Malformed request body: expected JSON")

    if not isinstance(body, dict):
        raise ValidationError("Malformed request body: expected a JSON object")
    return body


def get_converter(settings: RelaySettings = Depends(get_settings)) -> DocumentConverter:
    return DocumentConverter.from_settings(settings)


def get_object_store(settings: RelaySettings = Depends(get_settings)) -> ObjectStore:
    return ObjectStore.from_settings(settings)


def parse_body(model: Type[RequestModel], body: Dict[str, Any]) -> RequestModel:
    """Validate field types; fields of the wrong type are a 400."""
    try:
        return model.model_validate(body)
    except PydanticValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise ValidationError(f"Invalid value for: {', '.join(fields)}")


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/save-pdf", response_model=SavePDFResponse)
async def save_pdf(
    body: Dict[str, Any] = Depends(read_request_body),
    store: ObjectStore = Depends(get_object_store),
) -> SavePDFResponse:
    """
    Store an already rendered PDF in Dropbox.

    Raises:
        ValidationError: 400 if pdfBlob or fileName is missing
        OperationFailedError: 500 if the upload fails
    """
    payload = parse_body(SavePDFRequest, body)
    if not payload.pdfBlob or not payload.fileName:
        raise ValidationError("Missing data: pdfBlob and fileName are required")

    content = decode_pdf_blob(payload.pdfBlob)

    try:
        dropbox_data = await store.upload(content, payload.fileName)
    except UpstreamError as e:
        logger.error(f"Error saving PDF: {e}")
        raise OperationFailedError("Error saving PDF to Dropbox", error=str(e)) from e

    return SavePDFResponse(
        message="PDF saved to Dropbox successfully",
        data=dropbox_data,
    )


@router.post("/generate-pdf", response_model=GeneratePDFResponse)
async def generate_pdf(
    body: Dict[str, Any] = Depends(read_request_body),
    converter: DocumentConverter = Depends(get_converter),
) -> GeneratePDFResponse:
    """
    Render HTML to PDF and return it base64 encoded.

    Raises:
        ValidationError: 400 if htmlContent is missing
        OperationFailedError: 500 if the conversion fails
    """
    payload = parse_body(GeneratePDFRequest, body)
    if not payload.htmlContent:
        raise ValidationError("htmlContent is required")

    try:
        pdf_bytes = await converter.convert(payload.htmlContent)
    except UpstreamError as e:
        logger.error(f"Error generating PDF: {e}")
        raise OperationFailedError("Error generating PDF", error=str(e)) from e

    return GeneratePDFResponse(
        message="PDF generated successfully",
        pdfBlob=encode_pdf_blob(pdf_bytes),
    )


@router.post("/generate-and-save-pdf", response_model=GenerateAndSavePDFResponse)
async def generate_and_save_pdf(
    body: Dict[str, Any] = Depends(read_request_body),
    converter: DocumentConverter = Depends(get_converter),
    store: ObjectStore = Depends(get_object_store),
) -> GenerateAndSavePDFResponse:
    """
    Render HTML to PDF, store it in Dropbox and return both results.

    The converter output goes to Dropbox as-is. If conversion fails Dropbox
    is never called; if the upload fails the rendered PDF is discarded.

    Raises:
        ValidationError: 400 if htmlContent or fileName is missing
        OperationFailedError: 500 if either upstream step fails
    """
    payload = parse_body(GenerateAndSavePDFRequest, body)
    if not payload.htmlContent or not payload.fileName:
        raise ValidationError("htmlContent and fileName are required")

    try:
        pdf_bytes = await converter.convert(payload.htmlContent)
        dropbox_data = await store.upload(pdf_bytes, payload.fileName)
    except UpstreamError as e:
        logger.error(f"Error generating and saving PDF ({e.service}): {e}")
        raise OperationFailedError("Error generating and saving PDF", error=str(e)) from e

    return GenerateAndSavePDFResponse(
        message="PDF generated and saved successfully",
        pdfBlob=encode_pdf_blob(pdf_bytes),
        dropboxData=dropbox_data,
    )
