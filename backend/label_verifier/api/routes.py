"""API route definitions."""

import time
from fastapi import APIRouter, UploadFile, File, Form, HTTPException
from typing import Optional
import logging

from pydantic import ValidationError

from ..models import (
    ApplicationData,
    TextVerificationRequest,
    VerificationResponse,
    VerificationResult,
    ExtractedText,
    WarningResult,
    ErrorResponse,
    HealthResponse,
)
from ..services import (
    OCRService,
    LabelVerifier,
    RecognizedText,
    is_recognized,
    find_alcohol_percentages,
    check_government_warning,
)
from .. import __version__

logger = logging.getLogger(__name__)
router = APIRouter()

# Initialize services
ocr_service = OCRService()
verifier = LabelVerifier()


def _verification_response(
    application: ApplicationData,
    recognized: RecognizedText,
    start_time: float
) -> VerificationResponse:
    """Run the verifier and wrap its result for the API."""
    result = verifier.verify(application.to_declared(), recognized)
    summary = verifier.summarize(result)
    total_ms = int((time.time() - start_time) * 1000)
    return VerificationResponse(
        success=True,
        result=VerificationResult.from_core(result, summary, total_ms),
        error=None
    )


async def _read_upload(image: UploadFile) -> bytes:
    try:
        return await image.read()
    except Exception as e:
        logger.error(f"Failed to read uploaded image: {e}")
        raise HTTPException(status_code=400, detail="Failed to read uploaded image")


@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check API health and OCR readiness."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        ocr_ready=ocr_service.is_ready
    )


@router.post(
    "/verify",
    response_model=VerificationResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
    },
    tags=["Verification"]
)
async def verify_label(
    image: UploadFile = File(..., description="Label image file"),
    brand_name: str = Form(..., description="Declared brand name"),
    product_class: str = Form(..., description="Declared class/type"),
    alcohol_percent: Optional[float] = Form(None, description="Declared alcohol by volume"),
    net_contents: Optional[str] = Form(None, description="Declared net contents (e.g., 12 FL OZ)"),
):
    """
    Verify a label image against declared data.

    The image is read with OCR first; recognition failures are reported in
    the response body with an error_kind and no verification is attempted.
    """
    start_time = time.time()

    try:
        application = ApplicationData(
            brand_name=brand_name,
            product_class=product_class,
            alcohol_percent=alcohol_percent,
            net_contents=net_contents or None,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))

    image_bytes = await _read_upload(image)

    outcome = ocr_service.recognize(image_bytes, image.filename or "unknown")
    if not is_recognized(outcome):
        logger.info(f"Recognition failed ({outcome.kind.value}): {outcome.message}")
        return VerificationResponse(
            success=False,
            error=outcome.message,
            error_kind=outcome.kind
        )

    try:
        return _verification_response(application, outcome, start_time)
    except Exception as e:
        logger.exception(f"Error verifying label: {e}")
        return VerificationResponse(
            success=False,
            error=f"Error verifying label: {str(e)}"
        )


@router.post(
    "/verify/text",
    response_model=VerificationResponse,
    tags=["Verification"]
)
async def verify_text(request: TextVerificationRequest):
    """
    Verify already-recognized label text against declared data.

    For clients that run their own OCR provider.
    """
    start_time = time.time()
    return _verification_response(
        request.application_data,
        request.recognized.to_recognized(),
        start_time
    )


@router.post(
    "/extract",
    response_model=VerificationResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
    },
    tags=["Extraction"]
)
async def extract_only(
    image: UploadFile = File(..., description="Label image file"),
):
    """
    Read text from a label image without verification.

    Useful for checking OCR quality before submitting declared data.
    """
    image_bytes = await _read_upload(image)

    outcome = ocr_service.recognize(image_bytes, image.filename or "unknown")
    if not is_recognized(outcome):
        return VerificationResponse(
            success=False,
            error=outcome.message,
            error_kind=outcome.kind
        )

    warning = check_government_warning(outcome.text)
    extracted = ExtractedText(
        raw_text=outcome.text,
        ocr_confidence=outcome.confidence,
        alcohol_candidates=find_alcohol_percentages(outcome.text),
        government_warning=WarningResult(
            found=warning.found,
            matched_snippet=warning.matched_snippet
        ),
    )

    return VerificationResponse(success=True, extracted=extracted)
