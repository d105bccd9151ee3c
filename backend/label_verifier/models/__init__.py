"""Pydantic models for request/response schemas."""

from .schemas import (
    ApplicationData,
    RecognizedTextData,
    TextVerificationRequest,
    FieldResult,
    WarningResult,
    VerificationResult,
    ExtractedText,
    VerificationResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "ApplicationData",
    "RecognizedTextData",
    "TextVerificationRequest",
    "FieldResult",
    "WarningResult",
    "VerificationResult",
    "ExtractedText",
    "VerificationResponse",
    "ErrorResponse",
    "HealthResponse",
]
