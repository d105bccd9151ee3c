"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import Optional, Union

from ..services import (
    DeclaredData,
    FieldOutcome,
    VerificationResult as CoreVerificationResult,
    RecognizedText,
    RecognitionErrorKind,
)


class ApplicationData(BaseModel):
    """Declared label data to verify against."""
    brand_name: str = Field(..., min_length=1, description="Declared brand name")
    product_class: str = Field(..., min_length=1, description="Declared class/type (e.g., Beer, Bourbon Whiskey)")
    alcohol_percent: Optional[float] = Field(None, ge=0, le=100, description="Declared alcohol by volume")
    net_contents: Optional[str] = Field(None, description="Declared net contents (e.g., 12 FL OZ, 750 mL)")

    class Config:
        str_strip_whitespace = True
        json_schema_extra = {
            "example": {
                "brand_name": "Budweiser",
                "product_class": "Beer",
                "alcohol_percent": 5.0,
                "net_contents": "12 FL OZ"
            }
        }

    def to_declared(self) -> DeclaredData:
        """Convert to the immutable record the verifier consumes."""
        return DeclaredData(
            brand_name=self.brand_name,
            product_class=self.product_class,
            alcohol_percent=self.alcohol_percent,
            net_contents=self.net_contents or None,
        )


class RecognizedTextData(BaseModel):
    """Text already recognized by an external OCR provider."""
    text: str = ""
    confidence: float = Field(..., ge=0.0, le=1.0)

    def to_recognized(self) -> RecognizedText:
        return RecognizedText(text=self.text, confidence=self.confidence)


class TextVerificationRequest(BaseModel):
    """Request body for verifying pre-recognized text."""
    application_data: ApplicationData
    recognized: RecognizedTextData

    class Config:
        json_schema_extra = {
            "example": {
                "application_data": ApplicationData.Config.json_schema_extra["example"],
                "recognized": {
                    "text": "Budweiser Premium Beer 5.0% ABV 12 FL OZ GOVERNMENT WARNING",
                    "confidence": 0.95
                }
            }
        }


class FieldResult(BaseModel):
    """Result for a single field verification."""
    field_name: str
    matched: bool
    extracted_value: Optional[Union[float, str]] = None
    expected_value: Union[float, str]
    similarity: Optional[float] = Field(None, ge=0.0, le=1.0)

    @classmethod
    def from_outcome(cls, field_name: str, outcome: FieldOutcome) -> "FieldResult":
        return cls(
            field_name=field_name,
            matched=outcome.matched,
            extracted_value=outcome.extracted_value,
            expected_value=outcome.expected_value,
            similarity=outcome.similarity,
        )


class WarningResult(BaseModel):
    """Government warning detection result."""
    found: bool
    matched_snippet: Optional[str] = None


class VerificationResult(BaseModel):
    """Overall verification result for a label."""
    brand_name: FieldResult
    product_class: FieldResult
    alcohol_content: Optional[FieldResult] = None
    net_contents: Optional[FieldResult] = None
    government_warning: WarningResult
    overall_match: bool
    source_text: str
    source_confidence: float
    summary: str
    processing_time_ms: int

    @classmethod
    def from_core(
        cls,
        result: CoreVerificationResult,
        summary: str,
        processing_time_ms: int
    ) -> "VerificationResult":
        """Build the response model from the verifier's result."""
        return cls(
            brand_name=FieldResult.from_outcome("Brand Name", result.brand_name),
            product_class=FieldResult.from_outcome("Product Class", result.product_class),
            alcohol_content=(
                FieldResult.from_outcome("Alcohol Content", result.alcohol_content)
                if result.alcohol_content is not None else None
            ),
            net_contents=(
                FieldResult.from_outcome("Net Contents", result.net_contents)
                if result.net_contents is not None else None
            ),
            government_warning=WarningResult(
                found=result.government_warning.found,
                matched_snippet=result.government_warning.matched_snippet,
            ),
            overall_match=result.overall_match,
            source_text=result.source_text,
            source_confidence=result.source_confidence,
            summary=summary,
            processing_time_ms=processing_time_ms,
        )


class ExtractedText(BaseModel):
    """Text recognized from a label image, plus what could be read without declared data."""
    raw_text: str
    ocr_confidence: float = Field(ge=0.0, le=1.0)
    alcohol_candidates: list[float] = []
    government_warning: WarningResult


class VerificationResponse(BaseModel):
    """Response for label verification and extraction."""
    success: bool
    result: Optional[VerificationResult] = None
    extracted: Optional[ExtractedText] = None
    error: Optional[str] = None
    error_kind: Optional[RecognitionErrorKind] = None


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "error": "Invalid image format",
                "detail": "Allowed formats: JPEG, JPG, PNG, WEBP"
            }
        }


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    ocr_ready: bool
