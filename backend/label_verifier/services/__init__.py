"""Services for text normalization, field extraction, matching, verification and OCR."""

from .normalization import normalize
from .matching import fuzzy_match, similarity_score, OCR_CONFUSIONS
from .extraction import (
    WarningOutcome,
    extract_alcohol_percentage,
    find_alcohol_percentages,
    extract_volume,
    check_government_warning,
    extract_brand_name,
    extract_product_class,
)
from .recognition import RecognizedText, RecognitionFailure, RecognitionErrorKind, is_recognized
from .verification import (
    DeclaredData,
    FieldOutcome,
    VerificationResult,
    LabelVerifier,
    verify_label,
)
from .preprocessing import ImagePreprocessor
from .ocr import OCRService, OCRBox

__all__ = [
    "normalize",
    "fuzzy_match",
    "similarity_score",
    "OCR_CONFUSIONS",
    "WarningOutcome",
    "extract_alcohol_percentage",
    "find_alcohol_percentages",
    "extract_volume",
    "check_government_warning",
    "extract_brand_name",
    "extract_product_class",
    "RecognizedText",
    "RecognitionFailure",
    "RecognitionErrorKind",
    "is_recognized",
    "DeclaredData",
    "FieldOutcome",
    "VerificationResult",
    "LabelVerifier",
    "verify_label",
    "ImagePreprocessor",
    "OCRService",
    "OCRBox",
]
