"""Verification service for comparing recognized label text against declared data."""

from typing import Optional, List, Union
from dataclasses import dataclass
import logging

from .extraction import (
    WarningOutcome,
    extract_alcohol_percentage,
    extract_volume,
    check_government_warning,
    extract_brand_name,
    extract_product_class,
)
from .matching import similarity_score
from .recognition import RecognizedText
from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeclaredData:
    """Label data as declared by the applicant. Validated before it gets here."""
    brand_name: str
    product_class: str
    alcohol_percent: Optional[float] = None
    net_contents: Optional[str] = None


@dataclass(frozen=True)
class FieldOutcome:
    """Result of checking a single declared field against the label."""
    matched: bool
    extracted_value: Optional[Union[str, float]]
    expected_value: Union[str, float]
    similarity: Optional[float] = None  # Informational, never affects matched


@dataclass(frozen=True)
class VerificationResult:
    """Complete verification result for one label."""
    brand_name: FieldOutcome
    product_class: FieldOutcome
    alcohol_content: Optional[FieldOutcome]
    net_contents: Optional[FieldOutcome]
    government_warning: WarningOutcome
    overall_match: bool
    source_text: str
    source_confidence: float

    def present_fields(self) -> List[tuple]:
        """(label, outcome) pairs for every field that was checked."""
        fields = [
            ("Brand Name", self.brand_name),
            ("Product Class", self.product_class),
        ]
        if self.alcohol_content is not None:
            fields.append(("Alcohol Content", self.alcohol_content))
        if self.net_contents is not None:
            fields.append(("Net Contents", self.net_contents))
        return fields


class LabelVerifier:
    """Runs every field extractor against one label and aggregates the verdict."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def verify(
        self,
        declared: DeclaredData,
        recognized: RecognizedText,
    ) -> VerificationResult:
        """
        Verify recognized label text against declared data.

        Every field is evaluated and reported; a mismatch on one field never
        stops the others from being checked. Optional fields that were not
        declared come back as None and do not affect the verdict.

        Args:
            declared: Declared label data
            recognized: Text and confidence from the recognition provider

        Returns:
            VerificationResult with per-field outcomes and overall verdict
        """
        text = recognized.text or ""

        # Brand name (required)
        brand = extract_brand_name(text, declared.brand_name)
        brand_outcome = FieldOutcome(
            matched=brand is not None,
            extracted_value=brand,
            expected_value=declared.brand_name,
            similarity=similarity_score(declared.brand_name, text),
        )

        # Product class (required)
        product_class = extract_product_class(text, declared.product_class)
        class_outcome = FieldOutcome(
            matched=product_class is not None,
            extracted_value=product_class,
            expected_value=declared.product_class,
            similarity=similarity_score(declared.product_class, text),
        )

        # Alcohol content (optional)
        abv_outcome = None
        if declared.alcohol_percent is not None:
            abv = extract_alcohol_percentage(text, declared.alcohol_percent)
            abv_outcome = FieldOutcome(
                matched=abv is not None,
                extracted_value=abv,
                expected_value=declared.alcohol_percent,
            )

        # Net contents (optional)
        net_outcome = None
        if declared.net_contents:
            volume = extract_volume(text, declared.net_contents)
            net_outcome = FieldOutcome(
                matched=volume is not None,
                extracted_value=volume,
                expected_value=declared.net_contents,
            )

        # Government warning (informational unless policy requires it)
        warning = check_government_warning(text)

        field_outcomes = [brand_outcome, class_outcome, abv_outcome, net_outcome]
        overall_match = all(o.matched for o in field_outcomes if o is not None)
        if self.settings.require_government_warning and not warning.found:
            overall_match = False

        result = VerificationResult(
            brand_name=brand_outcome,
            product_class=class_outcome,
            alcohol_content=abv_outcome,
            net_contents=net_outcome,
            government_warning=warning,
            overall_match=overall_match,
            source_text=recognized.text,
            source_confidence=recognized.confidence,
        )

        for label, outcome in result.present_fields():
            logger.debug(f"{label}: expected={outcome.expected_value!r} "
                        f"extracted={outcome.extracted_value!r} matched={outcome.matched}")
        logger.info(f"Verification for '{declared.brand_name}': "
                   f"{'PASS' if overall_match else 'FAIL'} "
                   f"(warning {'found' if warning.found else 'not found'})")

        return result

    def summarize(self, result: VerificationResult) -> str:
        """Generate human-readable summary under this verifier's warning policy."""
        lines = []
        for label, outcome in result.present_fields():
            if not outcome.matched:
                lines.append(f"❌ {label}: expected '{outcome.expected_value}' not found on label")

        if not result.government_warning.found:
            marker = "❌" if self.settings.require_government_warning else "⚠️"
            lines.append(f"{marker} Government Warning: not detected on label")

        if result.overall_match and not lines:
            return "✅ All fields verified successfully. Label matches application data."

        if result.overall_match:
            header = "✅ Label matches application data. Notes:"
        else:
            header = "❌ Verification failed. Issues found:"

        return header + "\n" + "\n".join(lines)


def verify_label(declared: DeclaredData, recognized: RecognizedText) -> VerificationResult:
    """Verify with application settings. See LabelVerifier.verify."""
    return LabelVerifier().verify(declared, recognized)
