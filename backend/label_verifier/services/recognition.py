"""Text-recognition result types shared by the OCR provider and the verifier."""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class RecognitionErrorKind(str, Enum):
    """Why text recognition produced no usable text."""
    INVALID_IMAGE = "invalid_image"
    NO_TEXT_FOUND = "no_text_found"
    RECOGNITION_FAILED = "recognition_failed"


@dataclass(frozen=True)
class RecognizedText:
    """Text read from a label image, with the engine's confidence (0-1)."""
    text: str
    confidence: float


@dataclass(frozen=True)
class RecognitionFailure:
    """Tagged failure from the text-recognition provider."""
    kind: RecognitionErrorKind
    message: str


RecognitionOutcome = Union[RecognizedText, RecognitionFailure]


def is_recognized(outcome: RecognitionOutcome) -> bool:
    """True when the provider returned text rather than a failure."""
    return isinstance(outcome, RecognizedText)
