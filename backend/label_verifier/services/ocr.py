"""Text-recognition provider backed by EasyOCR.

Turns an uploaded label image into RecognizedText (line-ordered text plus the
mean box confidence) or a tagged RecognitionFailure. The verifier never sees
failures; callers branch on is_recognized() first.

- Lazy, thread-safe engine initialization (call initialize() on startup)
- Concurrency control via semaphore
- Unicode NFKC normalization of box text
- Boxes grouped into reading-order lines, joined with newlines
"""

import numpy as np
from typing import Optional, List
from dataclasses import dataclass
import logging
import os
import threading
import unicodedata
import re

from .preprocessing import ImagePreprocessor
from .recognition import (
    RecognizedText,
    RecognitionFailure,
    RecognitionErrorKind,
    RecognitionOutcome,
)
from ..config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class OCRBox:
    """Represents a detected text box with position and confidence."""
    text: str
    confidence: float
    bbox: List[List[int]]  # [[x1,y1], [x2,y2], [x3,y3], [x4,y4]]

    @property
    def top(self) -> int:
        """Top Y coordinate (minimum Y)."""
        return min(p[1] for p in self.bbox)

    @property
    def bottom(self) -> int:
        """Bottom Y coordinate (maximum Y)."""
        return max(p[1] for p in self.bbox)

    @property
    def left(self) -> int:
        """Left X coordinate (minimum X)."""
        return min(p[0] for p in self.bbox)

    @property
    def height(self) -> int:
        """Height of the bounding box."""
        return self.bottom - self.top

    @property
    def center_y(self) -> int:
        """Center Y coordinate."""
        return (self.top + self.bottom) // 2


class OCRService:
    """EasyOCR wrapper implementing the text-recognition provider contract."""

    _instance: Optional["OCRService"] = None
    _reader = None
    _initialized = False
    _lock = threading.Lock()
    _semaphore: Optional[threading.Semaphore] = None

    def __new__(cls):
        """Singleton pattern to reuse OCR engine."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        self.settings = get_settings()
        self.preprocessor = ImagePreprocessor()
        # Initialize semaphore for concurrency control
        if OCRService._semaphore is None:
            OCRService._semaphore = threading.Semaphore(self.settings.ocr_max_concurrent)

    def initialize(self) -> bool:
        """
        Initialize OCR engine. Call on app startup.
        Thread-safe initialization.

        Returns:
            True if initialization successful
        """
        with self._lock:
            if self._initialized:
                return True

            try:
                import easyocr
                import torch

                # Keep CPU inference from grabbing every core
                num_threads = int(os.environ.get('TORCH_NUM_THREADS', min(4, os.cpu_count() or 2)))
                torch.set_num_threads(num_threads)

                logger.info(f"Initializing EasyOCR engine ({', '.join(self.settings.ocr_languages)}, "
                           f"{num_threads} threads)...")

                kwargs = {"gpu": self.settings.ocr_gpu, "verbose": False}
                if self.settings.ocr_model_dir:
                    kwargs["model_storage_directory"] = self.settings.ocr_model_dir

                OCRService._reader = easyocr.Reader(self.settings.ocr_languages, **kwargs)
                OCRService._initialized = True
                logger.info("EasyOCR initialized successfully")
                return True

            except Exception as e:
                logger.exception(f"Failed to initialize EasyOCR: {e}")
                return False

    @property
    def is_ready(self) -> bool:
        """Check if OCR engine is ready."""
        return self._initialized and self._reader is not None

    def recognize(self, image_bytes: bytes, filename: str) -> RecognitionOutcome:
        """
        Read the text on a label image.

        Args:
            image_bytes: Raw uploaded image bytes
            filename: Upload filename (used for extension checks)

        Returns:
            RecognizedText on success, RecognitionFailure otherwise
        """
        is_valid, error_msg = self.preprocessor.validate_image(image_bytes, filename)
        if not is_valid:
            return RecognitionFailure(RecognitionErrorKind.INVALID_IMAGE, error_msg)

        if not self.is_ready:
            return RecognitionFailure(
                RecognitionErrorKind.RECOGNITION_FAILED,
                "OCR service not ready. Please try again in a moment."
            )

        try:
            image, meta = self.preprocessor.preprocess(image_bytes)
            logger.debug(f"Preprocessing steps: {meta['preprocessing_steps']}")
        except Exception as e:
            logger.warning(f"Could not decode image '{filename}': {e}")
            return RecognitionFailure(
                RecognitionErrorKind.INVALID_IMAGE,
                f"Unable to read image: {str(e)}"
            )

        try:
            boxes = self.read_boxes(image)
        except Exception as e:
            logger.exception(f"OCR processing failed: {e}")
            return RecognitionFailure(
                RecognitionErrorKind.RECOGNITION_FAILED,
                "Failed to process the image. Please try again."
            )

        text = "\n".join(self._group_lines(boxes))
        if not text.strip():
            return RecognitionFailure(
                RecognitionErrorKind.NO_TEXT_FOUND,
                "No text could be extracted from the image. Please try a clearer image."
            )

        confidence = sum(b.confidence for b in boxes) / len(boxes)
        logger.info(f"OCR read {len(boxes)} boxes (avg confidence {confidence:.2f})")
        return RecognizedText(text=text, confidence=confidence)

    def read_boxes(self, image: np.ndarray) -> List[OCRBox]:
        """
        Run a single OCR pass and return normalized, confidence-filtered boxes.

        Raises whatever the engine raises; recognize() maps it to a failure.
        """
        with self._semaphore:
            results = self._reader.readtext(
                image,
                decoder='greedy',  # Faster than beamsearch
                batch_size=1,      # Predictable CPU usage
                paragraph=False,   # Line grouping is done here
            )

        boxes = []
        for bbox_points, text, confidence in results or []:
            normalized_text = self._normalize_text(text)
            if not normalized_text:
                continue
            if confidence < self.settings.ocr_min_box_confidence:
                logger.debug(f"Dropping low-confidence box '{normalized_text}' ({confidence:.2f})")
                continue
            boxes.append(OCRBox(
                text=normalized_text,
                confidence=float(confidence),
                bbox=[[int(p[0]), int(p[1])] for p in bbox_points],
            ))

        if not boxes:
            logger.warning("OCR returned no results")
        return boxes

    def _group_lines(self, boxes: List[OCRBox]) -> List[str]:
        """Group boxes into lines (by center Y), left-to-right within each line."""
        if not boxes:
            return []

        # Dynamic line height from the median box height
        line_h = int(np.median([b.height for b in boxes]))
        line_h = max(12, min(line_h, 60))

        sorted_boxes = sorted(boxes, key=lambda b: (b.center_y, b.left))
        lines: List[List[OCRBox]] = [[sorted_boxes[0]]]
        for box in sorted_boxes[1:]:
            if abs(box.center_y - lines[-1][0].center_y) <= line_h // 2:
                lines[-1].append(box)
            else:
                lines.append([box])

        return [" ".join(b.text for b in sorted(line, key=lambda b: b.left)) for line in lines]

    def _normalize_text(self, text: str) -> str:
        """
        Normalize OCR text output.
        - Unicode NFKC normalization
        - Collapse whitespace
        - Strip leading/trailing whitespace
        """
        normalized = unicodedata.normalize('NFKC', text or "")
        normalized = re.sub(r'\s+', ' ', normalized)
        return normalized.strip()
