"""Image validation and preprocessing ahead of text recognition.

Pipeline: load (EXIF-upright) -> clamp size -> grayscale -> CLAHE contrast.
"""

import cv2
import numpy as np
from PIL import Image, ImageOps
import io
from typing import Tuple
import logging

from ..config import get_settings

logger = logging.getLogger(__name__)


class ImagePreprocessor:
    """Validates uploads and prepares images for OCR."""

    def __init__(self):
        self.settings = get_settings()

    def preprocess(self, image_bytes: bytes) -> Tuple[np.ndarray, dict]:
        """
        Preprocess image for OCR.

        Args:
            image_bytes: Raw image bytes

        Returns:
            Tuple of (preprocessed BGR image as numpy array, metadata dict)
        """
        image = self._load_image(image_bytes)

        metadata = {
            "original_size": image.shape[:2],
            "preprocessing_steps": [],
        }

        image, resized = self._clamp_size(image)
        if resized:
            metadata["preprocessing_steps"].append("resize")
            metadata["resized_to"] = image.shape[:2]

        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        metadata["preprocessing_steps"].append("grayscale")

        clahe = cv2.createCLAHE(clipLimit=2.0, tileGridSize=(8, 8))
        enhanced = clahe.apply(gray)
        metadata["preprocessing_steps"].append("clahe")

        # EasyOCR accepts grayscale, but BGR keeps downstream handling uniform
        result = cv2.cvtColor(enhanced, cv2.COLOR_GRAY2BGR)

        return result, metadata

    def _clamp_size(self, image: np.ndarray) -> Tuple[np.ndarray, bool]:
        """Downscale so the longest side is at most max_image_dimension."""
        h, w = image.shape[:2]
        max_dim = self.settings.max_image_dimension
        if max(h, w) <= max_dim:
            return image, False
        scale = max_dim / max(h, w)
        new_size = (int(w * scale), int(h * scale))
        logger.debug(f"Resizing image from {w}x{h} to {new_size[0]}x{new_size[1]}")
        return cv2.resize(image, new_size, interpolation=cv2.INTER_AREA), True


    def _load_image(self, image_bytes: bytes) -> np.ndarray:
        """Decode upload bytes to a BGR array, honoring EXIF orientation."""
        with Image.open(io.BytesIO(image_bytes)) as pil_image:
            # Phone photos are often stored sideways with a rotation tag
            upright = ImageOps.exif_transpose(pil_image).convert("RGB")
        return cv2.cvtColor(np.array(upright), cv2.COLOR_RGB2BGR)

    def get_image_info(self, image_bytes: bytes) -> dict:
        """Format and dimensions, read from the header only."""
        with Image.open(io.BytesIO(image_bytes)) as pil_image:
            width, height = pil_image.size
            return {
                "format": pil_image.format,
                "mode": pil_image.mode,
                "width": width,
                "height": height,
                "size_bytes": len(image_bytes),
            }

    def validate_image(self, image_bytes: bytes, filename: str) -> Tuple[bool, str]:
        """
        Check extension, size and dimensions before any decoding work.

        Returns:
            Tuple of (is_valid, error_message); error_message is "" when valid
        """
        allowed = self.settings.allowed_extensions
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if ext not in allowed:
            formats = ", ".join(sorted(allowed)).upper()
            return False, f"Invalid file type. Allowed formats: {formats}"

        if not image_bytes:
            return False, "Uploaded file is empty."

        limit_mb = self.settings.max_upload_size_mb
        if len(image_bytes) > limit_mb * 1024 * 1024:
            return False, f"Image exceeds {limit_mb}MB upload limit. Please resize or compress."

        try:
            info = self.get_image_info(image_bytes)
        except Exception as e:
            return False, f"Unable to read image: {str(e)}"

        min_dim = self.settings.min_image_dimension
        if min(info["width"], info["height"]) < min_dim:
            return False, f"Image too small. Minimum dimensions: {min_dim}x{min_dim} pixels."

        return True, ""
