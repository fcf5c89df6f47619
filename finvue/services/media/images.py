"""
Image Encoding for Logos and Avatars

Uploaded images are stored inline in the ledger document as data URIs,
so they travel with the document and need no separate file host.

DESIGN DECISION: Bytes are opened with Pillow before encoding. The
declared file extension is never trusted; the detected format decides
the MIME type, and anything Pillow cannot read is refused.
"""

import base64
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

from finvue.config import AppSettings, get_settings
from finvue.exceptions import ValidationError
from finvue.models.ledger import ValidationIssue


class ImageEncodingError(ValidationError):
    """Upload is not an acceptable image."""

    def __init__(self, message: str):
        super().__init__(message, issues=[ValidationIssue(
            field="image",
            issue_type="invalid_value",
            message=message,
        )])


class ImageEncoder:
    """Turns uploaded PNG/JPEG bytes into a data URI."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def detect_format(self, image_bytes: bytes) -> str:
        """
        Return the lower-case Pillow format name ('png', 'jpeg').

        Raises:
            ImageEncodingError: empty, too large, unreadable or unsupported
        """
        if not image_bytes:
            raise ImageEncodingError("Image is empty")
        if len(image_bytes) > self._settings.max_upload_size_bytes:
            raise ImageEncodingError(
                f"Image is larger than {self._settings.max_upload_size_mb} MB"
            )

        try:
            with Image.open(BytesIO(image_bytes)) as img:
                img.verify()
                detected = (img.format or "").lower()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ImageEncodingError(f"Could not read image: {e}")

        if detected not in self._settings.supported_formats_list:
            raise ImageEncodingError(
                f"Unsupported image format '{detected}'. "
                f"Use one of: {', '.join(self._settings.supported_formats_list)}"
            )
        return detected

    def to_data_uri(self, image_bytes: bytes) -> str:
        image_format = self.detect_format(image_bytes)
        encoded = base64.b64encode(image_bytes).decode("ascii")
        return f"data:image/{image_format};base64,{encoded}"
