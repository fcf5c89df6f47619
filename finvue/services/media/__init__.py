"""Image encoding for organization logos and user avatars."""

from finvue.services.media.images import ImageEncoder, ImageEncodingError

__all__ = [
    "ImageEncoder",
    "ImageEncodingError",
]
