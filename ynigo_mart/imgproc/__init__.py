"""Image processing for uploaded profile pictures."""

from .normalize import ImageNormalizer

__all__ = ["ImageNormalizer"]
