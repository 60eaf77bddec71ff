"""
Watermark Errors
================
Exception types raised by the rendering pipeline.

- DecodeError: the image reference could not be loaded or decoded
- RenderError: anything after decoding failed (color, font, drawing, encoding)

Both keep the underlying exception in ``original`` and chain it as
``__cause__`` so callers can inspect what the loader or Pillow reported.
"""

from typing import Optional


class WatermarkError(Exception):
    """Base class for all watermark rendering failures."""

    def __init__(self, message: str, original: Optional[BaseException] = None):
        super().__init__(message)
        self.original = original


class DecodeError(WatermarkError):
    """The image reference could not be loaded or decoded."""


class RenderError(WatermarkError):
    """Surface creation, measurement, painting or encoding failed."""
