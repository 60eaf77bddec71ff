"""
stampmark
=========
Renders a timestamp or text watermark onto an image and re-encodes it.

Modules:
    - core: Pure algorithm logic (no UI dependencies)
    - workers: QThread workers for rendering off the GUI thread

Usage:
    from stampmark import WatermarkRenderer, WatermarkSettings, GridPosition
    from stampmark.workers import RenderWorker, RenderConfig
"""

__version__ = "1.0.0"
__app_name__ = "stampmark"

# Core exports
from .core import (
    WatermarkRenderer, WatermarkLayout, WatermarkedImage, create_watermark,
    WatermarkSettings, GridPosition, PercentPosition,
    SourceImage, load_source, output_format,
    RGBAColor, hex_to_rgba, format_timestamp,
    WatermarkError, DecodeError, RenderError
)

__all__ = [
    # Version info
    "__version__",
    "__app_name__",

    # Rendering
    "WatermarkRenderer",
    "WatermarkLayout",
    "WatermarkedImage",
    "create_watermark",

    # Settings
    "WatermarkSettings",
    "GridPosition",
    "PercentPosition",

    # Sources
    "SourceImage",
    "load_source",
    "output_format",

    # Style helpers
    "RGBAColor",
    "hex_to_rgba",
    "format_timestamp",

    # Errors
    "WatermarkError",
    "DecodeError",
    "RenderError",
]
