"""
Core Module - Pure Algorithm Logic
==================================
This module contains no UI dependencies.
Loading, placement, painting and encoding are implemented here.
"""

from .errors import DecodeError, RenderError, WatermarkError
from .renderer import WatermarkedImage, WatermarkLayout, WatermarkRenderer, create_watermark
from .settings import GridPosition, PercentPosition, WatermarkSettings
from .source import SourceImage, load_source, output_format
from .style import RGBAColor, format_timestamp, hex_to_rgba

__all__ = [
    "WatermarkRenderer",
    "WatermarkLayout",
    "WatermarkedImage",
    "create_watermark",
    "WatermarkSettings",
    "GridPosition",
    "PercentPosition",
    "SourceImage",
    "load_source",
    "output_format",
    "RGBAColor",
    "hex_to_rgba",
    "format_timestamp",
    "WatermarkError",
    "DecodeError",
    "RenderError",
]
