"""
Workers Module - Async Thread Management
========================================
Contains QThread workers for non-blocking watermark rendering.

Components:
- RenderWorker: Single watermark render off the GUI thread
"""

from .render_worker import RenderWorker, RenderConfig, RenderResult

__all__ = [
    "RenderWorker",
    "RenderConfig",
    "RenderResult",
]
