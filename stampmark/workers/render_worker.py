"""
Render Worker - Async Watermark Rendering
=========================================
QThread worker that runs one watermark render off the GUI thread.

Workflow:
1. Capture the timestamp (now, unless the config carries one)
2. Run the async render on a private event loop inside the thread
3. Emit result_ready exactly once, with success or the error message
"""

import asyncio
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from PyQt6.QtCore import QThread, pyqtSignal

from stampmark.core.renderer import WatermarkedImage, WatermarkRenderer
from stampmark.core.settings import WatermarkSettings
from stampmark.core.source import ImageRef
from stampmark.core.style import Timestamp


@dataclass
class RenderConfig:
    """Configuration for a single render."""
    image_ref: ImageRef
    settings: Union[WatermarkSettings, Mapping[str, Any]] = field(default_factory=WatermarkSettings)
    timestamp: Optional[Timestamp] = None  # None = time the worker runs
    text: str = ""  # overrides the timestamp when non-empty
    font_path: Optional[str] = None


@dataclass
class RenderResult:
    """Result of a render."""
    success: bool = False
    image: Optional[WatermarkedImage] = None
    error_message: str = ""


class RenderWorker(QThread):
    """
    Worker thread for rendering a watermark.

    Signals:
        started_render(str): Emitted when rendering begins (watermark text or "")
        result_ready(RenderResult): Emitted once with the outcome
        error(str): Emitted when the render fails
    """

    # Signals
    started_render = pyqtSignal(str)
    result_ready = pyqtSignal(object)  # RenderResult
    error = pyqtSignal(str)

    def __init__(self, config: RenderConfig, parent=None):
        """
        Initialize the render worker.

        Args:
            config: RenderConfig with the image reference and settings.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self.config = config

    def run(self):
        """Main worker execution."""
        result = RenderResult()
        renderer = WatermarkRenderer(font_path=self.config.font_path)

        timestamp = self.config.timestamp
        if timestamp is None:
            timestamp = datetime.now()

        self.started_render.emit(self.config.text)

        try:
            result.image = asyncio.run(
                renderer.render(
                    self.config.image_ref,
                    timestamp,
                    self.config.settings,
                    self.config.text
                )
            )
            result.success = True

        except Exception as e:
            result.error_message = str(e)
            traceback.print_exc()
            self.error.emit(result.error_message)

        self.result_ready.emit(result)
