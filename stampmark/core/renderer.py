"""
Watermark Renderer
==================
Paints a timestamp (or caller-supplied text) onto an image using PIL/Pillow
and re-encodes it in a format inferred from the source.

Workflow:
1. Load and decode the image reference (the only await)
2. Copy it onto a fresh RGBA surface of the same size
3. Resolve the text, measure it and compute its position
4. Grid mode with opacity below 0.8: paint a translucent dark backing box
5. Paint the text, encode the surface

Technical Notes:
- Every layer is drawn on a transparent overlay and alpha-composited, so
  translucent fills blend with the image instead of replacing pixels
- The text origin is its left end on the baseline (Pillow anchor "ls")
- JPEG output is flattened onto opaque black, as a browser canvas does;
  PNG and WEBP keep the alpha channel
"""

import base64
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from .errors import RenderError, WatermarkError
from .placement import place_by_percent, place_on_grid
from .settings import GridPosition, WatermarkSettings
from .source import ImageRef, SourceImage, load_source, output_format
from .style import BACKING_COLOR, RGBAColor, Timestamp, hex_to_rgba, resolve_text

logger = logging.getLogger(__name__)

SettingsLike = Union[WatermarkSettings, Mapping[str, Any]]
Box = Tuple[float, float, float, float]


@dataclass(frozen=True)
class WatermarkedImage:
    """Encoded output of a render."""
    data: bytes
    format: str  # Pillow format name: "PNG", "WEBP" or "JPEG"
    mime_type: str
    width: int
    height: int

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def to_data_url(self) -> str:
        payload = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{payload}"


@dataclass(frozen=True)
class WatermarkLayout:
    """Everything needed to paint the text, computed before any drawing."""
    text: str
    font: ImageFont.FreeTypeFont
    color: RGBAColor
    text_width: float
    text_height: float
    origin: Tuple[float, float]  # left end of the baseline
    backing_box: Optional[Box] = None  # (x0, y0, x1, y1), x1 and y1 exclusive


def _as_settings(settings: SettingsLike) -> WatermarkSettings:
    if isinstance(settings, WatermarkSettings):
        return settings
    return WatermarkSettings.from_dict(settings)


def _inclusive_box(box: Box) -> Box:
    # ImageDraw.rectangle includes its end coordinates
    x0, y0, x1, y1 = box
    return x0, y0, x1 - 1, y1 - 1


def _composite(surface: Image.Image, paint: Callable[[ImageDraw.ImageDraw], None]) -> Image.Image:
    layer = Image.new("RGBA", surface.size, (0, 0, 0, 0))
    paint(ImageDraw.Draw(layer))
    return Image.alpha_composite(surface, layer)


class WatermarkRenderer:
    """
    Renders a single text watermark onto an image.

    A renderer holds no per-call state: every render works on its own
    surface, so one instance can serve concurrent calls.
    """

    # Text height estimate in grid mode, as a multiple of the font size
    LINE_HEIGHT_RATIO = 1.2

    # Backing box is painted only below this opacity (grid mode)
    BACKING_OPACITY_THRESHOLD = 0.8
    BACKING_PADDING = 5

    DEFAULT_JPEG_QUALITY = 92

    # Tried in order when no custom font is given
    FALLBACK_FONTS = (
        "arial.ttf",
        "Arial.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "DejaVuSans.ttf",
    )

    def __init__(
            self,
            font_path: Optional[str] = None,
            jpeg_quality: int = DEFAULT_JPEG_QUALITY,
            fetch_timeout: Optional[float] = None
    ):
        """
        Initialize the WatermarkRenderer.

        Args:
            font_path: Optional path to a TTF font file. If None, Arial or
                      DejaVu Sans is used, then Pillow's built-in font.
            jpeg_quality: Quality (1-95) for JPEG output.
            fetch_timeout: Seconds to wait for http(s) sources. None waits
                          indefinitely.
        """
        if not 1 <= jpeg_quality <= 95:
            raise ValueError("JPEG quality must be between 1 and 95")

        self._font_path = font_path
        self._jpeg_quality = jpeg_quality
        self._fetch_timeout = fetch_timeout
        self._cached_fonts: Dict[int, ImageFont.FreeTypeFont] = {}

    def _get_font(self, size: int) -> ImageFont.FreeTypeFont:
        """
        Get or create a cached font object for the given pixel size.

        Args:
            size: Font size in pixels.

        Returns:
            ImageFont object for measuring and drawing text.
        """
        if size in self._cached_fonts:
            return self._cached_fonts[size]

        candidates = self.FALLBACK_FONTS
        if self._font_path and Path(self._font_path).exists():
            candidates = (self._font_path,) + candidates

        font = None
        for candidate in candidates:
            try:
                font = ImageFont.truetype(candidate, size)
                break
            except OSError:
                continue

        if font is None:
            logger.warning("No TrueType font found, using Pillow's default font")
            font = ImageFont.load_default(size=size)

        self._cached_fonts[size] = font
        return font

    def layout(self, text: str, image_size: Tuple[int, int], settings: WatermarkSettings) -> WatermarkLayout:
        """
        Measure the text and compute where it goes.

        Args:
            text: Watermark text.
            image_size: (width, height) of the target surface.
            settings: Watermark settings.

        Returns:
            WatermarkLayout with the text origin and, in grid mode with
            opacity below 0.8, the backing box.

        Raises:
            ValueError: If the color is not a valid hex color.
        """
        font = self._get_font(max(1, int(round(settings.font_size))))
        color = hex_to_rgba(settings.color, settings.opacity)

        # Measure on a scratch surface, text metrics do not depend on pixels
        scratch = ImageDraw.Draw(Image.new("RGBA", (1, 1), (0, 0, 0, 0)))
        text_width = scratch.textlength(text, font=font)

        position = settings.position
        if isinstance(position, GridPosition):
            text_height = settings.font_size * self.LINE_HEIGHT_RATIO
            center_x, y = place_on_grid(position.index, image_size, (text_width, text_height))
            left = center_x - text_width / 2

            backing_box = None
            if settings.opacity < self.BACKING_OPACITY_THRESHOLD:
                pad = self.BACKING_PADDING
                backing_box = (
                    left - pad,
                    y - text_height + pad,
                    left + text_width + pad,
                    y + pad * 2,
                )
        else:
            text_height = settings.font_size
            left, y = place_by_percent(position, image_size, text_width)
            backing_box = None

        return WatermarkLayout(
            text=text,
            font=font,
            color=color,
            text_width=text_width,
            text_height=text_height,
            origin=(left, y),
            backing_box=backing_box,
        )

    def _encode(self, surface: Image.Image, pil_format: str) -> bytes:
        buffer = BytesIO()
        if pil_format == "JPEG":
            # Convert RGBA to RGB for JPEG, transparent areas become black
            rgb_surface = Image.new("RGB", surface.size, (0, 0, 0))
            rgb_surface.paste(surface, mask=surface.split()[3])
            rgb_surface.save(buffer, format="JPEG", quality=self._jpeg_quality)
        else:
            surface.save(buffer, format=pil_format)
        return buffer.getvalue()

    def render_source(
            self,
            source: SourceImage,
            timestamp: Optional[Timestamp],
            settings: SettingsLike,
            formatted_text: Optional[str] = None
    ) -> WatermarkedImage:
        """
        Paint the watermark onto an already decoded source and encode it.

        Args:
            source: Decoded source image and descriptor.
            timestamp: Used only when formatted_text is empty.
            settings: WatermarkSettings or a plain settings mapping.
            formatted_text: Optional literal text overriding the timestamp.

        Returns:
            WatermarkedImage with the same dimensions as the source.

        Raises:
            ValueError: If the settings mapping is out of range.
            RenderError: If any drawing or encoding step fails.
        """
        settings = _as_settings(settings)

        try:
            surface = source.image.convert("RGBA")
            text = resolve_text(timestamp, formatted_text)
            layout = self.layout(text, surface.size, settings)

            if layout.backing_box is not None:
                surface = _composite(
                    surface,
                    lambda draw: draw.rectangle(_inclusive_box(layout.backing_box), fill=BACKING_COLOR.to_pil())
                )

            surface = _composite(
                surface,
                lambda draw: draw.text(
                    layout.origin, layout.text, font=layout.font, fill=layout.color.to_pil(), anchor="ls"
                )
            )

            pil_format, mime_type = output_format(source.descriptor)
            data = self._encode(surface, pil_format)

        except WatermarkError:
            raise
        except Exception as e:
            raise RenderError(f"Failed to render watermark: {e}", original=e) from e

        logger.debug("Rendered %r at %s as %s", text, layout.origin, pil_format)
        return WatermarkedImage(
            data=data,
            format=pil_format,
            mime_type=mime_type,
            width=surface.width,
            height=surface.height,
        )

    async def render(
            self,
            image_ref: ImageRef,
            timestamp: Optional[Timestamp],
            settings: SettingsLike,
            formatted_text: Optional[str] = None
    ) -> WatermarkedImage:
        """
        Load an image reference and render the watermark onto it.

        Args:
            image_ref: Buffer, data URL, http(s) URL, path or PIL Image.
            timestamp: Used only when formatted_text is empty.
            settings: WatermarkSettings or a plain settings mapping.
            formatted_text: Optional literal text overriding the timestamp.

        Returns:
            WatermarkedImage encoded as PNG, WEBP or JPEG depending on
            the source.

        Raises:
            ValueError: If the settings mapping is out of range.
            DecodeError: If the image reference cannot be loaded.
            RenderError: If any drawing or encoding step fails.
        """
        settings = _as_settings(settings)
        source = await load_source(image_ref, timeout=self._fetch_timeout)
        return self.render_source(source, timestamp, settings, formatted_text)


# Convenience function for simple usage
async def create_watermark(
        image_ref: ImageRef,
        timestamp: Optional[Timestamp],
        settings: SettingsLike,
        formatted_text: Optional[str] = None
) -> WatermarkedImage:
    """
    Convenience function to watermark an image with a default renderer.

    Args:
        image_ref: Buffer, data URL, http(s) URL, path or PIL Image.
        timestamp: Point in time shown when formatted_text is empty.
        settings: WatermarkSettings or ``{fontSize, color, opacity, position}``.
        formatted_text: Optional literal watermark text.
    """
    renderer = WatermarkRenderer()
    return await renderer.render(image_ref, timestamp, settings, formatted_text)
