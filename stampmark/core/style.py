"""
Text and color helpers for the watermark renderer.
"""

from datetime import datetime
from typing import NamedTuple, Optional, Tuple, Union

Timestamp = Union[datetime, int, float]

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class RGBAColor(NamedTuple):
    """Color with 8-bit RGB channels and a 0-1 alpha, like CSS ``rgba()``."""
    r: int
    g: int
    b: int
    alpha: float

    def __str__(self) -> str:
        alpha = self.alpha
        if float(alpha).is_integer():
            alpha = int(alpha)
        return f"rgba({self.r}, {self.g}, {self.b}, {alpha})"

    def to_pil(self) -> Tuple[int, int, int, int]:
        """Fill tuple for Pillow, alpha scaled to 0-255."""
        return self.r, self.g, self.b, int(round(self.alpha * 255))


# Fill of the backing box painted behind low-opacity text
BACKING_COLOR = RGBAColor(0, 0, 0, 0.2)


def hex_to_rgba(hex_color: str, opacity: float) -> RGBAColor:
    """
    Convert a ``#RRGGBB`` color (``#`` optional) plus opacity to RGBA.

    Args:
        hex_color: Hex color string.
        opacity: Alpha in the range 0-1.

    Returns:
        RGBAColor with the decimal value of each byte pair.

    Raises:
        ValueError: If the string does not start with three hex byte pairs.
    """
    value = hex_color.replace("#", "", 1)

    channels = []
    for start in (0, 2, 4):
        pair = value[start:start + 2]
        if len(pair) != 2:
            raise ValueError(f"Invalid hex color: {hex_color!r}")
        channels.append(int(pair, 16))

    r, g, b = channels
    return RGBAColor(r, g, b, opacity)


def format_timestamp(timestamp: Timestamp) -> str:
    """
    Format a timestamp as ``YYYY-MM-DD HH:MM:SS`` in local time.

    Naive datetimes are taken as local time already; aware ones are
    converted. Numbers are POSIX seconds.
    """
    if isinstance(timestamp, (int, float)):
        timestamp = datetime.fromtimestamp(timestamp)
    elif timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone()

    return timestamp.strftime(TIMESTAMP_FORMAT)


def resolve_text(timestamp: Optional[Timestamp], formatted_text: Optional[str] = None) -> str:
    """Return the pre-formatted text if non-empty, else the formatted timestamp."""
    if formatted_text:
        return formatted_text

    if timestamp is None:
        raise ValueError("Either a timestamp or formatted text is required")

    return format_timestamp(timestamp)
