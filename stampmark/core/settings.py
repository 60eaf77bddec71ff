"""
Watermark Settings
==================
Caller-supplied, read-only configuration for a single render.

The position is a tagged variant:
- GridPosition: one of nine anchors (0-8) with a fixed edge inset and clamping
- PercentPosition: a free point in percent of the image size, no clamping
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Union


@dataclass(frozen=True)
class GridPosition:
    """
    Anchor on a 3x3 grid.

    0 1 2
    3 4 5
    6 7 8

    Indices outside 0-8 are kept as-is and fall back to 8 (bottom-right)
    when the text is placed.
    """
    index: int = 8


@dataclass(frozen=True)
class PercentPosition:
    """Point in percent of the image width/height (nominally 0-100)."""
    x: float = 50.0
    y: float = 50.0


Position = Union[GridPosition, PercentPosition]


@dataclass(frozen=True)
class WatermarkSettings:
    """Font size, color, opacity and position of the watermark text."""
    font_size: float = 24
    color: str = "#FFFFFF"  # "#RRGGBB", "#" optional
    opacity: float = 0.8  # 0.0-1.0
    position: Position = field(default_factory=GridPosition)

    def __post_init__(self):
        if not self.font_size > 0:
            raise ValueError("Font size must be greater than 0")

        if not 0 <= self.opacity <= 1:
            raise ValueError("Opacity must be between 0 and 1")

    @property
    def is_grid(self) -> bool:
        return isinstance(self.position, GridPosition)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WatermarkSettings":
        """
        Build settings from a plain settings object.

        Accepts both ``{fontSize, color, opacity, position}`` and the
        snake_case ``font_size`` key. ``position`` may be an integer grid
        index or a mapping with ``x``/``y`` percentages; anything else
        resolves to the bottom-right grid anchor.

        Args:
            data: Settings mapping.

        Returns:
            WatermarkSettings instance.

        Raises:
            ValueError: If font size or opacity are out of range.
        """
        defaults = cls()
        font_size = data.get("fontSize", data.get("font_size", defaults.font_size))

        return cls(
            font_size=float(font_size),
            color=str(data.get("color", defaults.color)),
            opacity=float(data.get("opacity", defaults.opacity)),
            position=_position_from_value(data.get("position")),
        )


def _position_from_value(value: Any) -> Position:
    if isinstance(value, (GridPosition, PercentPosition)):
        return value

    # bool is an int subclass but never a meaningful grid index
    if isinstance(value, int) and not isinstance(value, bool):
        return GridPosition(value)

    # JSON numbers arrive as floats, 3.0 is still grid index 3
    if isinstance(value, float) and value.is_integer():
        return GridPosition(int(value))

    if isinstance(value, Mapping) and "x" in value and "y" in value:
        return PercentPosition(float(value["x"]), float(value["y"]))

    return GridPosition(8)
