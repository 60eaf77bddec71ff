"""
Text Placement
==============
Pure coordinate math for positioning the watermark text.

Two modes with different formulas:

- Grid mode: nine fixed anchors, a 20px edge inset, and clamping so the
  text stays inside the image. Returns the horizontal text center and the
  baseline.
- Percent mode: a free point in percent of the image size. No inset and no
  clamping, the text may end up partially or fully off-canvas. Returns the
  left edge and the baseline.
"""

from typing import Tuple

from .settings import PercentPosition

# Fractional (x, y) anchors, indexed 0-8
GRID_ANCHORS: Tuple[Tuple[float, float], ...] = (
    (0.0, 0.0),  # top-left
    (0.5, 0.0),  # top-center
    (1.0, 0.0),  # top-right
    (0.0, 0.5),  # middle-left
    (0.5, 0.5),  # center
    (1.0, 0.5),  # middle-right
    (0.0, 1.0),  # bottom-left
    (0.5, 1.0),  # bottom-center
    (1.0, 1.0),  # bottom-right
)

DEFAULT_GRID_INDEX = 8

# Distance kept from the image edges in grid mode (pixels)
EDGE_INSET = 20


def grid_anchor(index: float) -> Tuple[float, float]:
    """
    Fractional anchor for a grid index.

    Whole-number floats count as their integer index. Anything else that is
    not an integer in 0-8 (2.5, -1, 99, True) gives the bottom-right anchor.
    """
    if isinstance(index, float) and index.is_integer():
        index = int(index)

    if isinstance(index, int) and not isinstance(index, bool) and 0 <= index < len(GRID_ANCHORS):
        return GRID_ANCHORS[index]
    return GRID_ANCHORS[DEFAULT_GRID_INDEX]


def _clamp(value: float, low: float, high: float) -> float:
    # low wins when the range is inverted (text wider than the image)
    return max(low, min(high, value))


def place_on_grid(
        index: int,
        image_size: Tuple[int, int],
        text_size: Tuple[float, float],
        inset: int = EDGE_INSET
) -> Tuple[float, float]:
    """
    Compute the grid-mode anchor.

    Args:
        index: Grid index 0-8; anything else behaves like 8.
        image_size: (width, height) of the image.
        text_size: (text_width, text_height) of the rendered text.
        inset: Edge inset in pixels.

    Returns:
        (center_x, baseline_y) clamped into the image.
    """
    img_w, img_h = image_size
    text_w, text_h = text_size
    fx, fy = grid_anchor(index)

    if fx == 0:
        x = inset + text_w / 2
    elif fx == 1:
        x = img_w - inset - text_w / 2
    else:
        x = img_w * fx

    if fy == 0:
        y = inset + text_h / 2
    elif fy == 1:
        y = img_h - inset
    else:
        y = img_h * fy + text_h / 4

    x = _clamp(x, text_w / 2 + inset, img_w - text_w / 2 - inset)
    y = _clamp(y, text_h / 2 + inset, img_h - inset)

    return x, y


def place_by_percent(
        position: PercentPosition,
        image_size: Tuple[int, int],
        text_width: float
) -> Tuple[float, float]:
    """
    Compute the percent-mode origin.

    The point is the horizontal center of the text, so the returned left
    edge is shifted by half the text width. Nothing is clamped.

    Returns:
        (left_x, baseline_y)
    """
    img_w, img_h = image_size
    x = (position.x / 100) * img_w - text_width / 2
    y = (position.y / 100) * img_h
    return x, y
