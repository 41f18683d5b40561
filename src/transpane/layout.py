"""Layout analysis: render recognized text as one pane or per-block panes."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .backends.base import TextBlock


class LayoutMode(Enum):
    """How recognized text is presented."""

    UNIFIED = "unified"  # one pane with the whole text
    SCATTERED = "scattered"  # one pane per block, at the block's position


@dataclass(frozen=True)
class LayoutThresholds:
    """Scattered-layout thresholds, as multiples of the mean block size.

    Attributes:
        vertical_gap: Max gap between consecutive blocks, in mean heights.
        overlap: Min (negative) gap before blocks count as overlapping.
        horizontal_offset: Max left-edge shift, in mean widths.
    """

    vertical_gap: float = 2.0
    overlap: float = -0.3
    horizontal_offset: float = 0.4


DEFAULT_THRESHOLDS = LayoutThresholds()


def classify(
    blocks: Sequence[TextBlock] | None,
    thresholds: LayoutThresholds = DEFAULT_THRESHOLDS,
) -> LayoutMode:
    """Decide between unified and scattered rendering.

    Blocks are sorted top to bottom. The layout is scattered when any two
    consecutive blocks are far apart or overlap vertically, or when their
    left edges drift too far apart. Blocks without a positive-area box are
    ignored; fewer than two remaining blocks is always unified.

    Args:
        blocks: Text blocks in device pixels, or None.
        thresholds: Threshold multiples to apply.

    Returns:
        LayoutMode.SCATTERED or LayoutMode.UNIFIED.
    """
    valid = [block.bbox for block in blocks or () if block.has_geometry]
    if len(valid) < 2:
        return LayoutMode.UNIFIED

    boxes = np.array([(box.x, box.y, box.width, box.height) for box in valid], dtype=float)
    boxes = boxes[np.argsort(boxes[:, 1], kind="stable")]
    x, y, width, height = boxes.T

    mean_height = height.mean()
    mean_width = width.mean()

    gaps = y[1:] - (y[:-1] + height[:-1])
    offsets = np.abs(np.diff(x))

    if np.any(gaps > thresholds.vertical_gap * mean_height):
        return LayoutMode.SCATTERED
    if np.any(gaps < thresholds.overlap * mean_height):
        return LayoutMode.SCATTERED
    if offsets.max() > thresholds.horizontal_offset * mean_width:
        return LayoutMode.SCATTERED
    return LayoutMode.UNIFIED
