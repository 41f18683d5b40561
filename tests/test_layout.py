"""Tests for layout classification."""

from transpane.backends.base import BoundingBox, TextBlock
from transpane.layout import LayoutMode, LayoutThresholds, classify


def block(x, y, width=100, height=20, text="line"):
    return TextBlock(text, BoundingBox(x, y, width, height))


class TestClassify:
    """Tests for unified versus scattered decisions."""

    def test_no_blocks(self):
        """Missing or empty block lists are unified."""
        assert classify(None) is LayoutMode.UNIFIED
        assert classify([]) is LayoutMode.UNIFIED

    def test_single_block(self):
        """One block is always unified."""
        assert classify([block(0, 0)]) is LayoutMode.UNIFIED

    def test_stacked_paragraph(self):
        """Evenly stacked, left-aligned lines are unified."""
        blocks = [block(10, y) for y in (0, 25, 50, 75)]

        assert classify(blocks) is LayoutMode.UNIFIED

    def test_half_height_gaps_are_unified(self):
        """Gaps of half the mean height stay unified."""
        blocks = [block(10, 0), block(10, 30), block(10, 60)]

        assert classify(blocks) is LayoutMode.UNIFIED

    def test_large_vertical_gap(self):
        """A gap beyond twice the mean height is scattered."""
        blocks = [block(10, 0), block(10, 25), block(10, 125)]

        assert classify(blocks) is LayoutMode.SCATTERED

    def test_vertical_overlap(self):
        """Blocks overlapping by more than the threshold are scattered."""
        blocks = [block(10, 0), block(10, 10)]

        assert classify(blocks) is LayoutMode.SCATTERED

    def test_slight_overlap_is_unified(self):
        """A small overlap within the threshold stays unified."""
        blocks = [block(10, 0), block(10, 16)]

        assert classify(blocks) is LayoutMode.UNIFIED

    def test_half_width_horizontal_shift(self):
        """A left-edge shift of half the mean width is scattered."""
        blocks = [block(0, 0), block(50, 25)]

        assert classify(blocks) is LayoutMode.SCATTERED

    def test_small_horizontal_shift(self):
        """A shift below the threshold stays unified."""
        blocks = [block(0, 0), block(30, 25)]

        assert classify(blocks) is LayoutMode.UNIFIED

    def test_unsorted_input(self):
        """Blocks are compared in top-to-bottom order regardless of input order."""
        blocks = [block(10, 50), block(10, 0), block(10, 25)]

        assert classify(blocks) is LayoutMode.UNIFIED

    def test_invalid_geometry_ignored(self):
        """Blocks without a positive-area box do not take part."""
        blocks = [
            block(10, 0),
            TextBlock("no box"),
            TextBlock("flat", BoundingBox(500, 900, 100, 0)),
        ]

        assert classify(blocks) is LayoutMode.UNIFIED

    def test_custom_thresholds(self):
        """Thresholds can be tightened."""
        blocks = [block(10, 0), block(10, 30)]
        strict = LayoutThresholds(vertical_gap=0.25)

        assert classify(blocks, strict) is LayoutMode.SCATTERED

    def test_three_lines_with_half_width_shift(self):
        """Three stacked lines with the middle one shifted by half the mean width are scattered."""
        blocks = [block(10, 0), block(60, 25), block(10, 50)]

        assert classify(blocks) is LayoutMode.SCATTERED


class TestThresholdBoundaries:
    """Tests for decisions exactly at each threshold (mean height 20, mean width 100)."""

    def test_gap_at_threshold_is_unified(self):
        """A gap of exactly twice the mean height stays unified."""
        assert classify([block(10, 0), block(10, 60)]) is LayoutMode.UNIFIED

    def test_gap_past_threshold_is_scattered(self):
        """A gap just over twice the mean height is scattered."""
        assert classify([block(10, 0), block(10, 60.5)]) is LayoutMode.SCATTERED

    def test_overlap_at_threshold_is_unified(self):
        """An overlap of exactly 0.3 mean heights stays unified."""
        assert classify([block(10, 0), block(10, 14)]) is LayoutMode.UNIFIED

    def test_overlap_past_threshold_is_scattered(self):
        """An overlap just over 0.3 mean heights is scattered."""
        assert classify([block(10, 0), block(10, 13.5)]) is LayoutMode.SCATTERED

    def test_offset_at_threshold_is_unified(self):
        """A left-edge shift of exactly 0.4 mean widths stays unified."""
        assert classify([block(0, 0), block(40, 25)]) is LayoutMode.UNIFIED

    def test_offset_past_threshold_is_scattered(self):
        """A left-edge shift just over 0.4 mean widths is scattered."""
        assert classify([block(0, 0), block(40.5, 25)]) is LayoutMode.SCATTERED
