"""Horizontal alignment and justification of broken lines."""

from __future__ import annotations

import math
from typing import Any

from .data import Alignment, BreakReason
from .util import F32_MAX


def _adjust_spaces(data: Any, line: Any, delta: float) -> None:
    """Add ``delta`` to the advance of the first ``num_spaces`` spaces of a line.

    Spaces are taken in visual order within each run: backwards for
    right-to-left runs.
    """
    remaining = line.num_spaces
    for item in data.line_items[line.item_range.start:line.item_range.stop]:
        if not item.is_text_run():
            continue
        clusters = data.clusters[item.cluster_range.start:item.cluster_range.stop]
        if item.bidi_level & 1:
            clusters = reversed(clusters)
        for cluster in clusters:
            if remaining == 0:
                break
            if cluster.info.is_space_or_nbsp():
                cluster.advance += delta
                remaining -= 1


def align(data: Any, alignment_width: float | None, alignment: Alignment) -> None:
    """Align every line within ``alignment_width``.

    Without a width the longest line's advance is used.
    """
    if alignment_width is None:
        alignment_width = max((line.metrics.advance for line in data.lines), default=0.0)

    for line in data.lines:
        line.alignment = alignment
        free_space = alignment_width - line.metrics.advance + line.metrics.trailing_whitespace
        if free_space <= 0.0:
            continue
        if alignment is Alignment.END:
            line.metrics.offset = free_space
        elif alignment is Alignment.MIDDLE:
            line.metrics.offset = free_space * 0.5
        elif alignment is Alignment.JUSTIFIED:
            if line.break_reason is BreakReason.NONE or line.num_spaces == 0:
                continue
            _adjust_spaces(data, line, free_space / line.num_spaces)


def unjustify(data: Any) -> None:
    """Remove justification previously applied to the clusters of each line."""
    for line in data.lines:
        if (
            line.alignment is Alignment.JUSTIFIED
            and math.isfinite(line.max_advance)
            and line.max_advance < F32_MAX
        ):
            extra = line.max_advance - line.metrics.advance + line.metrics.trailing_whitespace
            if line.break_reason is not BreakReason.NONE and line.num_spaces != 0:
                _adjust_spaces(data, line, -extra / line.num_spaces)