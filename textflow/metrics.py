"""Final metrics, text ranges and visual ordering of broken lines."""

from __future__ import annotations

import math
import sys
from typing import Any, List

from .data import LayoutItemKind, LineData, LineItemData
from .lines import reorder_line_items


def _round(x: float) -> float:
    """Round half away from zero."""
    return math.copysign(math.floor(abs(x) + 0.5), x)


def _mark_whitespace(data: Any, line_items: List[LineItemData]) -> None:
    for item in line_items:
        if item.kind is not LayoutItemKind.TEXT_RUN:
            continue
        item.is_whitespace = True
        clusters = data.clusters[item.cluster_range.start:item.cluster_range.stop]
        # Right-to-left runs have their "trailing" whitespace at the front.
        ordered = clusters if item.bidi_level & 1 else reversed(clusters)
        for cluster in ordered:
            if cluster.info.is_whitespace():
                item.has_trailing_whitespace = True
            else:
                item.is_whitespace = False
                break


def finalize_lines(data: Any, lines: List[LineData], line_items: List[LineItemData]) -> None:
    """Compute metrics, text ranges and visual item order of committed lines.

    Whitespace flags and advances of the line items are filled in, items on
    lines with mixed bidi levels are reordered, and vertical metrics are
    rounded and stacked from the top.
    """
    _mark_whitespace(data, line_items)

    y = 0.0
    for line in lines:
        metrics = line.metrics
        metrics.ascent = 0.0
        metrics.descent = 0.0
        metrics.leading = 0.0
        metrics.offset = 0.0
        text_start = sys.maxsize
        text_end = line.text_range.stop

        have_metrics = False
        needs_reorder = False
        start, stop = line.item_range.start, line.item_range.stop
        for item in reversed(line_items[start:stop]):
            if item.kind is LayoutItemKind.INLINE_BOX:
                height = data.inline_boxes[item.index].height
                metrics.ascent = max(metrics.ascent, height)
                metrics.line_height = max(metrics.line_height, height)
                have_metrics = True
                continue

            text_end = max(text_end, item.text_range.stop)
            text_start = min(text_start, item.text_range.start)
            if item.bidi_level != 0:
                needs_reorder = True

            run = data.runs[item.index]
            metrics.line_height = max(metrics.line_height, item.compute_line_height(data))
            item.advance = sum(
                cluster.advance
                for cluster in data.clusters[item.cluster_range.start:item.cluster_range.stop]
            )

            # Trailing whitespace does not contribute to the vertical metrics.
            if not have_metrics and item.is_whitespace:
                continue

            metrics.ascent = max(metrics.ascent, run.metrics.ascent)
            metrics.descent = max(metrics.descent, run.metrics.descent)
            metrics.leading = max(metrics.leading, run.metrics.leading)
            have_metrics = True

        line.text_range = range(text_start, text_end)

        if needs_reorder and stop - start > 1:
            segment = line_items[start:stop]
            reorder_line_items(segment)
            line_items[start:stop] = segment

        metrics.trailing_whitespace = 0.0
        if stop > start:
            last_run = next((item for item in reversed(line_items) if item.is_text_run()), None)
            if last_run is not None and len(last_run.cluster_range) > 0:
                cluster = data.clusters[last_run.cluster_range.stop - 1]
                if cluster.info.is_space_or_nbsp():
                    metrics.trailing_whitespace = cluster.advance

        if not have_metrics and stop > start:
            first = line_items[start]
            if first.is_text_run():
                run = data.runs[first.index]
                metrics.ascent = run.metrics.ascent
                metrics.descent = run.metrics.descent
                metrics.leading = run.metrics.leading

        metrics.ascent = _round(metrics.ascent)
        metrics.descent = _round(metrics.descent)
        metrics.line_height = _round(metrics.line_height)
        metrics.leading = metrics.line_height - (metrics.ascent + metrics.descent)

        above = _round(metrics.ascent + metrics.leading * 0.5)
        below = _round(metrics.descent + metrics.leading * 0.5)
        metrics.min_coord = y
        metrics.baseline = y + above
        y = metrics.baseline + below
        metrics.max_coord = y