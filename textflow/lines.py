"""Committing broken lines and reordering line items by bidi level."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, MutableSequence

from .data import (
    Alignment,
    BreakReason,
    LayoutItemKind,
    LineData,
    LineItemData,
    LineMetrics,
)


@dataclass
class LineState:
    """Progress of the line currently being built."""

    x: float = 0.0
    items_start: int = 0
    items_end: int = 0
    clusters_start: int = 0
    clusters_end: int = 0
    skip_mandatory_break: bool = False
    num_spaces: int = 0

    @property
    def items(self) -> range:
        return range(self.items_start, self.items_end)

    @property
    def clusters(self) -> range:
        return range(self.clusters_start, self.clusters_end)


def commit_line(
    data: Any,
    lines: List[LineData],
    line_items: List[LineItemData],
    state: LineState,
    max_advance: float,
    alignment: Alignment,
    break_reason: BreakReason,
) -> bool:
    """Append the line described by ``state`` to ``lines`` and ``line_items``.

    Returns False, committing nothing, if no item of the line has content.
    On success ``state`` is advanced to the start of the next line.
    """
    is_empty = data.text_len == 0
    state.clusters_end = min(state.clusters_end, len(data.clusters))
    state.items_end = min(state.items_end, len(data.items))

    start_item_idx = len(line_items)
    to_commit = data.items[state.items_start:state.items_end]

    run_positions = [i for i, item in enumerate(to_commit) if item.kind is LayoutItemKind.TEXT_RUN]
    first_run_pos = run_positions[0] if run_positions else 0
    last_run_pos = run_positions[-1] if run_positions else 0

    for i, item in enumerate(to_commit):
        if item.kind is LayoutItemKind.INLINE_BOX:
            line_items.append(
                LineItemData(
                    kind=LayoutItemKind.INLINE_BOX,
                    index=item.index,
                    bidi_level=item.bidi_level,
                    advance=data.inline_boxes[item.index].width,
                )
            )
            continue

        run_data = data.runs[item.index]
        run_start = run_data.cluster_range.start
        start = state.clusters_start if i == first_run_pos else run_start
        end = state.clusters_end if i == last_run_pos else run_data.cluster_range.stop
        if start > end or (not is_empty and start == end):
            continue

        if len(run_data.cluster_range) == 0:
            text_range = range(0, 0)
        else:
            first_cluster = data.clusters[start]
            last_cluster = data.clusters[run_start + max(end - run_start - 1, 0)]
            text_range = range(
                first_cluster.text_range(run_data).start,
                last_cluster.text_range(run_data).stop,
            )

        line_items.append(
            LineItemData(
                kind=LayoutItemKind.TEXT_RUN,
                index=item.index,
                bidi_level=run_data.bidi_level,
                advance=0.0,
                cluster_range=range(start, end),
                text_range=text_range,
            )
        )

    end_item_idx = len(line_items)
    if start_item_idx == end_item_idx:
        return False

    num_spaces = state.num_spaces
    if break_reason is BreakReason.REGULAR:
        num_spaces = max(num_spaces - 1, 0)

    lines.append(
        LineData(
            item_range=range(start_item_idx, end_item_idx),
            max_advance=max_advance,
            alignment=alignment,
            break_reason=break_reason,
            num_spaces=num_spaces,
            metrics=LineMetrics(advance=state.x),
        )
    )

    state.clusters_start = state.clusters_end
    state.clusters_end += 1
    state.items_start = state.items_end - 1
    state.num_spaces = 0
    return True


def reorder_line_items(items: MutableSequence[Any]) -> None:
    """Reorder line items in place into visual order by their bidi levels."""
    count = len(items)
    max_level = 0
    lowest_odd_level = 255
    for item in items:
        level = item.bidi_level
        max_level = max(max_level, level)
        if level & 1 and level < lowest_odd_level:
            lowest_odd_level = level

    for level in range(max_level, lowest_odd_level - 1, -1):
        i = 0
        while i < count:
            if items[i].bidi_level >= level:
                end = i + 1
                while end < count and items[end].bidi_level >= level:
                    end += 1
                items[i:end] = list(reversed(items[i:end]))
                i = end
            i += 1