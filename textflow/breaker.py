"""Greedy line breaking of a shaped layout."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Tuple

from .alignment import unjustify
from .data import (
    Alignment,
    Boundary,
    BreakReason,
    LayoutItemKind,
    LineData,
    LineItemData,
)
from .lines import LineState, commit_line
from .metrics import finalize_lines


@dataclass
class _BoundaryState:
    """Iteration state saved at a line breaking opportunity."""

    item_idx: int
    run_idx: int
    cluster_idx: int
    line: LineState


@dataclass
class _BreakerState:
    # Number of committed line items and lines, used when reverting.
    items: int = 0
    lines: int = 0
    # Iteration position within the layout.
    item_idx: int = 0
    run_idx: int = 0
    cluster_idx: int = 0
    line: LineState = field(default_factory=LineState)
    prev_boundary: Optional[_BoundaryState] = None

    def copy(self) -> "_BreakerState":
        boundary = self.prev_boundary
        if boundary is not None:
            boundary = replace(boundary, line=replace(boundary.line))
        return replace(self, line=replace(self.line), prev_boundary=boundary)

    def append_cluster_to_line(self, next_x: float) -> None:
        self.line.items_end = self.item_idx + 1
        self.line.clusters_end = self.cluster_idx + 1
        self.line.x = next_x

    def append_inline_box_to_line(self, next_x: float) -> None:
        self.line.items_end += 1
        self.line.x = next_x

    def mark_line_break_opportunity(self) -> None:
        self.prev_boundary = _BoundaryState(
            item_idx=self.item_idx,
            run_idx=self.run_idx,
            cluster_idx=self.cluster_idx,
            line=replace(self.line),
        )


class BreakLines:
    """Greedy line breaker for the layout data of ``layout``.

    Creating a breaker removes any justification and the existing lines of the
    layout. The computed lines are stored back into the layout by ``finish``,
    ``break_remaining`` or on leaving a ``with`` block.
    """

    def __init__(self, layout: Any) -> None:
        data = layout.data
        unjustify(data)
        data.width = 0.0
        data.height = 0.0
        data.lines = []
        data.line_items = []
        self._layout = layout
        self._lines: List[LineData] = []
        self._line_items: List[LineItemData] = []
        self._state = _BreakerState()
        self._prev_state: Optional[_BreakerState] = None
        self._done = False
        self._closed = False

    def __enter__(self) -> "BreakLines":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._store()

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("line breaker is already finished")

    def _commit(self, max_advance: float, reason: BreakReason) -> bool:
        return commit_line(
            self._layout.data,
            self._lines,
            self._line_items,
            self._state.line,
            max_advance,
            Alignment.START,
            reason,
        )

    def _start_new_line(self) -> Tuple[float, float]:
        state = self._state
        state.items = len(self._line_items)
        state.lines = len(self._lines)
        state.line.x = 0.0
        state.prev_boundary = None
        line = self._lines[-1]
        return line.metrics.advance, line.size()

    def break_next(self, max_advance: float) -> Optional[Tuple[float, float]]:
        """Compute the next line.

        Returns the advance and size of the line, or None when every line has
        been computed.
        """
        self._check_open()
        if self._done:
            return None
        self._prev_state = self._state.copy()
        data = self._layout.data
        state = self._state

        while state.item_idx < len(data.items):
            item = data.items[state.item_idx]

            if item.kind is LayoutItemKind.INLINE_BOX:
                inline_box = data.inline_boxes[item.index]
                next_x = state.line.x + inline_box.width
                if next_x <= max_advance:
                    state.item_idx += 1
                    state.append_inline_box_to_line(next_x)
                    # A line may always break after an inline box.
                    state.mark_line_break_opportunity()
                elif state.line.x == 0.0:
                    # The box never fits: take it and accept the overflow.
                    state.append_inline_box_to_line(next_x)
                    if self._commit(max_advance, BreakReason.EMERGENCY):
                        state.item_idx += 1
                        return self._start_new_line()
                elif self._commit(max_advance, BreakReason.REGULAR):
                    return self._start_new_line()
                continue

            run_data = data.runs[item.index]
            cluster_start = run_data.cluster_range.start
            cluster_end = run_data.cluster_range.stop

            while state.cluster_idx < cluster_end:
                cluster = data.clusters[state.cluster_idx]
                is_ligature_continuation = cluster.is_ligature_component()
                is_space = cluster.info.is_space_or_nbsp()
                boundary = cluster.info.boundary

                if boundary is Boundary.MANDATORY:
                    if not state.line.skip_mandatory_break:
                        state.prev_boundary = None
                        state.line.items_end = state.item_idx + 1
                        state.line.clusters_end = state.cluster_idx
                        # A mandatory break right after another one is skipped.
                        state.line.skip_mandatory_break = True
                        if self._commit(max_advance, BreakReason.EXPLICIT):
                            return self._start_new_line()
                elif boundary is Boundary.LINE:
                    # No breaks inside ligatures, nor at the very start of a line.
                    if not is_ligature_continuation and state.line.x != 0.0:
                        state.mark_line_break_opportunity()

                state.line.skip_mandatory_break = False

                advance = cluster.advance
                if cluster.is_ligature_start():
                    while True:
                        position = cluster_start + state.cluster_idx + 1
                        if position >= len(data.clusters):
                            break
                        component = data.clusters[position]
                        if not component.is_ligature_component():
                            break
                        advance += component.advance
                        state.cluster_idx += 1

                next_x = state.line.x + advance
                if next_x <= max_advance:
                    state.append_cluster_to_line(next_x)
                    state.cluster_idx += 1
                    if is_space:
                        state.line.num_spaces += 1
                elif is_space:
                    # Overflowing whitespace hangs at the end of the line.
                    state.append_cluster_to_line(next_x)
                    if self._commit(max_advance, BreakReason.REGULAR):
                        state.cluster_idx += 1
                        return self._start_new_line()
                elif state.prev_boundary is not None:
                    prev = state.prev_boundary
                    state.prev_boundary = None
                    state.line = prev.line
                    if self._commit(max_advance, BreakReason.REGULAR):
                        state.item_idx = prev.item_idx
                        state.run_idx = prev.run_idx
                        state.cluster_idx = prev.cluster_idx
                        return self._start_new_line()
                else:
                    # No break opportunity: let the word overflow the line.
                    state.append_cluster_to_line(next_x)
                    state.cluster_idx += 1

            state.run_idx += 1
            state.item_idx += 1

        if state.line.items_end == 0:
            state.line.items_end = 1
        if self._commit(max_advance, BreakReason.NONE):
            self._done = True
            return self._start_new_line()
        return None

    def revert(self) -> bool:
        """Undo the last computed line. Returns False if there is nothing to undo."""
        self._check_open()
        if self._prev_state is None:
            return False
        self._state = self._prev_state
        self._prev_state = None
        del self._lines[self._state.lines:]
        del self._line_items[self._state.items:]
        self._done = False
        return True

    def break_remaining(self, max_advance: float) -> None:
        """Break every remaining line with ``max_advance`` and finish."""
        self._check_open()
        while self.break_next(max_advance) is not None:
            pass
        self.finish()

    def finish(self) -> None:
        """Finalize line metrics and store the lines into the layout."""
        self._check_open()
        finalize_lines(self._layout.data, self._lines, self._line_items)
        self._store()

    def _store(self) -> None:
        if self._closed:
            return
        self._closed = True
        data = self._layout.data
        width = 0.0
        full_width = 0.0
        height = 0.0
        for line in self._lines:
            width = max(width, line.metrics.advance - line.metrics.trailing_whitespace)
            full_width = max(full_width, line.metrics.advance)
            height += line.metrics.size()
        data.width = width
        data.full_width = full_width
        data.height = height
        data.lines = self._lines
        data.line_items = self._line_items