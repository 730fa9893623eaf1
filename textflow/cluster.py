"""Clusters, the atomic units of text in a layout, and navigation between them.

The functions here work on any layout object that exposes its ``LayoutData``
as ``layout.data``; only the methods returning a line also use
``layout.get(index)``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator, Optional, Tuple

from .data import (
    SINGLE_GLYPH,
    Boundary,
    BreakReason,
    ClusterData,
    ClusterInfo,
    Glyph,
    LayoutItemKind,
    LineItemData,
    RunData,
)


class Affinity(enum.Enum):
    """Determines how a cursor attaches to a cluster."""

    DOWNSTREAM = 0
    """Left side for LTR clusters and right side for RTL clusters."""
    UPSTREAM = 1
    """Right side for LTR clusters and left side for RTL clusters."""

    def invert(self) -> "Affinity":
        """Return the opposite affinity."""
        if self is Affinity.DOWNSTREAM:
            return Affinity.UPSTREAM
        return Affinity.DOWNSTREAM

    def is_visually_leading(self, is_rtl: bool) -> bool:
        """Return True if the cursor belongs on the leading edge."""
        return (self is Affinity.UPSTREAM) == is_rtl

    def is_visually_trailing(self, is_rtl: bool) -> bool:
        """Return True if the cursor belongs on the trailing edge."""
        return not self.is_visually_leading(is_rtl)


def affinity_for(is_rtl: bool, is_leading: bool) -> Affinity:
    """Return the affinity for an edge of a cluster of the given direction."""
    if is_rtl != is_leading:
        return Affinity.DOWNSTREAM
    return Affinity.UPSTREAM


@dataclass(frozen=True)
class ClusterPath:
    """Index based path to a cluster: line, run within the line, logical cluster."""

    line_index: int = 0
    run_index: int = 0
    logical_index: int = 0

    def line(self, layout: Any) -> Any:
        """Return the line of this path in ``layout``, or None."""
        return layout.get(self.line_index)

    def run(self, layout: Any) -> Any:
        """Return the run of this path in ``layout``, or None."""
        line = self.line(layout)
        if line is None:
            return None
        return line.run(self.run_index)

    def cluster(self, layout: Any) -> Optional["Cluster"]:
        """Return the cluster of this path in ``layout``, or None."""
        run = _run_at(layout, self.line_index, self.run_index)
        if run is None:
            return None
        return run.get(self.logical_index)


@dataclass(frozen=True)
class _RunView:
    """A run as seen from a line, used for navigation."""

    layout: Any
    line_index: int
    index: int
    run_data: RunData
    line_item: Optional[LineItemData]

    @property
    def cluster_range(self) -> range:
        if self.line_item is not None:
            return self.line_item.cluster_range
        return self.run_data.cluster_range

    @property
    def text_range(self) -> range:
        if self.line_item is not None:
            return self.line_item.text_range
        return self.run_data.text_range

    @property
    def advance(self) -> float:
        if self.line_item is not None:
            return self.line_item.advance
        return self.run_data.advance

    @property
    def is_rtl(self) -> bool:
        return bool(self.run_data.bidi_level & 1)

    def __len__(self) -> int:
        return len(self.cluster_range)

    def logical_to_visual(self, logical_index: int) -> Optional[int]:
        count = len(self)
        if not 0 <= logical_index < count:
            return None
        return count - 1 - logical_index if self.is_rtl else logical_index

    def visual_to_logical(self, visual_index: int) -> Optional[int]:
        count = len(self)
        if not 0 <= visual_index < count:
            return None
        return count - 1 - visual_index if self.is_rtl else visual_index

    def get(self, index: int) -> Optional["Cluster"]:
        position = self.cluster_range.start + index
        if index < 0 or not 0 <= position < len(self.layout.data.clusters):
            return None
        return Cluster(
            layout=self.layout,
            path=ClusterPath(self.line_index, self.index, index),
            run_data=self.run_data,
            line_item=self.line_item,
        )

    def visual_clusters(self) -> Iterator["Cluster"]:
        indices = range(len(self))
        for index in (reversed(indices) if self.is_rtl else indices):
            cluster = self.get(index)
            if cluster is None:
                return
            yield cluster


def _run_at(layout: Any, line_index: int, run_index: int) -> Optional[_RunView]:
    data = layout.data
    if not 0 <= line_index < len(data.lines) or run_index < 0:
        return None
    item_range = data.lines[line_index].item_range
    position = item_range.start + run_index
    if position >= item_range.stop or position >= len(data.line_items):
        return None
    item = data.line_items[position]
    if item.kind is not LayoutItemKind.TEXT_RUN or item.index >= len(data.runs):
        return None
    return _RunView(layout, line_index, run_index, data.runs[item.index], item)


def _text_runs(layout: Any, line_index: int) -> Iterator[Tuple[int, _RunView]]:
    item_range = layout.data.lines[line_index].item_range
    for run_index in range(len(item_range)):
        run = _run_at(layout, line_index, run_index)
        if run is not None:
            yield run_index, run


def _binary_search(count: int, compare: Callable[[int], int]) -> Tuple[bool, int]:
    """Search ``0..count`` where ``compare(i)`` orders element ``i`` against the target."""
    low, high = 0, count
    while low < high:
        middle = (low + high) // 2
        order = compare(middle)
        if order < 0:
            low = middle + 1
        elif order > 0:
            high = middle
        else:
            return True, middle
    return False, low


def _line_for_byte_index(data: Any, index: int) -> Optional[int]:
    lines = data.lines

    def compare(i: int) -> int:
        text_range = lines[i].text_range
        if index < text_range.start:
            return 1
        if index >= text_range.stop:
            return -1
        return 0

    found, position = _binary_search(len(lines), compare)
    return position if found else None


def _line_for_offset(data: Any, offset: float) -> Optional[int]:
    lines = data.lines
    if not lines:
        return None
    if offset < 0.0:
        return 0

    def compare(i: int) -> int:
        metrics = lines[i].metrics
        if offset < metrics.min_coord:
            return 1
        if offset > metrics.max_coord:
            return -1
        return 0

    found, position = _binary_search(len(lines), compare)
    if not found:
        position = max(position - 1, 0)
    return position if position < len(lines) else None


def cluster_from_index(layout: Any, byte_index: int) -> Optional["Cluster"]:
    """Return the cluster containing the given byte index of the text."""
    line_index = run_index = logical_index = 0
    found = _line_for_byte_index(layout.data, byte_index)
    if found is not None:
        line_index = found
        for run_index, run in _text_runs(layout, found):
            if byte_index not in run.text_range:
                continue
            for logical_index in range(len(run)):
                cluster = run.get(logical_index)
                if cluster is None:
                    break
                if byte_index in cluster.text_range():
                    return cluster
    return ClusterPath(line_index, run_index, logical_index).cluster(layout)


def cluster_from_point(layout: Any, x: float, y: float) -> Optional[Tuple["Cluster", Affinity]]:
    """Return the cluster nearest to a point, with the affinity of the nearer edge."""
    line_index = run_index = logical_index = 0
    found = _line_for_offset(layout.data, y)
    if found is not None:
        line_index = found
        line = layout.data.lines[found]
        offset = 0.0
        last_run_index = max(len(line.item_range) - 1, 0)
        for run_index, run in _text_runs(layout, found):
            is_last_run = run_index == last_run_index
            run_advance = run.advance
            logical_index = 0
            if x > offset + run_advance and not is_last_run:
                offset += run_advance
                continue
            last_cluster_index = max(len(run) - 1, 0)
            for visual_index, cluster in enumerate(run.visual_clusters()):
                is_last_cluster = is_last_run and visual_index == last_cluster_index
                logical = run.visual_to_logical(visual_index)
                logical_index = logical if logical is not None else 0
                cluster_advance = cluster.advance
                edge = offset
                offset += cluster_advance
                if x > offset and not is_last_cluster:
                    continue
                affinity = affinity_for(cluster.is_rtl, x <= edge + cluster_advance * 0.5)
                target = ClusterPath(line_index, run_index, logical_index).cluster(layout)
                if target is None:
                    return None
                return target, affinity
    target = ClusterPath(line_index, run_index, logical_index).cluster(layout)
    if target is None:
        return None
    return target, Affinity.DOWNSTREAM


@dataclass(frozen=True, eq=False)
class Cluster:
    """Atomic unit of text within a run of a layout."""

    layout: Any
    path: ClusterPath
    run_data: RunData
    line_item: Optional[LineItemData] = None

    @property
    def _run(self) -> _RunView:
        return _RunView(
            self.layout, self.path.line_index, self.path.run_index, self.run_data, self.line_item
        )

    @property
    def data(self) -> ClusterData:
        """The packed data of this cluster."""
        return self.layout.data.clusters[self._run.cluster_range.start + self.path.logical_index]

    @property
    def info(self) -> ClusterInfo:
        return self.data.info

    @property
    def advance(self) -> float:
        return self.data.advance

    @property
    def is_rtl(self) -> bool:
        return bool(self.run_data.bidi_level & 1)

    @property
    def is_ligature_start(self) -> bool:
        return self.data.is_ligature_start()

    @property
    def is_ligature_continuation(self) -> bool:
        return self.data.is_ligature_component()

    @property
    def is_word_boundary(self) -> bool:
        return self.data.info.is_boundary()

    @property
    def is_soft_line_break(self) -> bool:
        return self.data.info.boundary is Boundary.LINE

    @property
    def is_hard_line_break(self) -> bool:
        return self.data.info.boundary is Boundary.MANDATORY

    @property
    def is_space_or_nbsp(self) -> bool:
        return self.data.info.is_space_or_nbsp()

    def line(self) -> Any:
        """Return the line that contains the cluster."""
        return self.layout.get(self.path.line_index)

    def text_range(self) -> range:
        """Return the byte range of text covered by the cluster."""
        return self.data.text_range(self.run_data)

    def glyphs(self) -> Iterator[Glyph]:
        """Yield copies of the glyphs of the cluster."""
        data = self.data
        if data.glyph_len == SINGLE_GLYPH:
            yield Glyph(
                id=data.glyph_offset,
                style_index=data.style_index,
                x=0.0,
                y=0.0,
                advance=data.advance,
            )
            return
        start = self.run_data.glyph_start + data.glyph_offset
        for glyph in self.layout.data.glyphs[start:start + data.glyph_len]:
            yield replace(glyph)

    def is_start_of_line(self) -> bool:
        """Return True if this cluster is visually first on its line."""
        return (
            self.path.run_index == 0
            and self._run.logical_to_visual(self.path.logical_index) == 0
        )

    def is_end_of_line(self) -> bool:
        """Return True if this cluster is visually last on its line."""
        line = self.layout.data.lines[self.path.line_index]
        run = self._run
        return max(len(line.item_range) - 1, 0) == self.path.run_index and run.logical_to_visual(
            self.path.logical_index
        ) == max(len(run) - 1, 0)

    def line_break_reason(self) -> Optional[BreakReason]:
        """Return why the line ended if the cluster is at its end, else None."""
        if self.is_end_of_line():
            return self.layout.data.lines[self.path.line_index].break_reason
        return None

    def bidi_link(self, affinity: Affinity) -> Optional["Cluster"]:
        """Return the cluster of the other direction sharing this insertion point."""
        run = self._run
        if len(run) == 0:
            return None
        run_end = len(run) - 1
        visual_index = run.logical_to_visual(self.path.logical_index)
        if visual_index is None:
            return None
        is_rtl = self.is_rtl
        is_leading = affinity.is_visually_leading(is_rtl)
        at_start = visual_index == 0 and is_leading
        at_end = visual_index == run_end and not is_leading
        if (at_start and not is_rtl) or (at_end and is_rtl):
            other = self.previous_logical()
        elif (at_end and not is_rtl) or (at_start and is_rtl):
            other = self.next_logical()
        else:
            return None
        if other is None or other.is_rtl == is_rtl:
            return None
        return other

    def next_logical(self) -> Optional["Cluster"]:
        """Return the cluster that follows this one in logical order."""
        if self.path.logical_index + 1 < len(self._run):
            return replace(self.path, logical_index=self.path.logical_index + 1).cluster(
                self.layout
            )
        index = self.text_range().stop
        if index >= self.layout.data.text_len:
            return None
        return cluster_from_index(self.layout, index)

    def previous_logical(self) -> Optional["Cluster"]:
        """Return the cluster that precedes this one in logical order."""
        if self.path.logical_index > 0:
            return replace(self.path, logical_index=self.path.logical_index - 1).cluster(
                self.layout
            )
        start = self.text_range().start
        if start == 0:
            return None
        return cluster_from_index(self.layout, start - 1)

    def next_visual(self) -> Optional["Cluster"]:
        """Return the cluster that follows this one in visual order."""
        run = self._run
        visual_index = run.logical_to_visual(self.path.logical_index)
        if visual_index is None:
            return None
        logical = run.visual_to_logical(visual_index + 1)
        if logical is not None:
            return run.get(logical)
        lines = self.layout.data.lines
        first_run = self.path.run_index + 1
        for line_index in range(self.path.line_index, len(lines)):
            for run_index in range(first_run, len(lines[line_index].item_range)):
                candidate = _run_at(self.layout, line_index, run_index)
                if candidate is not None and len(candidate.cluster_range) > 0:
                    first = candidate.visual_to_logical(0)
                    if first is None:
                        return None
                    return ClusterPath(line_index, run_index, first).cluster(self.layout)
            first_run = 0
        return None

    def previous_visual(self) -> Optional["Cluster"]:
        """Return the cluster that precedes this one in visual order."""
        run = self._run
        visual_index = run.logical_to_visual(self.path.logical_index)
        if visual_index is None:
            return None
        logical = run.visual_to_logical(visual_index - 1) if visual_index > 0 else None
        if logical is not None:
            return replace(self.path, logical_index=logical).cluster(self.layout)
        lines = self.layout.data.lines
        limit: Optional[int] = self.path.run_index
        for line_index in range(self.path.line_index, -1, -1):
            if line_index >= len(lines):
                return None
            first_run = limit if limit is not None else len(lines[line_index].item_range)
            for run_index in range(first_run - 1, -1, -1):
                candidate = _run_at(self.layout, line_index, run_index)
                if candidate is not None and len(candidate.cluster_range) > 0:
                    last = candidate.visual_to_logical(len(candidate.cluster_range) - 1)
                    if last is None:
                        return None
                    return ClusterPath(line_index, run_index, last).cluster(self.layout)
            limit = None
        return None

    def next_word(self) -> Optional["Cluster"]:
        """Return the next cluster that is a word boundary."""
        cluster: Cluster = self
        while True:
            following = cluster.next_logical()
            if following is None:
                return None
            if following.is_word_boundary:
                return following
            cluster = following

    def previous_word(self) -> Optional["Cluster"]:
        """Return the previous cluster that is a word boundary."""
        cluster: Cluster = self
        while True:
            preceding = cluster.previous_logical()
            if preceding is None:
                return None
            if preceding.is_word_boundary:
                return preceding
            cluster = preceding

    def visual_offset(self) -> Optional[float]:
        """Return the offset of this cluster along the line, before alignment."""
        if not 0 <= self.path.line_index < len(self.layout.data.lines):
            return None
        offset = 0.0
        for run_index in range(self.path.run_index + 1):
            run = _run_at(self.layout, self.path.line_index, run_index)
            if run is None:
                return None
            if run_index != self.path.run_index:
                offset += run.advance
                continue
            visual_index = run.logical_to_visual(self.path.logical_index)
            if visual_index is None:
                return None
            for position, cluster in enumerate(run.visual_clusters()):
                if position >= visual_index:
                    break
                offset += cluster.advance
        return offset