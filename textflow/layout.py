"""Text layouts, their lines and the positioned items on each line."""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field, replace
from itertools import islice
from typing import Any, Iterator, List, Optional, Tuple, Union

from .alignment import align as _align
from .breaker import BreakLines
from .builder import LayoutData
from .data import (
    Alignment,
    Glyph,
    InlineBox,
    LayoutItemKind,
    LineData,
    LineItemData,
    LineMetrics,
    Style,
)
from .run import Run
from .util import F32_MAX


@dataclass(eq=False)
class Layout:
    """A text layout: shaped runs broken into lines."""

    data: LayoutData = field(default_factory=LayoutData)

    @property
    def scale(self) -> float:
        """The scale factor provided when the layout was built."""
        return self.data.scale

    @property
    def styles(self) -> List[Style]:
        return self.data.styles

    @property
    def width(self) -> float:
        """Width of the layout, excluding trailing whitespace."""
        return self.data.width

    @property
    def full_width(self) -> float:
        """Width of the layout, including trailing whitespace."""
        return self.data.full_width

    @property
    def height(self) -> float:
        return self.data.height

    @property
    def inline_boxes(self) -> List[InlineBox]:
        return self.data.inline_boxes

    @property
    def is_empty(self) -> bool:
        return not self.data.lines

    def __len__(self) -> int:
        return len(self.data.lines)

    def get(self, index: int) -> Optional["Line"]:
        """Return the line at ``index``, or None."""
        if not 0 <= index < len(self.data.lines):
            return None
        return Line(self, index, self.data.lines[index])

    def lines(self) -> Iterator["Line"]:
        """Yield the lines of the layout in order."""
        for index, line in enumerate(self.data.lines):
            yield Line(self, index, line)

    def is_rtl(self) -> bool:
        """Return True if the dominant direction of the layout is right-to-left."""
        return bool(self.data.base_level & 1)

    def break_lines(self) -> BreakLines:
        """Return a line breaker for this layout."""
        return BreakLines(self)

    def break_all_lines(self, max_advance: Optional[float] = None) -> None:
        """Break every line with the given maximum advance (unbounded if None)."""
        self.break_lines().break_remaining(F32_MAX if max_advance is None else max_advance)

    def align(self, container_width: Optional[float], alignment: Alignment) -> None:
        """Align the lines within ``container_width``, or the longest line if None."""
        _align(self.data, container_width, alignment)

    def line_for_byte_index(self, index: int) -> Optional[Tuple[int, "Line"]]:
        """Return the index and line holding the given byte index of the text."""
        lines = self.data.lines
        position = bisect.bisect_right(lines, index, key=lambda line: line.text_range.start) - 1
        if position < 0:
            return None
        text_range = lines[position].text_range
        if not text_range.start <= index < text_range.stop:
            return None
        line = self.get(position)
        return None if line is None else (position, line)

    def line_for_offset(self, offset: float) -> Optional[Tuple[int, "Line"]]:
        """Return the index and line at an offset across the lines (y for horizontal text)."""
        if offset < 0.0:
            line = self.get(0)
            return None if line is None else (0, line)
        lines = self.data.lines
        position = bisect.bisect_left(lines, offset, key=lambda line: line.metrics.max_coord)
        if not (position < len(lines) and lines[position].metrics.min_coord <= offset):
            position = max(position - 1, 0)
        line = self.get(position)
        return None if line is None else (position, line)


@dataclass(frozen=True)
class PositionedInlineBox:
    """An inline box placed on a line."""

    x: float
    y: float
    width: float
    height: float
    id: int


@dataclass(frozen=True, eq=False)
class GlyphRun:
    """A sequence of fully positioned glyphs sharing one style."""

    run: Run
    style: Style
    glyph_start: int
    glyph_count: int
    offset: float
    baseline: float
    advance: float

    def glyphs(self) -> Iterator[Glyph]:
        """Yield the glyphs of the run in visual order, unpositioned."""
        all_glyphs = (
            glyph for cluster in self.run.visual_clusters() for glyph in cluster.glyphs()
        )
        return islice(all_glyphs, self.glyph_start, self.glyph_start + self.glyph_count)

    def positioned_glyphs(self) -> Iterator[Glyph]:
        """Yield the glyphs with their final positions on the line."""
        offset = self.offset
        for glyph in self.glyphs():
            yield replace(glyph, x=glyph.x + offset, y=glyph.y + self.baseline)
            offset += glyph.advance


PositionedLayoutItem = Union[GlyphRun, PositionedInlineBox]


@dataclass(frozen=True, eq=False)
class Line:
    """A line of a layout."""

    layout: Layout
    index: int
    data: LineData

    @property
    def metrics(self) -> LineMetrics:
        return self.data.metrics

    @property
    def text_range(self) -> range:
        return self.data.text_range

    @property
    def is_empty(self) -> bool:
        return len(self.data.item_range) == 0

    def __len__(self) -> int:
        return len(self.data.item_range)

    def item(self, index: int) -> Optional[LineItemData]:
        """Return the line item at ``index`` within the line, or None."""
        if index < 0:
            return None
        position = self.data.item_range.start + index
        if position >= self.data.item_range.stop:
            return None
        line_items = self.layout.data.line_items
        return line_items[position] if position < len(line_items) else None

    def run(self, index: int) -> Optional[Run]:
        """Return the text run at item ``index`` within the line, or None."""
        item = self.item(index)
        if item is None or item.kind is not LayoutItemKind.TEXT_RUN:
            return None
        runs = self.layout.data.runs
        if item.index >= len(runs):
            return None
        return Run(self.layout, self.index, index, runs[item.index], item)

    def runs(self) -> Iterator[Run]:
        """Yield the text runs of the line in visual order."""
        start, stop = self.data.item_range.start, self.data.item_range.stop
        data = self.layout.data
        for index, item in enumerate(data.line_items[start:stop]):
            if item.kind is LayoutItemKind.TEXT_RUN:
                yield Run(self.layout, self.index, index, data.runs[item.index], item)

    def items(self) -> Iterator[PositionedLayoutItem]:
        """Yield the glyph runs and inline boxes of the line, positioned."""
        data = self.layout.data
        metrics = self.data.metrics
        offset = 0.0
        for item_index in range(len(self)):
            item = self.item(item_index)
            if item is None:
                return
            if item.kind is LayoutItemKind.INLINE_BOX:
                inline_box = data.inline_boxes[item.index]
                yield PositionedInlineBox(
                    x=offset + metrics.offset,
                    y=metrics.baseline - inline_box.height,
                    width=inline_box.width,
                    height=inline_box.height,
                    id=inline_box.id,
                )
                offset += item.advance
                continue
            run = self.run(item_index)
            if run is None:
                return
            glyphs = [g for cluster in run.visual_clusters() for g in cluster.glyphs()]
            start = 0
            while start < len(glyphs):
                style_index = glyphs[start].style_index
                count = 1
                advance = glyphs[start].advance
                while (
                    start + count < len(glyphs)
                    and glyphs[start + count].style_index == style_index
                ):
                    advance += glyphs[start + count].advance
                    count += 1
                if not 0 <= style_index < len(data.styles):
                    return
                yield GlyphRun(
                    run=run,
                    style=data.styles[style_index],
                    glyph_start=start,
                    glyph_count=count,
                    offset=offset + metrics.offset,
                    baseline=metrics.baseline,
                    advance=advance,
                )
                start += count
                offset += advance