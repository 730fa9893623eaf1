"""Data records shared by shaping, line breaking and layout queries."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional

SINGLE_GLYPH = 0xFF
"""Value of ``ClusterData.glyph_len`` marking a single inline glyph."""


class Boundary(enum.Enum):
    """Kind of text boundary preceding a cluster."""

    NONE = 0
    WORD = 1
    LINE = 2
    MANDATORY = 3


class Whitespace(enum.Enum):
    """Whitespace classification of a cluster."""

    NONE = 0
    SPACE = 1
    NO_BREAK_SPACE = 2
    TAB = 3
    NEWLINE = 4
    OTHER = 5


@dataclass(frozen=True)
class ClusterInfo:
    """Boundary and whitespace information about a cluster."""

    boundary: Boundary = Boundary.NONE
    whitespace: Whitespace = Whitespace.NONE
    is_emoji: bool = False

    def is_boundary(self) -> bool:
        return self.boundary is not Boundary.NONE

    def is_whitespace(self) -> bool:
        return self.whitespace is not Whitespace.NONE

    def is_space_or_nbsp(self) -> bool:
        return self.whitespace in (Whitespace.SPACE, Whitespace.NO_BREAK_SPACE)


class Alignment(enum.Enum):
    """Alignment of a layout."""

    START = 0
    MIDDLE = 1
    END = 2
    JUSTIFIED = 3


class BreakReason(enum.Enum):
    """Why a line ended."""

    NONE = 0
    REGULAR = 1
    EXPLICIT = 2
    EMERGENCY = 3


class LayoutItemKind(enum.Enum):
    TEXT_RUN = 0
    INLINE_BOX = 1


@dataclass
class Glyph:
    """Glyph with an offset and advance."""

    id: int = 0
    style_index: int = 0
    x: float = 0.0
    y: float = 0.0
    advance: float = 0.0


@dataclass
class RunMetrics:
    """Metrics of a run."""

    ascent: float = 0.0
    descent: float = 0.0
    leading: float = 0.0
    underline_offset: float = 0.0
    underline_size: float = 0.0
    strikethrough_offset: float = 0.0
    strikethrough_size: float = 0.0


@dataclass
class LineMetrics:
    """Metrics of a line."""

    ascent: float = 0.0
    descent: float = 0.0
    leading: float = 0.0
    line_height: float = 0.0
    baseline: float = 0.0
    offset: float = 0.0
    advance: float = 0.0
    trailing_whitespace: float = 0.0
    min_coord: float = 0.0
    max_coord: float = 0.0

    def size(self) -> float:
        """Return the size of the line."""
        return self.line_height


@dataclass
class Decoration:
    """Underline or strikethrough decoration."""

    brush: Any
    offset: Optional[float] = None
    size: Optional[float] = None


@dataclass
class Style:
    """Style properties used while drawing glyphs."""

    brush: Any = None
    underline: Optional[Decoration] = None
    strikethrough: Optional[Decoration] = None
    line_height: float = 0.0


@dataclass
class InlineBox:
    """A box placed inline with the text at a byte index."""

    id: int = 0
    index: int = 0
    width: float = 0.0
    height: float = 0.0


@dataclass
class ClusterData:
    """Packed description of one cluster.

    If ``glyph_len`` is ``SINGLE_GLYPH`` then ``glyph_offset`` is a glyph id;
    otherwise it is an offset into the glyph list relative to the run.
    """

    LIGATURE_START: ClassVar[int] = 1
    LIGATURE_COMPONENT: ClassVar[int] = 2
    DIVERGENT_STYLES: ClassVar[int] = 4

    info: ClusterInfo = field(default_factory=ClusterInfo)
    flags: int = 0
    style_index: int = 0
    glyph_len: int = 0
    text_len: int = 0
    glyph_offset: int = 0
    text_offset: int = 0
    advance: float = 0.0

    def is_ligature_start(self) -> bool:
        return bool(self.flags & self.LIGATURE_START)

    def is_ligature_component(self) -> bool:
        return bool(self.flags & self.LIGATURE_COMPONENT)

    def has_divergent_styles(self) -> bool:
        return bool(self.flags & self.DIVERGENT_STYLES)

    def text_range(self, run: "RunData") -> range:
        start = run.text_range.start + self.text_offset
        return range(start, start + self.text_len)


@dataclass
class RunData:
    """A shaped sequence of clusters with a single font."""

    font_index: int = 0
    font_size: float = 0.0
    synthesis: Any = None
    coords_range: range = range(0, 0)
    text_range: range = range(0, 0)
    bidi_level: int = 0
    ends_with_newline: bool = False
    cluster_range: range = range(0, 0)
    glyph_start: int = 0
    metrics: RunMetrics = field(default_factory=RunMetrics)
    word_spacing: float = 0.0
    letter_spacing: float = 0.0
    advance: float = 0.0


@dataclass
class LineData:
    """A committed line."""

    text_range: range = range(0, 0)
    item_range: range = range(0, 0)
    metrics: LineMetrics = field(default_factory=LineMetrics)
    break_reason: BreakReason = BreakReason.NONE
    alignment: Alignment = Alignment.START
    max_advance: float = 0.0
    num_spaces: int = 0

    def size(self) -> float:
        return self.metrics.ascent + self.metrics.descent + self.metrics.leading


@dataclass
class LineItemData:
    """A run or inline box placed on a line."""

    kind: LayoutItemKind = LayoutItemKind.TEXT_RUN
    index: int = 0
    bidi_level: int = 0
    advance: float = 0.0
    is_whitespace: bool = False
    has_trailing_whitespace: bool = False
    text_range: range = range(0, 0)
    cluster_range: range = range(0, 0)

    def is_text_run(self) -> bool:
        return self.kind is LayoutItemKind.TEXT_RUN

    def is_inline_box(self) -> bool:
        return self.kind is LayoutItemKind.INLINE_BOX

    def compute_line_height(self, layout: Any) -> float:
        """Return the tallest style line height among this item's content."""
        if self.kind is LayoutItemKind.INLINE_BOX:
            return layout.inline_boxes[self.index].height
        run = layout.runs[self.index]
        height = 0.0
        for cluster in layout.clusters[run.cluster_range.start:run.cluster_range.stop]:
            if cluster.glyph_len != SINGLE_GLYPH and cluster.has_divergent_styles():
                start = run.glyph_start + cluster.glyph_offset
                for glyph in layout.glyphs[start:start + cluster.glyph_len]:
                    height = max(height, layout.styles[glyph.style_index].line_height)
            else:
                height = max(height, layout.styles[cluster.style_index].line_height)
        return height


@dataclass
class LayoutItem:
    """A run or inline box in logical order, before line breaking."""

    kind: LayoutItemKind
    index: int
    bidi_level: int = 0