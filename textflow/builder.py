"""Accumulation of shaped runs, clusters and glyphs into layout data."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, List, Sequence

from .data import (
    SINGLE_GLYPH,
    Boundary,
    ClusterData,
    ClusterInfo,
    Glyph,
    InlineBox,
    LayoutItem,
    LayoutItemKind,
    LineData,
    LineItemData,
    RunData,
    RunMetrics,
    Style,
)
from .util import nearly_zero

_MAX_LEN = 0xFFFF


@dataclass(frozen=True)
class ShapedGlyph:
    """A glyph as produced by a shaper; ``data`` is its style index."""

    id: int
    x: float = 0.0
    y: float = 0.0
    advance: float = 0.0
    data: int = 0


@dataclass(frozen=True)
class ShapedCluster:
    """A cluster as produced by a shaper.

    ``source`` is the byte range of the cluster in the text. For ligatures,
    ``components`` holds the byte ranges of every component, the first one
    included. ``data`` is the style index of the cluster.
    """

    source: range
    glyphs: Sequence[ShapedGlyph] = ()
    info: ClusterInfo = field(default_factory=ClusterInfo)
    components: Sequence[range] = ()
    data: int = 0

    @property
    def advance(self) -> float:
        """Total advance of the cluster's glyphs."""
        return sum(glyph.advance for glyph in self.glyphs)


def _grow(r: range, by: int = 1) -> range:
    return range(r.start, r.stop + by)


@dataclass
class LayoutData:
    """All the data that makes up a layout."""

    scale: float = 1.0
    has_bidi: bool = False
    base_level: int = 0
    text_len: int = 0
    width: float = 0.0
    full_width: float = 0.0
    height: float = 0.0
    fonts: List[Any] = field(default_factory=list)
    coords: List[int] = field(default_factory=list)
    styles: List[Style] = field(default_factory=list)
    inline_boxes: List[InlineBox] = field(default_factory=list)
    runs: List[RunData] = field(default_factory=list)
    items: List[LayoutItem] = field(default_factory=list)
    clusters: List[ClusterData] = field(default_factory=list)
    glyphs: List[Glyph] = field(default_factory=list)
    lines: List[LineData] = field(default_factory=list)
    line_items: List[LineItemData] = field(default_factory=list)

    def clear(self) -> None:
        """Reset to the empty state, keeping the list objects."""
        self.scale = 1.0
        self.has_bidi = False
        self.base_level = 0
        self.text_len = 0
        self.width = 0.0
        self.full_width = 0.0
        self.height = 0.0
        for items in (
            self.fonts,
            self.coords,
            self.styles,
            self.inline_boxes,
            self.runs,
            self.items,
            self.clusters,
            self.glyphs,
            self.lines,
            self.line_items,
        ):
            items.clear()

    def push_inline_box(self, index: int) -> None:
        """Append an inline box item with the bidi level of the last run."""
        bidi_level = self.runs[-1].bidi_level if self.runs else 0
        self.items.append(LayoutItem(LayoutItemKind.INLINE_BOX, index, bidi_level))

    def push_run(
        self,
        font: Any,
        font_size: float,
        synthesis: Any,
        metrics: RunMetrics,
        coords: Sequence[int],
        clusters: Iterable[ShapedCluster],
        bidi_level: int,
        word_spacing: float,
        letter_spacing: float,
    ) -> None:
        """Append the shaped clusters of one font as one or more runs.

        A run is split before every mandatory break and whenever its offsets
        would overflow 16 bits.
        """
        try:
            font_index = self.fonts.index(font)
        except ValueError:
            font_index = len(self.fonts)
            self.fonts.append(font)

        coords_start = len(self.coords)
        if any(coord != 0 for coord in coords):
            self.coords.extend(coords)
        run = RunData(
            font_index=font_index,
            font_size=font_size,
            synthesis=synthesis,
            coords_range=range(coords_start, len(self.coords)),
            text_range=range(0, 0),
            bidi_level=bidi_level,
            cluster_range=range(len(self.clusters), len(self.clusters)),
            glyph_start=len(self.glyphs),
            metrics=replace(metrics),
            word_spacing=word_spacing,
            letter_spacing=letter_spacing,
        )
        glyph_count = 0
        text_offset = 0

        def flush() -> None:
            nonlocal glyph_count
            if len(run.cluster_range) == 0:
                return
            self.runs.append(replace(run, metrics=replace(run.metrics)))
            self.items.append(
                LayoutItem(LayoutItemKind.TEXT_RUN, len(self.runs) - 1, run.bidi_level)
            )
            run.text_range = range(text_offset, text_offset)
            run.cluster_range = range(run.cluster_range.stop, run.cluster_range.stop)
            run.glyph_start = len(self.glyphs)
            run.advance = 0.0
            glyph_count = 0

        first = True
        for cluster in clusters:
            if cluster.info.boundary is Boundary.MANDATORY:
                run.ends_with_newline = True
                flush()
            run.ends_with_newline = False
            source = cluster.source
            if first:
                run.text_range = range(source.start, source.start)
                text_offset = source.start
                first = False
            components = list(cluster.components)
            num_components = len(components) + 1
            if (
                glyph_count > _MAX_LEN
                or text_offset - run.text_range.start > _MAX_LEN
                or (
                    num_components > 1
                    and components[-1].start - run.text_range.start > _MAX_LEN
                )
            ):
                flush()
            text_len = len(source)
            glyph_len = len(cluster.glyphs)
            advance = cluster.advance
            run.advance += advance
            cluster_data = ClusterData(
                info=cluster.info,
                flags=0,
                style_index=cluster.data,
                glyph_len=glyph_len,
                text_len=text_len,
                glyph_offset=0,
                text_offset=text_offset - run.text_range.start,
                advance=advance,
            )
            if num_components > 1:
                cluster_data.flags = ClusterData.LIGATURE_START
                cluster_data.advance /= len(components)
                cluster_data.text_len = len(components[0])
            run.cluster_range = _grow(run.cluster_range)
            run.text_range = _grow(run.text_range, text_len)
            text_offset += text_len

            encode = True
            if glyph_len == 1 and num_components == 1:
                glyph = cluster.glyphs[0]
                if nearly_zero(glyph.x) and nearly_zero(glyph.y):
                    cluster_data.glyph_len = SINGLE_GLYPH
                    cluster_data.glyph_offset = glyph.id
                    encode = False
            elif glyph_len == 0:
                encode = False

            if encode:
                cluster_data.glyph_offset = len(self.glyphs) - run.glyph_start
                for glyph in cluster.glyphs:
                    if glyph.data != cluster_data.style_index:
                        cluster_data.flags |= ClusterData.DIVERGENT_STYLES
                    self.glyphs.append(
                        Glyph(
                            id=glyph.id,
                            style_index=glyph.data,
                            x=glyph.x,
                            y=glyph.y,
                            advance=glyph.advance,
                        )
                    )
                glyph_count += glyph_len

            self.clusters.append(replace(cluster_data))
            if num_components > 1:
                cluster_data.glyph_offset = 0
                cluster_data.glyph_len = 0
                for component in components[1:]:
                    cluster_data.flags = ClusterData.LIGATURE_COMPONENT
                    cluster_data.text_offset = component.start - run.text_range.start
                    cluster_data.text_len = len(component)
                    self.clusters.append(replace(cluster_data))
                    run.cluster_range = _grow(run.cluster_range)
        flush()

    def finish(self) -> None:
        """Apply word and letter spacing to the clusters and glyphs of every run."""
        for run in self.runs:
            word = run.word_spacing
            letter = run.letter_spacing
            if nearly_zero(word) and nearly_zero(letter):
                continue
            for cluster in self.clusters[run.cluster_range.start:run.cluster_range.stop]:
                spacing = letter
                if not nearly_zero(word) and cluster.info.is_space_or_nbsp():
                    spacing += word
                if nearly_zero(spacing):
                    continue
                cluster.advance += spacing
                if cluster.glyph_len != SINGLE_GLYPH and cluster.glyph_len > 0:
                    start = run.glyph_start + cluster.glyph_offset
                    end = min(start + cluster.glyph_len, len(self.glyphs))
                    if end > start:
                        self.glyphs[end - 1].advance += spacing