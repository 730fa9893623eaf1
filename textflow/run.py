"""Runs: sequences of clusters sharing a single font and style."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

from .cluster import Cluster, ClusterPath
from .data import LineItemData, RunData, RunMetrics


@dataclass(frozen=True, eq=False)
class Run:
    """A run of a layout, optionally as placed on a line.

    When ``line_data`` is given, the cluster range, text range and advance
    are those of the part of the run that lies on that line.
    """

    layout: Any
    line_index: int
    index: int
    run_data: RunData
    line_data: Optional[LineItemData] = None

    def font(self) -> Any:
        """Return the font of the run."""
        return self.layout.data.fonts[self.run_data.font_index]

    @property
    def font_size(self) -> float:
        return self.run_data.font_size

    @property
    def synthesis(self) -> Any:
        """Synthesis suggestions for the font of the run."""
        return self.run_data.synthesis

    @property
    def metrics(self) -> RunMetrics:
        return self.run_data.metrics

    @property
    def advance(self) -> float:
        if self.line_data is not None:
            return self.line_data.advance
        return self.run_data.advance

    @property
    def text_range(self) -> range:
        if self.line_data is not None:
            return self.line_data.text_range
        return self.run_data.text_range

    @property
    def cluster_range(self) -> range:
        if self.line_data is not None:
            return self.line_data.cluster_range
        return self.run_data.cluster_range

    @property
    def is_rtl(self) -> bool:
        return bool(self.run_data.bidi_level & 1)

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    def __len__(self) -> int:
        return len(self.cluster_range)

    def normalized_coords(self) -> List[int]:
        """Return the normalized variation coordinates of the run's font."""
        coords_range = self.run_data.coords_range
        coords = self.layout.data.coords
        if coords_range.stop > len(coords) or coords_range.start > coords_range.stop:
            return []
        return coords[coords_range.start:coords_range.stop]

    def _cluster_at(self, position: int) -> Cluster:
        return Cluster(
            layout=self.layout,
            path=ClusterPath(
                self.line_index, self.index, position - self.cluster_range.start
            ),
            run_data=self.run_data,
            line_item=self.line_data,
        )

    def get(self, index: int) -> Optional[Cluster]:
        """Return the cluster at the given logical index, or None."""
        if index < 0:
            return None
        position = self.cluster_range.start + index
        if position >= len(self.layout.data.clusters):
            return None
        return self._cluster_at(position)

    def _iter_positions(self, positions: Iterator[int]) -> Iterator[Cluster]:
        count = len(self.layout.data.clusters)
        for position in positions:
            if position >= count:
                return
            yield self._cluster_at(position)

    def clusters(self) -> Iterator[Cluster]:
        """Yield the clusters in logical order."""
        return self._iter_positions(iter(self.cluster_range))

    def visual_clusters(self) -> Iterator[Cluster]:
        """Yield the clusters in visual order."""
        positions = reversed(self.cluster_range) if self.is_rtl else iter(self.cluster_range)
        return self._iter_positions(positions)

    def logical_to_visual(self, logical_index: int) -> Optional[int]:
        """Return the visual index of a logical cluster index, or None."""
        count = len(self)
        if not 0 <= logical_index < count:
            return None
        return count - 1 - logical_index if self.is_rtl else logical_index

    def visual_to_logical(self, visual_index: int) -> Optional[int]:
        """Return the logical index of a visual cluster index, or None."""
        count = len(self)
        if not 0 <= visual_index < count:
            return None
        return count - 1 - visual_index if self.is_rtl else visual_index