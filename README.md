# textflow

`textflow` lays out text that has already been shaped. You give it runs of
shaped clusters and glyphs, plus any inline boxes. It breaks the content into
lines and reorders runs of mixed direction by bidi level. It aligns and
justifies lines and computes line metrics. It also lets you hit-test and move
through the result by cluster and by word.

## Installation

```
pip install textflow
```

## Modules

- `textflow.data`: the records the package works with. These are
  `ClusterInfo` (with `Boundary` and `Whitespace`), `Glyph`, `RunMetrics`,
  `LineMetrics`, `Style`, `Decoration`, `InlineBox`, `ClusterData`, `RunData`,
  `LineData`, `LineItemData` and `LayoutItem`. The module also defines the
  enums `Alignment`, `BreakReason` and `LayoutItemKind`.
- `textflow.builder`: `LayoutData` holds every part of a layout.
  - `push_run` takes an iterable of `ShapedCluster` values, each with its
    `ShapedGlyph`s. It splits the input into runs before each mandatory break,
    and also whenever an offset would overflow 16 bits.
  - `push_inline_box` adds an inline box item.
  - `finish` applies word and letter spacing.
- `textflow.layout`: `Layout` is the entry point.
  - `break_all_lines(max_advance)` wraps the text, with no limit when
    `max_advance` is None.
  - `align(container_width, alignment)` positions the lines. When
    `container_width` is None, the longest line is used.
  - `lines()`, `get(index)`, `line_for_byte_index` and `line_for_offset`
    query the lines.
  - `Line.items()` yields `GlyphRun` and `PositionedInlineBox` values. A
    `GlyphRun.positioned_glyphs()` gives the final glyph positions.
- `textflow.breaker`: `BreakLines` is the greedy line breaker.
  - `break_next(max_advance)` computes one line at a time, and each call may
    use a different width. It returns the line's `(advance, size)`.
  - `revert()` undoes the last line.
  - `finish()` and `break_remaining()` store the lines in the layout. Leaving a
    `with` block does the same.
- `textflow.lines`: `commit_line` and `reorder_line_items`, the building blocks
  the breaker uses.
- `textflow.metrics`: `finalize_lines` computes rounded vertical metrics,
  baselines, trailing whitespace and text ranges for committed lines.
- `textflow.alignment`: `align` and `unjustify` work on `LayoutData`.
- `textflow.run`: `Run` gives access to clusters in logical order and in
  visual order.
- `textflow.cluster`: hit testing with `cluster_from_index` and
  `cluster_from_point`, plus `Cluster`, `ClusterPath` and `Affinity`.
  - Logical navigation: `next_logical` and `previous_logical`.
  - Visual navigation: `next_visual` and `previous_visual`.
  - Word navigation: `next_word` and `previous_word`.
  - `bidi_link` and `visual_offset` help with cursor placement.
- `textflow.util`: `nearly_eq` and `nearly_zero` compare floats with 32-bit
  float tolerance.

## Example

```python
from textflow.builder import ShapedCluster, ShapedGlyph
from textflow.data import Alignment, Boundary, ClusterInfo, RunMetrics, Style, Whitespace
from textflow.layout import Layout

text = "hello world"
layout = Layout()
data = layout.data
data.text_len = len(text)
data.styles.append(Style(line_height=16.0))

clusters = []
for i, ch in enumerate(text):
    info = ClusterInfo(
        boundary=Boundary.LINE if i == 6 else Boundary.NONE,
        whitespace=Whitespace.SPACE if ch == " " else Whitespace.NONE,
    )
    clusters.append(
        ShapedCluster(source=range(i, i + 1), glyphs=[ShapedGlyph(id=ord(ch), advance=8.0)], info=info)
    )

data.push_run("my-font", 16.0, None, RunMetrics(ascent=12.0, descent=4.0), [], clusters, 0, 0.0, 0.0)
data.finish()

layout.break_all_lines(50.0)
layout.align(None, Alignment.START)
for line in layout.lines():
    print(line.text_range, line.metrics.baseline)
    for item in line.items():
        ...
```

## What it does not do

`textflow` does not shape glyphs, read font files, select fonts or parse font
family lists or CSS-style style properties. It does not compute bidi levels or
find line and word boundaries from raw text either. All of these are inputs:
clusters arrive with their `ClusterInfo`, their bidi level and their glyphs
already set. Fonts and synthesis settings are stored as opaque values. The
package has no command-line interface and does no rendering. It only yields
positioned glyphs and boxes for you to draw.

## Running the tests

```
pip install textflow[test]
pytest
```