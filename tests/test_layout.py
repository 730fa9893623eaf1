from itertools import accumulate

import pytest

from textflow.builder import LayoutData, ShapedCluster, ShapedGlyph
from textflow.data import (
    Alignment,
    InlineBox,
    LineData,
    LineMetrics,
    RunMetrics,
    Style,
)
from textflow.layout import GlyphRun, Layout, PositionedInlineBox

LINE_HEIGHT = 20.0


def _metrics():
    return RunMetrics(
        ascent=12.0,
        descent=4.0,
        leading=0.0,
        underline_offset=0.0,
        underline_size=1.0,
        strikethrough_offset=0.0,
        strikethrough_size=1.0,
    )


def _style(brush):
    return Style(brush=brush, underline=None, strikethrough=None, line_height=LINE_HEIGHT)


def make_layout(advances, bidi_level=0, glyph_styles=None, boxes=()):
    data = LayoutData()
    data.styles.append(_style("black"))
    data.styles.append(_style("red"))
    glyph_styles = glyph_styles or [0] * len(advances)
    clusters = [
        ShapedCluster(
            source=range(i, i + 1),
            glyphs=(ShapedGlyph(id=100 + i, advance=a, data=s),),
            data=s,
        )
        for i, (a, s) in enumerate(zip(advances, glyph_styles))
    ]
    data.push_run(
        font="font",
        font_size=16.0,
        synthesis=None,
        metrics=_metrics(),
        coords=(),
        clusters=clusters,
        bidi_level=bidi_level,
        word_spacing=0.0,
        letter_spacing=0.0,
    )
    for box in boxes:
        data.inline_boxes.append(box)
        data.push_inline_box(len(data.inline_boxes) - 1)
    data.text_len = len(advances)
    return Layout(data)


def test_break_all_lines_single_line():
    advances = [5.0, 6.0, 7.0]
    layout = make_layout(advances)
    layout.break_all_lines(None)
    assert len(layout) == 1
    assert not layout.is_empty
    assert layout.width == pytest.approx(sum(advances))
    assert layout.full_width == pytest.approx(sum(advances))
    line = layout.get(0)
    assert line.text_range == range(0, len(advances))
    assert [line.index for line in layout.lines()] == [0]


def test_line_height_from_style():
    layout = make_layout([5.0, 5.0])
    layout.break_all_lines(None)
    line = layout.get(0)
    assert line.metrics.line_height == LINE_HEIGHT
    assert layout.height == LINE_HEIGHT
    assert line.metrics.min_coord == 0.0
    assert line.metrics.max_coord >= line.metrics.baseline


def test_get_out_of_range():
    layout = make_layout([5.0])
    layout.break_all_lines(None)
    assert layout.get(1) is None
    assert layout.get(-1) is None


def test_empty_layout():
    layout = Layout()
    assert len(layout) == 0
    assert layout.is_empty
    assert layout.get(0) is None
    assert layout.line_for_offset(-1.0) is None
    assert layout.line_for_byte_index(0) is None


def test_line_for_byte_index_after_break():
    layout = make_layout([5.0, 5.0, 5.0])
    layout.break_all_lines(None)
    for index in range(3):
        found = layout.line_for_byte_index(index)
        assert found is not None
        assert found[0] == 0
    assert layout.line_for_byte_index(3) is None


def _manual_layout():
    data = LayoutData()
    data.lines = [
        LineData(text_range=range(0, 3), metrics=LineMetrics(min_coord=0.0, max_coord=10.0)),
        LineData(text_range=range(3, 6), metrics=LineMetrics(min_coord=10.0, max_coord=20.0)),
    ]
    return Layout(data)


def test_line_for_byte_index_multiple_lines():
    layout = _manual_layout()
    assert layout.line_for_byte_index(0)[0] == 0
    assert layout.line_for_byte_index(2)[0] == 0
    assert layout.line_for_byte_index(3)[0] == 1
    assert layout.line_for_byte_index(5)[0] == 1
    assert layout.line_for_byte_index(6) is None


def test_line_for_offset():
    layout = _manual_layout()
    assert layout.line_for_offset(-5.0)[0] == 0
    assert layout.line_for_offset(5.0)[0] == 0
    assert layout.line_for_offset(15.0)[0] == 1
    assert layout.line_for_offset(100.0)[0] == 1
    index, line = layout.line_for_offset(15.0)
    assert line.text_range == range(3, 6)


def test_is_rtl_follows_base_level():
    layout = Layout()
    assert layout.is_rtl() is False
    layout.data.base_level = 1
    assert layout.is_rtl() is True


def test_items_single_glyph_run():
    advances = [5.0, 6.0, 7.0]
    layout = make_layout(advances)
    layout.break_all_lines(None)
    items = list(layout.get(0).items())
    assert len(items) == 1
    glyph_run = items[0]
    assert isinstance(glyph_run, GlyphRun)
    assert glyph_run.glyph_count == len(advances)
    assert glyph_run.advance == pytest.approx(sum(advances))
    assert glyph_run.style.brush == "black"
    assert [g.id for g in glyph_run.glyphs()] == [100, 101, 102]


def test_positioned_glyphs_offsets():
    advances = [5.0, 6.0, 7.0]
    layout = make_layout(advances)
    layout.break_all_lines(None)
    glyph_run = next(layout.get(0).items())
    positioned = list(glyph_run.positioned_glyphs())
    expected_x = [0.0] + list(accumulate(advances))[:-1]
    assert [g.x for g in positioned] == pytest.approx(expected_x)
    assert all(g.y == glyph_run.baseline for g in positioned)


def test_items_split_by_style():
    layout = make_layout([5.0, 5.0, 5.0, 5.0], glyph_styles=[0, 0, 1, 1])
    layout.break_all_lines(None)
    runs = list(layout.get(0).items())
    assert len(runs) == 2
    assert [r.glyph_count for r in runs] == [2, 2]
    assert runs[0].style.brush == "black"
    assert runs[1].style.brush == "red"
    assert runs[1].offset == pytest.approx(runs[0].offset + runs[0].advance)
    assert [g.id for g in runs[1].glyphs()] == [102, 103]


def test_rtl_run_visual_order():
    layout = make_layout([5.0, 6.0, 7.0], bidi_level=1)
    layout.break_all_lines(None)
    glyph_run = next(layout.get(0).items())
    assert [g.id for g in glyph_run.glyphs()] == [102, 101, 100]
    assert glyph_run.run.is_rtl


def test_runs_and_item_access():
    layout = make_layout([5.0, 5.0])
    layout.break_all_lines(None)
    line = layout.get(0)
    runs = list(line.runs())
    assert len(runs) == 1
    assert runs[0].text_range == range(0, 2)
    assert line.run(0).text_range == runs[0].text_range
    assert line.item(len(line)) is None
    assert line.run(len(line)) is None


def test_inline_box_positioned():
    box = InlineBox(id=7, index=2, width=9.0, height=8.0)
    layout = make_layout([5.0, 5.0], boxes=[box])
    layout.break_all_lines(None)
    line = layout.get(0)
    items = list(line.items())
    boxes = [item for item in items if isinstance(item, PositionedInlineBox)]
    assert len(boxes) == 1
    placed = boxes[0]
    assert placed.id == box.id
    assert placed.width == box.width
    assert placed.height == box.height
    assert placed.y == line.metrics.baseline - box.height
    glyph_run = items[0]
    assert placed.x == pytest.approx(glyph_run.offset + glyph_run.advance)
    assert line.run(1) is None
    assert line.item(1).is_inline_box()


def test_align_end_offsets_items():
    advances = [5.0, 5.0]
    layout = make_layout(advances)
    layout.break_all_lines(None)
    container = 50.0
    layout.align(container, Alignment.END)
    line = layout.get(0)
    assert line.metrics.offset == pytest.approx(container - sum(advances))
    glyph_run = next(line.items())
    assert glyph_run.offset == pytest.approx(line.metrics.offset)


def test_align_middle_without_width_is_noop_for_single_line():
    layout = make_layout([5.0, 5.0])
    layout.break_all_lines(None)
    layout.align(None, Alignment.MIDDLE)
    assert layout.get(0).metrics.offset == 0.0


def test_break_lines_next_and_revert():
    advances = [5.0, 6.0]
    layout = make_layout(advances)
    breaker = layout.break_lines()
    result = breaker.break_next(1000.0)
    assert result is not None
    assert result[0] == pytest.approx(sum(advances))
    assert breaker.break_next(1000.0) is None
    assert breaker.revert() is True
    assert breaker.break_next(1000.0) is not None
    breaker.finish()
    assert len(layout) == 1
    with pytest.raises(RuntimeError):
        breaker.break_next(1000.0)


def test_rebreak_preserves_line_count():
    layout = make_layout([5.0, 5.0, 5.0])
    layout.break_all_lines(None)
    first = layout.width
    layout.break_all_lines(None)
    assert len(layout) == 1
    assert layout.width == first