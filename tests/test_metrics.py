from textflow.builder import LayoutData, ShapedCluster, ShapedGlyph
from textflow.data import (
    Alignment,
    Boundary,
    BreakReason,
    ClusterInfo,
    InlineBox,
    RunMetrics,
    Style,
    Whitespace,
)
from textflow.lines import LineState, commit_line
from textflow.metrics import finalize_lines

TEXT_METRICS = RunMetrics(ascent=12.0, descent=4.0, leading=0.0)


def _cluster(start, advance, whitespace=Whitespace.NONE, boundary=Boundary.NONE):
    return ShapedCluster(
        source=range(start, start + 1),
        glyphs=(ShapedGlyph(id=start + 1, advance=advance),),
        info=ClusterInfo(boundary=boundary, whitespace=whitespace),
    )


def _data(run_specs, line_height=20.0):
    data = LayoutData()
    data.styles.append(Style(line_height=line_height))
    text_len = 0
    for clusters, level, metrics in run_specs:
        data.push_run("font", 16.0, None, metrics, (), clusters, level, 0.0, 0.0)
        text_len = max([text_len] + [c.source.stop for c in clusters])
    data.text_len = text_len
    return data


def _commit_all(data, x=0.0):
    state = LineState(x=x, items_end=len(data.items), clusters_end=len(data.clusters))
    lines, items = [], []
    assert commit_line(data, lines, items, state, 1000.0, Alignment.START, BreakReason.NONE)
    return lines, items


def test_single_line_advance_and_trailing_space():
    clusters = [_cluster(0, 10.0), _cluster(1, 10.0), _cluster(2, 5.0, Whitespace.SPACE)]
    data = _data([(clusters, 0, TEXT_METRICS)])
    lines, items = _commit_all(data)
    finalize_lines(data, lines, items)
    assert items[0].advance == sum(c.glyphs[0].advance for c in clusters)
    assert items[0].has_trailing_whitespace
    assert not items[0].is_whitespace
    assert lines[0].metrics.trailing_whitespace == 5.0
    assert lines[0].text_range == range(0, 3)


def test_metrics_stack_and_are_consistent():
    data = _data([([_cluster(0, 10.0), _cluster(1, 10.0)], 0, TEXT_METRICS)])
    lines, items = _commit_all(data)
    finalize_lines(data, lines, items)
    m = lines[0].metrics
    assert m.ascent == 12.0
    assert m.descent == 4.0
    assert m.line_height == 20.0
    assert m.leading == m.line_height - (m.ascent + m.descent)
    assert m.min_coord == 0.0
    assert m.min_coord <= m.baseline <= m.max_coord
    assert m.max_coord - m.min_coord == m.line_height


def test_two_lines_are_stacked():
    clusters = [_cluster(i, 10.0) for i in range(4)]
    data = _data([(clusters, 0, TEXT_METRICS)])
    lines, items = [], []
    state = LineState(x=20.0, items_end=1, clusters_end=2)
    assert commit_line(data, lines, items, state, 25.0, Alignment.START, BreakReason.REGULAR)
    state.x = 20.0
    state.clusters_end = 4
    state.items_end = 1
    assert commit_line(data, lines, items, state, 25.0, Alignment.START, BreakReason.NONE)
    finalize_lines(data, lines, items)
    assert lines[0].text_range == range(0, 2)
    assert lines[1].text_range == range(2, 4)
    assert lines[1].metrics.min_coord == lines[0].metrics.max_coord
    assert lines[1].metrics.baseline > lines[0].metrics.baseline


def test_rounding_is_half_away_from_zero():
    data = _data([([_cluster(0, 10.0)], 0, RunMetrics(ascent=2.5, descent=0.5))], line_height=10.0)
    lines, items = _commit_all(data)
    finalize_lines(data, lines, items)
    assert lines[0].metrics.ascent == 3.0
    assert lines[0].metrics.descent == 1.0


def test_trailing_whitespace_run_is_ignored_for_metrics():
    tall = RunMetrics(ascent=50.0, descent=20.0)
    data = _data([
        ([_cluster(0, 10.0), _cluster(1, 10.0)], 0, TEXT_METRICS),
        ([_cluster(2, 5.0, Whitespace.SPACE)], 0, tall),
    ])
    lines, items = _commit_all(data)
    finalize_lines(data, lines, items)
    assert items[1].is_whitespace
    assert lines[0].metrics.ascent == TEXT_METRICS.ascent
    assert lines[0].metrics.descent == TEXT_METRICS.descent


def test_whitespace_only_line_uses_first_run_metrics():
    data = _data([([_cluster(0, 5.0, Whitespace.SPACE)], 0, TEXT_METRICS)])
    lines, items = _commit_all(data)
    finalize_lines(data, lines, items)
    assert items[0].is_whitespace
    assert lines[0].metrics.ascent == TEXT_METRICS.ascent
    assert lines[0].metrics.descent == TEXT_METRICS.descent


def test_rtl_run_trailing_whitespace_is_at_front():
    clusters = [_cluster(0, 5.0, Whitespace.SPACE), _cluster(1, 10.0)]
    data = _data([(clusters, 1, TEXT_METRICS)])
    lines, items = _commit_all(data)
    finalize_lines(data, lines, items)
    assert items[0].has_trailing_whitespace
    assert not items[0].is_whitespace


def test_mixed_levels_are_reordered():
    data = _data([
        ([_cluster(0, 10.0)], 0, TEXT_METRICS),
        ([_cluster(1, 10.0)], 1, TEXT_METRICS),
        ([_cluster(2, 10.0)], 1, TEXT_METRICS),
    ])
    lines, items = _commit_all(data)
    finalize_lines(data, lines, items)
    assert [item.index for item in items] == [0, 2, 1]
    assert lines[0].text_range == range(0, 3)


def test_inline_box_sets_ascent_and_height():
    data = _data([([_cluster(0, 10.0)], 0, TEXT_METRICS)])
    data.inline_boxes.append(InlineBox(id=7, index=1, width=10.0, height=30.0))
    data.push_inline_box(0)
    lines, items = _commit_all(data)
    finalize_lines(data, lines, items)
    assert [item.is_inline_box() for item in items] == [False, True]
    assert items[1].advance == 10.0
    assert lines[0].metrics.ascent == 30.0
    assert lines[0].metrics.line_height == 30.0