"""UI tests for the segment view."""

from __future__ import annotations

import asyncio

from textual.app import App, ComposeResult

from chart_stream.segments import (
    ChartPendingSegment,
    InvalidChartSegment,
    TextSegment,
    parse_stream_content,
)
from chart_stream.ui.segment_view import SegmentBlock, SegmentView, render_segment

from samples import BAR_SPEC, chart_block


class SegmentViewApp(App):
    CSS = ""

    def compose(self) -> ComposeResult:
        yield SegmentView(id="segments")


def test_render_segment_dispatch() -> None:
    assert render_segment(TextSegment("hi  there"), 20).plain == "hi  there"
    chart = parse_stream_content(chart_block(BAR_SPEC))[0]
    assert render_segment(chart, 40).plain.startswith("[bar]")
    assert "chart loading" in render_segment(ChartPendingSegment(), 40).plain
    assert "bad" in render_segment(InvalidChartSegment("bad"), 40).plain


def test_show_segments_reuses_unchanged_blocks() -> None:
    seen: dict[str, object] = {}

    async def runner() -> None:
        app = SegmentViewApp()
        async with app.run_test() as pilot:
            view = app.query_one(SegmentView)
            view.show_segments([TextSegment("Intro\n"), ChartPendingSegment()])
            await pilot.pause()
            blocks = list(view.query(SegmentBlock))
            seen["first"] = blocks[0]
            assert len(blocks) == 2
            assert blocks[1].has_class("chart-loading")

            segments = parse_stream_content("Intro\n" + chart_block(BAR_SPEC))
            view.show_segments(segments)
            await pilot.pause()
            blocks = list(view.query(SegmentBlock))
            assert blocks[0] is seen["first"]
            assert blocks[1].has_class("chart")
            assert not blocks[1].has_class("chart-loading")
            assert view.segments == segments

            view.show_segments([TextSegment("Intro\n")])
            await pilot.pause()
            assert len(list(view.query(SegmentBlock))) == 1
            seen["segments"] = view.segments

    asyncio.run(runner())
    assert seen["segments"] == [TextSegment("Intro\n")]


def test_advance_tick_only_touches_pending_blocks() -> None:
    async def runner() -> None:
        app = SegmentViewApp()
        async with app.run_test() as pilot:
            view = app.query_one(SegmentView)
            view.show_segments([TextSegment("a"), ChartPendingSegment()])
            await pilot.pause()
            view.advance_tick()
            view.advance_tick()
            text_block, pending_block = view.query(SegmentBlock)
            assert text_block.tick == 0
            assert pending_block.tick == 2

    asyncio.run(runner())
