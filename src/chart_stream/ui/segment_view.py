"""Widgets that display a parsed segment list."""

from __future__ import annotations

from typing import Any, Sequence

from rich.text import Text
from textual.containers import VerticalScroll
from textual.widgets import Static

from chart_stream.segments import (
    ChartPendingSegment,
    ChartSegment,
    InvalidChartSegment,
    Segment,
    TextSegment,
)
from chart_stream.ui.chart_render import render_chart, render_invalid, render_pending


def render_segment(segment: Segment, width: int, tick: int = 0) -> Text:
    if isinstance(segment, TextSegment):
        return Text(segment.content)
    if isinstance(segment, ChartSegment):
        return render_chart(segment.content, width)
    if isinstance(segment, InvalidChartSegment):
        return render_invalid(segment.reason)
    return render_pending(tick)


class SegmentBlock(Static):
    """One rendered segment."""

    DEFAULT_CSS = """
    SegmentBlock {
        height: auto;
        margin: 0 0 1 0;
    }
    SegmentBlock.chart, SegmentBlock.chart-loading, SegmentBlock.chart-invalid {
        border: round $primary-darken-2;
        padding: 0 1;
    }
    """

    def __init__(self, segment: Segment, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.segment = segment
        self.tick = 0
        self.add_class(segment.kind)

    def set_segment(self, segment: Segment) -> None:
        if segment.kind != self.segment.kind:
            self.remove_class(self.segment.kind)
            self.add_class(segment.kind)
        self.segment = segment
        self.refresh(layout=True)

    def render(self) -> Text:
        width = max(1, self.content_size.width)
        return render_segment(self.segment, width, self.tick)


class SegmentView(VerticalScroll):
    """Scrollable list of segment blocks, reused across re-parses."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._blocks: list[SegmentBlock] = []
        self._tick = 0

    @property
    def segments(self) -> list[Segment]:
        return [block.segment for block in self._blocks]

    def show_segments(self, segments: Sequence[Segment]) -> None:
        """Update blocks in place; only changed or new segments re-render."""
        for index, segment in enumerate(segments):
            if index < len(self._blocks):
                block = self._blocks[index]
                if block.segment != segment:
                    block.set_segment(segment)
                continue
            block = SegmentBlock(segment)
            block.tick = self._tick
            self._blocks.append(block)
            self.mount(block)
        stale = self._blocks[len(segments) :]
        del self._blocks[len(segments) :]
        for block in stale:
            block.remove()
        self.scroll_end(animate=False)

    def advance_tick(self) -> None:
        """Animate pending placeholders."""
        self._tick += 1
        for block in self._blocks:
            if isinstance(block.segment, ChartPendingSegment):
                block.tick = self._tick
                block.refresh()
