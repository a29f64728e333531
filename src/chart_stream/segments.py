"""Split streamed model output into prose and chart segments.

The parser is a pure function of the accumulated text: it is re-run on every
growth of the buffer and keeps no state between calls. `StreamSegmenter`
caches everything up to the last closed block so long streams only rescan
their tail; its output always equals `parse_stream_content`.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import Any, ClassVar, Optional, Union

from chart_stream.chart_spec import ChartSpec, ChartSpecError, load_chart_spec

logger = logging.getLogger(__name__)

FENCE = "```"
OPENER = FENCE + "json"
_BLOCK_RE = re.compile(r"```json\s*(.*?)```", re.DOTALL)


@dataclass(frozen=True)
class TextSegment:
    """Prose shown verbatim."""

    content: str
    kind: ClassVar[str] = "text"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "content": self.content}


@dataclass(frozen=True)
class ChartSegment:
    """A closed block holding a validated chart spec."""

    content: ChartSpec
    kind: ClassVar[str] = "chart"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "content": self.content}


@dataclass(frozen=True)
class ChartPendingSegment:
    """A chart block whose closing fence has not arrived yet."""

    kind: ClassVar[str] = "chart-loading"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "content": ""}


@dataclass(frozen=True)
class InvalidChartSegment:
    """A closed block that failed validation (only with keep_invalid)."""

    reason: str
    kind: ClassVar[str] = "chart-invalid"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "content": self.reason}


Segment = Union[TextSegment, ChartSegment, ChartPendingSegment, InvalidChartSegment]


def _chart_segment(inner: str, keep_invalid: bool) -> Optional[Segment]:
    try:
        return ChartSegment(load_chart_spec(inner))
    except ChartSpecError as exc:
        logger.warning("Dropping chart block: %s", exc)
        if keep_invalid:
            return InvalidChartSegment(str(exc))
        return None


def _append_text(segments: list[Segment], text: str) -> None:
    if text.strip():
        segments.append(TextSegment(text))


def _segment_from(
    buffer: str, pos: int, keep_invalid: bool
) -> tuple[list[Segment], list[Segment], int]:
    """Segment `buffer[pos:]`.

    Returns the segments up to and including the last closed block, the
    segments after it, and the offset where the closed part ends.
    """
    closed: list[Segment] = []
    cursor = pos
    for match in _BLOCK_RE.finditer(buffer, pos):
        _append_text(closed, buffer[cursor : match.start()])
        segment = _chart_segment(match.group(1), keep_invalid)
        if segment is not None:
            closed.append(segment)
        cursor = match.end()

    tail: list[Segment] = []
    open_start = buffer.rfind(OPENER, cursor)
    if open_start >= 0:
        _append_text(tail, buffer[cursor:open_start])
        tail.append(ChartPendingSegment())
    else:
        _append_text(tail, buffer[cursor:])
    return closed, tail, cursor


def parse_stream_content(buffer: str, *, keep_invalid: bool = False) -> list[Segment]:
    """Return the ordered segments for the text accumulated so far.

    Closed ```json blocks become chart segments (or vanish when invalid), an
    unclosed trailing block becomes a single pending placeholder, and
    whitespace-only prose between them is skipped.
    """
    closed, tail, _ = _segment_from(buffer, 0, keep_invalid)
    return closed + tail


class StreamSegmenter:
    """Caching segmenter for an append-only stream buffer."""

    def __init__(self, *, keep_invalid: bool = False) -> None:
        self._keep_invalid = keep_invalid
        self.reset()

    def reset(self) -> None:
        self._buffer = ""
        self._closed: list[Segment] = []
        self._closed_end = 0
        self._segments: list[Segment] = []

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def segments(self) -> list[Segment]:
        return list(self._segments)

    def update(self, buffer: str) -> list[Segment]:
        """Re-segment after the buffer grew to `buffer`."""
        if not buffer.startswith(self._buffer):
            logger.debug("Buffer no longer extends the previous one; rescanning")
            self.reset()
        closed, tail, end = _segment_from(buffer, self._closed_end, self._keep_invalid)
        self._buffer = buffer
        self._closed.extend(closed)
        self._closed_end = end
        self._segments = self._closed + tail
        return self.segments

    def feed(self, delta: str) -> list[Segment]:
        return self.update(self._buffer + delta)
