"""Simulated stream playback for recorded event logs."""

from __future__ import annotations

from dataclasses import dataclass
import random
from typing import Iterable, Iterator, Optional

from chart_stream.events import DONE, ERROR, TOKEN, StreamEvent

STREAMING = "streaming"
MIN_DELAY_MS = 50
MAX_DELAY_MS = 150


@dataclass(frozen=True)
class StreamStep:
    """Accumulated text after one event, shown for `hold_ms`."""

    text: str
    status: str = STREAMING
    hold_ms: int = MIN_DELAY_MS
    message: str = ""


def _delay_bounds(min_delay_ms: int, max_delay_ms: int) -> tuple[int, int]:
    low = max(0, int(min_delay_ms))
    high = max(low, int(max_delay_ms))
    return low, high


def generate_steps(
    events: Iterable[StreamEvent],
    *,
    min_delay_ms: int = MIN_DELAY_MS,
    max_delay_ms: int = MAX_DELAY_MS,
    rng: Optional[random.Random] = None,
) -> Iterator[StreamStep]:
    """Yield one step per event until the stream finishes."""
    low, high = _delay_bounds(min_delay_ms, max_delay_ms)
    rng = rng or random.Random()
    text = ""
    for event in events:
        hold_ms = rng.randint(low, high)
        if event.event == TOKEN:
            text += event.delta
            yield StreamStep(text=text, hold_ms=hold_ms)
        elif event.event == DONE:
            yield StreamStep(text=text, status=DONE, hold_ms=hold_ms)
            return
        elif event.event == ERROR:
            yield StreamStep(
                text=text,
                status=ERROR,
                hold_ms=hold_ms,
                message=event.message or "stream error",
            )
            return
