"""Timer-driven stream playback for the TUI."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterator, Optional, TYPE_CHECKING

from textual.timer import Timer

from chart_stream.playback import STREAMING, StreamStep

if TYPE_CHECKING:
    from chart_stream.tui import ChartStreamApp

logger = logging.getLogger(__name__)


class StreamPlayer:
    """Non-blocking player that feeds stream steps to the app."""

    def __init__(self, app: "ChartStreamApp") -> None:
        self._app = app
        self._steps: Optional[Iterator[StreamStep]] = None
        self._timer: Optional[Timer] = None

    def start(self, steps: Iterator[StreamStep]) -> None:
        self.stop()
        self._steps = steps
        self._advance()

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        self._steps = None

    @property
    def is_running(self) -> bool:
        return self._steps is not None

    def _advance(self) -> None:
        if self._steps is None:
            return
        try:
            step = next(self._steps)
        except StopIteration:
            self.stop()
            self._app._on_stream_end()
            return
        except Exception as exc:
            logger.exception("Stream playback error")
            self._app._set_message(f"Playback error: {exc}", level="error")
            self.stop()
            return
        self._app._show_step(step)
        if step.status != STREAMING:
            self.stop()
            return
        self._schedule_next(step.hold_ms)

    def _schedule_next(self, hold_ms: int) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.stop()
            return
        delay = max(0.01, hold_ms / 1000.0)
        self._timer = self._app.set_timer(delay, self._advance)
