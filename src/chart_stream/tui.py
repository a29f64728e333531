"""Textual-based TUI for Chart Stream."""

from __future__ import annotations

from dataclasses import replace
import json
import logging
from pathlib import Path
import random
from typing import Optional

try:
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.widgets import Header, Static
    from rich.text import Text
except Exception as exc:  # pragma: no cover - depends on environment
    raise RuntimeError(
        "Textual is required for the TUI. Install the 'textual' dependency."
    ) from exc

from chart_stream.config import AppConfig, load_config, save_config
from chart_stream.events import DONE, ERROR, EventLogError, StreamEvent, load_event_log
from chart_stream.logging_setup import set_console_level
from chart_stream.playback import STREAMING, StreamStep, generate_steps
from chart_stream.segments import StreamSegmenter
from chart_stream.ui.segment_view import SegmentView
from chart_stream.ui.stream_player import StreamPlayer
from chart_stream.ui.tui_formatters import IDLE, render_status_line

logger = logging.getLogger(__name__)


class StatusLine(Static):
    """Status line widget."""

    def render(self) -> Text:
        app = self.app
        if not isinstance(app, ChartStreamApp):
            return Text("")
        return app._render_status_line(max(1, self.size.width))


class ChartStreamApp(App):
    """Replays a recorded model stream and renders prose and charts."""

    TITLE = "Chart Stream"
    SUB_TITLE = "LLM streaming responses with embedded Vega-Lite charts"
    PENDING_TICK_SECONDS = 0.35
    CSS = """
    #segments {
        border: round $primary;
        padding: 0 1;
        height: 1fr;
    }
    #status_line {
        height: 1;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("space", "toggle_playback", "Play/Stop"),
        Binding("r", "restart", "Restart"),
        Binding("c", "clear", "Clear"),
        Binding("d", "dump_segments", "Dump Segments"),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(
        self,
        *,
        path: str = "",
        config: Optional[AppConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__()
        self.path = path
        self._config = config or load_config()
        self._rng = rng or random.Random()
        self._stream_events: list[StreamEvent] = []
        self._stream_status = IDLE
        self._status_message = ""
        self._status_level = "info"
        self._segmenter = StreamSegmenter(keep_invalid=self._config.show_invalid)
        self._player = StreamPlayer(self)
        self._view: Optional[SegmentView] = None
        self._status_line: Optional[StatusLine] = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        yield SegmentView(id="segments")
        yield StatusLine(id="status_line")

    async def on_mount(self) -> None:
        self._view = self.query_one("#segments", SegmentView)
        self._view.border_title = "Output"
        self._status_line = self.query_one("#status_line", StatusLine)
        self.set_interval(self.PENDING_TICK_SECONDS, self._on_tick)
        if self.path and self.load_events(Path(self.path)) and self._config.autoplay:
            self.action_toggle_playback()
        self._refresh_status_line()

    # --- Internal helpers ---
    def _render_status_line(self, width: int) -> Text:
        return render_status_line(
            self._stream_status,
            event_count=len(self._stream_events),
            width=width,
            message=self._status_message,
            level=self._status_level,
        )

    def _refresh_status_line(self) -> None:
        if self._status_line is not None:
            self._status_line.refresh()

    def _set_message(self, message: str, level: str = "info") -> None:
        self._status_message = message
        self._status_level = level
        self._refresh_status_line()

    def _set_stream_status(self, status: str) -> None:
        if status != self._stream_status:
            logger.info("Stream status %s -> %s", self._stream_status, status)
        self._stream_status = status
        self._refresh_status_line()

    def _show_segments(self) -> None:
        if self._view is not None:
            self._view.show_segments(self._segmenter.segments)

    def _on_tick(self) -> None:
        if self._view is not None:
            self._view.advance_tick()

    def _show_step(self, step: StreamStep) -> None:
        self._segmenter.update(step.text)
        self._show_segments()
        if step.status == ERROR:
            self._set_message(step.message, level="error")
        elif step.status == DONE:
            self._set_message("Stream complete")
        self._set_stream_status(step.status)

    def _on_stream_end(self) -> None:
        if self._stream_status == STREAMING:
            self._set_stream_status(DONE)

    def _save_last_path(self, path: Path) -> None:
        self._config = replace(self._config, last_open_path=str(path))
        try:
            save_config(self._config)
        except OSError:
            logger.exception("Failed to save config")

    def _reset_output(self) -> None:
        self._segmenter.reset()
        self._show_segments()

    # --- Public API ---
    def load_events(self, path: Path) -> bool:
        """Load an event log; report failures on the status line."""
        try:
            events = load_event_log(path)
        except EventLogError as exc:
            logger.warning("Event log rejected: %s", exc)
            self._set_message(str(exc), level="error")
            return False
        self._player.stop()
        self._stream_events = events
        self._reset_output()
        self._set_stream_status(IDLE)
        self._set_message(f"Loaded {len(events)} events from {path.name}")
        self._save_last_path(path)
        return True

    # --- Actions ---
    def action_toggle_playback(self) -> None:
        if self._player.is_running:
            self._player.stop()
            self._set_stream_status(IDLE)
            self._set_message("Stopped")
            return
        if not self._stream_events:
            self._set_message("No events loaded", level="warn")
            return
        self._reset_output()
        self._set_message("")
        self._set_stream_status(STREAMING)
        self._player.start(
            generate_steps(
                self._stream_events,
                min_delay_ms=self._config.min_delay_ms,
                max_delay_ms=self._config.max_delay_ms,
                rng=self._rng,
            )
        )

    def action_restart(self) -> None:
        self._player.stop()
        self.action_toggle_playback()

    def action_clear(self) -> None:
        self._player.stop()
        self._stream_events = []
        self._reset_output()
        self._set_stream_status(IDLE)
        self._set_message("Cleared")

    def action_dump_segments(self) -> None:
        payload = [segment.to_dict() for segment in self._segmenter.segments]
        logger.info("Segments: %s", json.dumps(payload, ensure_ascii=False))
        self._set_message(f"Logged {len(payload)} segments")

    def action_quit_app(self) -> None:
        self._player.stop()
        self.exit()


def run_tui(path: str, *, config: Optional[AppConfig] = None) -> int:
    """Run the TUI and return an exit code."""
    logger.info("TUI start path=%s", path)
    try:
        set_console_level(logging.WARNING)
    except Exception:
        logger.exception("Failed to set console log level for TUI")
    app = ChartStreamApp(path=path, config=config)
    app.run()
    logger.info("TUI exit")
    return 0
