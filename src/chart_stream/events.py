"""Recorded stream event logs (newline-delimited JSON)."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

logger = logging.getLogger(__name__)

TOKEN = "token"
DONE = "done"
ERROR = "error"


class EventLogError(ValueError):
    """Raised when an event log cannot be read or decoded."""


@dataclass(frozen=True)
class StreamEvent:
    """One recorded event from a model response stream."""

    event: str
    delta: str = ""
    message: str = ""
    data: Any = None

    @property
    def is_terminal(self) -> bool:
        return self.event in (DONE, ERROR)


def _event_from_mapping(raw: dict[str, Any]) -> StreamEvent:
    name = raw.get("event")
    event = name if isinstance(name, str) else ""
    data = raw.get("data")
    delta = ""
    message = ""
    if isinstance(data, dict):
        value = data.get("delta")
        if isinstance(value, str):
            delta = value
        value = data.get("message")
        if isinstance(value, str):
            message = value
    return StreamEvent(event=event, delta=delta, message=message, data=data)


def parse_event_line(line: str, *, line_no: int = 0) -> Optional[StreamEvent]:
    """Decode one log line; blank lines return None."""
    if not line.strip():
        return None
    try:
        raw = json.loads(line)
    except json.JSONDecodeError as exc:
        raise EventLogError(f"line {line_no}: invalid JSON ({exc.msg})") from exc
    if not isinstance(raw, dict):
        raise EventLogError(f"line {line_no}: expected a JSON object")
    return _event_from_mapping(raw)


def parse_event_lines(lines: Iterable[str]) -> list[StreamEvent]:
    events: list[StreamEvent] = []
    for line_no, line in enumerate(lines, start=1):
        event = parse_event_line(line, line_no=line_no)
        if event is not None:
            events.append(event)
    return events


def load_event_log(path: Path) -> list[StreamEvent]:
    """Load every event from an NDJSON log file."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise EventLogError(f"cannot read {path}: {exc}") from exc
    try:
        events = parse_event_lines(text.splitlines())
    except EventLogError as exc:
        raise EventLogError(f"{path}: {exc}") from exc
    logger.info("Loaded %d events from %s", len(events), path)
    return events


def accumulate_text(events: Iterable[StreamEvent]) -> str:
    """Return the full text a stream produced before it finished."""
    parts: list[str] = []
    for event in events:
        if event.event == TOKEN:
            parts.append(event.delta)
        elif event.is_terminal:
            break
    return "".join(parts)
