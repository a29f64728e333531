from __future__ import annotations

from rich.text import Text

IDLE = "idle"

_STATUS_STYLES: dict[str, tuple[str, str]] = {
    "streaming": ("⏳", "#3b82f6"),
    "done": ("✓", "#10b981"),
    "error": ("✗", "#ef4444"),
}
_IDLE_STYLE = ("○", "#6b7280")
_MESSAGE_STYLES = {"warn": "#ffcc66", "error": "#ff5f52"}


def ellipsize(text: str, max_len: int) -> str:
    if max_len <= 0:
        return ""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return "." * max_len
    return text[: max_len - 3] + "..."


def status_label(status: str) -> Text:
    icon, style = _STATUS_STYLES.get(status, _IDLE_STYLE)
    return Text(f"{icon} {status.upper()}", style=style)


def render_status_line(
    status: str,
    *,
    event_count: int,
    width: int,
    message: str = "",
    level: str = "info",
) -> Text:
    """Render the single-line status bar."""
    line = status_label(status)
    line.append(f"  events: {event_count}")
    if message:
        room = max(0, width - len(line.plain) - 2)
        line.append("  ")
        line.append(ellipsize(message, room), style=_MESSAGE_STYLES.get(level))
    line.truncate(max(1, width))
    return line
