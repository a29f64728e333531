"""Text rendering of chart specs and placeholders for the terminal."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from rich.text import Text

from chart_stream.chart_spec import ChartSpec

BAR_CHAR = "█"
BAR_STYLE = "#3b82f6"
PENDING_FRAMES = ("●∙∙", "∙●∙", "∙∙●", "∙●∙")
_CHANNELS = ("x", "y", "theta", "color", "size")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def mark_name(spec: Mapping[str, Any]) -> str:
    mark = spec.get("mark")
    if isinstance(mark, dict):
        mark = mark.get("type")
    return mark if isinstance(mark, str) and mark else "chart"


def chart_fields(spec: Mapping[str, Any]) -> tuple[Optional[str], Optional[str]]:
    """Return the (category, value) fields named by the encoding."""
    encoding = spec.get("encoding")
    if not isinstance(encoding, dict):
        return None, None
    category: Optional[str] = None
    value: Optional[str] = None
    for channel in _CHANNELS:
        channel_def = encoding.get(channel)
        if not isinstance(channel_def, dict):
            continue
        field = channel_def.get("field")
        if not isinstance(field, str) or not field:
            continue
        quantitative = (
            channel_def.get("type") == "quantitative" or "aggregate" in channel_def
        )
        if quantitative and value is None:
            value = field
        elif not quantitative and category is None:
            category = field
    return category, value


def _inline_values(spec: Mapping[str, Any]) -> Optional[list[dict[str, Any]]]:
    data = spec.get("data")
    if not isinstance(data, dict):
        return None
    values = data.get("values")
    if not isinstance(values, list):
        return None
    return [row for row in values if isinstance(row, dict)]


def _guess_field(
    rows: list[dict[str, Any]], *, numeric: bool, skip: Optional[str]
) -> Optional[str]:
    for row in rows:
        for key, item in row.items():
            if key != skip and _is_number(item) == numeric:
                return key
    return None


def chart_rows(spec: Mapping[str, Any]) -> list[tuple[str, float]]:
    """Return (label, value) pairs from the inline dataset."""
    rows = _inline_values(spec)
    if not rows:
        return []
    category, value = chart_fields(spec)
    if value is None:
        value = _guess_field(rows, numeric=True, skip=category)
    if category is None:
        category = _guess_field(rows, numeric=False, skip=value)
    if value is None:
        return []
    pairs: list[tuple[str, float]] = []
    for index, row in enumerate(rows):
        amount = row.get(value)
        if not _is_number(amount):
            continue
        label = row.get(category) if category else None
        name = str(label) if label is not None else str(index + 1)
        pairs.append((name, float(amount)))
    return pairs


def _title(spec: ChartSpec) -> str:
    title = spec.get("title")
    if isinstance(title, dict):
        title = title.get("text")
    parts = [f"[{mark_name(spec)}]"]
    if isinstance(title, str) and title:
        parts.append(title)
    category, value = chart_fields(spec)
    if category and value:
        parts.append(f"({value} by {category})")
    return " ".join(parts)


def render_chart(spec: ChartSpec, width: int) -> Text:
    """Render a chart spec as a horizontal bar listing."""
    width = max(10, width)
    text = Text(_title(spec), style="bold")
    rows = chart_rows(spec)
    if not rows:
        text.append("\n(no inline data)", style="dim")
        return text
    labels = [label for label, _ in rows]
    amounts = [f"{amount:g}" for _, amount in rows]
    label_w = min(max(len(label) for label in labels), width // 3)
    amount_w = max(len(amount) for amount in amounts)
    bar_w = max(1, width - label_w - amount_w - 2)
    peak = max((amount for _, amount in rows), default=0.0)
    for (label, amount), shown in zip(rows, amounts):
        length = int(round(amount / peak * bar_w)) if peak > 0 and amount > 0 else 0
        text.append("\n")
        text.append(label[:label_w].ljust(label_w))
        text.append(" ")
        text.append(BAR_CHAR * length, style=BAR_STYLE)
        text.append(" " + shown.rjust(amount_w))
    return text


def render_pending(tick: int) -> Text:
    dots = PENDING_FRAMES[tick % len(PENDING_FRAMES)]
    return Text(f"{dots} chart loading", style=BAR_STYLE)


def render_invalid(reason: str) -> Text:
    return Text(f"⚠ chart not rendered: {reason}", style="#dc2626")
