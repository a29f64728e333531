"""Vega-Lite chart spec validation and defaults.

Design notes:
- Defaults are additive only; a key the producer set is never overwritten.
- The fallback dataset is a placeholder until producers always send `data`.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any, Mapping, Optional

from typing_extensions import TypeAlias

logger = logging.getLogger(__name__)

ChartSpec: TypeAlias = dict[str, Any]

DEFAULT_SCHEMA_URL = "https://vega.github.io/schema/vega-lite/v5.json"
DEFAULT_WIDTH = 500
DEFAULT_HEIGHT = 350
FALLBACK_VALUES: tuple[tuple[str, int], ...] = (
    ("Almaty", 120),
    ("Astana", 90),
    ("Shymkent", 70),
)


class ChartSpecError(ValueError):
    """Raised when a fenced block does not hold a usable chart spec."""


def fallback_data() -> dict[str, Any]:
    """Return a fresh copy of the built-in example dataset."""
    return {
        "values": [
            {"region": region, "revenue": revenue}
            for region, revenue in FALLBACK_VALUES
        ]
    }


def _is_missing(spec: Mapping[str, Any], key: str) -> bool:
    return spec.get(key) is None


def apply_chart_defaults(spec: Mapping[str, Any]) -> ChartSpec:
    """Return a copy of `spec` with schema, data and size filled in.

    A key counts as set unless it is absent or null, so `"width": null` gets
    the default while `"width": 0` is kept.
    """
    result: ChartSpec = copy.deepcopy(dict(spec))
    if _is_missing(result, "$schema"):
        result["$schema"] = DEFAULT_SCHEMA_URL
    if _is_missing(result, "data"):
        result["data"] = fallback_data()
    if _is_missing(result, "width"):
        result["width"] = DEFAULT_WIDTH
    if _is_missing(result, "height"):
        result["height"] = DEFAULT_HEIGHT
    return result


def _is_blank(value: object) -> bool:
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (dict, list)):
        return False
    return not value


def _validate(raw: object) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ChartSpecError("chart spec must be a JSON object")
    for key in ("mark", "encoding"):
        if _is_blank(raw.get(key)):
            raise ChartSpecError(f"chart spec is missing '{key}'")
    return raw


def _reject_constant(name: str) -> Any:
    raise ChartSpecError(f"invalid JSON: {name} is not allowed")


def load_chart_spec(raw_inner: str) -> ChartSpec:
    """Parse, validate and default the body of a ```json block."""
    try:
        raw = json.loads(raw_inner, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise ChartSpecError(f"invalid JSON: {exc.msg} (line {exc.lineno})") from exc
    except RecursionError as exc:
        raise ChartSpecError("invalid JSON: nesting too deep") from exc
    try:
        return apply_chart_defaults(_validate(raw))
    except RecursionError as exc:
        raise ChartSpecError("chart spec is nested too deeply") from exc


def normalize_chart_spec(raw_inner: str) -> Optional[ChartSpec]:
    """Return a renderable chart spec, or None when the block is unusable."""
    try:
        return load_chart_spec(raw_inner)
    except ChartSpecError as exc:
        logger.warning("Dropping chart block: %s", exc)
        return None
