"""Target requirement parsing and formatting."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from .models import coerce_value, normalize_name

# "Momentum: 100", "Crit Rate = 25", "Momentum 100"
_TARGET_LINE = re.compile(r"^(.+?)(?:\s*[:=]\s*|\s+)(-?\d+(?:\.\d+)?)\s*$")


def normalize_targets(targets: Mapping[str, Any] | None) -> dict[str, float]:
    """Trim keys, drop blank ones, and coerce values to finite floats."""
    normalized: dict[str, float] = {}
    for name, required in (targets or {}).items():
        key = normalize_name(name)
        if not key:
            continue
        normalized[key] = coerce_value(required)
    return normalized


def parse_targets(text: str) -> dict[str, float]:
    """Parse one ``name: value`` target per line; unparseable lines are skipped."""
    targets: dict[str, float] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        match = _TARGET_LINE.match(line)
        if match is None:
            continue
        name = normalize_name(match.group(1))
        if not name:
            continue
        targets[name] = coerce_value(match.group(2))
    return targets


def format_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def targets_to_text(targets: Mapping[str, Any]) -> str:
    """Render targets back to text, one per line, sorted by name."""
    return "\n".join(
        f"{name}: {format_value(coerce_value(value))}"
        for name, value in sorted(targets.items(), key=lambda entry: entry[0])
    )
