"""Cheap single-item ranking used to prune candidates per slot."""

from __future__ import annotations

from collections.abc import Collection

from buildplanner.data.models import Item, coerce_value, normalize_name

RECOMMENDED_LINE_BONUS = 10.0


def item_heuristic(item: Item, active_target_names: Collection[str]) -> float:
    """Return ``10 * recommended lines + value on lines matching an active target``."""
    targeted = 0.0
    recommended = 0
    for line in item.lines:
        key = normalize_name(line.name)
        if not key:
            continue
        if key in active_target_names:
            targeted += coerce_value(line.value)
        if line.recommended:
            recommended += 1
    return RECOMMENDED_LINE_BONUS * recommended + targeted
