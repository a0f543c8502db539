"""Attribute aggregation across a set of items."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from buildplanner.data.models import Item, coerce_value, normalize_name


@dataclass
class AttributeTotal:
    """Summed value and line counts for one attribute name."""

    total: float = 0.0
    lines: int = 0
    recommended_lines: int = 0


def aggregate(items: Iterable[Item]) -> dict[str, AttributeTotal]:
    """Sum same-named attribute lines over ``items``.

    Lines whose trimmed name is empty are skipped and non-finite values count
    as zero. Duplicate items are counted once per occurrence.
    """
    summary: dict[str, AttributeTotal] = {}
    for item in items:
        for line in item.lines:
            key = normalize_name(line.name)
            if not key:
                continue
            entry = summary.get(key)
            if entry is None:
                entry = summary[key] = AttributeTotal()
            entry.total += coerce_value(line.value)
            entry.lines += 1
            if line.recommended:
                entry.recommended_lines += 1
    return summary


def totals_of(summary: Mapping[str, AttributeTotal]) -> dict[str, float]:
    """Flatten an aggregate to ``name -> total``."""
    return {name: entry.total for name, entry in summary.items()}
