"""Compare aggregate totals against target requirements."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from buildplanner.data.models import coerce_value
from buildplanner.data.targets import normalize_targets


@dataclass(frozen=True)
class RequirementRow:
    """Current vs required value for one targeted attribute."""

    name: str
    current: float
    required: float
    delta: float
    missing: float


@dataclass(frozen=True)
class Comparison:
    rows: tuple[RequirementRow, ...]
    total_missing: float

    @property
    def satisfied(self) -> bool:
        return self.total_missing <= 0


def compare(totals: Mapping[str, float], targets: Mapping[str, Any]) -> Comparison:
    """Build one row per target, worst shortfall first, then by name."""
    rows: list[RequirementRow] = []
    for name, required in normalize_targets(targets).items():
        current = coerce_value(totals.get(name, 0.0))
        delta = current - required
        rows.append(
            RequirementRow(
                name=name,
                current=current,
                required=required,
                delta=delta,
                missing=max(0.0, -delta),
            )
        )

    rows.sort(key=lambda row: (-row.missing, row.name))
    return Comparison(rows=tuple(rows), total_missing=sum(row.missing for row in rows))
