"""Single-number quality score for a candidate build."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from buildplanner.data.models import Item
from buildplanner.data.targets import normalize_targets

from ..aggregate.aggregator import aggregate

DEFICIT_WEIGHT = 1000.0
RECOMMENDED_WEIGHT = 50.0
CONTRIBUTION_WEIGHT = 2.0
LINE_WEIGHT = 0.1


@dataclass(frozen=True)
class BuildScore:
    """Score breakdown for one build; higher ``score`` is better."""

    score: float
    deficit_penalty: float
    total_missing: float
    recommended_lines: int
    targeted_contribution: float
    total_lines: int
    totals: dict[str, float]


class BuildScorer:
    """Collapse target coverage, recommended lines and raw value into one number.

    ``score = -1000 * sum(missing^2) + 50 * recommended + 2 * targeted + 0.1 * lines``

    The squared deficit term dominates for realistic attribute magnitudes, so
    a build that meets every active target (``required > 0``) outranks any
    build that does not. Targeted contribution counts every target key,
    active or not.
    """

    def __init__(self, targets: Mapping[str, Any] | None = None) -> None:
        self.targets = normalize_targets(targets)
        self.active_targets = {name: value for name, value in self.targets.items() if value > 0}

    def score(self, items: Sequence[Item]) -> BuildScore:
        summary = aggregate(items)
        totals = {name: entry.total for name, entry in summary.items()}
        recommended_lines = sum(entry.recommended_lines for entry in summary.values())
        total_lines = sum(entry.lines for entry in summary.values())

        deficit_penalty = 0.0
        total_missing = 0.0
        for name, required in self.active_targets.items():
            missing = max(0.0, required - totals.get(name, 0.0))
            total_missing += missing
            deficit_penalty += missing * missing

        targeted_contribution = sum(value for name, value in totals.items() if name in self.targets)

        score = (
            -DEFICIT_WEIGHT * deficit_penalty
            + RECOMMENDED_WEIGHT * recommended_lines
            + CONTRIBUTION_WEIGHT * targeted_contribution
            + LINE_WEIGHT * total_lines
        )
        return BuildScore(
            score=score,
            deficit_penalty=deficit_penalty,
            total_missing=total_missing,
            recommended_lines=recommended_lines,
            targeted_contribution=targeted_contribution,
            total_lines=total_lines,
            totals=totals,
        )


def score_build(items: Sequence[Item], targets: Mapping[str, Any] | None) -> BuildScore:
    """Score ``items`` against ``targets``; see :class:`BuildScorer`."""
    return BuildScorer(targets).score(items)
