"""Build report generation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from buildplanner.data.models import SLOTS, Item
from buildplanner.data.targets import format_value

from ..aggregate.aggregator import aggregate, totals_of
from ..aggregate.comparator import compare
from ..score.scorer import BuildScore, score_build
from ..search.beam import OptimizationResult

NO_ITEM = "none"


@dataclass(frozen=True)
class BuildReport:
    """Combined JSON and Markdown build report."""

    json_report: dict[str, Any]
    markdown_report: str


def build_report(
    items: Sequence[Item],
    targets: Mapping[str, Any],
    *,
    missing_slots: Sequence[str] = (),
    searched: Mapping[str, Any] | None = None,
    score: BuildScore | None = None,
) -> BuildReport:
    """Render a build for programmatic and human consumption."""
    chosen: dict[str, Item | None] = {slot: None for slot in SLOTS}
    for item in items:
        chosen[item.slot] = item

    summary = aggregate(items)
    comparison = compare(totals_of(summary), targets)
    breakdown = score or score_build(items, targets)

    report_json: dict[str, Any] = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "slots": {slot: (item.name if item else NO_ITEM) for slot, item in chosen.items()},
        "item_ids": {slot: (item.id if item else None) for slot, item in chosen.items()},
        "missing_slots": list(missing_slots),
        "score": {
            "score": breakdown.score,
            "deficit_penalty": breakdown.deficit_penalty,
            "total_missing": breakdown.total_missing,
            "recommended_lines": breakdown.recommended_lines,
            "targeted_contribution": breakdown.targeted_contribution,
            "total_lines": breakdown.total_lines,
        },
        "aggregate": {
            name: {
                "total": entry.total,
                "lines": entry.lines,
                "recommended_lines": entry.recommended_lines,
            }
            for name, entry in sorted(summary.items())
        },
        "requirements": [
            {
                "name": row.name,
                "current": row.current,
                "required": row.required,
                "delta": row.delta,
                "missing": row.missing,
            }
            for row in comparison.rows
        ],
        "total_missing": comparison.total_missing,
        "searched": dict(searched or {}),
    }
    return BuildReport(json_report=report_json, markdown_report=_to_markdown(report_json))


def optimization_report(result: OptimizationResult, targets: Mapping[str, Any]) -> BuildReport:
    """Report on the best build an optimizer run found."""
    return build_report(
        result.best,
        targets,
        missing_slots=result.missing_slots,
        searched={
            "top_k_per_slot": result.searched.top_k_per_slot,
            "beam_width": result.searched.beam_width,
            "final_beam_size": result.searched.final_beam_size,
            "evaluated": result.searched.evaluated,
        },
        score=result.best_score,
    )


def _to_markdown(report_json: dict[str, Any]) -> str:
    score = report_json["score"]
    lines = ["## Build", ""]
    lines.extend(f"- {slot}: {name}" for slot, name in report_json["slots"].items())

    if report_json["missing_slots"]:
        lines.extend(["", f"Slots without candidates: {', '.join(report_json['missing_slots'])}"])

    lines.extend(
        [
            "",
            "## Score",
            f"- Score: {score['score']:.1f}",
            f"- Deficit Penalty: {score['deficit_penalty']:g}",
            f"- Total Missing: {score['total_missing']:g}",
            f"- Recommended Lines: {score['recommended_lines']}",
            f"- Total Lines: {score['total_lines']}",
        ]
    )

    if report_json["requirements"]:
        lines.extend(
            [
                "",
                "## Requirements",
                "",
                "| Buff | Current | Required | Delta |",
                "| --- | ---: | ---: | ---: |",
            ]
        )
        for row in report_json["requirements"]:
            lines.append(
                f"| {row['name']} | {format_value(row['current'])} | "
                f"{format_value(row['required'])} | {row['delta']:+g} |"
            )
    else:
        lines.extend(["", "No necessary buffs set."])

    if report_json["aggregate"]:
        lines.extend(["", "## Totals", ""])
        for name, entry in report_json["aggregate"].items():
            lines.append(
                f"- {name}: {format_value(entry['total'])} "
                f"({entry['lines']} lines, {entry['recommended_lines']} recommended)"
            )

    searched = report_json["searched"]
    if searched:
        lines.extend(
            [
                "",
                f"Searched: top {searched['top_k_per_slot']} per slot, beam {searched['beam_width']}, "
                f"final beam {searched['final_beam_size']}",
            ]
        )
    return "\n".join(lines)
