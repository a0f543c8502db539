from __future__ import annotations

from buildplanner.data.models import SLOTS, Item
from buildplanner.engine.report import NO_ITEM, build_report, optimization_report
from buildplanner.engine.search import optimize


def _catalog_without_legs() -> list[Item]:
    return [
        Item.create(f"{slot} piece", slot, [("Momentum", 10, slot == "Helmet")])
        for slot in SLOTS
        if slot != "Legs"
    ]


def test_optimization_report_lists_every_slot_and_missing_slots():
    targets = {"Momentum": 100, "Crit Rate": 5}
    result = optimize(_catalog_without_legs(), targets)

    report = optimization_report(result, targets)
    payload = report.json_report

    assert list(payload["slots"]) == list(SLOTS)
    assert payload["slots"]["Legs"] == NO_ITEM
    assert payload["slots"]["Helmet"] == "Helmet piece"
    assert payload["missing_slots"] == ["Legs"]
    assert payload["score"]["total_missing"] == 35.0
    assert [row["name"] for row in payload["requirements"]] == ["Momentum", "Crit Rate"]
    assert payload["searched"]["beam_width"] == 2500
    assert "- Legs: none" in report.markdown_report
    assert "Slots without candidates: Legs" in report.markdown_report
    assert "| Momentum | 70 | 100 | -30 |" in report.markdown_report


def test_report_without_targets_says_so():
    report = build_report([], {})

    assert report.json_report["requirements"] == []
    assert "No necessary buffs set." in report.markdown_report
    assert all(name == NO_ITEM for name in report.json_report["slots"].values())
