from __future__ import annotations

import itertools
import threading

import pytest

from buildplanner.data.models import SLOTS, Item
from buildplanner.engine.score import score_build
from buildplanner.engine.search import BeamSearchOptimizer, SearchCancelled, optimize


def _item(name: str, slot: str, *lines: tuple) -> Item:
    return Item.create(name, slot, lines, item_id=f"it_{name}")


def _full_catalog() -> list[Item]:
    catalog: list[Item] = []
    for index, slot in enumerate(SLOTS):
        catalog.append(_item(f"{slot}-momentum", slot, ("Momentum", 15), ("Crit Rate", 1)))
        catalog.append(_item(f"{slot}-crit", slot, ("Crit Rate", 6), ("Momentum", 2)))
        catalog.append(_item(f"{slot}-rec", slot, ("Haste", 3, True), ("Momentum", 4 + index)))
    return catalog


def test_empty_catalog_reports_every_slot_missing():
    result = optimize([], {"Momentum": 100})

    assert result.best == []
    assert result.missing_slots == list(SLOTS)
    assert result.best_score.total_missing == 100.0
    assert result.best_score.score == pytest.approx(-1000 * 100**2)
    assert result.searched.final_beam_size == 1


def test_missing_slot_is_reported_and_left_unfilled():
    catalog = [item for item in _full_catalog() if item.slot != "Legs"]

    result = optimize(catalog, {"Momentum": 60})

    assert result.missing_slots == ["Legs"]
    assert len(result.best) == 7
    assert all(item.slot != "Legs" for item in result.best)
    assert result.assignment()["Legs"] is None


def test_best_holds_one_item_per_slot_in_slot_order():
    result = optimize(_full_catalog(), {"Momentum": 60, "Crit Rate": 12})

    assert [item.slot for item in result.best] == list(SLOTS)
    assert result.best_score == score_build(result.best, {"Momentum": 60, "Crit Rate": 12})


def test_meets_all_targets_when_possible():
    targets = {"Momentum": 60, "Crit Rate": 12}

    result = optimize(_full_catalog(), targets)

    assert result.best_score.total_missing == 0.0


def test_matches_brute_force_on_small_catalog():
    slots = SLOTS[:3]
    catalog = [
        _item("w1-a", slots[0], ("Momentum", 10), ("Crit", 1)),
        _item("w1-b", slots[0], ("Crit", 8, True)),
        _item("w1-c", slots[0], ("Momentum", 4, True), ("Crit", 3)),
        _item("w2-a", slots[1], ("Momentum", 6)),
        _item("w2-b", slots[1], ("Crit", 5), ("Haste", 2, True)),
        _item("s1-a", slots[2], ("Momentum", 9, True)),
        _item("s1-b", slots[2], ("Crit", 9)),
        _item("s1-c", slots[2], ("Haste", 1), ("Momentum", 3), ("Crit", 3)),
    ]
    targets = {"Momentum": 15, "Crit": 10}
    by_slot = [[item for item in catalog if item.slot == slot] for slot in slots]

    brute_best = max(
        (score_build(list(combo), targets).score for combo in itertools.product(*by_slot)),
    )

    result = optimize(catalog, targets, top_k_per_slot=10, beam_width=100)

    assert result.best_score.score == pytest.approx(brute_best)
    assert result.missing_slots == list(SLOTS[3:])


def test_repeated_runs_are_identical():
    catalog = _full_catalog()
    targets = {"Momentum": 40, "Haste": 6}

    first = optimize(catalog, targets, top_k_per_slot=2, beam_width=5)
    second = optimize(catalog, targets, top_k_per_slot=2, beam_width=5)

    assert [item.id for item in first.best] == [item.id for item in second.best]
    assert first.best_score == second.best_score


def test_threaded_scoring_matches_serial():
    catalog = _full_catalog()
    targets = {"Momentum": 50, "Crit Rate": 20}

    serial = optimize(catalog, targets, beam_width=7)
    threaded = optimize(catalog, targets, beam_width=7, jobs=4)

    assert [item.id for item in threaded.best] == [item.id for item in serial.best]
    assert threaded.best_score == serial.best_score
    assert threaded.searched == serial.searched


def test_narrow_beams_never_beat_the_exhaustive_width():
    catalog = _full_catalog()
    targets = {"Momentum": 70, "Crit Rate": 30, "Haste": 9}

    # 3**7 partial builds fit in the widest beam, so that run is exhaustive.
    scores = [
        optimize(catalog, targets, top_k_per_slot=3, beam_width=width).best_score.score
        for width in (1, 9, 81, 3**7)
    ]
    brute_best = max(
        score_build(list(combo), targets).score
        for combo in itertools.product(*[[item for item in catalog if item.slot == slot] for slot in SLOTS])
    )

    assert scores[-1] == pytest.approx(brute_best)
    assert all(score <= scores[-1] for score in scores)


def test_prefilter_keeps_top_k_and_preserves_catalog_order_on_ties():
    optimizer = BeamSearchOptimizer(top_k_per_slot=2)
    items = [
        _item("plain-1", "Helmet", ("Other", 1)),
        _item("rec", "Helmet", ("Other", 1, True)),
        _item("plain-2", "Helmet", ("Other", 1)),
        _item("targeted", "Helmet", ("Momentum", 5)),
    ]

    kept = optimizer.prefilter(items, {"Momentum"})

    assert [item.name for item in kept] == ["rec", "targeted"]
    assert [item.name for item in BeamSearchOptimizer(top_k_per_slot=3).prefilter(items, set())] == [
        "rec",
        "plain-1",
        "plain-2",
    ]


def test_prefilter_ignores_inactive_targets():
    optimizer = BeamSearchOptimizer(top_k_per_slot=1)
    items = [
        _item("inactive", "Arms", ("Block", 50)),
        _item("active", "Arms", ("Momentum", 2)),
    ]
    result = optimizer.optimize(items, {"Block": 0, "Momentum": 10})

    assert [item.name for item in result.best] == ["active"]


def test_non_positive_budget_is_clamped_to_one():
    result = optimize(_full_catalog(), {"Momentum": 10}, top_k_per_slot=0, beam_width=0)

    assert result.searched.top_k_per_slot == 1
    assert result.searched.beam_width == 1
    assert result.searched.final_beam_size == 1
    assert len(result.best) == 8


def test_no_targets_prefers_recommended_lines():
    result = optimize(_full_catalog(), {})

    assert all(item.name.endswith("-rec") for item in result.best)
    assert result.best_score.deficit_penalty == 0.0


def test_cancel_event_stops_search():
    event = threading.Event()
    event.set()

    with pytest.raises(SearchCancelled):
        optimize(_full_catalog(), {"Momentum": 10}, cancel_event=event)


def test_searched_stats_count_evaluations():
    result = optimize(_full_catalog(), {"Momentum": 10}, top_k_per_slot=3, beam_width=4)

    # First slot: 1 x 3 partial builds, then 3 x 3 and 4 x 3 for each later slot.
    assert result.searched.evaluated == 3 + 9 + 6 * 12
    assert result.searched.final_beam_size == 4
