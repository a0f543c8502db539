from __future__ import annotations

from buildplanner.data.targets import normalize_targets, parse_targets, targets_to_text


def test_parse_targets_accepts_colon_and_space_forms():
    parsed = parse_targets("Momentum: 100\nCrit Rate 25")

    assert parsed == {"Momentum": 100, "Crit Rate": 25}


def test_parse_targets_accepts_equals_decimals_and_negative_values():
    parsed = parse_targets("Crit Rate = 12.5\n  Armor Pen:-3  \n")

    assert parsed == {"Crit Rate": 12.5, "Armor Pen": -3}


def test_parse_targets_skips_blank_and_unparseable_lines():
    parsed = parse_targets("\nnot a target\nSpeed:\nMomentum: 100\n")

    assert parsed == {"Momentum": 100}


def test_parse_targets_later_duplicate_wins():
    assert parse_targets("Momentum: 10\nMomentum: 40") == {"Momentum": 40}


def test_targets_to_text_sorts_names_and_formats_integers():
    text = targets_to_text({"Momentum": 100.0, "Crit Rate": 12.5})

    assert text == "Crit Rate: 12.5\nMomentum: 100"
    assert parse_targets(text) == {"Momentum": 100, "Crit Rate": 12.5}


def test_normalize_targets_trims_and_drops_empty_keys():
    normalized = normalize_targets({" Momentum ": "50", "  ": 10, "Crit": float("nan")})

    assert normalized == {"Momentum": 50.0, "Crit": 0.0}
