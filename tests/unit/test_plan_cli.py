"""Tests for the plan.py command line."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

import plan


def _write_catalog(path) -> None:
    path.write_text(
        "item,slot,buff,value,recommended\n"
        "Blade,Weapon 1,Momentum,40,yes\n"
        "Dagger,Weapon 2,Momentum,30,\n"
        "Charm,Support 1,Crit Rate,12,\n",
        encoding="utf-8",
    )


def test_cli_prints_markdown_report(tmp_path, capsys):
    catalog = tmp_path / "catalog.csv"
    _write_catalog(catalog)

    exit_code = plan.main(["--catalog", str(catalog), "--target", "Momentum: 60", "--target", "Crit Rate 10"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "- Weapon 1: Blade" in output
    assert "- Legs: none" in output
    assert "Slots without candidates: Support 2, Helmet, Vest, Arms, Legs" in output


def test_cli_json_output_reads_targets_file_and_overrides(tmp_path, capsys):
    catalog = tmp_path / "catalog.csv"
    _write_catalog(catalog)
    targets = tmp_path / "targets.txt"
    targets.write_text("Momentum: 100\n", encoding="utf-8")

    plan.main(["--catalog", str(catalog), "--targets", str(targets), "--beam-width", "2", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["total_missing"] == 30
    assert payload["searched"]["beam_width"] == 2


def test_cli_warns_without_targets(tmp_path, capsys):
    catalog = tmp_path / "catalog.csv"
    _write_catalog(catalog)

    plan.main(["--catalog", str(catalog)])

    assert "[WARN] No necessary buffs set" in capsys.readouterr().out


@pytest.mark.parametrize("flags", [["--top-k", "-5"], ["--beam-width", "0"], ["--jobs", "0"]])
def test_cli_rejects_budgets_below_one(tmp_path, flags):
    catalog = tmp_path / "catalog.csv"
    _write_catalog(catalog)

    with pytest.raises(ValidationError):
        plan.main(["--catalog", str(catalog), *flags])


def test_cli_overrides_are_applied(tmp_path):
    args = plan._parse_args(["--catalog", str(tmp_path / "c.csv"), "--top-k", "7", "--jobs", "2"])

    config = plan._resolve_config(args)

    assert (config.top_k_per_slot, config.beam_width, config.jobs) == (7, 2500, 2)
