"""Load planner config from YAML or JSON, with environment overrides."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .schema import PlannerConfig

ENV_PREFIX = "BUILDPLANNER_"


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or parsed."""


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> PlannerConfig:
    """Read a config file (optional), apply ``BUILDPLANNER_*`` overrides, validate.

    Invalid values surface as pydantic ``ValidationError``.
    """
    data: dict[str, Any] = {}
    if path is not None:
        data = _read_file(Path(path))

    data.update(_env_overrides(os.environ if environ is None else environ))
    return PlannerConfig.model_validate(data)


def _read_file(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()
    with config_path.open("r", encoding="utf-8") as file:
        if suffix in {".yaml", ".yml"}:
            try:
                parsed = yaml.safe_load(file)
            except yaml.YAMLError as exc:
                raise ConfigLoadError(f"Invalid YAML in {config_path}: {exc}") from exc
        elif suffix == ".json":
            try:
                parsed = json.load(file)
            except json.JSONDecodeError as exc:
                raise ConfigLoadError(f"Invalid JSON in {config_path}: {exc}") from exc
        else:
            raise ConfigLoadError(
                f"Unsupported config format '{suffix}'. Use .yaml/.yml or .json."
            )

    parsed = parsed or {}
    if not isinstance(parsed, dict):
        raise ConfigLoadError("Config root must be a JSON/YAML object.")
    return parsed


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for field_name in PlannerConfig.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if raw is not None and raw.strip():
            overrides[field_name] = raw.strip()
    return overrides
