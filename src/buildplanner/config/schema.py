"""Pydantic schema for planner configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PlannerConfig(BaseModel):
    """Validated runtime configuration with defaults."""

    model_config = ConfigDict(extra="forbid")

    top_k_per_slot: int = Field(default=50, gt=0)
    beam_width: int = Field(default=2500, gt=0)
    jobs: int = Field(default=1, ge=1)

    state_path: str = "planner_state.json"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @classmethod
    def interactive(cls, **overrides: object) -> PlannerConfig:
        """Budget used by the "run optimizer" action of the planner UI."""
        values: dict[str, object] = {"top_k_per_slot": 60, "beam_width": 3000}
        values.update(overrides)
        return cls.model_validate(values)
