"""FastAPI app for the build planner."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, model_validator

from buildplanner.config import load_config
from buildplanner.data.models import SLOTS
from buildplanner.data.store import StoreError

from .service import PlannerService


class BuffLinePayload(BaseModel):
    """Single attribute line of an item."""

    name: str
    value: float = 0.0
    recommended: bool = False


class ItemPayload(BaseModel):
    """Request payload for creating or replacing an item."""

    name: str = ""
    slot: str
    buffs: list[BuffLinePayload] = Field(default_factory=list)

    def lines(self) -> list[tuple[str, float, bool]]:
        return [(buff.name, buff.value, buff.recommended) for buff in self.buffs]


class EquipPayload(BaseModel):
    item_id: str | None = None


class TargetsPayload(BaseModel):
    """Targets as a name->value map or as free text, one per line."""

    targets: dict[str, float] | None = None
    text: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> TargetsPayload:
        if (self.targets is None) == (self.text is None):
            raise ValueError("Provide exactly one of 'targets' or 'text'.")
        return self


class RequirementRowModel(BaseModel):
    name: str
    current: float
    required: float
    delta: float
    missing: float


class ComparisonResponse(BaseModel):
    rows: list[RequirementRowModel]
    total_missing: float
    score: float
    recommended_lines: int


class OptimizeResponse(BaseModel):
    """Best build found plus its report."""

    assignment: dict[str, str | None]
    missing_slots: list[str]
    score: float
    total_missing: float
    searched: dict[str, int]
    report: dict[str, Any]
    markdown: str


app = FastAPI(title="Build Planner", version="0.1.0")


def get_cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env."""

    raw = os.getenv("CORS_ALLOW_ORIGINS", "*").strip()
    if raw == "*":
        return ["*"]
    return [item.strip() for item in raw.split(",") if item.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_service() -> PlannerService:
    """Return singleton planner service built from env/config file."""

    config_path = os.getenv("BUILDPLANNER_CONFIG", "").strip() or None
    return PlannerService.from_config(load_config(config_path))


def _require_slot(slot: str) -> None:
    if slot not in SLOTS:
        raise HTTPException(status_code=404, detail=f"unknown slot: {slot}")


@app.get("/api/state")
def read_state() -> dict[str, Any]:
    return get_service().state()


@app.delete("/api/state")
def clear_state() -> dict[str, Any]:
    service = get_service()
    service.clear()
    return service.state()


@app.post("/api/items", status_code=201)
def create_item(payload: ItemPayload) -> dict[str, Any]:
    try:
        item = get_service().add_item(payload.name, payload.slot, payload.lines())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return item.to_dict()


@app.put("/api/items/{item_id}")
def replace_item(item_id: str, payload: ItemPayload) -> dict[str, Any]:
    try:
        item = get_service().update_item(item_id, payload.name, payload.slot, payload.lines())
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"unknown item: {item_id}") from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return item.to_dict()


@app.delete("/api/items/{item_id}", status_code=204)
def remove_item(item_id: str) -> None:
    try:
        get_service().delete_item(item_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"unknown item: {item_id}") from exc


@app.put("/api/equipped/{slot}")
def equip_slot(slot: str, payload: EquipPayload) -> dict[str, str | None]:
    _require_slot(slot)
    service = get_service()
    try:
        service.equip(slot, payload.item_id)
    except StoreError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return service.state()["equipped"]


@app.put("/api/targets")
def replace_targets(payload: TargetsPayload) -> dict[str, float]:
    return get_service().set_targets(targets=payload.targets, text=payload.text)


@app.get("/api/comparison", response_model=ComparisonResponse)
def read_comparison() -> ComparisonResponse:
    service = get_service()
    comparison = service.comparison()
    score = service.equipped_score()
    return ComparisonResponse(
        rows=[RequirementRowModel(**vars(row)) for row in comparison.rows],
        total_missing=comparison.total_missing,
        score=score.score,
        recommended_lines=score.recommended_lines,
    )


@app.post("/api/optimize", response_model=OptimizeResponse)
def run_optimizer() -> OptimizeResponse:
    """Search for the best build and equip it."""

    result, report = get_service().optimize()
    return OptimizeResponse(
        assignment={slot: (item.id if item else None) for slot, item in result.assignment().items()},
        missing_slots=result.missing_slots,
        score=result.best_score.score,
        total_missing=result.best_score.total_missing,
        searched=report.json_report["searched"],
        report=report.json_report,
        markdown=report.markdown_report,
    )
