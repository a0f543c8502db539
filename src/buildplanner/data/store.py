"""Planner state store: catalog, equipped slots and targets."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from .models import SLOTS, AttributeLine, Item, empty_equipped, validate_slot
from .targets import normalize_targets, parse_targets

logger = logging.getLogger(__name__)


class StoreError(ValueError):
    """Raised when stored state is malformed or an edit is not allowed."""


class Assignment(Protocol):
    best: list[Item]


@dataclass
class PlannerState:
    """Everything the planner persists between sessions."""

    items: list[Item] = field(default_factory=list)
    equipped: dict[str, str | None] = field(default_factory=empty_equipped)
    targets: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "equipped": dict(self.equipped),
            "targets": dict(self.targets),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PlannerState:
        raw_items = data.get("items", [])
        if not isinstance(raw_items, list):
            raise StoreError("State 'items' must be a list.")
        try:
            items = [Item.from_dict(raw) for raw in raw_items]
        except (AttributeError, ValueError) as exc:
            raise StoreError(f"Invalid item record: {exc}") from exc

        raw_equipped = data.get("equipped") or {}
        if not isinstance(raw_equipped, dict):
            raise StoreError("State 'equipped' must be an object.")
        equipped = empty_equipped()
        for slot in SLOTS:
            item_id = raw_equipped.get(slot)
            equipped[slot] = str(item_id) if item_id else None

        raw_targets = data.get("targets") or {}
        if not isinstance(raw_targets, dict):
            raise StoreError("State 'targets' must be an object.")

        return cls(items=items, equipped=equipped, targets=normalize_targets(raw_targets))


class PlannerStore:
    """In-memory planner state with optional JSON persistence."""

    def __init__(self, path: str | Path | None = None, state: PlannerState | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self.state = state or PlannerState()

    @classmethod
    def open(cls, path: str | Path) -> PlannerStore:
        store = cls(path)
        store.load()
        return store

    def load(self) -> PlannerState:
        """Load state from disk; a missing file yields an empty state."""
        if self.path is None or not self.path.exists():
            self.state = PlannerState()
            return self.state

        with self.path.open("r", encoding="utf-8") as file:
            try:
                parsed = json.load(file)
            except json.JSONDecodeError as exc:
                raise StoreError(f"State file is not valid JSON: {self.path}") from exc

        if not isinstance(parsed, dict):
            raise StoreError("State root must be a JSON object.")

        self.state = PlannerState.from_dict(parsed)
        logger.info("Loaded %d items from %s", len(self.state.items), self.path)
        return self.state

    def save(self) -> None:
        """Write state to disk via a temp file in the same directory."""
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".planner-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file:
                json.dump(self.state.to_dict(), file, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("Saved %d items to %s", len(self.state.items), self.path)

    # Items

    @property
    def items(self) -> list[Item]:
        return list(self.state.items)

    def get_item(self, item_id: str) -> Item:
        for item in self.state.items:
            if item.id == item_id:
                return item
        raise KeyError(item_id)

    def add_item(
        self,
        name: str,
        slot: str,
        lines: Iterable[AttributeLine | tuple[Any, ...]] = (),
    ) -> Item:
        item = Item.create(name, slot, lines)
        self.state.items.insert(0, item)
        return item

    def update_item(
        self,
        item_id: str,
        name: str,
        slot: str,
        lines: Iterable[AttributeLine | tuple[Any, ...]] = (),
    ) -> Item:
        """Replace an item's name, slot and whole line list, keeping its id."""
        current = self.get_item(item_id)
        updated = Item.create(name, slot, lines, item_id=current.id)
        self.state.items = [updated if item.id == item_id else item for item in self.state.items]
        if updated.slot != current.slot and self.state.equipped.get(current.slot) == item_id:
            self.state.equipped[current.slot] = None
        return updated

    def delete_item(self, item_id: str) -> None:
        self.get_item(item_id)
        self.state.items = [item for item in self.state.items if item.id != item_id]
        for slot in SLOTS:
            if self.state.equipped.get(slot) == item_id:
                self.state.equipped[slot] = None

    def inventory_view(self, slot: str | None = None, query: str = "") -> list[Item]:
        """Filter by slot and case-insensitive text, ordered by slot then name."""
        needle = query.strip().lower()
        view: list[Item] = []
        for item in self.state.items:
            if slot is not None and item.slot != slot:
                continue
            if needle:
                haystack = " ".join(
                    [item.name, item.slot, *(f"{line.name} {line.value:g}" for line in item.lines)]
                ).lower()
                if needle not in haystack:
                    continue
            view.append(item)
        return sorted(view, key=lambda item: (item.slot, item.name))

    # Equipped slots

    def equip(self, slot: str, item_id: str | None) -> None:
        validate_slot(slot)
        if item_id is not None:
            try:
                item = self.get_item(item_id)
            except KeyError as exc:
                raise StoreError(f"Unknown item id '{item_id}'.") from exc
            if item.slot != slot:
                raise StoreError(f"Item '{item.name}' belongs to slot '{item.slot}', not '{slot}'.")
        self.state.equipped[slot] = item_id

    def equipped_items(self) -> list[Item]:
        """Equipped items in slot order, skipping empty slots and dangling ids."""
        by_id = {item.id: item for item in self.state.items}
        return [
            by_id[item_id]
            for slot in SLOTS
            if (item_id := self.state.equipped.get(slot)) is not None and item_id in by_id
        ]

    def apply_assignment(self, result: Assignment) -> None:
        """Clear every slot, then equip each item of an optimizer result."""
        self.state.equipped = empty_equipped()
        for item in result.best:
            self.state.equipped[item.slot] = item.id

    # Targets

    @property
    def targets(self) -> dict[str, float]:
        return dict(self.state.targets)

    def set_targets(self, targets: Mapping[str, Any]) -> dict[str, float]:
        self.state.targets = normalize_targets(targets)
        return self.targets

    def set_targets_text(self, text: str) -> dict[str, float]:
        return self.set_targets(parse_targets(text))

    def clear(self) -> None:
        self.state = PlannerState()
