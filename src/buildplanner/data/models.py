"""Core data model: slots, attribute lines, items."""

from __future__ import annotations

import math
import secrets
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

SLOTS: tuple[str, ...] = (
    "Weapon 1",
    "Weapon 2",
    "Support 1",
    "Support 2",
    "Helmet",
    "Vest",
    "Arms",
    "Legs",
)
DEFAULT_ITEM_NAME = "Unnamed Item"


def new_id(prefix: str = "id") -> str:
    """Return a random opaque identifier such as ``it_3fa9c1d2_18c4e5``."""
    return f"{prefix}_{secrets.token_hex(6)}_{int(time.time() * 1000):x}"


def normalize_name(name: Any) -> str:
    """Attribute names are compared after trimming; case is significant."""
    if name is None:
        return ""
    return str(name).strip()


def coerce_value(value: Any) -> float:
    """Return ``value`` as a finite float, or 0.0 when it is missing or invalid."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def validate_slot(slot: str) -> str:
    if slot not in SLOTS:
        raise ValueError(f"Unknown slot '{slot}'. Expected one of: {list(SLOTS)}")
    return slot


def empty_equipped() -> dict[str, str | None]:
    return {slot: None for slot in SLOTS}


@dataclass(frozen=True)
class AttributeLine:
    """Named numeric bonus on an item."""

    id: str
    name: str
    value: float = 0.0
    recommended: bool = False

    @classmethod
    def create(
        cls,
        name: str,
        value: Any = 0.0,
        recommended: bool = False,
        *,
        line_id: str | None = None,
    ) -> AttributeLine:
        return cls(
            id=line_id or new_id("b"),
            name=normalize_name(name),
            value=coerce_value(value),
            recommended=bool(recommended),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "value": self.value,
            "recommended": self.recommended,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AttributeLine:
        return cls(
            id=str(data.get("id") or new_id("b")),
            name=normalize_name(data.get("name")),
            value=coerce_value(data.get("value")),
            recommended=bool(data.get("recommended", False)),
        )


@dataclass(frozen=True)
class Item:
    """A piece of equipment bound to exactly one slot."""

    id: str
    name: str
    slot: str
    lines: tuple[AttributeLine, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        validate_slot(self.slot)

    @classmethod
    def create(
        cls,
        name: str,
        slot: str,
        lines: Iterable[AttributeLine | tuple[str, Any] | tuple[str, Any, bool]] = (),
        *,
        item_id: str | None = None,
    ) -> Item:
        """Build a normalized item; lines with a blank name are dropped."""
        normalized: list[AttributeLine] = []
        for line in lines:
            if not isinstance(line, AttributeLine):
                line = AttributeLine.create(*line)
            else:
                line = AttributeLine.create(
                    line.name, line.value, line.recommended, line_id=line.id
                )
            if line.name:
                normalized.append(line)

        return cls(
            id=item_id or new_id("it"),
            name=normalize_name(name) or DEFAULT_ITEM_NAME,
            slot=validate_slot(slot),
            lines=tuple(normalized),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slot": self.slot,
            "buffs": [line.to_dict() for line in self.lines],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Item:
        buffs = data.get("buffs", data.get("lines", []))
        if not isinstance(buffs, list):
            raise ValueError("Item 'buffs' must be a list.")
        lines = (AttributeLine.from_dict(buff) for buff in buffs)
        return cls(
            id=str(data.get("id") or new_id("it")),
            name=normalize_name(data.get("name")) or DEFAULT_ITEM_NAME,
            slot=validate_slot(normalize_name(data.get("slot"))),
            lines=tuple(line for line in lines if line.name),
        )
