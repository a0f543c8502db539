"""Planner service: store edits plus comparison and optimization."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any

from buildplanner.config import PlannerConfig
from buildplanner.data.models import Item
from buildplanner.data.store import PlannerStore
from buildplanner.data.targets import targets_to_text
from buildplanner.engine.aggregate import Comparison, aggregate, compare, totals_of
from buildplanner.engine.report import BuildReport, build_report, optimization_report
from buildplanner.engine.score import BuildScore, score_build
from buildplanner.engine.search import BeamSearchOptimizer, OptimizationResult

logger = logging.getLogger(__name__)

NO_TARGETS_WARNING = (
    "No necessary buffs set. Add targets to enable meaningful comparisons and optimization."
)


class PlannerService:
    """Adapter between the persisted store and the scoring engine.

    Every mutating call saves the store, so the JSON file always reflects the
    last successful edit.
    """

    def __init__(self, store: PlannerStore, config: PlannerConfig | None = None) -> None:
        self.store = store
        self.config = config or PlannerConfig.interactive()
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: PlannerConfig) -> PlannerService:
        return cls(PlannerStore.open(config.state_path), config)

    # Read side

    def state(self) -> dict[str, Any]:
        with self._lock:
            payload = self.store.state.to_dict()
        payload["targets_text"] = targets_to_text(payload["targets"])
        payload["warnings"] = [] if payload["targets"] else [NO_TARGETS_WARNING]
        return payload

    def warnings(self) -> list[str]:
        with self._lock:
            has_targets = bool(self.store.state.targets)
        return [] if has_targets else [NO_TARGETS_WARNING]

    def comparison(self) -> Comparison:
        items, targets = self._equipped_snapshot()
        return compare(totals_of(aggregate(items)), targets)

    def equipped_score(self) -> BuildScore:
        return score_build(*self._equipped_snapshot())

    def equipped_report(self) -> BuildReport:
        return build_report(*self._equipped_snapshot())

    def _equipped_snapshot(self) -> tuple[list[Item], dict[str, float]]:
        with self._lock:
            return self.store.equipped_items(), self.store.targets

    # Write side

    def add_item(self, name: str, slot: str, lines: Iterable[Any] = ()) -> Item:
        with self._lock:
            item = self.store.add_item(name, slot, lines)
            self.store.save()
        return item

    def update_item(self, item_id: str, name: str, slot: str, lines: Iterable[Any] = ()) -> Item:
        with self._lock:
            item = self.store.update_item(item_id, name, slot, lines)
            self.store.save()
        return item

    def delete_item(self, item_id: str) -> None:
        with self._lock:
            self.store.delete_item(item_id)
            self.store.save()

    def equip(self, slot: str, item_id: str | None) -> None:
        with self._lock:
            self.store.equip(slot, item_id)
            self.store.save()

    def set_targets(
        self,
        targets: Mapping[str, Any] | None = None,
        text: str | None = None,
    ) -> dict[str, float]:
        with self._lock:
            if text is not None:
                parsed = self.store.set_targets_text(text)
            else:
                parsed = self.store.set_targets(targets or {})
            self.store.save()
        return parsed

    def clear(self) -> None:
        with self._lock:
            self.store.clear()
            self.store.save()

    def optimize(
        self,
        *,
        auto_equip: bool = True,
        cancel_event: threading.Event | None = None,
    ) -> tuple[OptimizationResult, BuildReport]:
        """Run the beam search over the whole catalog and equip the best build."""
        optimizer = BeamSearchOptimizer(
            top_k_per_slot=self.config.top_k_per_slot,
            beam_width=self.config.beam_width,
            jobs=self.config.jobs,
        )
        with self._lock:
            catalog = self.store.items
            targets = self.store.targets

        result = optimizer.optimize(catalog, targets, cancel_event=cancel_event)
        if result.missing_slots:
            logger.warning("No candidates for slots: %s", ", ".join(result.missing_slots))

        if auto_equip:
            with self._lock:
                current = {item.id: item for item in self.store.state.items}
                stale = [item.name for item in result.best if current.get(item.id) != item]
                if stale:
                    # The catalog changed while searching; keep the slots as they are.
                    logger.warning("Skipping auto-equip, items changed during search: %s", ", ".join(stale))
                else:
                    self.store.apply_assignment(result)
                    self.store.save()
        return result, optimization_report(result, targets)
