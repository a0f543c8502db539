"""Beam-search optimizer that picks one item per slot."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

import numpy as np

from buildplanner.data.models import SLOTS, Item

from ..score.heuristic import item_heuristic
from ..score.scorer import BuildScore, BuildScorer

logger = logging.getLogger(__name__)

DEFAULT_TOP_K_PER_SLOT = 50
DEFAULT_BEAM_WIDTH = 2500


class SearchCancelled(RuntimeError):
    """Raised when the caller sets the cancel event between slots."""


@dataclass(frozen=True)
class SearchStats:
    """Effective search budget and work done."""

    top_k_per_slot: int
    beam_width: int
    final_beam_size: int
    evaluated: int


@dataclass(frozen=True)
class OptimizationResult:
    best: list[Item]
    best_score: BuildScore
    missing_slots: list[str]
    searched: SearchStats

    def assignment(self) -> dict[str, Item | None]:
        """Map every slot to its chosen item, or None."""
        chosen: dict[str, Item | None] = {slot: None for slot in SLOTS}
        for item in self.best:
            chosen[item.slot] = item
        return chosen


class BeamSearchOptimizer:
    """Expand slot by slot, keeping only the best ``beam_width`` partial builds.

    Candidates for each slot are first cut to ``top_k_per_slot`` by a cheap
    per-item heuristic. Every partial build is then rescored in full after
    each extension. Both cuts are lossy, so the result is the best build
    found under budget rather than a proven optimum.
    """

    def __init__(
        self,
        top_k_per_slot: int = DEFAULT_TOP_K_PER_SLOT,
        beam_width: int = DEFAULT_BEAM_WIDTH,
        jobs: int = 1,
    ) -> None:
        # Non-positive budgets degrade to a single candidate/partial build.
        self.top_k_per_slot = max(1, int(top_k_per_slot))
        self.beam_width = max(1, int(beam_width))
        self.jobs = max(1, int(jobs))

    def optimize(
        self,
        catalog: Sequence[Item],
        targets: Mapping[str, Any] | None = None,
        *,
        cancel_event: threading.Event | None = None,
    ) -> OptimizationResult:
        scorer = BuildScorer(targets)
        by_slot = self.partition(catalog)
        missing_slots = [slot for slot in SLOTS if not by_slot[slot]]
        candidates = {
            slot: self.prefilter(by_slot[slot], scorer.active_targets.keys()) for slot in SLOTS
        }

        beam: list[tuple[Item, ...]] = [()]
        evaluated = 0

        executor: ThreadPoolExecutor | None = None
        if self.jobs > 1:
            executor = ThreadPoolExecutor(max_workers=self.jobs)

        try:
            for slot in SLOTS:
                if cancel_event is not None and cancel_event.is_set():
                    raise SearchCancelled(f"Search cancelled before slot '{slot}'.")

                slot_candidates = candidates[slot]
                if not slot_candidates:
                    continue

                expanded = [
                    partial + (candidate,) for partial in beam for candidate in slot_candidates
                ]
                if executor is None:
                    scores = [scorer.score(build).score for build in expanded]
                else:
                    scores = list(executor.map(lambda build: scorer.score(build).score, expanded))
                evaluated += len(expanded)

                # sorted() is stable: equal scores keep beam-then-candidate order.
                order = sorted(range(len(expanded)), key=lambda index: -scores[index])
                beam = [expanded[index] for index in order[: self.beam_width]]
                logger.debug(
                    "slot=%s candidates=%d expanded=%d kept=%d best=%.3f",
                    slot,
                    len(slot_candidates),
                    len(expanded),
                    len(beam),
                    scores[order[0]],
                )
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        best = list(beam[0]) if beam else []
        best_score = scorer.score(best)
        logger.info(
            "Beam search finished: %d items, score=%.3f, missing_slots=%s, evaluated=%d",
            len(best),
            best_score.score,
            missing_slots,
            evaluated,
        )
        return OptimizationResult(
            best=best,
            best_score=best_score,
            missing_slots=missing_slots,
            searched=SearchStats(
                top_k_per_slot=self.top_k_per_slot,
                beam_width=self.beam_width,
                final_beam_size=len(beam),
                evaluated=evaluated,
            ),
        )

    @staticmethod
    def partition(catalog: Sequence[Item]) -> dict[str, list[Item]]:
        """Group catalog items by slot, preserving catalog order."""
        by_slot: dict[str, list[Item]] = {slot: [] for slot in SLOTS}
        for item in catalog:
            by_slot[item.slot].append(item)
        return by_slot

    def prefilter(self, items: Sequence[Item], active_target_names: Iterable[str]) -> list[Item]:
        """Keep the ``top_k_per_slot`` items by heuristic; ties keep catalog order."""
        if not items:
            return []
        names = set(active_target_names)
        values = np.array([item_heuristic(item, names) for item in items], dtype=np.float64)
        order = np.argsort(-values, kind="stable")[: self.top_k_per_slot]
        return [items[int(index)] for index in order]


def optimize(
    catalog: Sequence[Item],
    targets: Mapping[str, Any] | None = None,
    top_k_per_slot: int = DEFAULT_TOP_K_PER_SLOT,
    beam_width: int = DEFAULT_BEAM_WIDTH,
    *,
    jobs: int = 1,
    cancel_event: threading.Event | None = None,
) -> OptimizationResult:
    """Find a high-scoring one-item-per-slot build from ``catalog``."""
    optimizer = BeamSearchOptimizer(top_k_per_slot=top_k_per_slot, beam_width=beam_width, jobs=jobs)
    return optimizer.optimize(catalog, targets, cancel_event=cancel_event)
