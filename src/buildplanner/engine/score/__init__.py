"""Build scoring modules."""

from .heuristic import item_heuristic
from .scorer import BuildScore, BuildScorer, score_build

__all__ = ["BuildScore", "BuildScorer", "item_heuristic", "score_build"]
