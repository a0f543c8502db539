"""Assignment search."""

from .beam import BeamSearchOptimizer, OptimizationResult, SearchCancelled, SearchStats, optimize

__all__ = ["BeamSearchOptimizer", "OptimizationResult", "SearchCancelled", "SearchStats", "optimize"]
