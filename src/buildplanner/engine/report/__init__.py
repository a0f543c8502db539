"""Build reporting."""

from .renderer import NO_ITEM, BuildReport, build_report, optimization_report

__all__ = ["NO_ITEM", "BuildReport", "build_report", "optimization_report"]
