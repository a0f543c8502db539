"""Attribute aggregation and requirement comparison."""

from .aggregator import AttributeTotal, aggregate, totals_of
from .comparator import Comparison, RequirementRow, compare

__all__ = ["AttributeTotal", "Comparison", "RequirementRow", "aggregate", "compare", "totals_of"]
