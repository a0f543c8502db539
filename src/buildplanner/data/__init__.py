"""Data model, persistence and import utilities."""

from .loader import CatalogCsvLoader, DataValidationError
from .models import SLOTS, AttributeLine, Item, coerce_value, empty_equipped, normalize_name
from .store import PlannerState, PlannerStore, StoreError
from .targets import normalize_targets, parse_targets, targets_to_text

__all__ = [
    "AttributeLine",
    "CatalogCsvLoader",
    "DataValidationError",
    "Item",
    "PlannerState",
    "PlannerStore",
    "SLOTS",
    "StoreError",
    "coerce_value",
    "empty_equipped",
    "normalize_name",
    "normalize_targets",
    "parse_targets",
    "targets_to_text",
]
