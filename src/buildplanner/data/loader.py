"""CSV loader and validator for item catalogs."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from .models import SLOTS, AttributeLine, Item

REQUIRED_COLUMNS = ["item", "slot", "buff", "value"]
COLUMN_ALIASES = {
    "item_name": "item",
    "item name": "item",
    "name": "item",
    "stat": "buff",
    "attribute": "buff",
}
TRUE_VALUES = {"1", "true", "yes", "y", "x", "rec", "recommended"}


class DataValidationError(ValueError):
    """Raised when catalog data fails validation."""


class CatalogCsvLoader:
    """Load a catalog stored as one CSV row per attribute line."""

    def load_csv(self, path: str | Path, encoding: str = "utf-8") -> pd.DataFrame:
        """Load CSV and normalize column names."""
        csv_path = Path(path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_path}")

        dataframe = pd.read_csv(csv_path, encoding=encoding, dtype=str, keep_default_na=False)
        return self._normalize_columns(dataframe)

    def validate(self, dataframe: pd.DataFrame) -> None:
        """Validate schema and slot names."""
        missing = [col for col in REQUIRED_COLUMNS if col not in dataframe.columns]
        if missing:
            raise DataValidationError(f"Missing required columns: {missing}")

        slots = dataframe["slot"].astype(str).str.strip()
        unknown = sorted(set(slots[~slots.isin(SLOTS)].tolist()))
        if unknown:
            raise DataValidationError(f"Unknown slots in catalog: {unknown}")

    def to_items(self, dataframe: pd.DataFrame) -> list[Item]:
        """Group rows into items by (item, slot), keeping first-seen order."""
        self.validate(dataframe)
        working = dataframe.copy()
        working["item"] = working["item"].astype(str).str.strip()
        working["slot"] = working["slot"].astype(str).str.strip()
        if "recommended" not in working.columns:
            working["recommended"] = ""

        items: list[Item] = []
        for (name, slot), group in working.groupby(["item", "slot"], sort=False):
            lines = [
                AttributeLine.create(
                    row["buff"],
                    pd.to_numeric(row["value"], errors="coerce"),
                    str(row["recommended"]).strip().lower() in TRUE_VALUES,
                )
                for _, row in group.iterrows()
            ]
            items.append(Item.create(name, slot, lines))
        return items

    def load_items(self, path: str | Path, encoding: str = "utf-8") -> list[Item]:
        """Load CSV, validate it, and build catalog items."""
        return self.to_items(self.load_csv(path, encoding=encoding))

    @staticmethod
    def _normalize_columns(dataframe: pd.DataFrame) -> pd.DataFrame:
        normalized = {}
        for column in dataframe.columns:
            new_name = str(column).strip().lower()
            normalized[column] = COLUMN_ALIASES.get(new_name, new_name)
        return dataframe.rename(columns=normalized)
