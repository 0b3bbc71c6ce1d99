from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import Catalog, Item

logger = logging.getLogger(__name__)

CATALOG_COLUMNS = ["id", "notes", "category", "intensity", "description"]


def _split_notes(raw: str, separator: str) -> tuple[str, ...]:
    return tuple(n.strip().lower() for n in raw.split(separator) if n.strip())


def load_catalog(
    path: Path | None = None,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> Catalog:
    """Load a catalog CSV (id, notes, category, intensity, description)."""
    csv_path = Path(path) if path is not None else config.csv_path
    df = pd.read_csv(csv_path, dtype=str).fillna("")

    missing = [c for c in CATALOG_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Catalog file {csv_path} is missing columns: {missing}")

    df["id"] = df["id"].str.strip()
    df["category"] = df["category"].str.strip().str.lower()
    df["intensity"] = df["intensity"].str.strip().str.lower().replace("", "medium")
    df["notes_list"] = df["notes"].apply(lambda s: _split_notes(s, config.notes_separator))

    items = [
        Item(
            id=row["id"],
            notes=row["notes_list"],
            category=row["category"],
            intensity=row["intensity"],
            description=row["description"].strip(),
        )
        for _, row in df.iterrows()
    ]
    logger.info("Loaded %d catalog items from %s", len(items), csv_path)
    return Catalog(items)
