from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CatalogConfig:
    csv_path: Path = Path(__file__).resolve().parent / "data" / "essential_oils.csv"
    notes_separator: str = ","


DEFAULT_CATALOG_CONFIG = CatalogConfig()
