"""
Catalog package.

Responsibilities:
- Define the Item schema (descriptor notes, category, intensity, description).
- Load the read-only essential-oil catalog from CSV.
- Classify oils into top, middle and base perfumery notes.
- Expose a stable, insertion-ordered id -> Item mapping to the engine.
"""
from .loader import load_catalog
from .models import Catalog, Intensity, Item, NoteType, classify_note_type

__all__ = ["Catalog", "Intensity", "Item", "NoteType", "classify_note_type", "load_catalog"]
