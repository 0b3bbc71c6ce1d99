from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Intensity(str, Enum):
    light = "light"
    medium = "medium"
    strong = "strong"
    heavy = "heavy"

    @property
    def rank(self) -> int:
        return _INTENSITY_RANK[self]


_INTENSITY_RANK = {
    Intensity.light: 1,
    Intensity.medium: 2,
    Intensity.strong: 3,
    Intensity.heavy: 4,
}


class NoteType(str, Enum):
    """Perfumery note position: how early an oil is perceived in a blend."""

    top = "TOP"
    middle = "MIDDLE"
    base = "BASE"


TOP_CATEGORIES = frozenset({"citrus"})
BASE_CATEGORIES = frozenset({"woody", "earthy", "resinous"})


class Item(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    notes: tuple[str, ...] = Field(default_factory=tuple)
    category: str
    intensity: Intensity = Intensity.medium
    description: str = ""

    def attributes(self) -> dict[str, Any]:
        """Attribute payload handed to similarity oracles."""
        return {
            "notes": list(self.notes),
            "category": self.category,
            "intensity": self.intensity.value,
            "description": self.description,
        }

    @property
    def note_type(self) -> NoteType:
        return classify_note_type(self)


def classify_note_type(item: Item) -> NoteType:
    """
    Sort an oil into top, middle or base notes from its attributes.

    Citrus oils and strong fresh herbs are top notes. BASE_CATEGORIES and
    heavy oils are base notes. Everything else is a middle note.
    """
    if item.category in TOP_CATEGORIES or (
        item.category == "herbal" and item.intensity == Intensity.strong and "fresh" in item.notes
    ):
        return NoteType.top
    if item.category in BASE_CATEGORIES or item.intensity == Intensity.heavy:
        return NoteType.base
    return NoteType.middle


class Catalog(Mapping[str, Item]):
    """
    Read-only, insertion-ordered mapping from item id to Item.

    The iteration order is the axis order used by every matrix the engine
    builds, so it must not change for the lifetime of a run.
    """

    def __init__(self, items: Iterable[Item]):
        self._items: dict[str, Item] = {}
        for item in items:
            if item.id in self._items:
                raise ValueError(f"Duplicate catalog id: {item.id!r}")
            self._items[item.id] = item

    @classmethod
    def from_records(cls, records: Mapping[str, Mapping[str, Any]]) -> "Catalog":
        return cls(Item(id=item_id, **dict(data)) for item_id, data in records.items())

    @property
    def ids(self) -> list[str]:
        return list(self._items)

    def categories(self) -> list[str]:
        """Distinct categories in first-seen order."""
        return list(dict.fromkeys(item.category for item in self._items.values()))

    def subset(self, ids: Iterable[str]) -> "Catalog":
        return Catalog(self._items[i] for i in ids)

    def __getitem__(self, item_id: str) -> Item:
        return self._items[item_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Catalog({len(self)} items)"
