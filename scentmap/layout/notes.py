from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from ..catalog.models import Item, NoteType
from ..errors import DegenerateInputError
from .config import DEFAULT_LAYOUT_CONFIG, LayoutConfig

NOTE_CENTERS = {
    NoteType.top: (0.6, 0.7),
    NoteType.middle: (0.0, 0.0),
    NoteType.base: (-0.6, -0.7),
}
MIN_RADIUS = 0.3
RADIUS_SPREAD = 0.2


def note_type_layout(
    items: Sequence[Item],
    config: LayoutConfig = DEFAULT_LAYOUT_CONFIG,
) -> np.ndarray:
    """
    Place items on rings around a fixed centre per perfumery note type.

    Needs no similarities: top notes sit upper right, base notes lower
    left, middle notes at the origin. Items of one note type are spread
    evenly by angle, in the given order, at a seeded radius in
    [MIN_RADIUS, MIN_RADIUS + RADIUS_SPREAD).
    """
    if len(items) < 2:
        raise DegenerateInputError(f"At least 2 items are required for a layout, got {len(items)}")

    rng = np.random.default_rng(config.seed)
    groups: dict[NoteType, list[int]] = {note: [] for note in NOTE_CENTERS}
    for index, item in enumerate(items):
        groups[item.note_type].append(index)

    coords = np.zeros((len(items), 2))
    for note, members in groups.items():
        cx, cy = NOTE_CENTERS[note]
        for rank, index in enumerate(members):
            angle = rank / len(members) * 2 * math.pi
            radius = MIN_RADIUS + rng.random() * RADIUS_SPREAD
            coords[index] = (cx + radius * math.cos(angle), cy + radius * math.sin(angle))
    return coords
