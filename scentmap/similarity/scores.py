from __future__ import annotations

import math
from dataclasses import dataclass

MAX_SIMILARITY = 1.0
MIN_SIMILARITY = 0.0
NEUTRAL_SIMILARITY = 0.5
KEY_SEPARATOR = "|"


def pair_key(a: str, b: str) -> str:
    """Canonical cache key: the two ids sorted, so (a, b) and (b, a) collide."""
    return KEY_SEPARATOR.join(sorted((a, b)))


def clamp_similarity(value: float) -> float:
    value = float(value)
    if math.isnan(value):
        raise ValueError("Similarity must be a number, got NaN")
    return max(MIN_SIMILARITY, min(MAX_SIMILARITY, value))


def normalize_score(value: float, scale_max: float = 100.0) -> float:
    """Map a score on [0, scale_max] onto the engine's [0, 1] convention."""
    if scale_max <= 0:
        raise ValueError("scale_max must be positive")
    return clamp_similarity(float(value) / scale_max)


@dataclass(frozen=True)
class SimilarityScore:
    value: float
    explanation: str | None = None
    source: str = "oracle"

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", clamp_similarity(self.value))
