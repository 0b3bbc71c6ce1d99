from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from ..catalog.models import Item
from .scores import SimilarityScore, clamp_similarity


class SimilarityOracle(ABC):
    """
    Anything that can judge how similar two catalog items are.

    Implementations return a score on [0, 1]. They may be slow and they
    may fail; failures should surface as exceptions (ideally
    OracleUnavailable) so the matrix builder can fall back.
    """

    @abstractmethod
    def get_similarity(self, item_a: Item, item_b: Item) -> SimilarityScore:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass


class HeuristicOracle(SimilarityOracle):
    """
    Rule-based similarity from catalog attributes alone.

    0.4 for a shared category, up to 0.3 for close intensities and up to
    0.3 for overlapping notes (Jaccard).
    """

    category_weight = 0.4
    intensity_weight = 0.3
    notes_weight = 0.3

    @property
    def name(self) -> str:
        return "heuristic"

    def get_similarity(self, item_a: Item, item_b: Item) -> SimilarityScore:
        score = 0.0
        if item_a.category == item_b.category:
            score += self.category_weight

        intensity_diff = abs(item_a.intensity.rank - item_b.intensity.rank)
        score += (4 - intensity_diff) / 4 * self.intensity_weight

        notes_a, notes_b = set(item_a.notes), set(item_b.notes)
        union = notes_a | notes_b
        if union:
            score += len(notes_a & notes_b) / len(union) * self.notes_weight

        return SimilarityScore(
            value=clamp_similarity(score),
            explanation=(
                f"Heuristic score: {'same' if item_a.category == item_b.category else 'different'} "
                f"category, intensity gap {intensity_diff}, "
                f"{len(notes_a & notes_b)} shared notes"
            ),
            source=self.name,
        )


# ---------------------------------------------------------------------------
# Fallbacks
# ---------------------------------------------------------------------------

SAME_CATEGORY_FALLBACK = 0.6
DIFFERENT_CATEGORY_FALLBACK = 0.3

FallbackPolicy = Callable[[Item, Item], SimilarityScore]


def category_fallback(item_a: Item, item_b: Item) -> SimilarityScore:
    same = item_a.category == item_b.category
    return SimilarityScore(
        value=SAME_CATEGORY_FALLBACK if same else DIFFERENT_CATEGORY_FALLBACK,
        explanation=f"Fallback score: {'same category' if same else 'different categories'}",
        source="fallback",
    )


_HEURISTIC = HeuristicOracle()


def heuristic_fallback(item_a: Item, item_b: Item) -> SimilarityScore:
    score = _HEURISTIC.get_similarity(item_a, item_b)
    return SimilarityScore(value=score.value, explanation=score.explanation, source="fallback")


FALLBACKS: dict[str, FallbackPolicy] = {
    "category": category_fallback,
    "heuristic": heuristic_fallback,
}


def get_fallback(name: str) -> FallbackPolicy:
    if name not in FALLBACKS:
        raise ValueError(f"Unknown fallback '{name}'. Available: {list(FALLBACKS)}")
    return FALLBACKS[name]
