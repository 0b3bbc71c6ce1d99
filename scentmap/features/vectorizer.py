from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity
from sklearn.preprocessing import MultiLabelBinarizer

from ..catalog.models import Catalog
from ..errors import DegenerateInputError
from ..layout.distance import build_distance_matrix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeatureMatrix:
    ids: list[str]
    vocabulary: list[str]
    weights: np.ndarray  # (len(ids), len(vocabulary))

    def vector(self, item_id: str) -> np.ndarray:
        return self.weights[self.ids.index(item_id)]

    def weight(self, item_id: str, token: str) -> float:
        return float(self.weights[self.ids.index(item_id), self.vocabulary.index(token)])


def build_vocabulary(catalog: Catalog) -> list[str]:
    """Every distinct note across the catalog, in first-seen order."""
    vocabulary: dict[str, None] = {}
    for item in catalog.values():
        for note in item.notes:
            vocabulary.setdefault(note, None)
    return list(vocabulary)


def vectorize(catalog: Catalog, vocabulary: list[str] | None = None) -> FeatureMatrix:
    """
    TF-IDF weights for every item over the shared vocabulary.

    weight = (1 / number of notes on the item) * log(N / items containing
    the note) when the item has the note, else 0. A note carried by every
    item gets IDF 0 and therefore never separates items.
    """
    if len(catalog) == 0:
        raise DegenerateInputError("Cannot vectorize an empty catalog")

    vocabulary = vocabulary if vocabulary is not None else build_vocabulary(catalog)
    items = list(catalog.values())

    binarizer = MultiLabelBinarizer(classes=vocabulary)
    presence = binarizer.fit_transform([set(item.notes) for item in items]).astype(float)

    doc_freq = presence.sum(axis=0)
    with np.errstate(divide="ignore"):
        idf = np.where(doc_freq > 0, np.log(len(items) / np.maximum(doc_freq, 1)), 0.0)
    tf = np.array([1.0 / len(item.notes) if item.notes else 0.0 for item in items])

    weights = presence * tf[:, None] * idf[None, :]
    logger.info(
        "Vectorized %d items over a vocabulary of %d notes", len(items), len(vocabulary),
    )
    return FeatureMatrix(ids=catalog.ids, vocabulary=list(vocabulary), weights=weights)


def feature_distances(features: FeatureMatrix) -> np.ndarray:
    """Cosine similarity between feature vectors, converted to [0, 1] distances."""
    sims = cosine_similarity(features.weights)
    # TF-IDF weights are non-negative so cosine lands in [0, 1]; an all-zero
    # vector has cosine 0 with everything, including itself.
    np.fill_diagonal(sims, 1.0)
    return build_distance_matrix(sims, max_similarity=1.0, min_similarity=0.0)
