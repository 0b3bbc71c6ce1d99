from __future__ import annotations

from typing import TYPE_CHECKING, Union

import numpy as np

if TYPE_CHECKING:
    from ..similarity.matrix import SimilarityMatrix


def build_distance_matrix(
    similarity: Union["SimilarityMatrix", np.ndarray],
    max_similarity: float = 1.0,
    min_similarity: float = 0.0,
    missing: float | None = None,
) -> np.ndarray:
    """
    Turn a similarity matrix into an n x n distance matrix.

    distance = (max - s) / (max - min), clamped to [0, 1]. Missing pairs
    (absent from a SimilarityMatrix, or NaN in an array) take the midpoint
    of the range so they pull the layout toward neither extreme. The result
    is symmetric with an exact zero diagonal.
    """
    span = max_similarity - min_similarity
    if span <= 0:
        raise ValueError("max_similarity must be greater than min_similarity")
    neutral = missing if missing is not None else (max_similarity + min_similarity) / 2.0

    if isinstance(similarity, np.ndarray):
        sims = np.array(similarity, dtype=float)
        if sims.ndim != 2 or sims.shape[0] != sims.shape[1]:
            raise ValueError(f"Similarity matrix must be square, got shape {sims.shape}")
        sims = np.where(np.isnan(sims), neutral, sims)
    else:
        sims = similarity.to_array(default=neutral)

    distances = np.clip((max_similarity - sims) / span, 0.0, 1.0)
    # Average with the transpose so one-sided noise cannot break symmetry.
    distances = (distances + distances.T) / 2.0
    np.fill_diagonal(distances, 0.0)
    return distances
