from __future__ import annotations

import numpy as np

from ..errors import DegenerateInputError
from ..layout.eigen import top_eigenpairs
from .config import DEFAULT_FEATURE_CONFIG, FeatureConfig
from .vectorizer import FeatureMatrix


def pca_project(
    features: FeatureMatrix,
    n_components: int = 2,
    config: FeatureConfig = DEFAULT_FEATURE_CONFIG,
) -> np.ndarray:
    """
    Project feature vectors onto their top principal axes.

    Columns are centered, the sample covariance (n - 1 denominator) is
    decomposed with power iteration, and each centered row is projected on
    the resulting axes. Axes the vocabulary cannot supply stay at 0.
    """
    data = np.asarray(features.weights, dtype=float)
    n_items, n_features = data.shape
    if n_items < 2:
        raise DegenerateInputError("PCA needs at least 2 items")

    centered = data - data.mean(axis=0, keepdims=True)
    coords = np.zeros((n_items, n_components))
    if n_features == 0:
        return coords

    covariance = centered.T @ centered / (n_items - 1)
    k = min(n_components, n_features)
    _, axes = top_eigenpairs(
        covariance, k, iterations=config.power_iterations, seed=config.seed,
    )
    coords[:, :k] = centered @ axes
    return coords
