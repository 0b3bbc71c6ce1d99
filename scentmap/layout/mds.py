from __future__ import annotations

import logging

import numpy as np

from ..errors import DegenerateInputError
from .config import DEFAULT_LAYOUT_CONFIG, LayoutConfig
from .eigen import top_eigenpairs

logger = logging.getLogger(__name__)


def validate_distances(distances: np.ndarray) -> np.ndarray:
    d = np.asarray(distances, dtype=float)
    if d.ndim != 2 or d.shape[0] != d.shape[1]:
        raise ValueError(f"Distance matrix must be square, got shape {d.shape}")
    if d.shape[0] < 2:
        raise DegenerateInputError("At least 2 items are required to compute a layout")
    return d


def double_center(d_squared: np.ndarray) -> np.ndarray:
    """B = -0.5 * (D2 - rowMean - colMean + grandMean)."""
    row_means = d_squared.mean(axis=1, keepdims=True)
    col_means = d_squared.mean(axis=0, keepdims=True)
    grand_mean = d_squared.mean()
    return -0.5 * (d_squared - row_means - col_means + grand_mean)


def classical_mds(
    distances: np.ndarray,
    n_components: int = 2,
    config: LayoutConfig = DEFAULT_LAYOUT_CONFIG,
) -> np.ndarray:
    """
    Classical (metric) MDS with power-iteration eigenpairs.

    Returns an (n, n_components) array. Negative eigenvalues, which show up
    for non-Euclidean distances, contribute through their absolute value.
    """
    d = validate_distances(distances)
    b = double_center(d ** 2)

    k = min(n_components, d.shape[0])
    eigenvalues, eigenvectors = top_eigenpairs(
        b, k, iterations=config.mds_iterations, seed=config.seed,
    )
    if np.any(eigenvalues < 0):
        logger.debug("MDS found negative eigenvalues %s, using magnitudes", eigenvalues)

    coords = np.zeros((d.shape[0], n_components))
    coords[:, :k] = eigenvectors * np.sqrt(np.abs(eigenvalues))
    return coords
