from __future__ import annotations

import numpy as np


def _normalize(vector: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vector)
    return vector / norm if norm > 0 else vector


def top_eigenpairs(
    matrix: np.ndarray,
    k: int,
    iterations: int = 100,
    seed: int | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Approximate the k dominant eigenpairs of a symmetric matrix.

    Power iteration from a random start, renormalizing every step, for a
    fixed number of iterations; each found component is deflated out
    (M - lambda * v v^T) before the next one is extracted. Eigenvalues are
    Rayleigh quotients and keep their sign.

    Returns (eigenvalues of shape (k,), eigenvectors of shape (n, k)).
    """
    working = np.array(matrix, dtype=float)
    if working.ndim != 2 or working.shape[0] != working.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {working.shape}")
    n = working.shape[0]
    if not 0 < k <= n:
        raise ValueError(f"k must be in [1, {n}], got {k}")

    rng = np.random.default_rng(seed)
    eigenvalues = np.zeros(k)
    eigenvectors = np.zeros((n, k))

    for component in range(k):
        vector = _normalize(rng.random(n) - 0.5)
        for _ in range(iterations):
            vector = _normalize(working @ vector)

        eigenvalue = float(vector @ (working @ vector))
        eigenvalues[component] = eigenvalue
        eigenvectors[:, component] = vector

        working = working - eigenvalue * np.outer(vector, vector)

    return eigenvalues, eigenvectors
