from __future__ import annotations

import numpy as np

from .config import DEFAULT_LAYOUT_CONFIG, LayoutConfig
from .mds import validate_distances


def force_directed_layout(
    distances: np.ndarray,
    config: LayoutConfig = DEFAULT_LAYOUT_CONFIG,
) -> np.ndarray:
    """
    Damped gradient descent on pairwise stress.

    Points start uniformly in [-1, 1]^2. Each iteration sums, for every
    pair, a correction of (current - target) * learning_rate along the
    line joining the two points, then applies all displacements at once.
    Runs for a fixed number of iterations with no convergence check.

    Each point sums n - 1 corrections, so with the plain rate the step
    grows with the item count and overshoots beyond a handful of items.
    Set ``config.scale_step`` for larger catalogs; with two items both
    settings are identical.
    """
    targets = validate_distances(distances)
    n = targets.shape[0]
    rng = np.random.default_rng(config.seed)
    coords = (rng.random((n, 2)) - 0.5) * 2

    rows, cols = np.triu_indices(n, k=1)
    pair_targets = targets[rows, cols]
    rate = config.learning_rate / (n - 1) if config.scale_step else config.learning_rate

    for _ in range(config.force_iterations):
        delta = coords[rows] - coords[cols]
        current = np.maximum(np.hypot(delta[:, 0], delta[:, 1]), config.epsilon)
        force = (current - pair_targets) * rate
        step = (force / current)[:, None] * delta

        displacement = np.zeros_like(coords)
        np.subtract.at(displacement, rows, step)
        np.add.at(displacement, cols, step)
        coords = coords + displacement

    return coords
