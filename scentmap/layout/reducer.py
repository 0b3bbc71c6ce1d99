from __future__ import annotations

import numpy as np

from .config import DEFAULT_LAYOUT_CONFIG, LayoutConfig
from .force import force_directed_layout
from .mds import classical_mds

METHODS = ("mds", "force")


def reduce(
    distances: np.ndarray,
    method: str | None = None,
    config: LayoutConfig = DEFAULT_LAYOUT_CONFIG,
) -> np.ndarray:
    """Run the configured reducer over a distance matrix, returning (n, 2) coordinates."""
    method = method or config.method
    if method == "mds":
        return classical_mds(distances, n_components=2, config=config)
    if method == "force":
        return force_directed_layout(distances, config=config)
    raise ValueError(f"Unknown layout method '{method}'. Available: {list(METHODS)}")
