"""
Layout package: distance matrices and 2D dimensionality reduction.

Responsibilities:
- Convert bounded similarities into a symmetric [0, 1] distance matrix.
- Approximate the top eigenpairs of a symmetric matrix by power iteration.
- Embed a distance matrix in 2D with classical MDS or a force-directed
  stress minimizer, both seeded for reproducible output.
- Cluster items by perfumery note type without any similarity input.
"""
from .config import DEFAULT_LAYOUT_CONFIG, LayoutConfig
from .distance import build_distance_matrix
from .eigen import top_eigenpairs
from .force import force_directed_layout
from .mds import classical_mds, double_center
from .notes import note_type_layout
from .reducer import reduce

__all__ = [
    "DEFAULT_LAYOUT_CONFIG",
    "LayoutConfig",
    "build_distance_matrix",
    "classical_mds",
    "double_center",
    "force_directed_layout",
    "note_type_layout",
    "reduce",
    "top_eigenpairs",
]
