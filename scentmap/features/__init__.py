"""
Feature vectors from descriptor notes.

Responsibilities:
- Build the shared note vocabulary for a catalog.
- Weight each item's notes TF-IDF style (length-normalized term frequency,
  item-level document frequency).
- Project feature vectors straight to 2D with a power-iteration PCA, or
  turn them into a distance matrix for the MDS/force reducers.
"""
from .config import DEFAULT_FEATURE_CONFIG, FeatureConfig
from .pca import pca_project
from .vectorizer import FeatureMatrix, build_vocabulary, feature_distances, vectorize

__all__ = [
    "DEFAULT_FEATURE_CONFIG",
    "FeatureConfig",
    "FeatureMatrix",
    "build_vocabulary",
    "feature_distances",
    "pca_project",
    "vectorize",
]
