"""
Similarity acquisition layer.

Responsibilities:
- Define the oracle interface and its implementations (rule-based
  heuristic, Groq chat model, local command).
- Cache pairwise scores by unordered pair and persist them across runs.
- Assemble the full pairwise similarity matrix, falling back to a
  deterministic score whenever an oracle call fails.
"""
from .cache import SimilarityCache
from .command_oracle import CommandOracle
from .groq_oracle import GroqOracle
from .matrix import SimilarityMatrix, generate_similarity_matrix
from .oracle import HeuristicOracle, SimilarityOracle, category_fallback, heuristic_fallback
from .scores import SimilarityScore, normalize_score, pair_key

__all__ = [
    "CommandOracle",
    "GroqOracle",
    "HeuristicOracle",
    "SimilarityCache",
    "SimilarityMatrix",
    "SimilarityOracle",
    "SimilarityScore",
    "category_fallback",
    "generate_similarity_matrix",
    "heuristic_fallback",
    "normalize_score",
    "pair_key",
]
