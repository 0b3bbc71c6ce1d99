"""
Similarity-to-embedding pipeline.

Usage:
    python -m scentmap.pipeline [output.json]
"""
from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

from .catalog.loader import load_catalog
from .catalog.models import Catalog
from .embedding.assembler import assemble_embedding, save_embedding
from .embedding.models import EmbeddingResult
from .errors import DegenerateInputError
from .features.config import DEFAULT_FEATURE_CONFIG, FeatureConfig
from .features.pca import pca_project
from .features.vectorizer import feature_distances, vectorize
from .layout.config import DEFAULT_LAYOUT_CONFIG, LayoutConfig
from .layout.distance import build_distance_matrix
from .layout.notes import note_type_layout
from .layout.reducer import reduce
from .similarity.cache import SimilarityCache
from .similarity.config import (
    DEFAULT_CACHE_CONFIG,
    DEFAULT_MATRIX_CONFIG,
    DEFAULT_ORACLE_CONFIG,
    CacheConfig,
    MatrixConfig,
    OracleConfig,
)
from .similarity.groq_oracle import GroqOracle
from .similarity.matrix import SimilarityMatrix, generate_similarity_matrix
from .similarity.oracle import HeuristicOracle, SimilarityOracle

logger = logging.getLogger(__name__)

_DEFAULT_OUTPUT = Path(__file__).resolve().parent.parent / "data" / "embeddings.json"


class EmbeddingEngine:
    """
    Turns a catalog into 2D coordinates.

    Every collaborator is passed in; an engine owns its cache and the
    matrices it builds, so separate engines never share state.
    """

    def __init__(
        self,
        catalog: Catalog,
        oracle: SimilarityOracle | None = None,
        cache: SimilarityCache | None = None,
        matrix_config: MatrixConfig = DEFAULT_MATRIX_CONFIG,
        layout_config: LayoutConfig = DEFAULT_LAYOUT_CONFIG,
        feature_config: FeatureConfig = DEFAULT_FEATURE_CONFIG,
    ):
        self.catalog = catalog
        self.oracle = oracle if oracle is not None else HeuristicOracle()
        self.cache = cache if cache is not None else SimilarityCache(CacheConfig(cache_path=None))
        self.matrix_config = matrix_config
        self.layout_config = layout_config
        self.feature_config = feature_config

    def _require_items(self) -> None:
        if len(self.catalog) < 2:
            raise DegenerateInputError(
                f"At least 2 items are required to build an embedding, got {len(self.catalog)}"
            )

    def similarity_matrix(self) -> SimilarityMatrix:
        return generate_similarity_matrix(
            self.catalog, self.oracle, self.cache, self.matrix_config,
        )

    def embed(
        self,
        method: str | None = None,
        similarity: SimilarityMatrix | None = None,
    ) -> EmbeddingResult:
        """Oracle path: similarities -> distances -> MDS or force layout."""
        self._require_items()
        method = method or self.layout_config.method

        if similarity is None:
            similarity = self.similarity_matrix()

        start_time = time.time()
        distances = build_distance_matrix(similarity)
        coords = reduce(distances, method=method, config=self.layout_config)
        elapsed_ms = round((time.time() - start_time) * 1000, 1)
        logger.info("Computed %s layout for %d items in %.1f ms", method, len(similarity.ids), elapsed_ms)

        return assemble_embedding(
            similarity.ids, coords, self.catalog, similarity=similarity,
            method=f"{self.oracle.name} + {method}",
        )

    def embed_features(self, method: str = "pca") -> EmbeddingResult:
        """Feature path: note TF-IDF vectors -> PCA, or -> cosine distances -> MDS/force."""
        self._require_items()
        start_time = time.time()
        features = vectorize(self.catalog)

        if method == "pca":
            coords = pca_project(features, n_components=2, config=self.feature_config)
        else:
            coords = reduce(feature_distances(features), method=method, config=self.layout_config)

        elapsed_ms = round((time.time() - start_time) * 1000, 1)
        logger.info("Computed tf-idf + %s layout for %d items in %.1f ms", method, len(features.ids), elapsed_ms)
        return assemble_embedding(
            features.ids, coords, self.catalog, method=f"tf-idf + {method}",
        )

    def embed_notes(self) -> EmbeddingResult:
        """Attribute path: top/middle/base note clusters, no similarities needed."""
        self._require_items()
        start_time = time.time()
        coords = note_type_layout(list(self.catalog.values()), config=self.layout_config)
        elapsed_ms = round((time.time() - start_time) * 1000, 1)
        logger.info("Computed note type layout for %d items in %.1f ms", len(self.catalog), elapsed_ms)
        return assemble_embedding(
            self.catalog.ids, coords, self.catalog,
            method="perfumery notes", include_note_types=True,
        )


def build_default_engine(
    oracle_config: OracleConfig = DEFAULT_ORACLE_CONFIG,
    cache_config: CacheConfig = DEFAULT_CACHE_CONFIG,
) -> EmbeddingEngine:
    """Bundled catalog, file-backed cache, and the Groq oracle when a key is configured."""
    groq = GroqOracle(oracle_config)
    oracle: SimilarityOracle = groq if groq.available else HeuristicOracle()
    if not groq.available:
        logger.info("GROQ_API_KEY not set, using heuristic similarity oracle")
    return EmbeddingEngine(
        catalog=load_catalog(),
        oracle=oracle,
        cache=SimilarityCache(cache_config),
    )


def run_pipeline(output_path: Path = _DEFAULT_OUTPUT) -> Path:
    engine = build_default_engine()
    result = engine.embed()
    return save_embedding(result, output_path)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    out = run_pipeline(Path(sys.argv[1])) if len(sys.argv) > 1 else run_pipeline()
    print(f"Embedding saved to: {out}")
