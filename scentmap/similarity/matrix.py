from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from datetime import datetime, timezone
from itertools import combinations

import numpy as np

from ..catalog.models import Catalog, Item
from .cache import SimilarityCache
from .config import DEFAULT_MATRIX_CONFIG, MatrixConfig
from .oracle import FallbackPolicy, SimilarityOracle, get_fallback
from .scores import MAX_SIMILARITY, NEUTRAL_SIMILARITY, SimilarityScore, pair_key

logger = logging.getLogger(__name__)


@dataclass
class SimilarityMatrix:
    """Symmetric pairwise similarities on [0, 1] for a fixed, ordered set of ids."""

    ids: list[str]
    scores: dict[str, SimilarityScore] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def set(self, a: str, b: str, score: SimilarityScore) -> None:
        if a != b:
            self.scores[pair_key(a, b)] = score

    def get(self, a: str, b: str) -> float | None:
        if a == b:
            return MAX_SIMILARITY
        found = self.scores.get(pair_key(a, b))
        return found.value if found is not None else None

    @property
    def comparisons(self) -> int:
        return len(self.scores)

    @property
    def fallback_count(self) -> int:
        return sum(1 for s in self.scores.values() if s.source == "fallback")

    def to_array(self, default: float = NEUTRAL_SIMILARITY) -> np.ndarray:
        n = len(self.ids)
        array = np.full((n, n), default, dtype=float)
        for i, j in combinations(range(n), 2):
            value = self.get(self.ids[i], self.ids[j])
            if value is not None:
                array[i, j] = array[j, i] = value
        np.fill_diagonal(array, MAX_SIMILARITY)
        return array

    def to_dict(self) -> dict[str, dict[str, float]]:
        """Nested {a: {b: similarity}} over every ordered pair that has a score, self pairs included."""
        out: dict[str, dict[str, float]] = {}
        for a in self.ids:
            row: dict[str, float] = {}
            for b in self.ids:
                value = self.get(a, b)
                if value is not None:
                    row[b] = value
            out[a] = row
        return out


def _call_oracle(
    oracle: SimilarityOracle,
    item_a: Item,
    item_b: Item,
    timeout: float | None,
) -> SimilarityScore:
    """Run one oracle call, raising FuturesTimeoutError if it outlives ``timeout``."""
    if timeout is None:
        return oracle.get_similarity(item_a, item_b)
    # A stuck call cannot be interrupted; its worker thread is abandoned.
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="oracle")
    try:
        future = executor.submit(oracle.get_similarity, item_a, item_b)
        return future.result(timeout=timeout)
    finally:
        executor.shutdown(wait=False)


def _score_pair(
    item_a: Item,
    item_b: Item,
    oracle: SimilarityOracle,
    fallback: FallbackPolicy,
    timeout: float | None = None,
) -> SimilarityScore:
    try:
        return _call_oracle(oracle, item_a, item_b, timeout)
    except FuturesTimeoutError:
        logger.warning(
            "Similarity oracle %s timed out after %.1fs for %s-%s, using fallback score",
            oracle.name, timeout, item_a.id, item_b.id,
        )
        return fallback(item_a, item_b)
    except Exception:
        logger.warning(
            "Similarity oracle %s failed for %s-%s, using fallback score",
            oracle.name, item_a.id, item_b.id, exc_info=True,
        )
        return fallback(item_a, item_b)


def generate_similarity_matrix(
    catalog: Catalog,
    oracle: SimilarityOracle,
    cache: SimilarityCache,
    config: MatrixConfig = DEFAULT_MATRIX_CONFIG,
) -> SimilarityMatrix:
    """
    Score every unordered pair of catalog items.

    Cached pairs are reused; the rest go to the oracle. A failing oracle
    call, or one running past ``config.oracle_timeout`` seconds, never aborts
    the run: the configured fallback supplies the score instead. The cache
    is flushed once when all pairs are done.
    """
    start_time = time.time()
    fallback = get_fallback(config.fallback)
    ids = catalog.ids
    pairs = list(combinations(ids, 2))
    total = len(pairs)
    logger.info("Generating similarity matrix for %d items (%d pairs)", len(ids), total)

    matrix = SimilarityMatrix(ids=ids)
    hits = 0

    def _resolve(pair: tuple[str, str]) -> tuple[tuple[str, str], SimilarityScore, bool]:
        a, b = pair
        score, hit = cache.get_or_compute(
            a, b,
            lambda: _score_pair(catalog[a], catalog[b], oracle, fallback, config.oracle_timeout),
        )
        return pair, score, hit

    def _record(done: int, pair: tuple[str, str], score: SimilarityScore) -> None:
        matrix.set(pair[0], pair[1], score)
        if config.progress_every and (done % config.progress_every == 0 or done == total):
            logger.info("Progress: %d/%d (%.1f%%)", done, total, done / total * 100)

    if config.max_workers > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
            for done, (pair, score, hit) in enumerate(pool.map(_resolve, pairs), start=1):
                hits += hit
                _record(done, pair, score)
    else:
        for done, pair in enumerate(pairs, start=1):
            pair, score, hit = _resolve(pair)
            hits += hit
            _record(done, pair, score)

    cache.flush()

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    logger.info(
        "Similarity matrix complete: %d pairs, %d cached, %d fallbacks, %.1f ms",
        total, hits, matrix.fallback_count, elapsed_ms,
    )
    return matrix
