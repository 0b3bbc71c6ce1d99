import json
import subprocess
import threading
import time
from itertools import combinations
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest

from scentmap.catalog.models import Catalog, Item
from scentmap.errors import OracleUnavailable
from scentmap.similarity.cache import SimilarityCache
from scentmap.similarity.command_oracle import CommandOracle
from scentmap.similarity.config import CacheConfig, MatrixConfig
from scentmap.similarity.matrix import generate_similarity_matrix
from scentmap.similarity.oracle import HeuristicOracle, SimilarityOracle
from scentmap.similarity.scores import SimilarityScore, pair_key

CATALOG = Catalog.from_records({
    "a": {"notes": ["fresh", "green"], "category": "x", "intensity": "light"},
    "b": {"notes": ["fresh", "sweet"], "category": "x", "intensity": "medium"},
    "c": {"notes": ["smoky"], "category": "y", "intensity": "heavy"},
    "d": {"notes": ["sweet", "warm"], "category": "y", "intensity": "strong"},
})


class FailingOracle(SimilarityOracle):
    def __init__(self, exc: Exception = OracleUnavailable("model offline")):
        self.exc = exc

    @property
    def name(self) -> str:
        return "failing"

    def get_similarity(self, item_a: Item, item_b: Item) -> SimilarityScore:
        raise self.exc


class CountingOracle(SimilarityOracle):
    """Order-sensitive scores, so a second call for (b, a) would be detectable."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "counting"

    def get_similarity(self, item_a: Item, item_b: Item) -> SimilarityScore:
        with self._lock:
            self.calls.append((item_a.id, item_b.id))
        return SimilarityScore(0.1 * ord(item_a.id[0]) % 1.0, f"{item_a.id}->{item_b.id}")


class StuckOracle(SimilarityOracle):
    """Blocks until released, like a model request that never answers."""

    def __init__(self):
        self.release = threading.Event()

    @property
    def name(self) -> str:
        return "stuck"

    def get_similarity(self, item_a: Item, item_b: Item) -> SimilarityScore:
        self.release.wait(timeout=5.0)
        return SimilarityScore(0.9)


class NanOracle(SimilarityOracle):
    @property
    def name(self) -> str:
        return "nan"

    def get_similarity(self, item_a: Item, item_b: Item) -> SimilarityScore:
        return SimilarityScore(float("nan"))

def _memory_cache(**kwargs) -> SimilarityCache:
    return SimilarityCache(CacheConfig(cache_path=None, **kwargs))


def test_matrix_is_symmetric_with_max_diagonal():
    matrix = generate_similarity_matrix(CATALOG, CountingOracle(), _memory_cache())
    for a in CATALOG.ids:
        assert matrix.get(a, a) == 1.0
        for b in CATALOG.ids:
            assert matrix.get(a, b) == matrix.get(b, a)
    array = matrix.to_array()
    np.testing.assert_array_equal(array, array.T)
    assert np.all(np.diag(array) == 1.0)


def test_one_oracle_call_per_unordered_pair():
    oracle = CountingOracle()
    matrix = generate_similarity_matrix(CATALOG, oracle, _memory_cache())
    assert len(oracle.calls) == 6
    assert matrix.comparisons == 6


def test_failed_oracle_calls_use_category_fallback():
    cache = _memory_cache()
    matrix = generate_similarity_matrix(CATALOG, FailingOracle(), cache)

    assert matrix.get("a", "b") == 0.6
    assert matrix.get("c", "d") == 0.6
    assert matrix.get("a", "c") == 0.3
    assert matrix.fallback_count == 6
    assert cache.lookup("b", "a") == 0.6
    assert cache.entry("a", "c").explanation == "Fallback score: different categories"


def test_unexpected_oracle_errors_also_fall_back():
    matrix = generate_similarity_matrix(CATALOG, FailingOracle(RuntimeError("boom")), _memory_cache())
    assert matrix.get("a", "d") == 0.3


@patch("scentmap.similarity.command_oracle.subprocess.run")
def test_nan_command_reply_uses_category_fallback(mock_run):
    mock_run.return_value = subprocess.CompletedProcess(
        args=[], returncode=0, stdout="SIMILARITY_RESULT: nan\n", stderr="",
    )
    matrix = generate_similarity_matrix(
        CATALOG.subset(["a", "c"]), CommandOracle(["bare", "similarity.js"]), _memory_cache(),
    )
    assert matrix.get("a", "c") == 0.3
    assert matrix.fallback_count == 1


def test_nan_scores_from_an_oracle_use_fallback():
    matrix = generate_similarity_matrix(CATALOG.subset(["a", "b"]), NanOracle(), _memory_cache())
    assert matrix.get("a", "b") == 0.6


def test_stuck_oracle_times_out_to_fallback():
    oracle = StuckOracle()
    start = time.time()
    try:
        matrix = generate_similarity_matrix(
            CATALOG.subset(["a", "b"]), oracle, _memory_cache(), MatrixConfig(oracle_timeout=0.05),
        )
    finally:
        oracle.release.set()

    assert time.time() - start < 2.0
    assert matrix.get("a", "b") == 0.6
    assert matrix.scores[pair_key("a", "b")].source == "fallback"


def test_oracle_without_timeout_is_called_directly():
    oracle = CountingOracle()
    matrix = generate_similarity_matrix(CATALOG, oracle, _memory_cache(), MatrixConfig(oracle_timeout=None))
    assert len(oracle.calls) == 6
    assert matrix.fallback_count == 0


def test_heuristic_fallback_policy():
    matrix = generate_similarity_matrix(
        CATALOG, FailingOracle(), _memory_cache(), MatrixConfig(fallback="heuristic"),
    )
    expected = HeuristicOracle().get_similarity(CATALOG["a"], CATALOG["b"]).value
    assert matrix.get("a", "b") == pytest.approx(expected)


def test_cached_pairs_skip_the_oracle():
    cache = _memory_cache()
    first = CountingOracle()
    generate_similarity_matrix(CATALOG, first, cache)

    second = CountingOracle()
    matrix = generate_similarity_matrix(CATALOG, second, cache)
    assert second.calls == []
    assert matrix.comparisons == 6


def test_fallbacks_not_cached_are_retried():
    cache = _memory_cache(cache_fallbacks=False)
    generate_similarity_matrix(CATALOG, FailingOracle(), cache)
    assert len(cache) == 0

    oracle = CountingOracle()
    generate_similarity_matrix(CATALOG, oracle, cache)
    assert len(oracle.calls) == 6


def test_cache_is_flushed_at_end_of_generation(tmp_path: Path):
    path = tmp_path / "cache.json"
    cache = SimilarityCache(CacheConfig(cache_path=path, flush_every=100))
    generate_similarity_matrix(CATALOG, HeuristicOracle(), cache)

    payload = json.loads(path.read_text())
    assert len(payload["entries"]) == 6


def test_concurrent_generation_matches_sequential():
    sequential = generate_similarity_matrix(CATALOG, CountingOracle(), _memory_cache())

    oracle = CountingOracle()
    concurrent = generate_similarity_matrix(
        CATALOG, oracle, _memory_cache(), MatrixConfig(max_workers=4),
    )
    assert len(oracle.calls) == 6
    for a, b in combinations(CATALOG.ids, 2):
        assert concurrent.get(a, b) == sequential.get(a, b)


def test_to_dict_includes_self_pairs():
    matrix = generate_similarity_matrix(CATALOG, HeuristicOracle(), _memory_cache())
    as_dict = matrix.to_dict()
    assert set(as_dict) == set(CATALOG.ids)
    assert all(as_dict[i][i] == 1.0 for i in CATALOG.ids)
    assert as_dict["a"]["b"] == as_dict["b"]["a"]
