from __future__ import annotations

import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import CacheCorrupt
from .config import DEFAULT_CACHE_CONFIG, CacheConfig
from .scores import MAX_SIMILARITY, SimilarityScore, pair_key

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_a: str
    item_b: str
    similarity: float = Field(..., ge=0.0, le=1.0)
    explanation: str | None = None
    source: str = "oracle"
    timestamp: datetime = Field(default_factory=_utcnow)


class CacheFile(BaseModel):
    generated_at: datetime = Field(default_factory=_utcnow)
    entries: dict[str, CacheEntry] = Field(default_factory=dict)


def read_cache_file(path: Path) -> CacheFile:
    """Parse a persisted cache, raising CacheCorrupt on unreadable or invalid content."""
    try:
        text = path.read_text(encoding="utf-8")
        return CacheFile.model_validate_json(text)
    except (OSError, UnicodeDecodeError, ValidationError) as exc:
        raise CacheCorrupt(f"Cannot read similarity cache {path}: {exc}") from exc


class SimilarityCache:
    """
    Pairwise similarity cache keyed by unordered item pair.

    Entries are written once and never mutated; the only invalidation is
    clear(). When a cache_path is configured the cache loads it on
    construction and writes it back every ``flush_every`` new entries and
    on flush().
    """

    def __init__(self, config: CacheConfig = DEFAULT_CACHE_CONFIG, autoload: bool = True):
        self.config = config
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._key_locks: dict[str, threading.Lock] = {}
        self._pending = 0
        self._hits = 0
        self._misses = 0
        if autoload:
            self.load()

    @property
    def path(self) -> Path | None:
        return Path(self.config.cache_path) if self.config.cache_path is not None else None

    # -- persistence ---------------------------------------------------------

    def load(self) -> int:
        """Replace in-memory entries with the persisted ones; never raises."""
        path = self.path
        if path is None:
            return 0
        if not path.exists():
            logger.info("No similarity cache at %s, starting empty", path)
            return 0
        try:
            cache_file = read_cache_file(path)
        except CacheCorrupt:
            logger.warning("Similarity cache at %s is corrupt, starting empty", path, exc_info=True)
            return 0

        with self._lock:
            self._entries = {pair_key(e.item_a, e.item_b): e for e in cache_file.entries.values()}
            self._pending = 0
        logger.info("Loaded %d cached similarity scores from %s", len(self._entries), path)
        return len(self._entries)

    def flush(self) -> bool:
        """Write the cache to disk atomically. Returns False if nothing was written."""
        path = self.path
        if path is None:
            return False
        with self._lock:
            payload = CacheFile(entries=dict(self._entries)).model_dump_json(indent=2)
            self._pending = 0
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=path.name, suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
        except OSError:
            logger.warning("Failed to save similarity cache to %s", path, exc_info=True)
            return False
        logger.debug("Similarity cache saved (%d entries)", len(self._entries))
        return True

    # -- access --------------------------------------------------------------

    def entry(self, a: str, b: str) -> CacheEntry | None:
        with self._lock:
            found = self._entries.get(pair_key(a, b))
            if found is None:
                self._misses += 1
            else:
                self._hits += 1
            return found

    def lookup(self, a: str, b: str) -> float | None:
        if a == b:
            return MAX_SIMILARITY
        found = self.entry(a, b)
        return found.similarity if found is not None else None

    def store(
        self,
        a: str,
        b: str,
        value: float,
        explanation: str | None = None,
        source: str = "oracle",
    ) -> CacheEntry | None:
        """
        Record a score for the pair. Self pairs, repeated keys and (unless
        cache_fallbacks is set) fallback scores are not stored.
        """
        if a == b:
            return None
        if source == "fallback" and not self.config.cache_fallbacks:
            return None

        key = pair_key(a, b)
        first, second = sorted((a, b))
        with self._lock:
            if key in self._entries:
                return self._entries[key]
            new_entry = CacheEntry(
                item_a=first, item_b=second, similarity=value,
                explanation=explanation, source=source,
            )
            self._entries[key] = new_entry
            self._pending += 1
            should_flush = self._pending >= self.config.flush_every
        if should_flush:
            self.flush()
        return new_entry

    def get_or_compute(
        self,
        a: str,
        b: str,
        compute: Callable[[], SimilarityScore],
    ) -> tuple[SimilarityScore, bool]:
        """
        Return the cached score for a pair, computing and storing it on a miss.

        The lookup and the store happen under a per-pair lock, so concurrent
        callers asking for the same pair trigger a single computation. The
        second value is True on a cache hit.
        """
        if a == b:
            return SimilarityScore(MAX_SIMILARITY, "self-similarity", "self"), True

        key = pair_key(a, b)
        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            cached = self.entry(a, b)
            if cached is not None:
                return SimilarityScore(cached.similarity, cached.explanation, cached.source), True
            score = compute()
            stored = self.store(a, b, score.value, score.explanation, score.source)
            if stored is not None:
                # later callers find the entry, so the pair no longer needs a lock
                with self._lock:
                    self._key_locks.pop(key, None)
            return score, False

    def clear(self, persist: bool = True) -> None:
        with self._lock:
            self._entries.clear()
            self._key_locks.clear()
            self._pending = 0
            self._hits = 0
            self._misses = 0
        if persist:
            self.flush()

    def stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
                "pair_locks": len(self._key_locks),
            }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        return pair_key(*pair) in self._entries
