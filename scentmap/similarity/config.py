"""
Similarity acquisition settings.

Loads the project's .env so the Groq API key can live outside the code.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DATA_DIR = Path(__file__).resolve().parent.parent.parent / "data"


@dataclass(frozen=True)
class OracleConfig:
    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = "llama-3.3-70b-versatile"
    timeout: float = 30.0
    max_tokens: int = 150
    temperature: float = 0.3
    enabled: bool = True


@dataclass(frozen=True)
class CacheConfig:
    cache_path: Path | None = _DATA_DIR / "similarity_cache.json"
    flush_every: int = 5
    cache_fallbacks: bool = True


@dataclass(frozen=True)
class MatrixConfig:
    max_workers: int = 1
    fallback: str = "category"
    progress_every: int = 10
    # seconds per oracle call before the fallback is used; None waits forever
    oracle_timeout: float | None = 180.0


DEFAULT_ORACLE_CONFIG = OracleConfig()
DEFAULT_CACHE_CONFIG = CacheConfig()
DEFAULT_MATRIX_CONFIG = MatrixConfig()
