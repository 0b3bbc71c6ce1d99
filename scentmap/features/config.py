from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FeatureConfig:
    power_iterations: int = 50
    seed: int = 42


DEFAULT_FEATURE_CONFIG = FeatureConfig()
