from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LayoutConfig:
    method: str = "mds"
    mds_iterations: int = 100
    force_iterations: int = 200
    learning_rate: float = 0.1
    # divide learning_rate by (n - 1) so each point moves by the mean pair correction
    scale_step: bool = False
    epsilon: float = 0.001
    seed: int = 42


DEFAULT_LAYOUT_CONFIG = LayoutConfig()
