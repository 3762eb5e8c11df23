from .loader import load_config, load_config_with_overrides
from .schema import (
    PrioritiserConfig,
    RunOptions,
    ScoringThresholds,
    BenchmarkTarget,
    NetworkConfig,
)

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "PrioritiserConfig",
    "RunOptions",
    "ScoringThresholds",
    "BenchmarkTarget",
    "NetworkConfig",
]
