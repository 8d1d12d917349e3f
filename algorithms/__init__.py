from .math_tools import MathTools
from .aggregation import DAY_MS, VolumeAggregator
from .guardrails import GuardrailEvaluator, GuardrailResult
from .statistics import StatsBuilder
from .progression import (
    IsometricStrategy,
    ProgressionStrategy,
    RepsStrategy,
    WeightedRepsStrategy,
    compute_next_target,
    compute_stats,
    strategy_for,
    validate_log,
)

__all__ = [
    "MathTools",
    "DAY_MS",
    "VolumeAggregator",
    "GuardrailEvaluator",
    "GuardrailResult",
    "StatsBuilder",
    "ProgressionStrategy",
    "RepsStrategy",
    "WeightedRepsStrategy",
    "IsometricStrategy",
    "compute_next_target",
    "compute_stats",
    "strategy_for",
    "validate_log",
]
