"""Configuration layer: constants and typed config dataclasses."""

from followflee.config.constants import (
    COOPERATOR,
    DEFECTOR,
    EMPTY,
    MAX_GENOME,
    NODE_ATTRS,
)
from followflee.config.types import (
    GenerationStats,
    LatticeConfig,
    ModelConfig,
    PopulationConfig,
    ReplacementMode,
    RunConfig,
    RunResult,
)

__all__ = [
    "COOPERATOR",
    "DEFECTOR",
    "EMPTY",
    "GenerationStats",
    "LatticeConfig",
    "MAX_GENOME",
    "ModelConfig",
    "NODE_ATTRS",
    "PopulationConfig",
    "ReplacementMode",
    "RunConfig",
    "RunResult",
]
