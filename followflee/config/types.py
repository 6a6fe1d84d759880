"""Configuration dataclasses for follow/flee simulation runs.

All frozen dataclasses that parameterise the model, the lattice, the initial
population and a full run live here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from followflee.config.constants import (
    COOPERATOR_FRACTION,
    DENSITY,
    GRID_HEIGHT,
    GRID_WIDTH,
    MAX_GENOME,
    NUM_GENERATIONS,
    REP_MODE_UNSET,
    REP_RATE_UNSET,
    REPLACEMENT_RATE,
    STEPS_PER_GEN_UNSET,
    STEPS_PER_GENERATION,
)

__all__ = [
    "GenerationStats",
    "LatticeConfig",
    "ModelConfig",
    "PopulationConfig",
    "ReplacementMode",
    "RunConfig",
    "RunResult",
]

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ReplacementMode(Enum):
    """Birth/death rule applied at the end of every generation."""

    SIMPLE_BD = "simpleBD"
    NEIGHBOUR_BD = "neighbourBD"


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModelConfig:
    """Model attributes read once at initialisation.

    Defaults are the unset sentinels; :meth:`is_complete` reports whether every
    required attribute was provided with a usable value.
    """

    rep_mode: str = REP_MODE_UNSET
    rep_rate: float = REP_RATE_UNSET
    steps_per_gen: int = STEPS_PER_GEN_UNSET
    rank_by_score: bool = True

    @classmethod
    def from_attrs(cls, attrs: Mapping[str, object]) -> "ModelConfig":
        """Build from the camelCase attribute map a host passes to the model."""
        return cls(
            rep_mode=str(attrs.get("repMode", REP_MODE_UNSET)),
            rep_rate=float(attrs.get("repRate", REP_RATE_UNSET)),  # type: ignore[arg-type]
            steps_per_gen=int(attrs.get("stepsPerGen", STEPS_PER_GEN_UNSET)),  # type: ignore[call-overload]
            rank_by_score=bool(attrs.get("rankByScore", True)),
        )

    def to_attrs(self) -> dict[str, object]:
        """Inverse of :meth:`from_attrs`."""
        return {
            "repMode": self.rep_mode,
            "repRate": self.rep_rate,
            "stepsPerGen": self.steps_per_gen,
            "rankByScore": self.rank_by_score,
        }

    def missing(self) -> list[str]:
        """Names of required attributes left at their sentinel or out of range."""
        missing: list[str] = []
        if self.rep_mode == REP_MODE_UNSET:
            missing.append("repMode")
        if not 0.0 <= self.rep_rate <= 1.0:
            missing.append("repRate")
        if self.steps_per_gen < 1:
            missing.append("stepsPerGen")
        return missing

    def is_complete(self) -> bool:
        return not self.missing()


@dataclass(frozen=True)
class LatticeConfig:
    """Square lattice topology."""

    width: int = GRID_WIDTH
    height: int = GRID_HEIGHT
    neighbours: int = 4
    periodic: bool = True

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError("lattice must be at least 1x1")
        if self.neighbours not in (4, 8):
            raise ValueError("neighbours must be 4 (von Neumann) or 8 (Moore)")

    @property
    def num_nodes(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class PopulationConfig:
    """Initial population layout."""

    density: float = DENSITY
    cooperator_fraction: float = COOPERATOR_FRACTION
    actions: int | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.density <= 1.0:
            raise ValueError("density must be in [0.0, 1.0]")
        if not 0.0 <= self.cooperator_fraction <= 1.0:
            raise ValueError("cooperator_fraction must be in [0.0, 1.0]")
        if self.actions is not None and not 0 <= self.actions <= MAX_GENOME:
            raise ValueError(f"actions must be in [0, {MAX_GENOME}]")


@dataclass(frozen=True)
class RunConfig:
    """Everything needed to reproduce one simulation run."""

    lattice: LatticeConfig = field(default_factory=LatticeConfig)
    population: PopulationConfig = field(default_factory=PopulationConfig)
    model: ModelConfig = field(
        default_factory=lambda: ModelConfig(
            rep_mode=ReplacementMode.SIMPLE_BD.value,
            rep_rate=REPLACEMENT_RATE,
            steps_per_gen=STEPS_PER_GENERATION,
        )
    )
    generations: int = NUM_GENERATIONS
    seed: int = 0

    def __post_init__(self) -> None:
        if self.generations < 0:
            raise ValueError("generations must be >= 0")


# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GenerationStats:
    """Population summary taken after one generation's replacement phase."""

    generation: int
    num_agents: int
    num_cooperators: int
    cooperator_fraction: float
    mean_score: float
    score_variance: float
    genome_entropy: float
    same_strategy_adjacency: float
    cluster_count: int


@dataclass(frozen=True)
class RunResult:
    """Top-level result for one simulation run."""

    config: RunConfig
    history: tuple[GenerationStats, ...]

    @property
    def final(self) -> GenerationStats | None:
        return self.history[-1] if self.history else None
