"""Centralized domain constants for follow/flee simulations.

Node attribute names, their integer encodings, the payoff matrix, and the
default lattice/population sizes all live here. Consuming modules should
import from this module rather than defining their own inline literals.
"""

from __future__ import annotations

STRATEGY_ATTR = "strategy"
"""Node attribute holding the strategy code (0 empty, 1 cooperator, 2 defector)."""

ACTIONS_ATTR = "actions"
"""Node attribute holding the 8-bit movement genome."""

SCORE_ATTR = "score"
"""Node attribute holding the payoff accumulated in the current generation."""

NODE_ATTRS: tuple[str, ...] = (STRATEGY_ATTR, ACTIONS_ATTR, SCORE_ATTR)
"""All per-node attributes copied on move/spawn and zeroed on evict."""

EMPTY = 0
COOPERATOR = 1
DEFECTOR = 2

GENOME_BITS = 8
"""Width of the action genome; four 2-bit behaviour codes."""

MAX_GENOME = (1 << GENOME_BITS) - 1
"""Largest valid genome value (255)."""

REWARD = 3
"""C vs C: reward for mutual cooperation."""

SUCKER = 0
"""C vs D: sucker's payoff."""

TEMPTATION = 5
"""D vs C: temptation to defect."""

PUNISHMENT = 1
"""D vs D: punishment for mutual defection."""

NEIGHBOURS_GRAPH_ATTR = "neighbours"
"""Graph-level attribute holding the per-node neighbour count of a regular lattice."""

GRID_WIDTH = 20
"""Default lattice width in cells."""

GRID_HEIGHT = 20
"""Default lattice height in cells."""

DENSITY = 0.5
"""Default fraction of lattice nodes occupied by agents."""

COOPERATOR_FRACTION = 0.5
"""Default fraction of the initial population playing cooperate."""

NUM_GENERATIONS = 100
"""Default number of generations per run."""

STEPS_PER_GENERATION = 10
"""Default number of micro-steps each agent takes per generation."""

REPLACEMENT_RATE = 0.1
"""Default fraction of the population replaced every generation."""

REP_MODE_UNSET = ""
REP_RATE_UNSET = -1.0
STEPS_PER_GEN_UNSET = -1
"""Sentinels for required model attributes; ``init`` fails if any is left unset."""
