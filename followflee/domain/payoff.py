"""Prisoner's dilemma payoff engine."""

from __future__ import annotations

from followflee.config.constants import (
    COOPERATOR,
    DEFECTOR,
    PUNISHMENT,
    REWARD,
    SUCKER,
    TEMPTATION,
)
from followflee.domain.errors import InvariantViolation

PAYOFF_MATRIX: dict[tuple[int, int], int] = {
    (COOPERATOR, COOPERATOR): REWARD,
    (COOPERATOR, DEFECTOR): SUCKER,
    (DEFECTOR, COOPERATOR): TEMPTATION,
    (DEFECTOR, DEFECTOR): PUNISHMENT,
}
"""(acting strategy, opponent strategy) -> reward received by the actor."""


def payoff(strategy_a: int, strategy_b: int) -> int:
    """Return the reward ``strategy_a`` receives when playing against ``strategy_b``."""
    try:
        return PAYOFF_MATRIX[(strategy_a, strategy_b)]
    except KeyError:
        raise InvariantViolation(
            f"invalid strategies ({strategy_a}, {strategy_b})"
        ) from None
