"""Generational birth/death: evict the worst agents, clone the best ones.

Both strategies evict the lowest-ranked ``n`` agents and spawn one clone of
each of the top ``n`` agents, so the population size is unchanged. Parent
attributes are captured before eviction, so a parent that is itself evicted
(``rep_rate > 0.5``) still produces its clone.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from random import Random
from typing import Any

from followflee.config.constants import NODE_ATTRS
from followflee.config.types import ReplacementMode
from followflee.domain.errors import InvariantViolation
from followflee.domain.ledger import Agent, PopulationLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Parent:
    """Snapshot of a top-ranked agent taken before the eviction step."""

    node_id: int
    attrs: dict[str, Any]


def agents_to_replace(population_size: int, rep_rate: float) -> int:
    return math.floor(population_size * rep_rate)


def rank_by_score(ledger: PopulationLedger) -> None:
    """Sort the ledger's agents in place by score, highest first.

    The sort is stable: equal scores keep their current relative order.
    """
    ledger.agents.sort(key=lambda agent: ledger.score(agent.node_id), reverse=True)


def _evict_worst(ledger: PopulationLedger, count: int) -> list[Parent]:
    """Evict the last ``count`` agents and return snapshots of the first ``count``."""
    agents = ledger.agents
    parents = [
        Parent(
            node_id=agent.node_id,
            attrs={name: ledger.attrs(agent.node_id)[name] for name in NODE_ATTRS},
        )
        for agent in agents[:count]
    ]
    for agent in agents[len(agents) - count :]:
        ledger.evict(agent)
    return parents


def simple_bd(ledger: PopulationLedger, count: int, rng: Random) -> list[Agent]:
    """Replace the worst ``count`` agents by clones of the best, placed anywhere."""
    parents = _evict_worst(ledger, count)
    offspring: list[Agent] = []
    for parent in parents:
        target = ledger.select_random_empty_cell(rng)
        offspring.append(ledger.spawn(parent.attrs, target))
    return offspring


def neighbour_bd(ledger: PopulationLedger, count: int, rng: Random) -> list[Agent]:
    """Replace the worst ``count`` agents by clones of the best, placed next to the parent.

    Falls back to a random empty cell when the parent has no empty neighbour.
    """
    parents = _evict_worst(ledger, count)
    offspring: list[Agent] = []
    for parent in parents:
        free = [n for n in ledger.graph.neighbors(parent.node_id) if ledger.is_empty(n)]
        if free:
            target = free[rng.randrange(len(free))]
        else:
            target = ledger.select_random_empty_cell(rng)
        offspring.append(ledger.spawn(parent.attrs, target))
    return offspring


_STRATEGIES = {
    ReplacementMode.SIMPLE_BD: simple_bd,
    ReplacementMode.NEIGHBOUR_BD: neighbour_bd,
}


def replace(
    mode: ReplacementMode,
    ledger: PopulationLedger,
    rep_rate: float,
    rng: Random,
    rank: bool = True,
) -> list[Agent]:
    """Run one replacement phase and return the spawned agents.

    With ``rank=False`` the ledger's current agent order is used as the
    ranking instead of sorting by score.
    """
    try:
        strategy = _STRATEGIES[mode]
    except KeyError:
        raise InvariantViolation(f"the replacement mode is invalid: {mode!r}") from None

    count = agents_to_replace(len(ledger.agents), rep_rate)
    if count == 0:
        return []
    if rank:
        rank_by_score(ledger)

    worst = ledger.score(ledger.agents[-1].node_id)
    best = ledger.score(ledger.agents[0].node_id)
    offspring = strategy(ledger, count, rng)
    logger.debug(
        "%s replaced %d agents (best score %d, worst score %d)", mode.value, count, best, worst
    )
    return offspring

