"""Per-decision snapshot of an agent's neighbourhood."""

from __future__ import annotations

from dataclasses import dataclass, field

import networkx as nx

from followflee.config.constants import COOPERATOR, EMPTY, SCORE_ATTR, STRATEGY_ATTR
from followflee.domain.ledger import Agent
from followflee.domain.payoff import payoff


@dataclass
class FreeCell:
    """A cell the agent may move to, scored during a single decision."""

    node_id: int
    score: int = 0


@dataclass
class Horizon:
    """Cooperator neighbours, defector neighbours and free cells around an agent.

    ``free_cells[0]`` is always the agent's own cell. One instance is created
    per generation (``capacity`` is the lattice's neighbour count) and cleared
    before every agent's micro-step.
    """

    capacity: int = 0
    cooperators: list[int] = field(default_factory=list)
    defectors: list[int] = field(default_factory=list)
    free_cells: list[FreeCell] = field(default_factory=list)

    def clear(self) -> None:
        self.cooperators.clear()
        self.defectors.clear()
        self.free_cells.clear()


def build_horizon(graph: nx.Graph, agent: Agent, horizon: Horizon) -> int:
    """Play against every occupied neighbour and record the neighbourhood state.

    The accumulated payoff is added to the agent's ``score`` attribute, which
    persists across micro-steps of a generation. Returns the payoff earned.
    """
    horizon.clear()
    horizon.free_cells.append(FreeCell(agent.node_id, 0))

    attrs = graph.nodes[agent.node_id]
    strategy = attrs[STRATEGY_ATTR]
    earned = 0
    for neighbour in graph.neighbors(agent.node_id):
        other = graph.nodes[neighbour][STRATEGY_ATTR]
        if other == EMPTY:
            horizon.free_cells.append(FreeCell(neighbour, 0))
            continue

        earned += payoff(strategy, other)
        if other == COOPERATOR:
            horizon.cooperators.append(neighbour)
        else:
            horizon.defectors.append(neighbour)

    attrs[SCORE_ATTR] += earned
    return earned
