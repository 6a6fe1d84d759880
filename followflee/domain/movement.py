"""Genome-driven movement decisions.

The 8-bit ``actions`` genome holds four 2-bit behaviour codes, most
significant pair first:

- bits 7-6: applied to the cooperators when every neighbour cooperates
- bits 5-4: applied to the defectors when every neighbour defects
- bits 3-2: applied to the cooperators in a mixed neighbourhood
- bits 1-0: applied to the defectors in a mixed neighbourhood

Each code adjusts the scores of the agent's free cells; the agent then moves
to the best-scoring free cell, breaking ties uniformly at random.
"""

from __future__ import annotations

from enum import IntEnum
from random import Random
from typing import Callable, NamedTuple, Sequence

import networkx as nx

from followflee.config.constants import ACTIONS_ATTR, MAX_GENOME
from followflee.domain.errors import InvariantViolation
from followflee.domain.horizon import FreeCell, Horizon
from followflee.domain.ledger import Agent


class MoveCode(IntEnum):
    """Behaviour encoded by one 2-bit slice of the genome."""

    STAY = 0
    FOLLOW = 1
    FLEE = 2
    RANDOM = 3


class Genome(NamedTuple):
    """Decoded action genome."""

    all_cooperators: MoveCode
    all_defectors: MoveCode
    mixed_cooperators: MoveCode
    mixed_defectors: MoveCode


def decode_actions(actions: int) -> Genome:
    """Split an 8-bit genome into its four behaviour codes."""
    if not 0 <= actions <= MAX_GENOME:
        raise InvariantViolation(f"invalid action genome ({actions})")
    return Genome(*(MoveCode((actions >> shift) & 0b11) for shift in (6, 4, 2, 0)))


def encode_actions(genome: Sequence[int]) -> int:
    """Pack four behaviour codes (most significant first) into a genome."""
    if len(genome) != 4 or any(not 0 <= code <= 3 for code in genome):
        raise ValueError("genome must be four codes in [0, 3]")
    actions = 0
    for code in genome:
        actions = (actions << 2) | int(code)
    return actions


# ---------------------------------------------------------------------------
# Behaviours
# ---------------------------------------------------------------------------


def stay_still(free_cells: list[FreeCell], num_neighbours: int) -> None:
    """The agent's own cell keeps its score; every other free cell loses ``num_neighbours``."""
    for cell in free_cells[1:]:
        cell.score -= num_neighbours


def follow(graph: nx.Graph, free_cells: list[FreeCell], neighbour: int) -> None:
    """Free cells adjacent to ``neighbour`` gain one."""
    adjacent = graph[neighbour]
    for cell in free_cells:
        if cell.node_id in adjacent:
            cell.score += 1


def flee(graph: nx.Graph, free_cells: list[FreeCell], neighbour: int) -> None:
    """Free cells not adjacent to ``neighbour`` gain one."""
    adjacent = graph[neighbour]
    for cell in free_cells:
        if cell.node_id not in adjacent:
            cell.score += 1


def random_shift(free_cells: list[FreeCell], num_neighbours: int, rng: Random) -> None:
    """Every free cell gains an independent draw from ``[-num_neighbours, num_neighbours]``."""
    for cell in free_cells:
        cell.score += rng.randint(-num_neighbours, num_neighbours)


def _apply_stay(graph: nx.Graph, free_cells: list[FreeCell], neighbours: list[int], rng: Random) -> None:
    stay_still(free_cells, len(neighbours))


def _apply_follow(graph: nx.Graph, free_cells: list[FreeCell], neighbours: list[int], rng: Random) -> None:
    for neighbour in neighbours:
        follow(graph, free_cells, neighbour)


def _apply_flee(graph: nx.Graph, free_cells: list[FreeCell], neighbours: list[int], rng: Random) -> None:
    for neighbour in neighbours:
        flee(graph, free_cells, neighbour)


def _apply_random(graph: nx.Graph, free_cells: list[FreeCell], neighbours: list[int], rng: Random) -> None:
    random_shift(free_cells, len(neighbours), rng)


_BEHAVIOURS: dict[MoveCode, Callable[[nx.Graph, list[FreeCell], list[int], Random], None]] = {
    MoveCode.STAY: _apply_stay,
    MoveCode.FOLLOW: _apply_follow,
    MoveCode.FLEE: _apply_flee,
    MoveCode.RANDOM: _apply_random,
}


def evaluate_free_cells(
    graph: nx.Graph,
    free_cells: list[FreeCell],
    neighbours: list[int],
    code: int,
    rng: Random,
) -> None:
    """Apply behaviour ``code`` for the given neighbour list to the free-cell scores."""
    try:
        behaviour = _BEHAVIOURS[MoveCode(code)]
    except ValueError:
        raise InvariantViolation(f"invalid action code ({code})") from None
    behaviour(graph, free_cells, neighbours, rng)


# ---------------------------------------------------------------------------
# Decision
# ---------------------------------------------------------------------------


def pick_best(free_cells: list[FreeCell], rng: Random) -> int:
    """Return the id of the highest-scoring free cell; ties are drawn uniformly."""
    best = max(cell.score for cell in free_cells)
    winners = [cell.node_id for cell in free_cells if cell.score == best]
    if len(winners) == 1:
        return winners[0]
    return winners[rng.randrange(len(winners))]


def decide_move(graph: nx.Graph, agent: Agent, horizon: Horizon, rng: Random) -> int:
    """Choose the cell ``agent`` moves to (its own id means stay).

    Consumes a horizon freshly built by :func:`build_horizon`; the free-cell
    scores are mutated in place.
    """
    free_cells = horizon.free_cells
    if len(free_cells) == 1:
        return agent.node_id  # no place to go

    num_neighbours = len(graph[agent.node_id]) - (len(free_cells) - 1)

    # no social context: the genome has nothing to react to
    if num_neighbours == 0:
        return free_cells[rng.randrange(len(free_cells))].node_id

    genome = decode_actions(int(graph.nodes[agent.node_id][ACTIONS_ATTR]))
    if num_neighbours == len(horizon.cooperators):
        evaluate_free_cells(graph, free_cells, horizon.cooperators, genome.all_cooperators, rng)
    elif num_neighbours == len(horizon.defectors):
        evaluate_free_cells(graph, free_cells, horizon.defectors, genome.all_defectors, rng)
    else:
        evaluate_free_cells(graph, free_cells, horizon.cooperators, genome.mixed_cooperators, rng)
        evaluate_free_cells(graph, free_cells, horizon.defectors, genome.mixed_defectors, rng)

    return pick_best(free_cells, rng)
