"""Square-lattice topology and initial population layout.

Nodes are integer ids ``y * width + x``. Each node carries the ``strategy``,
``actions`` and ``score`` attributes; the graph carries ``neighbours``, the
per-node neighbour count of the lattice.
"""

from __future__ import annotations

from random import Random

import networkx as nx

from followflee.config.constants import (
    ACTIONS_ATTR,
    COOPERATOR,
    DEFECTOR,
    MAX_GENOME,
    NEIGHBOURS_GRAPH_ATTR,
    NODE_ATTRS,
    STRATEGY_ATTR,
)
from followflee.config.types import LatticeConfig, PopulationConfig

VON_NEUMANN: tuple[tuple[int, int], ...] = ((0, -1), (-1, 0), (1, 0), (0, 1))
MOORE: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)


def node_id(x: int, y: int, width: int) -> int:
    return y * width + x


def build_lattice(config: LatticeConfig) -> nx.Graph:
    """Build an empty square lattice (von Neumann or Moore, optionally toroidal)."""
    w, h = config.width, config.height
    offsets = VON_NEUMANN if config.neighbours == 4 else MOORE

    graph = nx.Graph()
    graph.graph[NEIGHBOURS_GRAPH_ATTR] = config.neighbours
    for y in range(h):
        for x in range(w):
            graph.add_node(node_id(x, y, w), **{name: 0 for name in NODE_ATTRS})

    for y in range(h):
        for x in range(w):
            source = node_id(x, y, w)
            for dx, dy in offsets:
                tx, ty = x + dx, y + dy
                if config.periodic:
                    tx, ty = tx % w, ty % h
                elif not (0 <= tx < w and 0 <= ty < h):
                    continue
                target = node_id(tx, ty, w)
                # Wrapping on tiny lattices can point a node back at itself
                if target != source:
                    graph.add_edge(source, target)
    return graph


def seed_population(graph: nx.Graph, config: PopulationConfig, rng: Random) -> int:
    """Place agents on random nodes; returns the number of agents placed.

    ``round(density * N)`` nodes become agents, the first
    ``round(cooperator_fraction * agents)`` of them cooperators. Genomes are
    drawn uniformly from 0-255 unless ``config.actions`` fixes one.
    """
    nodes = sorted(graph.nodes)
    for node in nodes:
        for name in NODE_ATTRS:
            graph.nodes[node][name] = 0

    n_agents = round(config.density * len(nodes))
    chosen = rng.sample(nodes, n_agents)
    n_cooperators = round(config.cooperator_fraction * n_agents)
    for i, node in enumerate(chosen):
        attrs = graph.nodes[node]
        attrs[STRATEGY_ATTR] = COOPERATOR if i < n_cooperators else DEFECTOR
        attrs[ACTIONS_ATTR] = (
            config.actions if config.actions is not None else rng.randint(0, MAX_GENOME)
        )
    return n_agents
