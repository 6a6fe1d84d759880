"""Population ledger: the agent/empty-cell partition of a graph's nodes.

Every node id is in exactly one of ``agents`` (by ``Agent.node_id``) or
``empty_cells`` at all times. Agents are thin handles; their strategy,
genome and score live on the graph's node attribute dicts, and all mutation
of those attributes goes through the ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from random import Random
from typing import Any, Mapping

import networkx as nx

from followflee.config.constants import EMPTY, NODE_ATTRS, SCORE_ATTR, STRATEGY_ATTR
from followflee.domain.errors import InvariantViolation


@dataclass
class Agent:
    """An agent, identified by the node it currently occupies."""

    node_id: int


class PopulationLedger:
    """Authoritative partition of graph nodes into agents and empty cells."""

    def __init__(self, graph: nx.Graph) -> None:
        self.graph = graph
        self.agents: list[Agent] = []
        self.empty_cells: set[int] = set()

    @classmethod
    def from_graph(cls, graph: nx.Graph) -> PopulationLedger:
        """Partition all nodes by their ``strategy`` attribute (0 means empty)."""
        ledger = cls(graph)
        for node_id, data in graph.nodes(data=True):
            if data.get(STRATEGY_ATTR, EMPTY) > EMPTY:
                for name in NODE_ATTRS:
                    data.setdefault(name, 0)
                ledger.agents.append(Agent(node_id))
            else:
                ledger.empty_cells.add(node_id)
                ledger.clear_attrs(node_id)
        return ledger

    # -- attribute access ---------------------------------------------------

    def attrs(self, node_id: int) -> dict[str, Any]:
        return self.graph.nodes[node_id]

    def score(self, node_id: int) -> int:
        return int(self.graph.nodes[node_id][SCORE_ATTR])

    def is_empty(self, node_id: int) -> bool:
        return node_id in self.empty_cells

    def copy_attrs(self, src: Mapping[str, Any], tgt_id: int) -> None:
        tgt = self.graph.nodes[tgt_id]
        for name in NODE_ATTRS:
            tgt[name] = src[name]

    def clear_attrs(self, node_id: int) -> None:
        node = self.graph.nodes[node_id]
        for name in NODE_ATTRS:
            node[name] = 0

    # -- mutations ----------------------------------------------------------

    def move(self, agent: Agent, target_id: int) -> None:
        """Relocate ``agent`` onto the empty cell ``target_id``; no-op for its own cell."""
        if target_id == agent.node_id:
            return
        if target_id not in self.empty_cells:
            raise InvariantViolation(f"cannot move agent {agent.node_id} onto occupied cell {target_id}")
        self.empty_cells.remove(target_id)
        self.copy_attrs(self.graph.nodes[agent.node_id], target_id)
        self.clear_attrs(agent.node_id)
        self.empty_cells.add(agent.node_id)
        agent.node_id = target_id

    def evict(self, agent: Agent) -> None:
        """Remove ``agent`` from the population and free its cell."""
        self.agents.remove(agent)
        self.clear_attrs(agent.node_id)
        self.empty_cells.add(agent.node_id)

    def spawn(self, parent_attrs: Mapping[str, Any], target_id: int) -> Agent:
        """Place a copy of ``parent_attrs`` on the empty cell ``target_id``."""
        if target_id not in self.empty_cells:
            raise InvariantViolation(f"cannot spawn onto occupied cell {target_id}")
        self.empty_cells.remove(target_id)
        self.copy_attrs(parent_attrs, target_id)
        child = Agent(target_id)
        self.agents.append(child)
        return child

    def select_random_empty_cell(self, rng: Random) -> int:
        """Draw uniformly from the empty cells, ordered by node id."""
        if not self.empty_cells:
            raise InvariantViolation("no empty cells left to select from")
        ordered = sorted(self.empty_cells)
        return ordered[rng.randrange(len(ordered))]

    # -- checks -------------------------------------------------------------

    def check_partition(self) -> None:
        """Raise :class:`InvariantViolation` unless agents and empty cells partition the nodes."""
        agent_ids = [agent.node_id for agent in self.agents]
        occupied = set(agent_ids)
        if len(occupied) != len(agent_ids):
            raise InvariantViolation("two agents share a node")
        if occupied & self.empty_cells:
            raise InvariantViolation("a node is both occupied and empty")
        if occupied | self.empty_cells != set(self.graph.nodes):
            raise InvariantViolation("agents and empty cells do not cover every node")
        for node_id in agent_ids:
            if self.graph.nodes[node_id][STRATEGY_ATTR] == EMPTY:
                raise InvariantViolation(f"agent at {node_id} has no strategy")
