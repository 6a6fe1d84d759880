"""Generation driver: the follow/flee model as an explicit state machine.

The host calls :meth:`FollowFleeModel.init` once with its attribute map and
then :meth:`FollowFleeModel.step` once per tick. The first tick partitions the
graph into agents and empty cells; every tick runs one generation:

1. sort agents by node id, then shuffle with the shared generator
2. for each agent: reset its score, then ``steps_per_gen`` times build its
   horizon (playing the game with its neighbours) and move
3. run the configured replacement strategy

``step`` always returns ``True``: the model never decides to stop on its own.
"""

from __future__ import annotations

import logging
from enum import Enum
from random import Random
from typing import Mapping

import networkx as nx

from followflee.config.constants import NEIGHBOURS_GRAPH_ATTR, SCORE_ATTR
from followflee.config.types import ModelConfig, ReplacementMode
from followflee.domain.errors import InvariantViolation
from followflee.domain.horizon import Horizon, build_horizon
from followflee.domain.ledger import Agent, PopulationLedger
from followflee.domain.movement import decide_move
from followflee.domain.replacement import replace

logger = logging.getLogger(__name__)


class ModelState(Enum):
    """Lifecycle of the generation driver."""

    IDLE = "idle"
    RUNNING = "running"


def replacement_mode_from_string(raw: str) -> ReplacementMode:
    """Parse the ``repMode`` attribute; an unknown name is fatal."""
    try:
        return ReplacementMode(raw)
    except ValueError:
        raise InvariantViolation(f"the replacement mode is invalid: {raw!r}") from None


class FollowFleeModel:
    """Spatial prisoner's dilemma with genome-driven movement and selection."""

    def __init__(self, graph: nx.Graph, rng: Random) -> None:
        self.graph = graph
        self.rng = rng
        self.state = ModelState.IDLE
        self.config: ModelConfig | None = None
        self.rep_mode: ReplacementMode | None = None
        self.ledger: PopulationLedger | None = None
        self.generation = 0

    def init(self, attrs: Mapping[str, object] | ModelConfig) -> bool:
        """Read the model attributes; ``False`` if a required one is unset."""
        config = attrs if isinstance(attrs, ModelConfig) else ModelConfig.from_attrs(attrs)
        missing = config.missing()
        if missing:
            logger.warning("model attributes unset or out of range: %s", ", ".join(missing))
            return False
        self.rep_mode = replacement_mode_from_string(config.rep_mode)
        self.config = config
        self.state = ModelState.IDLE
        self.ledger = None
        self.generation = 0
        return True

    def initialize(self) -> PopulationLedger:
        """Partition the graph nodes by their current strategy attribute."""
        self.ledger = PopulationLedger.from_graph(self.graph)
        self.state = ModelState.RUNNING
        logger.debug(
            "initialised with %d agents and %d empty cells",
            len(self.ledger.agents),
            len(self.ledger.empty_cells),
        )
        return self.ledger

    def step(self) -> bool:
        """Advance one host tick (one generation); returns ``True`` to continue."""
        if self.config is None or self.rep_mode is None:
            raise RuntimeError("step() called before a successful init()")
        if self.state is ModelState.IDLE:
            self.initialize()
        assert self.ledger is not None

        if not self.ledger.agents:
            return True  # nothing to do

        self.run_generation(self.ledger, self.config, self.rep_mode)
        self.generation += 1
        return True

    def run_generation(
        self, ledger: PopulationLedger, config: ModelConfig, rep_mode: ReplacementMode
    ) -> None:
        # shuffle from id order, never from the previous generation's order
        ledger.agents.sort(key=lambda agent: agent.node_id)
        self.rng.shuffle(ledger.agents)

        horizon = Horizon(capacity=int(self.graph.graph.get(NEIGHBOURS_GRAPH_ATTR, 0)))
        for agent in ledger.agents:
            ledger.attrs(agent.node_id)[SCORE_ATTR] = 0
            for _ in range(config.steps_per_gen):
                self.micro_step(ledger, agent, horizon)

        replace(rep_mode, ledger, config.rep_rate, self.rng, rank=config.rank_by_score)

    def micro_step(self, ledger: PopulationLedger, agent: Agent, horizon: Horizon) -> int:
        """Score ``agent`` against its neighbours and move it; returns its new node id."""
        build_horizon(self.graph, agent, horizon)
        target = decide_move(self.graph, agent, horizon, self.rng)
        ledger.move(agent, target)
        return agent.node_id
