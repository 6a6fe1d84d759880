"""Domain layer: payoff, horizon, movement, ledger, replacement and the generation driver."""

from followflee.domain.errors import InvariantViolation
from followflee.domain.horizon import FreeCell, Horizon, build_horizon
from followflee.domain.lattice import build_lattice, seed_population
from followflee.domain.ledger import Agent, PopulationLedger
from followflee.domain.model import FollowFleeModel, ModelState
from followflee.domain.movement import Genome, MoveCode, decide_move, decode_actions
from followflee.domain.payoff import payoff
from followflee.domain.replacement import neighbour_bd, replace, simple_bd

__all__ = [
    "Agent",
    "FollowFleeModel",
    "FreeCell",
    "Genome",
    "Horizon",
    "InvariantViolation",
    "ModelState",
    "MoveCode",
    "PopulationLedger",
    "build_horizon",
    "build_lattice",
    "decide_move",
    "decode_actions",
    "neighbour_bd",
    "payoff",
    "replace",
    "seed_population",
    "simple_bd",
]
