"""Tests for followflee.domain.movement module."""

from __future__ import annotations

from random import Random

import networkx as nx
import pytest

from followflee.config.constants import COOPERATOR, DEFECTOR, EMPTY
from followflee.domain.errors import InvariantViolation
from followflee.domain.horizon import FreeCell, Horizon, build_horizon
from followflee.domain.ledger import Agent
from followflee.domain.movement import (
    Genome,
    MoveCode,
    decide_move,
    decode_actions,
    encode_actions,
    evaluate_free_cells,
    flee,
    follow,
    pick_best,
    random_shift,
    stay_still,
)


def make_graph(
    strategies: dict[int, int], edges: list[tuple[int, int]], actions: int = 0
) -> nx.Graph:
    g = nx.Graph()
    for node_id, strategy in strategies.items():
        g.add_node(node_id, strategy=strategy, actions=0, score=0)
    g.nodes[0]["actions"] = actions
    g.add_edges_from(edges)
    return g


def scores_by_id(horizon: Horizon) -> dict[int, int]:
    return {cell.node_id: cell.score for cell in horizon.free_cells}


class TestGenomeDecoding:
    def test_most_significant_pair_first(self) -> None:
        assert decode_actions(0b01_10_11_00) == Genome(
            MoveCode.FOLLOW, MoveCode.FLEE, MoveCode.RANDOM, MoveCode.STAY
        )

    def test_zero_and_max(self) -> None:
        assert decode_actions(0) == Genome(*([MoveCode.STAY] * 4))
        assert decode_actions(255) == Genome(*([MoveCode.RANDOM] * 4))

    def test_encode_is_inverse(self) -> None:
        assert encode_actions((1, 2, 3, 0)) == 0b01101100
        assert decode_actions(encode_actions((3, 0, 2, 1))) == (3, 0, 2, 1)

    def test_encode_rejects_bad_codes(self) -> None:
        with pytest.raises(ValueError):
            encode_actions((4, 0, 0, 0))
        with pytest.raises(ValueError):
            encode_actions((1, 1, 1))

    @pytest.mark.parametrize("actions", [-1, 256, 1000])
    def test_out_of_range_genome_is_fatal(self, actions: int) -> None:
        with pytest.raises(InvariantViolation):
            decode_actions(actions)


class TestBehaviours:
    def test_stay_still_spares_own_cell(self) -> None:
        cells = [FreeCell(0), FreeCell(1), FreeCell(2)]
        stay_still(cells, 3)
        assert [c.score for c in cells] == [0, -3, -3]

    def test_follow_rewards_cells_adjacent_to_neighbour(self) -> None:
        g = nx.Graph([(0, 1), (1, 2), (0, 3)])
        cells = [FreeCell(0), FreeCell(2), FreeCell(3)]
        follow(g, cells, 1)
        assert [c.score for c in cells] == [1, 1, 0]

    def test_flee_rewards_cells_not_adjacent_to_neighbour(self) -> None:
        g = nx.Graph([(0, 1), (1, 2), (0, 3)])
        cells = [FreeCell(0), FreeCell(2), FreeCell(3)]
        flee(g, cells, 1)
        assert [c.score for c in cells] == [0, 0, 1]

    def test_random_shift_stays_within_bounds(self) -> None:
        rng = Random(0)
        for _ in range(50):
            cells = [FreeCell(i) for i in range(4)]
            random_shift(cells, 2, rng)
            assert all(-2 <= c.score <= 2 for c in cells)

    def test_random_shift_draws_one_value_per_cell(self) -> None:
        cells = [FreeCell(i) for i in range(3)]
        random_shift(cells, 2, Random(7))
        expected = Random(7)
        assert [c.score for c in cells] == [expected.randint(-2, 2) for _ in range(3)]

    def test_invalid_code_is_fatal(self) -> None:
        with pytest.raises(InvariantViolation):
            evaluate_free_cells(nx.Graph(), [FreeCell(0)], [], 4, Random(0))

    def test_follow_code_applies_once_per_neighbour(self) -> None:
        g = nx.Graph([(0, 1), (0, 2), (1, 3), (2, 3)])
        cells = [FreeCell(0), FreeCell(3)]
        evaluate_free_cells(g, cells, [1, 2], MoveCode.FOLLOW, Random(0))
        assert [c.score for c in cells] == [2, 2]


class TestPickBest:
    def test_unique_maximum_needs_no_draw(self) -> None:
        rng = Random(0)
        state = rng.getstate()
        assert pick_best([FreeCell(0, 1), FreeCell(5, 3), FreeCell(6, 2)], rng) == 5
        assert rng.getstate() == state

    def test_ties_broken_uniformly(self) -> None:
        cells = [FreeCell(0, 2), FreeCell(5, 1), FreeCell(6, 2)]
        picks = {pick_best(cells, Random(seed)) for seed in range(40)}
        assert picks == {0, 6}


class TestDecideMove:
    def test_no_free_neighbour_stays_without_drawing(self) -> None:
        g = make_graph({0: COOPERATOR, 1: DEFECTOR, 2: COOPERATOR}, [(0, 1), (0, 2)], actions=255)
        horizon = Horizon()
        build_horizon(g, Agent(0), horizon)
        rng = Random(1)
        state = rng.getstate()
        assert decide_move(g, Agent(0), horizon, rng) == 0
        assert rng.getstate() == state

    def test_stay_still_scenario(self) -> None:
        g = make_graph(
            {0: COOPERATOR, 1: COOPERATOR, 2: COOPERATOR, 3: EMPTY, 4: EMPTY},
            [(0, 1), (0, 2), (0, 3), (0, 4)],
            actions=0,
        )
        horizon = Horizon()
        build_horizon(g, Agent(0), horizon)
        assert decide_move(g, Agent(0), horizon, Random(0)) == 0
        assert scores_by_id(horizon) == {0: 0, 3: -2, 4: -2}

    def test_follow_scenario(self) -> None:
        # the single cooperator (1) shares free cell 2 with the agent, not cell 3
        g = make_graph(
            {0: COOPERATOR, 1: COOPERATOR, 2: EMPTY, 3: EMPTY},
            [(0, 1), (0, 2), (0, 3), (1, 2)],
            actions=encode_actions((MoveCode.FOLLOW, 0, 0, 0)),
        )
        horizon = Horizon()
        build_horizon(g, Agent(0), horizon)
        target = decide_move(g, Agent(0), horizon, Random(0))
        scores = scores_by_id(horizon)
        assert scores[2] == scores[3] + 1
        assert scores[2] == max(scores.values())
        assert target in {0, 2}

    def test_flee_scenario(self) -> None:
        g = make_graph(
            {0: COOPERATOR, 1: COOPERATOR, 2: EMPTY, 3: EMPTY},
            [(0, 1), (0, 2), (0, 3), (1, 2)],
            actions=encode_actions((MoveCode.FLEE, 0, 0, 0)),
        )
        horizon = Horizon()
        build_horizon(g, Agent(0), horizon)
        assert decide_move(g, Agent(0), horizon, Random(0)) == 3

    def test_all_defectors_use_second_code(self) -> None:
        g = make_graph(
            {0: COOPERATOR, 1: DEFECTOR, 2: EMPTY},
            [(0, 1), (0, 2)],
            actions=encode_actions((MoveCode.STAY, MoveCode.FLEE, MoveCode.STAY, MoveCode.STAY)),
        )
        horizon = Horizon()
        build_horizon(g, Agent(0), horizon)
        assert decide_move(g, Agent(0), horizon, Random(0)) == 2
        assert scores_by_id(horizon) == {0: 0, 2: 1}

    def test_homogeneous_neighbourhood_ignores_mixed_codes(self) -> None:
        g = make_graph(
            {0: DEFECTOR, 1: COOPERATOR, 2: EMPTY},
            [(0, 1), (0, 2)],
            actions=encode_actions((MoveCode.STAY, MoveCode.RANDOM, MoveCode.FLEE, MoveCode.FLEE)),
        )
        horizon = Horizon()
        build_horizon(g, Agent(0), horizon)
        assert decide_move(g, Agent(0), horizon, Random(0)) == 0
        assert scores_by_id(horizon) == {0: 0, 2: -1}

    def test_mixed_neighbourhood_applies_both_codes(self) -> None:
        # follow the cooperator (1), flee the defector (2)
        g = make_graph(
            {0: COOPERATOR, 1: COOPERATOR, 2: DEFECTOR, 3: EMPTY, 4: EMPTY},
            [(0, 1), (0, 2), (0, 3), (0, 4), (1, 3), (2, 4)],
            actions=encode_actions((MoveCode.STAY, MoveCode.STAY, MoveCode.FOLLOW, MoveCode.FLEE)),
        )
        horizon = Horizon()
        build_horizon(g, Agent(0), horizon)
        assert decide_move(g, Agent(0), horizon, Random(0)) == 3
        assert scores_by_id(horizon) == {0: 1, 3: 2, 4: 0}

    def test_mixed_stay_codes_are_additive(self) -> None:
        g = make_graph(
            {0: COOPERATOR, 1: COOPERATOR, 2: DEFECTOR, 3: DEFECTOR, 4: EMPTY},
            [(0, 1), (0, 2), (0, 3), (0, 4)],
            actions=0,
        )
        horizon = Horizon()
        build_horizon(g, Agent(0), horizon)
        assert decide_move(g, Agent(0), horizon, Random(0)) == 0
        assert scores_by_id(horizon) == {0: 0, 4: -3}

    def test_isolated_agent_ignores_genome(self) -> None:
        # a stay genome would keep the agent put; isolation overrides it
        g = make_graph({0: COOPERATOR, 1: EMPTY, 2: EMPTY}, [(0, 1), (0, 2)], actions=0)
        horizon = Horizon()
        build_horizon(g, Agent(0), horizon)
        for seed in range(20):
            expected = horizon.free_cells[Random(seed).randrange(3)].node_id
            assert decide_move(g, Agent(0), horizon, Random(seed)) == expected
        picks = {decide_move(g, Agent(0), horizon, Random(seed)) for seed in range(60)}
        assert picks == {0, 1, 2}

    def test_random_code_targets_are_free_cells(self) -> None:
        g = make_graph(
            {0: COOPERATOR, 1: COOPERATOR, 2: EMPTY, 3: EMPTY},
            [(0, 1), (0, 2), (0, 3)],
            actions=encode_actions((MoveCode.RANDOM, 0, 0, 0)),
        )
        for seed in range(20):
            horizon = Horizon()
            build_horizon(g, Agent(0), horizon)
            assert decide_move(g, Agent(0), horizon, Random(seed)) in {0, 2, 3}
