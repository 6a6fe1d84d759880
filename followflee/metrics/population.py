"""Population metrics: strategy mix, score moments, genome diversity, clustering."""

from __future__ import annotations

from typing import Sequence

import networkx as nx
import numpy as np

from followflee.config.constants import (
    ACTIONS_ATTR,
    COOPERATOR,
    MAX_GENOME,
    SCORE_ATTR,
    STRATEGY_ATTR,
)
from followflee.config.types import GenerationStats
from followflee.domain.ledger import PopulationLedger


def cooperator_fraction(strategies: Sequence[int]) -> float:
    """Fraction of agents cooperating; NaN for an empty population."""
    if not strategies:
        return float("nan")
    return sum(1 for s in strategies if s == COOPERATOR) / len(strategies)


def score_moments(scores: Sequence[int]) -> tuple[float, float]:
    """Return mean and population variance of the scores (0.0, 0.0 when empty)."""
    if not scores:
        return 0.0, 0.0
    arr = np.asarray(scores, dtype=np.float64)
    return float(arr.mean()), float(arr.var())


def genome_entropy(genomes: Sequence[int]) -> float:
    """Shannon entropy (bits) of the genome distribution, at most 8."""
    if not genomes:
        return 0.0
    counts = np.bincount(np.asarray(genomes, dtype=np.int64), minlength=MAX_GENOME + 1)
    p = counts[counts > 0] / len(genomes)
    return float(-(p * np.log2(p)).sum())


def _occupied_subgraph(graph: nx.Graph, occupied: Sequence[int]) -> nx.Graph:
    """Undirected subgraph of occupied nodes keeping only same-strategy edges."""
    sub = graph.subgraph(occupied).to_undirected()
    mixed = [
        (u, v)
        for u, v in sub.edges()
        if graph.nodes[u][STRATEGY_ATTR] != graph.nodes[v][STRATEGY_ATTR]
    ]
    sub.remove_edges_from(mixed)
    return sub


def same_strategy_adjacency_fraction(graph: nx.Graph, occupied: Sequence[int]) -> float:
    """Fraction of agent-agent edges joining agents with the same strategy.

    Returns NaN when no two agents are adjacent.
    """
    sub = graph.subgraph(occupied).to_undirected()
    total = sub.number_of_edges()
    if total == 0:
        return float("nan")
    same = sum(
        1 for u, v in sub.edges() if graph.nodes[u][STRATEGY_ATTR] == graph.nodes[v][STRATEGY_ATTR]
    )
    return same / total


def strategy_cluster_count(graph: nx.Graph, occupied: Sequence[int]) -> int:
    """Number of connected single-strategy clusters of agents."""
    if not occupied:
        return 0
    return nx.number_connected_components(_occupied_subgraph(graph, occupied))


def population_stats(ledger: PopulationLedger, generation: int) -> GenerationStats:
    """Summarise the ledger's population after ``generation``."""
    graph = ledger.graph
    occupied = sorted(agent.node_id for agent in ledger.agents)
    strategies = [graph.nodes[n][STRATEGY_ATTR] for n in occupied]
    scores = [graph.nodes[n][SCORE_ATTR] for n in occupied]
    genomes = [graph.nodes[n][ACTIONS_ATTR] for n in occupied]
    mean_score, score_variance = score_moments(scores)
    return GenerationStats(
        generation=generation,
        num_agents=len(occupied),
        num_cooperators=sum(1 for s in strategies if s == COOPERATOR),
        cooperator_fraction=cooperator_fraction(strategies),
        mean_score=mean_score,
        score_variance=score_variance,
        genome_entropy=genome_entropy(genomes),
        same_strategy_adjacency=same_strategy_adjacency_fraction(graph, occupied),
        cluster_count=strategy_cluster_count(graph, occupied),
    )
