"""Metrics layer: population summaries computed after each generation."""

from followflee.metrics.population import (
    cooperator_fraction,
    genome_entropy,
    population_stats,
    same_strategy_adjacency_fraction,
    score_moments,
    strategy_cluster_count,
)

__all__ = [
    "cooperator_fraction",
    "genome_entropy",
    "population_stats",
    "same_strategy_adjacency_fraction",
    "score_moments",
    "strategy_cluster_count",
]
