"""Simulation engine: lattice runs with per-generation population metrics."""

from followflee.simulation.engine import prepare_model, run_simulation, trajectory

__all__ = [
    "prepare_model",
    "run_simulation",
    "trajectory",
]
