"""Experiment entrypoints: CLI argument parsing and run orchestration."""

from followflee.experiments.cli import build_run_config, main

__all__ = [
    "build_run_config",
    "main",
]
