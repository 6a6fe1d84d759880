"""Fatal error raised when simulation state breaks a model invariant."""

from __future__ import annotations


class InvariantViolation(RuntimeError):
    """Corrupted state or a broken data contract; the run must abort.

    Raised for an unknown replacement mode, a strategy outside
    {cooperator, defector} reaching the payoff engine, an action code outside
    0-3, drawing from an exhausted empty-cell pool, and a broken
    agent/empty partition.
    """
