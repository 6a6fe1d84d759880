"""Follow/flee: a spatial prisoner's dilemma with mobile, evolving agents."""

__version__ = "0.1.0"
