"""matchsim - live match timeline simulation and wager resolution."""

__version__ = "0.1.0"
