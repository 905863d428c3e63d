"""CMO Simulator - a turn-based marketing strategy simulation."""

__version__ = "0.1.0"
