"""Automated play for the CMO Simulator.

Key classes:
- AutoPlayer: Plays a simulation end to end through the public command API
- SimulationResult: Summary of one automated simulation

Usage:
    from cmosim.testing import AutoPlayer

    result = AutoPlayer(policy="efficient", random_seed=1).run()
"""

from cmosim.testing.autoplayer import POLICIES, AutoPlayer, SimulationResult

__all__ = ["POLICIES", "AutoPlayer", "SimulationResult"]
