"""Simulation engine module for the CMO Simulator.

This module contains the core simulation logic including:
- resolver: Wildcard and big bet resolution
- quarter: Quarter processing and caller-side budget/time checks
- scoring: ROI, overall score, grade and debrief notes
- commands: Command models accepted by the state machine
- machine: Pure transition function and the hosting SimulationMachine

Usage:
    from cmosim.content import get_tactic_by_id
    from cmosim.engine import SimulationMachine, can_complete_quarter

    machine = SimulationMachine(random_seed=42)
    machine.start("user-1", total_budget=500_000)
    machine.set_strategy(
        target_audience="Young professionals",
        brand_positioning="Premium",
        primary_channels=["digital"],
    )
    machine.complete_strategy_session()

    machine.add_tactic("Q1", get_tactic_by_id("digital-1"))
    if can_complete_quarter(machine.context, "Q1"):
        machine.complete_quarter("Q1")
"""

from cmosim.engine.commands import (
    AddTactic,
    Command,
    CompleteDebrief,
    CompleteQuarter,
    CompleteStrategySession,
    HireTalent,
    MakeBigBet,
    RemoveTactic,
    RespondToWildcard,
    RestartSimulation,
    SaveSimulation,
    SetStrategy,
    StartSimulation,
    TriggerWildcard,
    parse_command,
)
from cmosim.engine.machine import SimulationMachine, reduce
from cmosim.engine.quarter import (
    calculate_efficiency_multiplier,
    calculate_quarter_spend,
    calculate_tactic_impact,
    calculate_talent_multiplier,
    can_complete_quarter,
    process_quarter,
    quarter_budget_remaining,
    quarter_time_remaining,
)
from cmosim.engine.resolver import (
    calculate_momentum,
    calculate_success_probability,
    calculate_team_strength,
    resolve_big_bet,
    resolve_wildcard,
    resolve_wildcard_impact,
)
from cmosim.engine.scoring import (
    aggregate_quarters,
    calculate_final_results,
    calculate_overall_score,
    calculate_roi,
    get_grade,
)

__all__ = [
    # Commands
    "AddTactic",
    "Command",
    "CompleteDebrief",
    "CompleteQuarter",
    "CompleteStrategySession",
    "HireTalent",
    "MakeBigBet",
    "RemoveTactic",
    "RespondToWildcard",
    "RestartSimulation",
    "SaveSimulation",
    "SetStrategy",
    "StartSimulation",
    "TriggerWildcard",
    "parse_command",
    # Machine
    "SimulationMachine",
    "reduce",
    # Quarter processing
    "calculate_efficiency_multiplier",
    "calculate_quarter_spend",
    "calculate_tactic_impact",
    "calculate_talent_multiplier",
    "can_complete_quarter",
    "process_quarter",
    "quarter_budget_remaining",
    "quarter_time_remaining",
    # Resolution
    "calculate_momentum",
    "calculate_success_probability",
    "calculate_team_strength",
    "resolve_big_bet",
    "resolve_wildcard",
    "resolve_wildcard_impact",
    # Scoring
    "aggregate_quarters",
    "calculate_final_results",
    "calculate_overall_score",
    "calculate_roi",
    "get_grade",
]
