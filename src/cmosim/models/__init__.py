"""CMO Simulator models.

This module exports the content catalog types and the simulation state.
"""

from .content import (
    AnyWildcard,
    BigBetOption,
    BigBetOutcome,
    EnhancedWildcardEvent,
    HiddenMetricImpact,
    ImpactVector,
    Rarity,
    Tactic,
    TacticCategory,
    TalentCandidate,
    TriggerConditions,
    WildcardChoice,
    WildcardEvent,
    WildcardType,
)
from .state import (
    KPIs,
    FinalResults,
    Phase,
    QuarterData,
    QuarterKey,
    QuarterResult,
    ResolvedWildcard,
    SimulationContext,
    Strategy,
    clamp,
    clamp_percent,
)

__all__ = [
    # Content
    "AnyWildcard",
    "BigBetOption",
    "BigBetOutcome",
    "EnhancedWildcardEvent",
    "HiddenMetricImpact",
    "ImpactVector",
    "Rarity",
    "Tactic",
    "TacticCategory",
    "TalentCandidate",
    "TriggerConditions",
    "WildcardChoice",
    "WildcardEvent",
    "WildcardType",
    # State
    "KPIs",
    "FinalResults",
    "Phase",
    "QuarterData",
    "QuarterKey",
    "QuarterResult",
    "ResolvedWildcard",
    "SimulationContext",
    "Strategy",
    "clamp",
    "clamp_percent",
]
