"""Simulation state models for the CMO Simulator.

This module defines the SimulationContext aggregate and everything nested in
it. The context is owned by the state machine; every other component receives
it read-only and returns new values.

Key formulas:
- Quarter_budget = floor(Total_budget / 4)
- Remaining_budget = Total_budget - sum(Quarter.budget_spent)
- Percentage KPIs (market share, satisfaction, awareness) live in [0, 100]
"""

from __future__ import annotations

import math
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from cmosim.models.content import (
    AnyWildcard,
    BigBetOption,
    BigBetOutcome,
    ImpactVector,
    TalentCandidate,
    Tactic,
)
from cmosim.parameters import (
    DEFAULT_TOTAL_BUDGET,
    QUARTER_TIME_HOURS,
    QUARTERS_PER_YEAR,
    STARTING_BRAND_AWARENESS,
    STARTING_BRAND_EQUITY,
    STARTING_CUSTOMER_SATISFACTION,
    STARTING_MARKET_SHARE,
    STARTING_MORALE,
)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value to the specified range."""
    return max(min_val, min(max_val, value))


def clamp_percent(value: float) -> float:
    """Clamp a percentage-type KPI to [0, 100]."""
    return clamp(float(value), 0.0, 100.0)


class QuarterKey(str, Enum):
    """One of the four decision periods, in play order."""

    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"

    @property
    def index(self) -> int:
        """Zero-based position in the year."""
        return list(QuarterKey).index(self)

    @property
    def next(self) -> Optional[QuarterKey]:
        """The following quarter, or None after Q4."""
        order = list(QuarterKey)
        position = order.index(self)
        if position + 1 < len(order):
            return order[position + 1]
        return None


class Phase(str, Enum):
    """Lifecycle state of a simulation.

    idle -> strategy_session -> Q1 -> Q2 -> Q3 -> Q4 -> debrief -> completed
    """

    IDLE = "idle"
    STRATEGY_SESSION = "strategy_session"
    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"
    DEBRIEF = "debrief"
    COMPLETED = "completed"

    @property
    def quarter(self) -> Optional[QuarterKey]:
        """The active quarter for quarter phases, otherwise None."""
        try:
            return QuarterKey(self.value)
        except ValueError:
            return None

    @classmethod
    def for_quarter(cls, quarter: QuarterKey) -> Phase:
        return cls(quarter.value)


class KPIs(BaseModel):
    """Cumulative key performance indicators.

    Attributes:
        revenue: Total revenue earned so far (unbounded)
        profit: Total profit so far (unbounded, may be negative)
        market_share: Market share level, percent (0-100, starts at 10)
        customer_satisfaction: Satisfaction level (0-100, starts at 70)
        brand_awareness: Awareness level (0-100, starts at 30)
    """

    revenue: float = 0.0
    profit: float = 0.0
    market_share: float = Field(default=STARTING_MARKET_SHARE, ge=0.0, le=100.0)
    customer_satisfaction: float = Field(default=STARTING_CUSTOMER_SATISFACTION, ge=0.0, le=100.0)
    brand_awareness: float = Field(default=STARTING_BRAND_AWARENESS, ge=0.0, le=100.0)

    @field_validator("market_share", "customer_satisfaction", "brand_awareness", mode="before")
    @classmethod
    def clamp_to_percent(cls, v: float) -> float:
        """Clamp percentage fields to [0, 100]."""
        return clamp_percent(v)

    def apply(self, delta: ImpactVector) -> KPIs:
        """Return new KPIs with delta added and percentages clamped."""
        return KPIs(
            revenue=self.revenue + delta.revenue,
            profit=self.profit + delta.profit,
            market_share=self.market_share + delta.market_share,
            customer_satisfaction=self.customer_satisfaction + delta.customer_satisfaction,
            brand_awareness=self.brand_awareness + delta.brand_awareness,
        )


class Strategy(BaseModel):
    """Strategic decisions made during the strategy session.

    Every field is optional so the presentation layer can fill the strategy
    in over several SET_STRATEGY commands.
    """

    target_audience: Optional[str] = None
    brand_positioning: Optional[str] = None
    primary_channels: list[str] = Field(default_factory=list)
    budget_allocation: dict[str, float] = Field(default_factory=dict)

    # Company metadata
    company_name: Optional[str] = None
    industry: Optional[str] = None
    strategy_type: Optional[str] = None
    company_size: Optional[str] = None
    market_landscape: Optional[str] = None
    time_horizon: Optional[str] = None
    total_budget: Optional[float] = Field(default=None, gt=0.0)

    def merge(self, partial: dict[str, Any]) -> Strategy:
        """Return a new strategy with the given fields overwritten.

        Unknown keys are ignored; an explicit None clears an optional
        field. Raises pydantic ValidationError if a supplied value has the
        wrong type.
        """
        known = {key: value for key, value in partial.items() if key in type(self).model_fields}
        return Strategy.model_validate({**self.model_dump(), **known})

    @property
    def is_complete(self) -> bool:
        """Minimum strategy needed to leave the strategy session."""
        return bool(self.target_audience and self.brand_positioning and self.primary_channels)


class ResolvedWildcard(BaseModel):
    """A wildcard response that has been applied to the KPIs."""

    wildcard_id: str
    choice_id: str
    cost: float = 0.0
    time_required: float = 0.0
    impact: ImpactVector = Field(default_factory=ImpactVector)
    morale_delta: float = 0.0
    brand_equity_delta: float = 0.0


class QuarterResult(BaseModel):
    """Snapshot produced when a quarter completes.

    Revenue, profit, budget_spent and time_spent are flows for this quarter
    only. The percentage fields are the end-of-quarter levels, so Q4's result
    holds the final market share, satisfaction and awareness.
    """

    revenue: float = 0.0
    profit: float = 0.0
    market_share: float = Field(default=0.0, ge=0.0, le=100.0)
    customer_satisfaction: float = Field(default=0.0, ge=0.0, le=100.0)
    brand_awareness: float = Field(default=0.0, ge=0.0, le=100.0)
    budget_spent: float = 0.0
    time_spent: float = 0.0

    @field_validator("market_share", "customer_satisfaction", "brand_awareness", mode="before")
    @classmethod
    def clamp_to_percent(cls, v: float) -> float:
        """Clamp percentage fields to [0, 100]."""
        return clamp_percent(v)


class QuarterData(BaseModel):
    """Decisions and outcomes for a single quarter.

    Attributes:
        tactics: Selected tactics; insertion order is priority order
        budget_spent: Tactics + wildcard responses + hires + big bet
        time_spent: Team hours committed the same way
        wildcard_events: Wildcards triggered during this quarter
        pending_wildcard: Triggered wildcard still awaiting a response
        resolved_wildcards: Responses already applied to the KPIs
        talent_hired: Candidates hired during this quarter
        big_bet: Big bet made this quarter (Q4 only)
        big_bet_outcome: Its resolved outcome
        opening_kpis: KPIs when the quarter began
        results: Set once when the quarter completes
    """

    tactics: list[Tactic] = Field(default_factory=list)
    budget_spent: float = 0.0
    time_spent: float = 0.0
    wildcard_events: list[AnyWildcard] = Field(default_factory=list)
    pending_wildcard: Optional[AnyWildcard] = None
    resolved_wildcards: list[ResolvedWildcard] = Field(default_factory=list)
    talent_hired: list[TalentCandidate] = Field(default_factory=list)
    big_bet: Optional[BigBetOption] = None
    big_bet_outcome: Optional[BigBetOutcome] = None
    opening_kpis: Optional[KPIs] = None
    results: Optional[QuarterResult] = None

    @property
    def is_completed(self) -> bool:
        return self.results is not None

    def has_tactic(self, tactic_id: str) -> bool:
        return any(t.id == tactic_id for t in self.tactics)


def _empty_quarters() -> dict[QuarterKey, QuarterData]:
    return {quarter: QuarterData() for quarter in QuarterKey}


class FinalResults(BaseModel):
    """Graded outcome written once when the debrief begins."""

    final_kpis: KPIs
    roi: float
    overall_score: int
    grade: str
    total_revenue: float = 0.0
    total_profit: float = 0.0
    total_budget_spent: float = 0.0
    budget_utilization: float = 0.0
    quarterly_revenue: dict[str, float] = Field(default_factory=dict)
    quarterly_profit: dict[str, float] = Field(default_factory=dict)
    recommendations: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)


class SimulationContext(BaseModel):
    """Complete simulation state.

    Serializes to a JSON document that is sufficient to resume a simulation.
    The invariant remaining_budget == total_budget - sum(budget_spent) holds
    after every transition.
    """

    simulation_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    phase: Phase = Phase.IDLE

    strategy: Strategy = Field(default_factory=Strategy)

    total_budget: float = Field(default=DEFAULT_TOTAL_BUDGET, gt=0.0)
    remaining_budget: float = DEFAULT_TOTAL_BUDGET

    kpis: KPIs = Field(default_factory=KPIs)
    quarters: dict[QuarterKey, QuarterData] = Field(default_factory=_empty_quarters)

    hired_talent: list[TalentCandidate] = Field(default_factory=list)
    selected_big_bet: Optional[BigBetOption] = None
    big_bet_outcome: Optional[BigBetOutcome] = None
    wildcards: list[AnyWildcard] = Field(default_factory=list)

    # Hidden metrics
    morale: float = Field(default=STARTING_MORALE, ge=0.0, le=100.0)
    brand_equity: float = Field(default=STARTING_BRAND_EQUITY, ge=0.0, le=100.0)

    final_results: Optional[FinalResults] = None

    @field_validator("morale", "brand_equity", mode="before")
    @classmethod
    def clamp_hidden_metric(cls, v: float) -> float:
        """Clamp hidden metrics to [0, 100]."""
        return clamp_percent(v)

    @property
    def quarter_budget(self) -> int:
        """Budget allotted to each quarter: floor(total_budget / 4)."""
        return math.floor(self.total_budget / QUARTERS_PER_YEAR)

    @property
    def quarter_time(self) -> float:
        """Team hours allotted to each quarter."""
        return QUARTER_TIME_HOURS

    @property
    def current_quarter(self) -> Optional[QuarterKey]:
        return self.phase.quarter

    @property
    def total_budget_spent(self) -> float:
        return sum(q.budget_spent for q in self.quarters.values())

    @property
    def completed_quarters(self) -> list[QuarterKey]:
        return [key for key in QuarterKey if self.quarters[key].is_completed]

    # Serialization methods
    def to_json(self) -> str:
        """Serialize context to JSON string."""
        return self.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> SimulationContext:
        """Deserialize context from JSON string."""
        return cls.model_validate_json(json_str)

    def to_dict(self) -> dict:
        """Serialize context to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> SimulationContext:
        """Deserialize context from dictionary."""
        return cls.model_validate(data)
