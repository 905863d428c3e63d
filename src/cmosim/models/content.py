"""Content catalog models for the CMO Simulator.

These are the immutable building blocks the simulation consumes: tactics the
player can schedule, wildcard events that interrupt a quarter, talent that can
be hired, and the Q4 big bets. None of them carry behaviour beyond small
derived properties; the engine decides what they do.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class TacticCategory(str, Enum):
    """Marketing channel a tactic belongs to.

    Inherits from str for proper JSON serialization.
    """

    DIGITAL = "digital"
    TRADITIONAL = "traditional"
    CONTENT = "content"
    EVENTS = "events"
    PARTNERSHIPS = "partnerships"


class WildcardType(str, Enum):
    """Kind of disruption a wildcard represents."""

    CRISIS = "crisis"
    OPPORTUNITY = "opportunity"
    MARKET_SHIFT = "market_shift"
    COMPETITOR_ACTION = "competitor_action"


class Rarity(str, Enum):
    """Rarity tier of an enhanced wildcard, used as a selection weight."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"

    @property
    def weight(self) -> int:
        """Relative selection weight (common events are ten times likelier
        than legendary ones)."""
        return {"common": 10, "uncommon": 5, "rare": 2, "legendary": 1}[self.value]


class ImpactVector(BaseModel):
    """A change to the five tracked KPIs.

    Used for tactic expected impact, wildcard choice impact, big bet impact,
    and per-quarter deltas. Percentage-type fields are deltas in percentage
    points, not levels.
    """

    model_config = ConfigDict(frozen=True)

    revenue: float = 0.0
    profit: float = 0.0
    market_share: float = 0.0
    customer_satisfaction: float = 0.0
    brand_awareness: float = 0.0

    def scaled(self, factor: float) -> ImpactVector:
        """Return a copy with every field multiplied by factor."""
        return ImpactVector(
            revenue=self.revenue * factor,
            profit=self.profit * factor,
            market_share=self.market_share * factor,
            customer_satisfaction=self.customer_satisfaction * factor,
            brand_awareness=self.brand_awareness * factor,
        )

    def map_fields(self, fn) -> ImpactVector:
        """Return a copy with fn applied to each field value."""
        return ImpactVector(**{name: fn(value) for name, value in self.model_dump().items()})

    def __add__(self, other: ImpactVector) -> ImpactVector:
        if not isinstance(other, ImpactVector):
            return NotImplemented
        return ImpactVector(
            revenue=self.revenue + other.revenue,
            profit=self.profit + other.profit,
            market_share=self.market_share + other.market_share,
            customer_satisfaction=self.customer_satisfaction + other.customer_satisfaction,
            brand_awareness=self.brand_awareness + other.brand_awareness,
        )


class Tactic(BaseModel):
    """A selectable marketing action with fixed cost, time and impact.

    Attributes:
        id: Catalog identifier (unique within a quarter's tactic list)
        name: Display name
        category: Marketing channel
        cost: Budget consumed when the quarter completes
        time_required: Team hours consumed
        expected_impact: KPI deltas the tactic produces (profit is ignored;
            quarter profit is always revenue minus spend)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    category: TacticCategory
    cost: float = Field(default=0.0, ge=0.0)
    time_required: float = Field(default=0.0, ge=0.0)
    expected_impact: ImpactVector = Field(default_factory=ImpactVector)


class WildcardChoice(BaseModel):
    """One way of responding to a wildcard event."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    # Negative cost is a saving (e.g. defensive cost cutting)
    cost: float = 0.0
    time_required: float = Field(default=0.0, ge=0.0)
    impact: ImpactVector = Field(default_factory=ImpactVector)


class WildcardEvent(BaseModel):
    """A baseline wildcard: every choice has a flat, deterministic impact."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["baseline"] = "baseline"
    id: str = Field(..., min_length=1)
    type: WildcardType
    title: str
    description: str = ""
    choices: list[WildcardChoice] = Field(default_factory=list)

    def get_choice(self, choice_id: str) -> Optional[WildcardChoice]:
        """Find a choice by ID, or None if this event has no such choice."""
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None


class TriggerConditions(BaseModel):
    """When an enhanced wildcard is eligible to appear.

    Unset bounds are not checked. Revenue and market share are compared
    against the cumulative KPIs at the time of selection.
    """

    model_config = ConfigDict(frozen=True)

    min_revenue: Optional[float] = None
    max_revenue: Optional[float] = None
    min_market_share: Optional[float] = None
    max_market_share: Optional[float] = None
    quarters: Optional[list[str]] = None
    has_hired_talent: Optional[bool] = None


class HiddenMetricImpact(BaseModel):
    """Morale or brand-equity effect of an enhanced wildcard."""

    model_config = ConfigDict(frozen=True)

    base: float = 0.0
    choice_modifiers: dict[str, float] = Field(default_factory=dict)

    def for_choice(self, choice_id: str) -> float:
        return self.base + self.choice_modifiers.get(choice_id, 0.0)


class EnhancedWildcardEvent(WildcardEvent):
    """A context-sensitive wildcard.

    Its choice impacts are scaled by the Event Resolver according to
    year-to-date momentum and whether the team has a specialist in one of
    the relevant categories. It also moves the hidden morale and brand
    equity metrics.
    """

    kind: Literal["enhanced"] = "enhanced"
    rarity: Rarity = Rarity.COMMON
    trigger_conditions: Optional[TriggerConditions] = None
    relevant_categories: list[TacticCategory] = Field(default_factory=list)
    morale_impact: HiddenMetricImpact = Field(default_factory=HiddenMetricImpact)
    brand_equity_impact: HiddenMetricImpact = Field(default_factory=HiddenMetricImpact)
    team_morale_description: str = ""


AnyWildcard = Annotated[
    Union[WildcardEvent, EnhancedWildcardEvent],
    Field(discriminator="kind"),
]


class TalentCandidate(BaseModel):
    """A hireable specialist.

    Once hired, the candidate occupies a team slot for the rest of the
    simulation and multiplies the impact of tactics in their specialty
    categories from the hiring quarter onward.

    Attributes:
        salary: Annual salary; one quarter of it is charged at hiring
        hiring_cost: One-time recruiting fee
        skill_multiplier: Multiplier on tactic impact in specialty categories
        efficiency: Percent cut to tactic cost and hours in the hiring quarter
        specialties: Tactic categories the multiplier applies to
        morale_boost: Immediate change to team morale
        brand_equity_boost: Immediate change to brand equity
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    role: str
    experience: Literal["junior", "mid", "senior", "executive"] = "mid"
    salary: float = Field(default=0.0, ge=0.0)
    hiring_cost: float = Field(default=0.0, ge=0.0)
    skill_multiplier: float = Field(default=1.0, ge=1.0)
    efficiency: float = Field(default=0.0, ge=0.0, le=100.0)
    specialties: list[TacticCategory] = Field(default_factory=list)
    morale_boost: float = 0.0
    brand_equity_boost: float = 0.0
    backstory: str = ""

    @property
    def total_hiring_cost(self) -> float:
        """Budget charged to the hiring quarter: fee plus one quarter's salary."""
        return self.hiring_cost + round(self.salary / 4)


class BigBetOption(BaseModel):
    """A high-risk, high-reward Q4 investment."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    category: Literal[
        "product_launch", "market_expansion", "technology_pivot", "acquisition", "partnership"
    ]
    cost: float = Field(default=0.0, ge=0.0)
    risk: float = Field(..., ge=0.0, le=1.0)
    strategy: str = ""
    potential_impact: ImpactVector = Field(default_factory=ImpactVector)


class BigBetOutcome(BaseModel):
    """Resolved result of a big bet."""

    model_config = ConfigDict(frozen=True)

    success: bool
    success_probability: float = Field(..., ge=0.0, le=1.0)
    actual_impact: ImpactVector
