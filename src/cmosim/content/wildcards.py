"""Wildcard catalog.

Baseline wildcards have flat choice impacts and can appear in any quarter.
Enhanced wildcards carry rarity, trigger conditions and hidden-metric effects;
selection among eligible enhanced events is weighted by rarity.

Usage:
    rng = random.Random(42)
    event = get_enhanced_wildcard_for_quarter(context, QuarterKey.Q2, rng)
    if event is None:
        event = get_random_wildcard(rng)
"""

from __future__ import annotations

import random
from typing import Optional, Union

from cmosim.models.content import (
    EnhancedWildcardEvent,
    HiddenMetricImpact,
    ImpactVector,
    Rarity,
    TacticCategory,
    TriggerConditions,
    WildcardChoice,
    WildcardEvent,
    WildcardType,
)
from cmosim.models.state import QuarterKey, SimulationContext


def _choice(
    id: str,
    title: str,
    description: str,
    cost: float,
    time_required: float,
    revenue: float,
    profit: float,
    market_share: float,
    customer_satisfaction: float,
    brand_awareness: float,
) -> WildcardChoice:
    return WildcardChoice(
        id=id,
        title=title,
        description=description,
        cost=cost,
        time_required=time_required,
        impact=ImpactVector(
            revenue=revenue,
            profit=profit,
            market_share=market_share,
            customer_satisfaction=customer_satisfaction,
            brand_awareness=brand_awareness,
        ),
    )


# =============================================================================
# BASELINE WILDCARDS
# =============================================================================

VIRAL_COMPLAINT = WildcardEvent(
    id="wildcard-1",
    type=WildcardType.CRISIS,
    title="Negative Social Media Viral Post",
    description="A customer complaint has gone viral on social media, potentially "
    "damaging your brand reputation.",
    choices=[
        _choice("crisis-1-ignore", "Ignore and Wait",
                "Let the situation blow over naturally without direct response.",
                0, 0, -50_000, 0, -2, -10, -5),
        _choice("crisis-1-respond", "Public Response Campaign",
                "Launch a comprehensive response campaign addressing the concerns.",
                30_000, 20, -10_000, -30_000, 0, 5, 3),
        _choice("crisis-1-overhaul", "Complete Brand Overhaul",
                "Use this as an opportunity for major brand improvements.",
                100_000, 60, 50_000, -50_000, 3, 15, 10),
    ],
)

CELEBRITY_ENDORSEMENT = WildcardEvent(
    id="wildcard-2",
    type=WildcardType.OPPORTUNITY,
    title="Celebrity Endorsement Opportunity",
    description="A popular celebrity has expressed interest in endorsing your brand.",
    choices=[
        _choice("opportunity-2-decline", "Decline the Offer",
                "Pass on the opportunity to maintain current strategy.",
                0, 0, 0, 0, 0, 0, 0),
        _choice("opportunity-2-basic", "Basic Endorsement Deal",
                "Sign a standard endorsement contract.",
                150_000, 30, 300_000, 150_000, 8, 5, 25),
        _choice("opportunity-2-premium", "Premium Partnership",
                "Create a comprehensive partnership with co-created content.",
                300_000, 60, 500_000, 200_000, 12, 8, 35),
    ],
)

ECONOMIC_DOWNTURN = WildcardEvent(
    id="wildcard-3",
    type=WildcardType.MARKET_SHIFT,
    title="Economic Downturn",
    description="A sudden economic downturn has affected consumer spending patterns.",
    choices=[
        _choice("downturn-3-maintain", "Maintain Current Strategy",
                "Continue with planned marketing activities.",
                0, 0, -100_000, -100_000, -3, -2, -5),
        _choice("downturn-3-pivot", "Pivot to Value Messaging",
                "Shift marketing focus to value and affordability.",
                50_000, 40, -30_000, -80_000, 2, 5, 0),
        _choice("downturn-3-aggressive", "Aggressive Market Capture",
                "Increase marketing spend to capture market share from competitors.",
                200_000, 50, 100_000, -100_000, 8, 3, 15),
    ],
)

COMPETITOR_LAUNCH = WildcardEvent(
    id="wildcard-4",
    type=WildcardType.COMPETITOR_ACTION,
    title="Major Competitor Product Launch",
    description="Your main competitor has launched a revolutionary product that "
    "threatens your market position.",
    choices=[
        _choice("competitor-4-ignore", "Focus on Strengths",
                "Double down on your existing product advantages.",
                25_000, 20, -50_000, -25_000, -5, 2, 0),
        _choice("competitor-4-counter", "Counter-Launch Campaign",
                "Launch an aggressive campaign highlighting your competitive advantages.",
                100_000, 45, 50_000, -50_000, 0, 0, 12),
        _choice("competitor-4-innovate", "Accelerate Innovation",
                "Fast-track your own product development and launch.",
                250_000, 80, 200_000, -50_000, 6, 10, 18),
    ],
)

BASELINE_WILDCARDS: tuple[WildcardEvent, ...] = (
    VIRAL_COMPLAINT,
    CELEBRITY_ENDORSEMENT,
    ECONOMIC_DOWNTURN,
    COMPETITOR_LAUNCH,
)


# =============================================================================
# ENHANCED WILDCARDS
# =============================================================================

DATA_PRIVACY_SCANDAL = EnhancedWildcardEvent(
    id="wildcard-enhanced-1",
    type=WildcardType.CRISIS,
    title="Data Privacy Scandal",
    description="A major data breach has exposed customer information. The media is "
    "demanding answers and customers are losing trust.",
    rarity=Rarity.UNCOMMON,
    relevant_categories=[TacticCategory.DIGITAL, TacticCategory.CONTENT],
    morale_impact=HiddenMetricImpact(
        base=-20,
        choice_modifiers={
            "crisis-data-ignore": -30,
            "crisis-data-minimal": -10,
            "crisis-data-comprehensive": 10,
        },
    ),
    brand_equity_impact=HiddenMetricImpact(
        base=-25,
        choice_modifiers={
            "crisis-data-ignore": -40,
            "crisis-data-minimal": -15,
            "crisis-data-comprehensive": 5,
        },
    ),
    team_morale_description="Team is stressed about reputation damage and customer trust.",
    choices=[
        _choice("crisis-data-ignore", "Minimal Response",
                "Issue a brief statement and hope it blows over quickly.",
                25_000, 10, -200_000, -25_000, -5, -25, -10),
        _choice("crisis-data-minimal", "Standard Crisis Management",
                "Hire a PR firm and implement basic security improvements.",
                150_000, 40, -100_000, -150_000, -2, -10, -5),
        _choice("crisis-data-comprehensive", "Transparency & Innovation",
                "Full transparency, customer compensation, and industry-leading "
                "security overhaul.",
                500_000, 80, 100_000, -400_000, 3, 20, 15),
    ],
)

VIRAL_MOMENT = EnhancedWildcardEvent(
    id="wildcard-enhanced-2",
    type=WildcardType.OPPORTUNITY,
    title="Viral Social Media Moment",
    description="Your brand has unexpectedly gone viral on social media due to a "
    "customer's creative content. Millions are watching.",
    rarity=Rarity.RARE,
    trigger_conditions=TriggerConditions(quarters=["Q2", "Q3"]),
    relevant_categories=[TacticCategory.DIGITAL, TacticCategory.CONTENT],
    morale_impact=HiddenMetricImpact(
        base=15,
        choice_modifiers={"viral-ignore": -10, "viral-capitalize": 20, "viral-overdo": 5},
    ),
    brand_equity_impact=HiddenMetricImpact(
        base=10,
        choice_modifiers={"viral-ignore": -5, "viral-capitalize": 25, "viral-overdo": -10},
    ),
    team_morale_description="Team is excited about the unexpected positive attention.",
    choices=[
        _choice("viral-ignore", "Stay the Course",
                "Don't change strategy, let the moment pass naturally.",
                0, 0, 50_000, 50_000, 1, 2, 5),
        _choice("viral-capitalize", "Strategic Amplification",
                "Carefully amplify the moment with complementary content and engagement.",
                100_000, 30, 400_000, 300_000, 8, 15, 30),
        _choice("viral-overdo", "Maximum Exploitation",
                "Go all-in with massive campaigns trying to recreate the viral moment.",
                300_000, 60, 200_000, -100_000, 3, -5, 10),
    ],
)

RECESSION_WARNING = EnhancedWildcardEvent(
    id="wildcard-enhanced-3",
    type=WildcardType.MARKET_SHIFT,
    title="Economic Recession Warning",
    description="Economic indicators suggest a recession is imminent. Consumer "
    "spending is expected to drop significantly.",
    rarity=Rarity.UNCOMMON,
    trigger_conditions=TriggerConditions(quarters=["Q3", "Q4"]),
    relevant_categories=[TacticCategory.TRADITIONAL, TacticCategory.PARTNERSHIPS],
    morale_impact=HiddenMetricImpact(
        base=-15,
        choice_modifiers={"recession-cuts": -25, "recession-pivot": -5, "recession-invest": 10},
    ),
    brand_equity_impact=HiddenMetricImpact(
        base=-5,
        choice_modifiers={"recession-cuts": -15, "recession-pivot": 5, "recession-invest": 15},
    ),
    team_morale_description="Team is worried about job security and budget cuts.",
    choices=[
        _choice("recession-cuts", "Defensive Cost Cutting",
                "Reduce marketing spend and focus on efficiency.",
                -200_000, 20, -300_000, 100_000, -8, -10, -15),
        _choice("recession-pivot", "Value-Focused Messaging",
                "Pivot marketing to emphasize value and affordability.",
                100_000, 50, -100_000, -100_000, 2, 10, 5),
        _choice("recession-invest", "Counter-Cyclical Investment",
                "Increase marketing investment while competitors retreat.",
                400_000, 70, 300_000, -100_000, 12, 5, 20),
    ],
)

INNOVATION_AWARD = EnhancedWildcardEvent(
    id="wildcard-enhanced-4",
    type=WildcardType.OPPORTUNITY,
    title="Industry Innovation Award",
    description="Your marketing campaign has been nominated for a prestigious "
    "industry award. Winning could boost credibility significantly.",
    rarity=Rarity.RARE,
    trigger_conditions=TriggerConditions(min_revenue=200_000, quarters=["Q3", "Q4"]),
    relevant_categories=[TacticCategory.CONTENT, TacticCategory.EVENTS],
    morale_impact=HiddenMetricImpact(
        base=20,
        choice_modifiers={"award-ignore": -15, "award-participate": 10, "award-campaign": 25},
    ),
    brand_equity_impact=HiddenMetricImpact(
        base=15,
        choice_modifiers={"award-ignore": -10, "award-participate": 10, "award-campaign": 30},
    ),
    team_morale_description="Team is proud of the recognition and motivated to win.",
    choices=[
        _choice("award-ignore", "Focus on Business",
                "Ignore the award and focus on core business objectives.",
                0, 0, 0, 0, 0, 0, 0),
        _choice("award-participate", "Professional Participation",
                "Participate professionally without additional investment.",
                25_000, 15, 75_000, 50_000, 2, 5, 10),
        _choice("award-campaign", "Full PR Campaign",
                "Launch a comprehensive PR campaign around the nomination.",
                150_000, 45, 300_000, 150_000, 6, 12, 25),
    ],
)

TALENT_POACHING = EnhancedWildcardEvent(
    id="wildcard-enhanced-5",
    type=WildcardType.COMPETITOR_ACTION,
    title="Talent Poaching Attempt",
    description="A major competitor is aggressively trying to poach your top "
    "marketing talent with lucrative offers.",
    rarity=Rarity.COMMON,
    trigger_conditions=TriggerConditions(has_hired_talent=True),
    morale_impact=HiddenMetricImpact(
        base=-10,
        choice_modifiers={"poaching-ignore": -20, "poaching-counter": 5, "poaching-invest": 15},
    ),
    brand_equity_impact=HiddenMetricImpact(
        base=0,
        choice_modifiers={"poaching-ignore": -5, "poaching-counter": 0, "poaching-invest": 5},
    ),
    team_morale_description="Team is unsettled by competitor recruitment efforts.",
    choices=[
        _choice("poaching-ignore", "Trust Team Loyalty",
                "Trust that your team will stay loyal without intervention.",
                0, 0, -150_000, 0, -3, -5, -5),
        _choice("poaching-counter", "Competitive Counter-Offers",
                "Match competitor offers to retain key talent.",
                200_000, 20, 50_000, -150_000, 1, 2, 0),
        _choice("poaching-invest", "Comprehensive Retention Program",
                "Implement equity, development, and culture programs.",
                350_000, 40, 200_000, -150_000, 4, 8, 5),
    ],
)

INFLUENCER_COLLABORATION = EnhancedWildcardEvent(
    id="wildcard-enhanced-6",
    type=WildcardType.OPPORTUNITY,
    title="Influencer Collaboration Offer",
    description="A mega-influencer with 50M+ followers wants to collaborate on a "
    "campaign, but they're known for being unpredictable.",
    rarity=Rarity.LEGENDARY,
    trigger_conditions=TriggerConditions(min_revenue=300_000, quarters=["Q2", "Q3", "Q4"]),
    relevant_categories=[TacticCategory.DIGITAL, TacticCategory.PARTNERSHIPS],
    morale_impact=HiddenMetricImpact(
        base=10,
        choice_modifiers={
            "influencer-decline": -5,
            "influencer-standard": 15,
            "influencer-exclusive": 25,
        },
    ),
    brand_equity_impact=HiddenMetricImpact(
        base=5,
        choice_modifiers={
            "influencer-decline": 0,
            "influencer-standard": 20,
            "influencer-exclusive": 35,
        },
    ),
    team_morale_description="Team is excited about the high-profile collaboration opportunity.",
    choices=[
        _choice("influencer-decline", "Politely Decline",
                "Too risky - stick with current influencer strategy.",
                0, 0, 0, 0, 0, 0, 0),
        _choice("influencer-standard", "Standard Collaboration",
                "Partner on a controlled campaign with clear guidelines.",
                500_000, 60, 1_200_000, 700_000, 15, 20, 40),
        _choice("influencer-exclusive", "Exclusive Partnership",
                "Go all-in with an exclusive, high-risk, high-reward partnership.",
                1_200_000, 90, 2_500_000, 1_300_000, 25, 30, 60),
    ],
)

ENHANCED_WILDCARDS: tuple[EnhancedWildcardEvent, ...] = (
    DATA_PRIVACY_SCANDAL,
    VIRAL_MOMENT,
    RECESSION_WARNING,
    INNOVATION_AWARD,
    TALENT_POACHING,
    INFLUENCER_COLLABORATION,
)


# =============================================================================
# SELECTION
# =============================================================================


def get_random_wildcard(rng: random.Random) -> WildcardEvent:
    """Pick a baseline wildcard uniformly at random."""
    return rng.choice(BASELINE_WILDCARDS)


def get_wildcard_by_id(wildcard_id: str) -> Optional[Union[WildcardEvent, EnhancedWildcardEvent]]:
    """Look up a baseline or enhanced wildcard by ID, or None if unknown."""
    for wildcard in BASELINE_WILDCARDS + ENHANCED_WILDCARDS:
        if wildcard.id == wildcard_id:
            return wildcard
    return None


def is_eligible(
    wildcard: EnhancedWildcardEvent,
    context: SimulationContext,
    quarter: QuarterKey,
) -> bool:
    """Check an enhanced wildcard's trigger conditions against the context.

    Revenue and market share are read from the cumulative KPIs. Events
    without trigger conditions are always eligible.
    """
    conditions = wildcard.trigger_conditions
    if conditions is None:
        return True

    kpis = context.kpis
    if conditions.quarters is not None and quarter.value not in conditions.quarters:
        return False
    if conditions.min_revenue is not None and kpis.revenue < conditions.min_revenue:
        return False
    if conditions.max_revenue is not None and kpis.revenue > conditions.max_revenue:
        return False
    if conditions.min_market_share is not None and kpis.market_share < conditions.min_market_share:
        return False
    if conditions.max_market_share is not None and kpis.market_share > conditions.max_market_share:
        return False
    if conditions.has_hired_talent is not None:
        if conditions.has_hired_talent != bool(context.hired_talent):
            return False
    return True


def get_enhanced_wildcard_for_quarter(
    context: SimulationContext,
    quarter: QuarterKey | str,
    rng: random.Random,
) -> Optional[EnhancedWildcardEvent]:
    """Select an eligible enhanced wildcard, weighted by rarity.

    Args:
        context: Current simulation context (read only)
        quarter: Quarter the event would be triggered in
        rng: Random source for the weighted draw

    Returns:
        An enhanced wildcard, or None if no event is eligible
    """
    quarter = QuarterKey(quarter)
    eligible = [w for w in ENHANCED_WILDCARDS if is_eligible(w, context, quarter)]
    if not eligible:
        return None
    weights = [w.rarity.weight for w in eligible]
    return rng.choices(eligible, weights=weights, k=1)[0]
