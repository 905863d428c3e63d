"""Talent market and big bet catalogs.

The talent market opens in Q2 and Q3; the big bets are offered in Q4.
"""

from __future__ import annotations

import random
from typing import Optional

from cmosim.models.content import BigBetOption, ImpactVector, TacticCategory, TalentCandidate

# =============================================================================
# TALENT POOL
# =============================================================================

TALENT_POOL: tuple[TalentCandidate, ...] = (
    TalentCandidate(
        id="talent-1",
        name="Sarah Chen",
        role="Digital Marketing Director",
        experience="senior",
        salary=120_000,
        hiring_cost=15_000,
        skill_multiplier=1.15,
        efficiency=20,
        specialties=[TacticCategory.DIGITAL],
        morale_boost=10,
        brand_equity_boost=5,
        backstory="Former growth lead at a unicorn startup, scaled user acquisition "
        "from 10K to 1M users.",
    ),
    TalentCandidate(
        id="talent-2",
        name="Marcus Rodriguez",
        role="Creative Director",
        experience="senior",
        salary=110_000,
        hiring_cost=12_000,
        skill_multiplier=1.1,
        efficiency=15,
        specialties=[TacticCategory.CONTENT, TacticCategory.TRADITIONAL],
        morale_boost=20,
        brand_equity_boost=25,
        backstory="Award-winning creative director who led rebrands for Fortune 500 companies.",
    ),
    TalentCandidate(
        id="talent-3",
        name="Dr. Priya Patel",
        role="Customer Experience Strategist",
        experience="executive",
        salary=140_000,
        hiring_cost=20_000,
        skill_multiplier=1.12,
        efficiency=10,
        specialties=[TacticCategory.EVENTS],
        morale_boost=15,
        brand_equity_boost=20,
        backstory="PhD in Consumer Psychology, transformed customer satisfaction at "
        "3 major brands.",
    ),
    TalentCandidate(
        id="talent-4",
        name="Alex Kim",
        role="Growth Hacker",
        experience="mid",
        salary=85_000,
        hiring_cost=8_000,
        skill_multiplier=1.08,
        efficiency=25,
        specialties=[TacticCategory.DIGITAL, TacticCategory.CONTENT],
        morale_boost=25,
        brand_equity_boost=15,
        backstory="Self-taught marketer who created viral campaigns reaching 50M+ "
        "people on zero budget.",
    ),
    TalentCandidate(
        id="talent-5",
        name="Jennifer Walsh",
        role="Partnership Director",
        experience="senior",
        salary=130_000,
        hiring_cost=18_000,
        skill_multiplier=1.2,
        efficiency=5,
        specialties=[TacticCategory.PARTNERSHIPS],
        morale_boost=10,
        brand_equity_boost=10,
        backstory="Built partnership networks generating $50M+ in revenue across "
        "multiple industries.",
    ),
    TalentCandidate(
        id="talent-6",
        name="David Thompson",
        role="Marketing Operations Manager",
        experience="mid",
        salary=75_000,
        hiring_cost=7_000,
        skill_multiplier=1.06,
        efficiency=30,
        specialties=[TacticCategory.DIGITAL, TacticCategory.EVENTS],
        morale_boost=5,
        brand_equity_boost=0,
        backstory="Streamlined marketing operations for high-growth companies, "
        "reducing costs by 40%.",
    ),
)


# =============================================================================
# BIG BETS
# =============================================================================


def _bet(
    id: str,
    name: str,
    description: str,
    category: str,
    cost: float,
    risk: float,
    strategy: str,
    revenue: float,
    market_share: float,
    brand_awareness: float,
    customer_satisfaction: float,
) -> BigBetOption:
    return BigBetOption(
        id=id,
        name=name,
        description=description,
        category=category,
        cost=cost,
        risk=risk,
        strategy=strategy,
        potential_impact=ImpactVector(
            revenue=revenue,
            market_share=market_share,
            brand_awareness=brand_awareness,
            customer_satisfaction=customer_satisfaction,
        ),
    )


BIG_BETS: tuple[BigBetOption, ...] = (
    _bet(
        "bigbet-1", "Super Bowl Commercial",
        "Launch a high-impact Super Bowl commercial to achieve massive brand awareness "
        "and cultural relevance.",
        "product_launch", 8_000_000, 0.35,
        "Mass market brand awareness through premium advertising placement",
        15_000_000, 12, 35, 20,
    ),
    _bet(
        "bigbet-2", "AI-Powered Personalization Platform",
        "Invest in cutting-edge AI technology to deliver hyper-personalized customer "
        "experiences.",
        "technology_pivot", 3_000_000, 0.25,
        "Technology-driven customer experience enhancement and data monetization",
        8_500_000, 7, 18, 30,
    ),
    _bet(
        "bigbet-3", "Global Market Expansion",
        "Enter 3 new international markets with localized marketing campaigns and "
        "partnerships.",
        "market_expansion", 5_000_000, 0.4,
        "Geographic diversification through strategic market entry and localization",
        11_500_000, 16, 28, 18,
    ),
    _bet(
        "bigbet-4", "Strategic Acquisition",
        "Acquire a complementary company to expand product portfolio and customer base.",
        "acquisition", 12_000_000, 0.5,
        "Inorganic growth through strategic acquisition and market consolidation",
        24_000_000, 25, 42, 8,
    ),
    _bet(
        "bigbet-5", "Influencer Partnership Network",
        "Build exclusive partnerships with top-tier influencers and content creators "
        "for authentic brand advocacy.",
        "partnership", 2_000_000, 0.2,
        "Authentic brand advocacy through strategic influencer partnerships and "
        "content collaboration",
        4_750_000, 5, 14, 10,
    ),
    _bet(
        "bigbet-6", "Sustainability Revolution",
        "Transform the brand into a sustainability leader with eco-friendly initiatives "
        "and carbon neutrality.",
        "product_launch", 4_000_000, 0.15,
        "Brand differentiation through environmental leadership and sustainable innovation",
        6_500_000, 6, 45, 32,
    ),
)


def get_random_talent_pool(rng: random.Random, count: int = 3) -> list[TalentCandidate]:
    """Draw `count` distinct candidates from the talent pool."""
    return rng.sample(TALENT_POOL, min(count, len(TALENT_POOL)))


def get_random_big_bets(rng: random.Random, count: int = 3) -> list[BigBetOption]:
    """Draw `count` distinct big bet options."""
    return rng.sample(BIG_BETS, min(count, len(BIG_BETS)))


def get_talent_by_id(talent_id: str) -> Optional[TalentCandidate]:
    for candidate in TALENT_POOL:
        if candidate.id == talent_id:
            return candidate
    return None


def get_big_bet_by_id(bet_id: str) -> Optional[BigBetOption]:
    for bet in BIG_BETS:
        if bet.id == bet_id:
            return bet
    return None
