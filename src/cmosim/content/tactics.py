"""Tactic catalog.

Fifteen tactics, three per marketing channel. Selecting a tactic copies the
(frozen) model into a quarter; the catalog itself is never modified.
"""

from __future__ import annotations

from typing import Optional

from cmosim.models.content import ImpactVector, Tactic, TacticCategory


def _tactic(
    id: str,
    name: str,
    category: TacticCategory,
    cost: float,
    time_required: float,
    revenue: float,
    market_share: float,
    customer_satisfaction: float,
    brand_awareness: float,
) -> Tactic:
    return Tactic(
        id=id,
        name=name,
        category=category,
        cost=cost,
        time_required=time_required,
        expected_impact=ImpactVector(
            revenue=revenue,
            market_share=market_share,
            customer_satisfaction=customer_satisfaction,
            brand_awareness=brand_awareness,
        ),
    )


# Digital
SOCIAL_MEDIA_CAMPAIGN = _tactic(
    "digital-1", "Social Media Advertising Campaign", TacticCategory.DIGITAL,
    75_000, 30, 150_000, 3, 2, 15,
)
SEARCH_ADS = _tactic(
    "digital-2", "Google Ads & SEM", TacticCategory.DIGITAL,
    100_000, 25, 200_000, 4, 1, 10,
)
INFLUENCER_PROGRAM = _tactic(
    "digital-3", "Influencer Partnership Program", TacticCategory.DIGITAL,
    50_000, 40, 80_000, 2, 5, 20,
)

# Content
CONTENT_HUB = _tactic(
    "content-1", "Content Marketing Hub", TacticCategory.CONTENT,
    60_000, 50, 90_000, 2, 8, 12,
)
VIDEO_SERIES = _tactic(
    "content-2", "Video Marketing Series", TacticCategory.CONTENT,
    80_000, 60, 120_000, 3, 6, 18,
)
PODCAST_SPONSORSHIP = _tactic(
    "content-3", "Podcast Sponsorship", TacticCategory.CONTENT,
    30_000, 20, 50_000, 1, 3, 8,
)

# Traditional
TV_CAMPAIGN = _tactic(
    "traditional-1", "TV Commercial Campaign", TacticCategory.TRADITIONAL,
    200_000, 45, 300_000, 8, 2, 25,
)
PRINT_ADVERTISING = _tactic(
    "traditional-2", "Print Advertising", TacticCategory.TRADITIONAL,
    40_000, 15, 60_000, 2, 1, 8,
)
RADIO_SPONSORSHIP = _tactic(
    "traditional-3", "Radio Sponsorship", TacticCategory.TRADITIONAL,
    25_000, 10, 40_000, 1, 1, 6,
)

# Events
TRADE_SHOW = _tactic(
    "events-1", "Trade Show Presence", TacticCategory.EVENTS,
    120_000, 80, 180_000, 5, 10, 15,
)
CUSTOMER_EVENTS = _tactic(
    "events-2", "Customer Experience Events", TacticCategory.EVENTS,
    90_000, 70, 110_000, 3, 15, 12,
)
LAUNCH_EVENT = _tactic(
    "events-3", "Product Launch Event", TacticCategory.EVENTS,
    150_000, 90, 250_000, 6, 8, 20,
)

# Partnerships
BRAND_PARTNERSHIP = _tactic(
    "partnerships-1", "Strategic Brand Partnership", TacticCategory.PARTNERSHIPS,
    70_000, 60, 140_000, 4, 6, 14,
)
RETAIL_PARTNERSHIP = _tactic(
    "partnerships-2", "Retail Partnership Program", TacticCategory.PARTNERSHIPS,
    100_000, 50, 200_000, 6, 4, 10,
)
TECH_PARTNERSHIP = _tactic(
    "partnerships-3", "Technology Integration Partnership", TacticCategory.PARTNERSHIPS,
    80_000, 70, 160_000, 5, 12, 8,
)


ALL_TACTICS: tuple[Tactic, ...] = (
    SOCIAL_MEDIA_CAMPAIGN,
    SEARCH_ADS,
    INFLUENCER_PROGRAM,
    CONTENT_HUB,
    VIDEO_SERIES,
    PODCAST_SPONSORSHIP,
    TV_CAMPAIGN,
    PRINT_ADVERTISING,
    RADIO_SPONSORSHIP,
    TRADE_SHOW,
    CUSTOMER_EVENTS,
    LAUNCH_EVENT,
    BRAND_PARTNERSHIP,
    RETAIL_PARTNERSHIP,
    TECH_PARTNERSHIP,
)


def get_tactics_by_category(category: TacticCategory | str) -> list[Tactic]:
    """All catalog tactics in a marketing channel, in catalog order."""
    category = TacticCategory(category)
    return [tactic for tactic in ALL_TACTICS if tactic.category == category]


def get_tactic_by_id(tactic_id: str) -> Optional[Tactic]:
    """Look up a tactic by ID.

    Returns:
        Tactic if found, None otherwise
    """
    for tactic in ALL_TACTICS:
        if tactic.id == tactic_id:
            return tactic
    return None
