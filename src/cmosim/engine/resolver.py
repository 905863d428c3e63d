"""Event resolution for wildcards and big bets.

Every function here is side-effect free. The only source of randomness is the
`random.Random` instance passed in by the caller, so outcomes are reproducible
with a fixed seed.

Formulas:
- Momentum = 1.2 when year-to-date revenue (completed quarters) > 300,000
- Relevant specialist: positive fields x1.1, negative fields x0.9
- Team_strength = 0.5 * (hires / slots) + 0.5 * (morale / 100)
- P(big bet success) = clamp(0.2, 0.9,
      (1 - risk) * 0.5 + market * 0.2 + revenue * 0.2 + satisfaction * 0.1
      + team_strength * 0.1)
  where market, revenue and satisfaction are normalized and capped to [0, 1].
- Failed bet: potential * 0.1, plus a one-time satisfaction penalty of 5.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence, Union

from cmosim.models.content import (
    BigBetOption,
    BigBetOutcome,
    EnhancedWildcardEvent,
    ImpactVector,
    TalentCandidate,
    WildcardEvent,
)
from cmosim.models.state import KPIs, ResolvedWildcard, SimulationContext, clamp
from cmosim.parameters import (
    BIG_BET_FAILURE_FRACTION,
    BIG_BET_FAILURE_SATISFACTION_PENALTY,
    BIG_BET_MARKET_SHARE_NORMALIZER,
    BIG_BET_MARKET_WEIGHT,
    BIG_BET_MAX_PROBABILITY,
    BIG_BET_MIN_PROBABILITY,
    BIG_BET_REVENUE_NORMALIZER,
    BIG_BET_REVENUE_WEIGHT,
    BIG_BET_RISK_WEIGHT,
    BIG_BET_SATISFACTION_NORMALIZER,
    BIG_BET_SATISFACTION_WEIGHT,
    BIG_BET_TEAM_WEIGHT,
    MAX_TEAM_SLOTS,
    MOMENTUM_MULTIPLIER,
    MOMENTUM_REVENUE_THRESHOLD,
    TALENT_RELEVANCE_BOOST,
    TALENT_RELEVANCE_MITIGATION,
)

logger = logging.getLogger(__name__)


# =============================================================================
# WILDCARDS
# =============================================================================


def year_to_date_revenue(context: SimulationContext) -> float:
    """Revenue booked by completed quarters only.

    Wildcard effects applied during the current quarter are not counted, so
    momentum cannot feed on itself within a quarter.
    """
    return sum(
        quarter.results.revenue
        for quarter in context.quarters.values()
        if quarter.results is not None
    )


def calculate_momentum(
    context: SimulationContext,
    threshold: float = MOMENTUM_REVENUE_THRESHOLD,
    multiplier: float = MOMENTUM_MULTIPLIER,
) -> float:
    """Momentum factor applied to enhanced wildcard impacts.

    Returns:
        multiplier if year-to-date revenue exceeds threshold, else 1.0
    """
    if year_to_date_revenue(context) > threshold:
        return multiplier
    return 1.0


def has_relevant_talent(
    event: EnhancedWildcardEvent,
    hired_talent: Sequence[TalentCandidate],
) -> bool:
    """Whether any hire specializes in one of the event's relevant categories."""
    relevant = set(event.relevant_categories)
    return any(relevant.intersection(talent.specialties) for talent in hired_talent)


def resolve_wildcard_impact(
    event: Union[WildcardEvent, EnhancedWildcardEvent],
    choice_id: str,
    context: SimulationContext,
    *,
    momentum_threshold: float = MOMENTUM_REVENUE_THRESHOLD,
    momentum_multiplier: float = MOMENTUM_MULTIPLIER,
    talent_boost: float = TALENT_RELEVANCE_BOOST,
    talent_mitigation: float = TALENT_RELEVANCE_MITIGATION,
) -> Optional[ImpactVector]:
    """Compute the KPI impact of responding to a wildcard.

    Baseline events return the chosen impact unmodified. Enhanced events are
    scaled by momentum, then nudged in the player's favour when a relevant
    specialist is on the team.

    Args:
        event: The wildcard being answered
        choice_id: ID of the chosen response
        context: Current simulation context (read only)

    Returns:
        The impact vector, or None if choice_id is not one of the event's choices
    """
    choice = event.get_choice(choice_id)
    if choice is None:
        return None

    if not isinstance(event, EnhancedWildcardEvent):
        return choice.impact

    momentum = calculate_momentum(context, momentum_threshold, momentum_multiplier)
    impact = choice.impact.scaled(momentum)

    if has_relevant_talent(event, context.hired_talent):
        impact = impact.map_fields(
            lambda v: v * talent_boost if v > 0 else v * talent_mitigation
        )

    return impact


def resolve_wildcard(
    event: Union[WildcardEvent, EnhancedWildcardEvent],
    choice_id: str,
    context: SimulationContext,
    impact: Optional[ImpactVector] = None,
) -> Optional[ResolvedWildcard]:
    """Resolve a wildcard response into a ResolvedWildcard record.

    If impact is given it is used as-is (precomputed by the caller);
    otherwise it is computed with resolve_wildcard_impact. Enhanced events
    also produce morale and brand equity deltas.

    Returns:
        ResolvedWildcard, or None if choice_id is unknown for this event
    """
    choice = event.get_choice(choice_id)
    if choice is None:
        return None

    if impact is None:
        impact = resolve_wildcard_impact(event, choice_id, context)

    morale_delta = 0.0
    brand_equity_delta = 0.0
    if isinstance(event, EnhancedWildcardEvent):
        morale_delta = event.morale_impact.for_choice(choice_id)
        brand_equity_delta = event.brand_equity_impact.for_choice(choice_id)

    return ResolvedWildcard(
        wildcard_id=event.id,
        choice_id=choice_id,
        cost=choice.cost,
        time_required=choice.time_required,
        impact=impact,
        morale_delta=morale_delta,
        brand_equity_delta=brand_equity_delta,
    )


# =============================================================================
# BIG BETS
# =============================================================================


def calculate_team_strength(
    hired_talent: Sequence[TalentCandidate],
    morale: float,
    max_slots: int = MAX_TEAM_SLOTS,
) -> float:
    """Team strength in [0, 1] from filled slots and morale."""
    filled = min(len(hired_talent), max_slots) / max_slots if max_slots > 0 else 0.0
    return clamp(0.5 * filled + 0.5 * (morale / 100.0), 0.0, 1.0)


def calculate_success_probability(
    option: BigBetOption,
    kpis: KPIs,
    team_strength: float = 0.0,
    *,
    min_probability: float = BIG_BET_MIN_PROBABILITY,
    max_probability: float = BIG_BET_MAX_PROBABILITY,
) -> float:
    """Success probability of a big bet, always within [min, max].

    Args:
        option: The bet being made
        kpis: Cumulative KPIs at the time of the bet
        team_strength: 0-1, see calculate_team_strength

    Returns:
        Probability in [0.2, 0.9] with default bounds
    """
    revenue_factor = clamp(kpis.revenue / BIG_BET_REVENUE_NORMALIZER, 0.0, 1.0)
    market_factor = clamp(kpis.market_share / BIG_BET_MARKET_SHARE_NORMALIZER, 0.0, 1.0)
    satisfaction_factor = clamp(
        kpis.customer_satisfaction / BIG_BET_SATISFACTION_NORMALIZER, 0.0, 1.0
    )
    team_factor = clamp(team_strength, 0.0, 1.0)

    raw = (
        (1.0 - option.risk) * BIG_BET_RISK_WEIGHT
        + market_factor * BIG_BET_MARKET_WEIGHT
        + revenue_factor * BIG_BET_REVENUE_WEIGHT
        + satisfaction_factor * BIG_BET_SATISFACTION_WEIGHT
        + team_factor * BIG_BET_TEAM_WEIGHT
    )
    return clamp(raw, min_probability, max_probability)


def calculate_failure_impact(
    option: BigBetOption,
    failure_fraction: float = BIG_BET_FAILURE_FRACTION,
    satisfaction_penalty: float = BIG_BET_FAILURE_SATISFACTION_PENALTY,
) -> ImpactVector:
    """What survives of a failed bet: a fraction of the upside, minus trust."""
    return option.potential_impact.scaled(failure_fraction) + ImpactVector(
        customer_satisfaction=-satisfaction_penalty
    )


def resolve_big_bet(
    option: BigBetOption,
    kpis: KPIs,
    rng: random.Random,
    team_strength: float = 0.0,
    *,
    failure_fraction: float = BIG_BET_FAILURE_FRACTION,
    satisfaction_penalty: float = BIG_BET_FAILURE_SATISFACTION_PENALTY,
) -> BigBetOutcome:
    """Roll a big bet.

    Args:
        option: The bet being made
        kpis: Cumulative KPIs at the time of the bet
        rng: Random source for the success draw
        team_strength: 0-1, see calculate_team_strength

    Returns:
        BigBetOutcome with the full potential on success, or the reduced
        failure impact otherwise
    """
    probability = calculate_success_probability(option, kpis, team_strength)
    success = rng.random() < probability

    if success:
        actual = option.potential_impact
    else:
        actual = calculate_failure_impact(option, failure_fraction, satisfaction_penalty)

    logger.debug(
        f"Big bet {option.id}: p={probability:.3f} -> {'success' if success else 'failure'}"
    )
    return BigBetOutcome(success=success, success_probability=probability, actual_impact=actual)
