"""Quarter processing.

Turns a quarter's committed decisions into a QuarterResult. Processing is
deterministic: randomness (wildcard draws, big bet rolls) has already been
resolved by the time a quarter is processed.

Key formulas:
- Talent_multiplier(tactic) = product of skill_multiplier over hires whose
  specialties include the tactic's category
- Revenue = sum(tactic revenue * multiplier) + wildcard revenue + big bet revenue
- Efficiency = max(0.5, 1 - sum(efficiency of the quarter's hires) / 100),
  applied to the quarter's tactic cost and hours
- Profit = Revenue - Budget_spent
- Level fields = clamp(current level + tactic deltas, 0, 100)

Wildcard and big bet deltas are applied to the cumulative KPIs as they are
resolved, so only the tactic deltas are added to the percentage levels here.
"""

from __future__ import annotations

from typing import Sequence

from cmosim.engine.scoring import round_half_up
from cmosim.models.content import ImpactVector, Tactic, TalentCandidate
from cmosim.models.state import (
    KPIs,
    QuarterData,
    QuarterKey,
    QuarterResult,
    SimulationContext,
    clamp_percent,
)
from cmosim.parameters import MIN_EFFICIENCY_MULTIPLIER


def calculate_talent_multiplier(tactic: Tactic, hired_talent: Sequence[TalentCandidate]) -> float:
    """Combined skill multiplier of every hire specializing in the tactic's channel."""
    multiplier = 1.0
    for talent in hired_talent:
        if tactic.category in talent.specialties:
            multiplier *= talent.skill_multiplier
    return multiplier


def calculate_tactic_impact(
    tactics: Sequence[Tactic],
    hired_talent: Sequence[TalentCandidate],
) -> ImpactVector:
    """Sum of tactic expected impacts, each scaled by its talent multiplier.

    Profit in a tactic's expected impact is ignored.
    """
    total = ImpactVector()
    for tactic in tactics:
        scaled = tactic.expected_impact.scaled(calculate_talent_multiplier(tactic, hired_talent))
        total = total + scaled.model_copy(update={"profit": 0.0})
    return total


def calculate_efficiency_multiplier(
    new_hires: Sequence[TalentCandidate],
    floor: float = MIN_EFFICIENCY_MULTIPLIER,
) -> float:
    """Tactic cost/time multiplier from the efficiency of a quarter's hires.

    Formula: max(floor, 1 - sum(efficiency) / 100)
    """
    total_efficiency = sum(talent.efficiency for talent in new_hires)
    return max(floor, 1.0 - total_efficiency / 100.0)


def calculate_quarter_spend(quarter: QuarterData) -> tuple[float, float]:
    """Budget and hours committed in a quarter.

    Sums tactics, wildcard responses, hires (fee plus a quarter's salary)
    and the big bet. Hires take no team hours. Tactic cost and hours are
    scaled by the efficiency of the quarter's hires and rounded half up.

    Returns:
        (budget_spent, time_spent)
    """
    budget = sum(t.cost for t in quarter.tactics)
    time = sum(t.time_required for t in quarter.tactics)

    efficiency = calculate_efficiency_multiplier(quarter.talent_hired)
    if efficiency < 1.0:
        budget = round_half_up(budget * efficiency)
        time = round_half_up(time * efficiency)

    budget += sum(w.cost for w in quarter.resolved_wildcards)
    time += sum(w.time_required for w in quarter.resolved_wildcards)

    budget += sum(talent.total_hiring_cost for talent in quarter.talent_hired)

    if quarter.big_bet is not None:
        budget += quarter.big_bet.cost

    return budget, time


def process_quarter(
    quarter: QuarterData,
    kpis: KPIs,
    hired_talent: Sequence[TalentCandidate],
) -> QuarterResult:
    """Produce the result snapshot for a quarter.

    Args:
        quarter: The quarter's decisions (tactics, resolved wildcards, hires, bet)
        kpis: Cumulative KPIs at completion time, already including this
            quarter's wildcard and big bet effects
        hired_talent: Everyone hired up to and including this quarter

    Returns:
        QuarterResult with flow fields for this quarter and end-of-quarter levels
    """
    tactic_impact = calculate_tactic_impact(quarter.tactics, hired_talent)
    budget_spent, time_spent = calculate_quarter_spend(quarter)

    revenue = tactic_impact.revenue
    revenue += sum(w.impact.revenue for w in quarter.resolved_wildcards)
    if quarter.big_bet_outcome is not None:
        revenue += quarter.big_bet_outcome.actual_impact.revenue

    return QuarterResult(
        revenue=revenue,
        profit=revenue - budget_spent,
        market_share=clamp_percent(kpis.market_share + tactic_impact.market_share),
        customer_satisfaction=clamp_percent(
            kpis.customer_satisfaction + tactic_impact.customer_satisfaction
        ),
        brand_awareness=clamp_percent(kpis.brand_awareness + tactic_impact.brand_awareness),
        budget_spent=budget_spent,
        time_spent=time_spent,
    )


# =============================================================================
# CALLER-SIDE PRECONDITIONS
# =============================================================================


def quarter_budget_remaining(context: SimulationContext, quarter: QuarterKey | str) -> float:
    """Quarter allotment minus what the quarter has committed (may be negative)."""
    return context.quarter_budget - context.quarters[QuarterKey(quarter)].budget_spent


def quarter_time_remaining(context: SimulationContext, quarter: QuarterKey | str) -> float:
    """Quarter hours minus hours committed (may be negative)."""
    return context.quarter_time - context.quarters[QuarterKey(quarter)].time_spent


def can_complete_quarter(context: SimulationContext, quarter: QuarterKey | str) -> bool:
    """Whether a quarter is within its budget and time allotment.

    The machine accepts over-allocated quarters; callers gate
    COMPLETE_QUARTER on this check.
    """
    return (
        quarter_budget_remaining(context, quarter) >= 0
        and quarter_time_remaining(context, quarter) >= 0
    )
