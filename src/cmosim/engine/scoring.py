"""Final scoring for a completed simulation.

All functions are pure: no clock, no randomness, no I/O. The same four
quarter results always grade the same way, which keeps leaderboard entries
auditable.

Formulas:
- ROI = (Total_revenue - Total_spent) / Total_spent * 100, or 0 if nothing spent
- Overall_score = round((ROI*0.4 + Share*2 + Satisfaction*0.8 + Awareness*0.6) / 4)
  using Q4's end-of-quarter levels, rounded half up
- Grade: >=90 A+, >=80 A, >=70 B, >=60 C, else D
"""

from __future__ import annotations

import math
from typing import Mapping, Optional, Sequence

from cmosim.models.state import FinalResults, KPIs, QuarterKey, QuarterResult
from cmosim.parameters import (
    AWARENESS_WEIGHT,
    FALLBACK_GRADE,
    GRADE_THRESHOLDS,
    MARKET_SHARE_WEIGHT,
    RECOMMENDATION_AWARENESS_FLOOR,
    RECOMMENDATION_MARKET_SHARE_FLOOR,
    RECOMMENDATION_REVENUE_FLOOR,
    RECOMMENDATION_SATISFACTION_FLOOR,
    RECOMMENDATION_UNUSED_BUDGET_FRACTION,
    ROI_WEIGHT,
    SATISFACTION_WEIGHT,
    SCORE_DIVISOR,
    STRENGTH_BRAND_EQUITY,
    STRENGTH_MARKET_SHARE,
    STRENGTH_ROI,
    WEAKNESS_MARKET_SHARE,
    WEAKNESS_MORALE,
    WEAKNESS_ROI,
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 going up (41.5 -> 42, 42.5 -> 43)."""
    return int(math.floor(value + 0.5))


def calculate_roi(total_revenue: float, total_budget_spent: float) -> float:
    """Return on investment as a percentage; 0 when nothing was spent."""
    if total_budget_spent > 0:
        return (total_revenue - total_budget_spent) / total_budget_spent * 100.0
    return 0.0


def calculate_overall_score(
    roi: float,
    market_share: float,
    customer_satisfaction: float,
    brand_awareness: float,
) -> int:
    """Weighted strategy score. Unbounded: a high ROI can push it past 100."""
    weighted = (
        roi * ROI_WEIGHT
        + market_share * MARKET_SHARE_WEIGHT
        + customer_satisfaction * SATISFACTION_WEIGHT
        + brand_awareness * AWARENESS_WEIGHT
    )
    return round_half_up(weighted / SCORE_DIVISOR)


def get_grade(score: float) -> str:
    """Letter grade for an overall score."""
    for floor, grade in GRADE_THRESHOLDS:
        if score >= floor:
            return grade
    return FALLBACK_GRADE


def generate_recommendations(
    final_kpis: KPIs,
    total_revenue: float,
    remaining_budget: float,
    total_budget: float,
) -> list[str]:
    """Advice for each final KPI that fell below its floor."""
    recommendations = []

    if total_revenue < RECOMMENDATION_REVENUE_FLOOR:
        recommendations.append(
            "Focus on revenue-generating tactics like digital advertising and partnerships."
        )
    if final_kpis.market_share < RECOMMENDATION_MARKET_SHARE_FLOOR:
        recommendations.append(
            "Increase market share through competitive pricing and brand differentiation."
        )
    if final_kpis.customer_satisfaction < RECOMMENDATION_SATISFACTION_FLOOR:
        recommendations.append(
            "Invest in customer experience improvements and support initiatives."
        )
    if final_kpis.brand_awareness < RECOMMENDATION_AWARENESS_FLOOR:
        recommendations.append(
            "Boost brand awareness through content marketing and social media campaigns."
        )
    if remaining_budget > total_budget * RECOMMENDATION_UNUSED_BUDGET_FRACTION:
        recommendations.append(
            "You left significant budget unused. Consider more aggressive marketing investments."
        )

    return recommendations


def identify_strengths_and_weaknesses(
    roi: float,
    market_share: float,
    morale: Optional[float] = None,
    brand_equity: Optional[float] = None,
) -> tuple[list[str], list[str]]:
    """Debrief talking points from ROI, market share and the hidden metrics."""
    strengths = []
    weaknesses = []

    if roi > STRENGTH_ROI:
        strengths.append("Exceptional ROI - highly efficient budget use")
    if market_share > STRENGTH_MARKET_SHARE:
        strengths.append("Strong market presence achieved")
    if brand_equity is not None and brand_equity > STRENGTH_BRAND_EQUITY:
        strengths.append("Built powerful brand equity")

    if roi < WEAKNESS_ROI:
        weaknesses.append("Low ROI - budget efficiency needs improvement")
    if market_share < WEAKNESS_MARKET_SHARE:
        weaknesses.append("Limited market penetration")
    if morale is not None and morale < WEAKNESS_MORALE:
        weaknesses.append("Team burnout affected performance")

    return strengths, weaknesses


def aggregate_quarters(results: Mapping[QuarterKey, QuarterResult]) -> dict:
    """Totals and per-quarter breakdown for final results and leaderboard rows."""
    ordered = [results[key] for key in QuarterKey if key in results]
    return {
        "total_revenue": sum(r.revenue for r in ordered),
        "total_profit": sum(r.profit for r in ordered),
        "total_budget_spent": sum(r.budget_spent for r in ordered),
        "total_time_spent": sum(r.time_spent for r in ordered),
        "quarterly_revenue": {key.value: results[key].revenue for key in QuarterKey if key in results},
        "quarterly_profit": {key.value: results[key].profit for key in QuarterKey if key in results},
    }


def calculate_final_results(
    results: Sequence[QuarterResult],
    kpis: KPIs,
    total_budget: float,
    *,
    morale: Optional[float] = None,
    brand_equity: Optional[float] = None,
) -> FinalResults:
    """Score a completed simulation.

    Args:
        results: The quarter results in order Q1..Q4 (the last one supplies
            the final percentage levels)
        kpis: Cumulative KPIs at the end of Q4
        total_budget: The simulation's total budget, for utilization
        morale: Optional hidden team morale for strengths/weaknesses
        brand_equity: Optional hidden brand equity for strengths/weaknesses

    Returns:
        FinalResults
    """
    totals = aggregate_quarters(dict(zip(QuarterKey, results)))
    total_revenue = totals["total_revenue"]
    total_profit = totals["total_profit"]
    total_budget_spent = totals["total_budget_spent"]

    if results:
        last = results[-1]
        final_share = last.market_share
        final_satisfaction = last.customer_satisfaction
        final_awareness = last.brand_awareness
    else:
        final_share = kpis.market_share
        final_satisfaction = kpis.customer_satisfaction
        final_awareness = kpis.brand_awareness

    roi = calculate_roi(total_revenue, total_budget_spent)
    score = calculate_overall_score(roi, final_share, final_satisfaction, final_awareness)

    final_kpis = KPIs(
        revenue=kpis.revenue,
        profit=kpis.profit,
        market_share=final_share,
        customer_satisfaction=final_satisfaction,
        brand_awareness=final_awareness,
    )
    strengths, weaknesses = identify_strengths_and_weaknesses(
        roi, final_share, morale=morale, brand_equity=brand_equity
    )

    return FinalResults(
        final_kpis=final_kpis,
        roi=roi,
        overall_score=score,
        grade=get_grade(score),
        total_revenue=total_revenue,
        total_profit=total_profit,
        total_budget_spent=total_budget_spent,
        budget_utilization=(total_budget_spent / total_budget * 100.0) if total_budget > 0 else 0.0,
        quarterly_revenue=totals["quarterly_revenue"],
        quarterly_profit=totals["quarterly_profit"],
        recommendations=generate_recommendations(
            final_kpis, total_revenue, total_budget - total_budget_spent, total_budget
        ),
        strengths=strengths,
        weaknesses=weaknesses,
    )
