"""Simulation balance parameters for the CMO Simulator.

This module is the SINGLE SOURCE OF TRUTH for all tunable simulation constants.

Parameter Categories:
- Budget & Time: How much each quarter can spend
- Starting KPIs: Where every simulation begins
- Momentum: How strong early quarters amplify wildcard outcomes
- Big Bets: Success probability weights and failure consequences
- Talent: Team slots and when the talent market is open
- Grading: Score thresholds for letter grades

Usage:
    from cmosim.parameters import QUARTER_TIME_HOURS, MOMENTUM_MULTIPLIER

Note: Resolver functions take these values as keyword defaults so tests and
balance scripts can override them without monkeypatching the module.
"""

# =============================================================================
# BUDGET & TIME PARAMETERS
# =============================================================================

DEFAULT_TOTAL_BUDGET = 2_000_000
"""Annual marketing budget when the player does not choose one.

The quarterly allotment is always floor(total_budget / 4). Custom
per-quarter reallocation is intentionally not supported.
"""

QUARTERS_PER_YEAR = 4

QUARTER_TIME_HOURS = 200
"""Team hours available in each quarter.

Tactics and wildcard responses consume hours. Like the budget, the limit is
checked by the caller (see can_complete_quarter) and never by the machine.
"""


# =============================================================================
# STARTING KPIs
# =============================================================================

STARTING_MARKET_SHARE = 10.0
STARTING_CUSTOMER_SATISFACTION = 70.0
STARTING_BRAND_AWARENESS = 30.0
STARTING_MORALE = 75.0
STARTING_BRAND_EQUITY = 50.0


# =============================================================================
# MOMENTUM PARAMETERS
# =============================================================================

MOMENTUM_REVENUE_THRESHOLD = 300_000
"""Year-to-date revenue (completed quarters only) that activates momentum.

Current: 300,000

Analysis:
    A typical Q1 with two or three mid-priced tactics earns 200-350k, so
    momentum usually switches on from Q2 or Q3 for engaged players.
"""

MOMENTUM_MULTIPLIER = 1.2
"""Multiplier applied to every field of an enhanced wildcard impact once
momentum is active."""

TALENT_RELEVANCE_BOOST = 1.1
"""Multiplier on positive impact fields when a hired specialist covers one
of the wildcard's relevant tactic categories."""

TALENT_RELEVANCE_MITIGATION = 0.9
"""Multiplier on negative impact fields under the same condition."""


# =============================================================================
# BIG BET PARAMETERS
# =============================================================================

BIG_BET_MIN_PROBABILITY = 0.2
BIG_BET_MAX_PROBABILITY = 0.9
"""Success probability bounds.

No big bet is ever a certain win or a certain loss, regardless of how
extreme the current KPIs are.
"""

BIG_BET_RISK_WEIGHT = 0.5
BIG_BET_MARKET_WEIGHT = 0.2
BIG_BET_REVENUE_WEIGHT = 0.2
BIG_BET_SATISFACTION_WEIGHT = 0.1
"""Weights for (1 - risk), market factor, revenue factor and satisfaction
factor in the success probability. They sum to 1.0."""

BIG_BET_REVENUE_NORMALIZER = 1_000_000
"""Cumulative revenue at which the revenue factor saturates at 1.0."""

BIG_BET_MARKET_SHARE_NORMALIZER = 100.0
BIG_BET_SATISFACTION_NORMALIZER = 100.0

BIG_BET_TEAM_WEIGHT = 0.1
"""Maximum probability bonus from team strength (0-1), added before the
final clamp."""

BIG_BET_FAILURE_FRACTION = 0.1
"""Fraction of the potential impact that survives a failed bet."""

BIG_BET_FAILURE_SATISFACTION_PENALTY = 5.0
"""One-time customer satisfaction loss on a failed bet."""


# =============================================================================
# TALENT PARAMETERS
# =============================================================================

MAX_TEAM_SLOTS = 3
"""Maximum number of hires across the whole simulation."""

TALENT_MARKET_QUARTERS = ("Q2", "Q3")
"""Quarters in which HIRE_TALENT is accepted."""

MIN_EFFICIENCY_MULTIPLIER = 0.5
"""Floor on the tactic cost/time multiplier from hires' efficiency.

A hire with efficiency e (percent) cuts the cost and hours of tactics in
the quarter they join by e%. Efficiencies add up and the combined
multiplier is max(0.5, 1 - sum/100), so tactic spend never drops below half.
"""


# =============================================================================
# GRADING PARAMETERS
# =============================================================================

GRADE_THRESHOLDS = (
    (90, "A+"),
    (80, "A"),
    (70, "B"),
    (60, "C"),
)
"""Score floors for each grade, checked in order. Anything below the last
floor is a D."""

FALLBACK_GRADE = "D"

ROI_WEIGHT = 0.4
MARKET_SHARE_WEIGHT = 2.0
SATISFACTION_WEIGHT = 0.8
AWARENESS_WEIGHT = 0.6
SCORE_DIVISOR = 4.0
"""overall_score = round((roi*0.4 + share*2 + satisfaction*0.8 +
awareness*0.6) / 4)"""


# =============================================================================
# DEBRIEF PARAMETERS
# =============================================================================

RECOMMENDATION_REVENUE_FLOOR = 500_000
RECOMMENDATION_MARKET_SHARE_FLOOR = 15.0
RECOMMENDATION_SATISFACTION_FLOOR = 70.0
RECOMMENDATION_AWARENESS_FLOOR = 40.0
RECOMMENDATION_UNUSED_BUDGET_FRACTION = 0.2
"""A recommendation is emitted for each final KPI below its floor, and when
more than this fraction of the total budget was left unspent."""

STRENGTH_ROI = 150.0
STRENGTH_MARKET_SHARE = 15.0
STRENGTH_BRAND_EQUITY = 70.0
WEAKNESS_ROI = 50.0
WEAKNESS_MARKET_SHARE = 8.0
WEAKNESS_MORALE = 50.0
