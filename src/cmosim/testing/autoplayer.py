"""Automated player for the CMO Simulator.

Drives a SimulationMachine from start to debrief with a simple tactic
selection policy. Used by the integration tests and by
scripts/balance_simulation.py to look at score and grade distributions.

Key principle: the AutoPlayer is just another caller. It goes through the
public command API and respects the caller-side budget and time checks the
same way a UI would.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from cmosim.content import (
    ALL_TACTICS,
    get_enhanced_wildcard_for_quarter,
    get_random_big_bets,
    get_random_talent_pool,
    get_random_wildcard,
)
from cmosim.engine.machine import SimulationMachine
from cmosim.engine.quarter import (
    can_complete_quarter,
    quarter_budget_remaining,
    quarter_time_remaining,
)
from cmosim.models.content import Tactic, WildcardChoice
from cmosim.models.state import Phase, QuarterKey, SimulationContext
from cmosim.parameters import TALENT_MARKET_QUARTERS
from cmosim.storage.service import SimulationStore

logger = logging.getLogger(__name__)

Policy = Literal["random", "efficient", "awareness"]
POLICIES: tuple[str, ...] = ("random", "efficient", "awareness")


@dataclass
class SimulationResult:
    """Summary of one automated simulation."""

    policy: str
    overall_score: int
    grade: str
    roi: float
    total_revenue: float
    total_budget_spent: float
    final_market_share: float
    final_satisfaction: float
    final_awareness: float
    wildcards_handled: int
    talent_hired: int
    big_bet_made: bool
    big_bet_success: bool

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "policy": self.policy,
            "overall_score": self.overall_score,
            "grade": self.grade,
            "roi": round(self.roi, 2),
            "total_revenue": round(self.total_revenue, 2),
            "total_budget_spent": round(self.total_budget_spent, 2),
            "final_market_share": round(self.final_market_share, 2),
            "final_satisfaction": round(self.final_satisfaction, 2),
            "final_awareness": round(self.final_awareness, 2),
            "wildcards_handled": self.wildcards_handled,
            "talent_hired": self.talent_hired,
            "big_bet_made": self.big_bet_made,
            "big_bet_success": self.big_bet_success,
        }


def _tactic_ranking(policy: str, rng: random.Random) -> Callable[[list[Tactic]], list[Tactic]]:
    if policy == "efficient":
        return lambda tactics: sorted(
            tactics, key=lambda t: t.expected_impact.revenue / max(t.cost, 1.0), reverse=True
        )
    if policy == "awareness":
        return lambda tactics: sorted(
            tactics, key=lambda t: t.expected_impact.brand_awareness, reverse=True
        )
    if policy == "random":
        return lambda tactics: rng.sample(tactics, len(tactics))
    raise ValueError(f"Unknown policy: {policy}")


class AutoPlayer:
    """Plays one simulation end to end.

    Usage:
        player = AutoPlayer(policy="efficient", random_seed=7)
        result = player.run()
        print(result.grade)
    """

    def __init__(
        self,
        policy: Policy = "efficient",
        random_seed: Optional[int] = None,
        total_budget: Optional[float] = None,
        wildcard_chance: float = 0.5,
        hire_talent: bool = True,
        allow_big_bet: bool = True,
        store: Optional[SimulationStore] = None,
    ):
        """Initialize the player.

        Args:
            policy: Tactic selection policy ("random", "efficient", "awareness")
            random_seed: Seed for both the machine and the player's own choices
            total_budget: Budget passed to START_SIMULATION (default budget if None)
            wildcard_chance: Probability of a wildcard each quarter
            hire_talent: Whether to hire one candidate per talent-market quarter
            allow_big_bet: Whether to take an affordable big bet in Q4
            store: Optional store; the simulation is saved after every quarter
        """
        self.policy = policy
        self.total_budget = total_budget
        self.wildcard_chance = wildcard_chance
        self.hire_talent = hire_talent
        self.allow_big_bet = allow_big_bet
        self._random = random.Random(random_seed)
        self._rank = _tactic_ranking(policy, self._random)
        self.machine = SimulationMachine(store=store, random_seed=random_seed)

    def run(self, user_id: str = "autoplayer") -> SimulationResult:
        """Play a full simulation and return its summary."""
        machine = self.machine
        machine.start(user_id, total_budget=self.total_budget)
        machine.set_strategy(
            target_audience="Digital-first professionals",
            brand_positioning="Quality at a fair price",
            primary_channels=["digital", "content"],
            company_name="AutoCo",
            strategy_type=self.policy.title(),
        )
        machine.complete_strategy_session()

        for quarter in QuarterKey:
            self.play_quarter(quarter)
            if machine.store is not None:
                machine.save()

        context = machine.complete_debrief()
        return self._summarize(context)

    def play_quarter(self, quarter: QuarterKey) -> None:
        """Make every decision for the active quarter, then complete it."""
        machine = self.machine
        if not machine.is_in_quarter(quarter):
            raise RuntimeError(f"Expected {quarter.value}, machine is in {machine.phase.value}")

        if self.hire_talent and quarter.value in TALENT_MARKET_QUARTERS:
            self._hire(quarter)

        if self._random.random() < self.wildcard_chance:
            self._handle_wildcard(quarter)

        if self.allow_big_bet and quarter == QuarterKey.Q4:
            self._big_bet(quarter)

        self._fill_tactics(quarter)

        # Drop the lowest-priority tactics until the quarter fits
        while not can_complete_quarter(machine.context, quarter):
            tactics = machine.context.quarters[quarter].tactics
            if not tactics:
                logger.warning(f"{quarter.value} is over its allotment with no tactics left")
                break
            machine.remove_tactic(quarter, tactics[-1].id)

        machine.complete_quarter(quarter)

    def _fits(self, quarter: QuarterKey, cost: float, hours: float) -> bool:
        context = self.machine.context
        return (
            cost <= quarter_budget_remaining(context, quarter)
            and hours <= quarter_time_remaining(context, quarter)
        )

    def _hire(self, quarter: QuarterKey) -> None:
        for candidate in get_random_talent_pool(self._random, 3):
            if self._fits(quarter, candidate.total_hiring_cost, 0):
                self.machine.hire_talent(quarter, candidate)
                return

    def _handle_wildcard(self, quarter: QuarterKey) -> None:
        machine = self.machine
        event = get_enhanced_wildcard_for_quarter(machine.context, quarter, self._random)
        if event is None or self._random.random() < 0.5:
            event = get_random_wildcard(self._random)
        machine.trigger_wildcard(quarter, event)
        choice = self._choose_response(quarter, event.choices)
        machine.respond_to_wildcard(quarter, event, choice.id)

    def _choose_response(self, quarter: QuarterKey, choices: list[WildcardChoice]) -> WildcardChoice:
        affordable = [c for c in choices if self._fits(quarter, c.cost, c.time_required)]
        if not affordable:
            return min(choices, key=lambda c: (c.cost, c.time_required))
        return max(affordable, key=lambda c: c.impact.revenue - c.cost)

    def _big_bet(self, quarter: QuarterKey) -> None:
        for option in get_random_big_bets(self._random, 3):
            if self._fits(quarter, option.cost, 0):
                self.machine.make_big_bet(quarter, option)
                return

    def _fill_tactics(self, quarter: QuarterKey) -> None:
        for tactic in self._rank(list(ALL_TACTICS)):
            if self._fits(quarter, tactic.cost, tactic.time_required):
                self.machine.add_tactic(quarter, tactic)

    def _summarize(self, context: SimulationContext) -> SimulationResult:
        final = context.final_results
        if final is None or context.phase != Phase.COMPLETED:
            raise RuntimeError(f"Simulation did not complete (phase {context.phase.value})")
        return SimulationResult(
            policy=self.policy,
            overall_score=final.overall_score,
            grade=final.grade,
            roi=final.roi,
            total_revenue=final.total_revenue,
            total_budget_spent=final.total_budget_spent,
            final_market_share=final.final_kpis.market_share,
            final_satisfaction=final.final_kpis.customer_satisfaction,
            final_awareness=final.final_kpis.brand_awareness,
            wildcards_handled=len(context.wildcards),
            talent_hired=len(context.hired_talent),
            big_bet_made=context.selected_big_bet is not None,
            big_bet_success=bool(context.big_bet_outcome and context.big_bet_outcome.success),
        )
