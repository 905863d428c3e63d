"""Simulation state machine for the CMO Simulator.

This module implements the lifecycle of a simulation as a pure transition
function, `reduce(context, command, rng)`, plus the SimulationMachine class
that hosts a context, owns the random source and talks to the store.

Lifecycle:
    idle -> strategy_session -> Q1 -> Q2 -> Q3 -> Q4 -> debrief -> completed
    RESTART_SIMULATION returns to idle from any phase.

Rejection semantics:
    A command that does not fit the current phase (wrong quarter, unknown
    choice, full team, big bet outside Q4, ...) is rejected by returning the
    context unchanged. The machine never raises for a bad command; callers
    detect rejection as "no observable change". Rejections are logged at
    WARNING.
    SimulationMachine applies the same rule to API arguments that do not
    form a valid command, such as an unknown quarter key.

Budget and time limits are NOT enforced here. Callers gate COMPLETE_QUARTER
on can_complete_quarter().
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pydantic import ValidationError

from cmosim.engine.commands import (
    AddTactic,
    Command,
    CompleteDebrief,
    CompleteQuarter,
    CompleteStrategySession,
    HireTalent,
    MakeBigBet,
    RemoveTactic,
    RespondToWildcard,
    RestartSimulation,
    SaveSimulation,
    SetStrategy,
    StartSimulation,
    TriggerWildcard,
)
from cmosim.engine.quarter import calculate_quarter_spend, process_quarter
from cmosim.engine.resolver import calculate_team_strength, resolve_big_bet, resolve_wildcard
from cmosim.engine.scoring import calculate_final_results
from cmosim.models.content import (
    AnyWildcard,
    BigBetOption,
    BigBetOutcome,
    ImpactVector,
    TalentCandidate,
    Tactic,
)
from cmosim.models.state import (
    KPIs,
    Phase,
    QuarterData,
    QuarterKey,
    SimulationContext,
    Strategy,
    clamp_percent,
)
from cmosim.parameters import DEFAULT_TOTAL_BUDGET, MAX_TEAM_SLOTS, TALENT_MARKET_QUARTERS
from cmosim.storage.service import PersistenceResult, SimulationStore

logger = logging.getLogger(__name__)

BIG_BET_QUARTER = QuarterKey.Q4


class CommandRejected(Exception):
    """Raised inside a handler to reject a command; never escapes reduce()."""


# =============================================================================
# Helpers
# =============================================================================


def _require_phase(context: SimulationContext, *phases: Phase) -> None:
    if context.phase not in phases:
        allowed = ", ".join(p.value for p in phases)
        raise CommandRejected(f"phase is {context.phase.value}, expected {allowed}")


def _require_quarter(context: SimulationContext, quarter: QuarterKey) -> QuarterData:
    """Return the active quarter's data if `quarter` is the active quarter."""
    if context.current_quarter != quarter:
        raise CommandRejected(
            f"quarter {quarter.value} is not active (phase is {context.phase.value})"
        )
    return context.quarters[quarter]


def _replace_quarter(
    context: SimulationContext,
    key: QuarterKey,
    quarter: QuarterData,
    **updates: Any,
) -> SimulationContext:
    """Store a quarter, recomputing its spend and the remaining budget."""
    budget_spent, time_spent = calculate_quarter_spend(quarter)
    quarter = quarter.model_copy(update={"budget_spent": budget_spent, "time_spent": time_spent})
    quarters = {**context.quarters, key: quarter}
    total_spent = sum(q.budget_spent for q in quarters.values())
    return context.model_copy(
        update={
            "quarters": quarters,
            "remaining_budget": context.total_budget - total_spent,
            **updates,
        }
    )


def _score(context: SimulationContext) -> SimulationContext:
    """Write final results once; a second call leaves them untouched."""
    if context.final_results is not None:
        return context
    results = [context.quarters[key].results for key in QuarterKey]
    final = calculate_final_results(
        [r for r in results if r is not None],
        context.kpis,
        context.total_budget,
        morale=context.morale,
        brand_equity=context.brand_equity,
    )
    logger.info(f"Final results: score={final.overall_score} grade={final.grade} roi={final.roi:.1f}")
    return context.model_copy(update={"final_results": final})


# =============================================================================
# Handlers
# =============================================================================


def _start(context: SimulationContext, command: StartSimulation, rng: random.Random,
           now: datetime) -> SimulationContext:
    _require_phase(context, Phase.IDLE)
    total_budget = command.total_budget or DEFAULT_TOTAL_BUDGET
    return SimulationContext(
        user_id=command.user_id,
        started_at=now,
        phase=Phase.STRATEGY_SESSION,
        total_budget=total_budget,
        remaining_budget=total_budget,
    )


def _set_strategy(context: SimulationContext, command: SetStrategy, rng: random.Random,
                  now: datetime) -> SimulationContext:
    _require_phase(context, Phase.STRATEGY_SESSION)
    try:
        strategy: Strategy = context.strategy.merge(command.strategy)
    except ValidationError as e:
        raise CommandRejected(f"invalid strategy: {e.error_count()} error(s)") from e

    updates: dict[str, Any] = {"strategy": strategy}
    if strategy.total_budget is not None and strategy.total_budget != context.total_budget:
        # Nothing has been spent before Q1
        updates["total_budget"] = strategy.total_budget
        updates["remaining_budget"] = strategy.total_budget
    return context.model_copy(update=updates)


def _complete_strategy(context: SimulationContext, command: CompleteStrategySession,
                       rng: random.Random, now: datetime) -> SimulationContext:
    _require_phase(context, Phase.STRATEGY_SESSION)
    if not context.strategy.is_complete:
        raise CommandRejected("strategy needs a target audience, positioning and a channel")
    q1 = context.quarters[QuarterKey.Q1].model_copy(update={"opening_kpis": context.kpis})
    return context.model_copy(
        update={"phase": Phase.Q1, "quarters": {**context.quarters, QuarterKey.Q1: q1}}
    )


def _add_tactic(context: SimulationContext, command: AddTactic, rng: random.Random,
                now: datetime) -> SimulationContext:
    quarter = _require_quarter(context, command.quarter)
    if quarter.has_tactic(command.tactic.id):
        raise CommandRejected(f"tactic {command.tactic.id} already selected")
    tactics: list[Tactic] = [*quarter.tactics, command.tactic]
    return _replace_quarter(context, command.quarter, quarter.model_copy(update={"tactics": tactics}))


def _remove_tactic(context: SimulationContext, command: RemoveTactic, rng: random.Random,
                   now: datetime) -> SimulationContext:
    quarter = _require_quarter(context, command.quarter)
    if not quarter.has_tactic(command.tactic_id):
        raise CommandRejected(f"tactic {command.tactic_id} is not selected")
    tactics = [t for t in quarter.tactics if t.id != command.tactic_id]
    return _replace_quarter(context, command.quarter, quarter.model_copy(update={"tactics": tactics}))


def _trigger_wildcard(context: SimulationContext, command: TriggerWildcard, rng: random.Random,
                      now: datetime) -> SimulationContext:
    quarter = _require_quarter(context, command.quarter)
    if quarter.pending_wildcard is not None:
        raise CommandRejected(f"wildcard {quarter.pending_wildcard.id} is still pending")
    wildcard: AnyWildcard = command.wildcard
    updated = quarter.model_copy(
        update={
            "pending_wildcard": wildcard,
            "wildcard_events": [*quarter.wildcard_events, wildcard],
        }
    )
    return _replace_quarter(
        context, command.quarter, updated, wildcards=[*context.wildcards, wildcard]
    )


def _respond_to_wildcard(context: SimulationContext, command: RespondToWildcard,
                         rng: random.Random, now: datetime) -> SimulationContext:
    quarter = _require_quarter(context, command.quarter)
    pending = quarter.pending_wildcard
    if pending is None or pending.id != command.wildcard.id:
        raise CommandRejected(f"wildcard {command.wildcard.id} is not pending")

    resolved = resolve_wildcard(pending, command.choice_id, context, impact=command.impact)
    if resolved is None:
        raise CommandRejected(f"unknown choice {command.choice_id} for {pending.id}")

    updated = quarter.model_copy(
        update={
            "pending_wildcard": None,
            "resolved_wildcards": [*quarter.resolved_wildcards, resolved],
        }
    )
    return _replace_quarter(
        context,
        command.quarter,
        updated,
        kpis=context.kpis.apply(resolved.impact),
        morale=clamp_percent(context.morale + resolved.morale_delta),
        brand_equity=clamp_percent(context.brand_equity + resolved.brand_equity_delta),
    )


def _hire_talent(context: SimulationContext, command: HireTalent, rng: random.Random,
                 now: datetime) -> SimulationContext:
    quarter = _require_quarter(context, command.quarter)
    talent: TalentCandidate = command.talent
    if command.quarter.value not in TALENT_MARKET_QUARTERS:
        raise CommandRejected(f"talent market is closed in {command.quarter.value}")
    if any(t.id == talent.id for t in context.hired_talent):
        raise CommandRejected(f"{talent.name} is already on the team")
    if len(context.hired_talent) >= MAX_TEAM_SLOTS:
        raise CommandRejected("all team slots are filled")

    updated = quarter.model_copy(update={"talent_hired": [*quarter.talent_hired, talent]})
    return _replace_quarter(
        context,
        command.quarter,
        updated,
        hired_talent=[*context.hired_talent, talent],
        morale=clamp_percent(context.morale + talent.morale_boost),
        brand_equity=clamp_percent(context.brand_equity + talent.brand_equity_boost),
    )


def _make_big_bet(context: SimulationContext, command: MakeBigBet, rng: random.Random,
                  now: datetime) -> SimulationContext:
    quarter = _require_quarter(context, command.quarter)
    if command.quarter != BIG_BET_QUARTER:
        raise CommandRejected(f"big bets are only offered in {BIG_BET_QUARTER.value}")
    if context.selected_big_bet is not None:
        raise CommandRejected("a big bet has already been made")

    option: BigBetOption = command.option
    outcome: Optional[BigBetOutcome] = command.outcome
    if outcome is None:
        team_strength = calculate_team_strength(context.hired_talent, context.morale)
        outcome = resolve_big_bet(option, context.kpis, rng, team_strength)

    impact: ImpactVector = outcome.actual_impact
    updated = quarter.model_copy(update={"big_bet": option, "big_bet_outcome": outcome})
    return _replace_quarter(
        context,
        command.quarter,
        updated,
        kpis=context.kpis.apply(impact),
        selected_big_bet=option,
        big_bet_outcome=outcome,
    )


def _complete_quarter(context: SimulationContext, command: CompleteQuarter, rng: random.Random,
                      now: datetime) -> SimulationContext:
    key = command.quarter
    quarter = _require_quarter(context, key)
    if quarter.pending_wildcard is not None:
        raise CommandRejected(f"wildcard {quarter.pending_wildcard.id} awaits a response")

    result = process_quarter(quarter, context.kpis, context.hired_talent)
    quarters = {**context.quarters, key: quarter.model_copy(update={"results": result})}

    completed = [q.results for q in quarters.values() if q.results is not None]
    kpis = KPIs(
        revenue=sum(r.revenue for r in completed),
        profit=sum(r.profit for r in completed),
        market_share=result.market_share,
        customer_satisfaction=result.customer_satisfaction,
        brand_awareness=result.brand_awareness,
    )

    next_key = key.next
    if next_key is not None:
        quarters[next_key] = quarters[next_key].model_copy(update={"opening_kpis": kpis})
        next_phase = Phase.for_quarter(next_key)
    else:
        next_phase = Phase.DEBRIEF

    updated = context.model_copy(update={"quarters": quarters, "kpis": kpis, "phase": next_phase})
    logger.info(
        f"{key.value} complete: revenue={result.revenue:,.0f} profit={result.profit:,.0f} "
        f"-> {next_phase.value}"
    )
    if next_phase == Phase.DEBRIEF:
        updated = _score(updated)
    return updated


def _complete_debrief(context: SimulationContext, command: CompleteDebrief, rng: random.Random,
                      now: datetime) -> SimulationContext:
    if context.phase == Phase.COMPLETED:
        # Idempotent: final results are already written
        return context
    _require_phase(context, Phase.DEBRIEF)
    scored = _score(context)
    return scored.model_copy(update={"phase": Phase.COMPLETED, "completed_at": now})


def _save(context: SimulationContext, command: SaveSimulation, rng: random.Random,
          now: datetime) -> SimulationContext:
    # Persistence is handled by the hosting SimulationMachine
    return context


def _restart(context: SimulationContext, command: RestartSimulation, rng: random.Random,
             now: datetime) -> SimulationContext:
    return SimulationContext()


_HANDLERS: dict[type, Callable[..., SimulationContext]] = {
    StartSimulation: _start,
    SetStrategy: _set_strategy,
    CompleteStrategySession: _complete_strategy,
    AddTactic: _add_tactic,
    RemoveTactic: _remove_tactic,
    TriggerWildcard: _trigger_wildcard,
    RespondToWildcard: _respond_to_wildcard,
    HireTalent: _hire_talent,
    MakeBigBet: _make_big_bet,
    CompleteQuarter: _complete_quarter,
    CompleteDebrief: _complete_debrief,
    SaveSimulation: _save,
    RestartSimulation: _restart,
}


def reduce(
    context: SimulationContext,
    command: Command,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> SimulationContext:
    """Apply a command to a context and return the resulting context.

    The input context is never modified. A rejected command returns the
    input context itself (the same object).

    Args:
        context: Current context
        command: Command to apply
        rng: Random source for big bet rolls (default: unseeded)
        now: Timestamp for started_at/completed_at (default: now, UTC)

    Returns:
        The new context, or `context` if the command was rejected
    """
    handler = _HANDLERS.get(type(command))
    if handler is None:
        logger.warning(f"Rejected {type(command).__name__}: unknown command")
        return context

    try:
        new_context = handler(
            context,
            command,
            rng if rng is not None else random.Random(),
            now if now is not None else datetime.now(timezone.utc),
        )
    except CommandRejected as e:
        logger.warning(f"Rejected {command.type}: {e}")
        return context

    if new_context.phase != context.phase:
        logger.info(f"{command.type}: {context.phase.value} -> {new_context.phase.value}")
    else:
        logger.debug(f"Applied {command.type} in {context.phase.value}")
    return new_context


# =============================================================================
# Hosting machine
# =============================================================================


class SimulationMachine:
    """Hosts a simulation context and exposes the command and query API.

    Every command method returns the new (or unchanged) context snapshot.
    Arguments that cannot form a valid command (an unknown quarter key, a
    non-positive budget) are rejected like any other bad command.

    Attributes:
        store: Optional persistence collaborator used by save()
        last_save: Result of the most recent save, None before the first one
    """

    def __init__(
        self,
        context: Optional[SimulationContext] = None,
        store: Optional[SimulationStore] = None,
        random_seed: Optional[int] = None,
    ) -> None:
        """Initialize the machine.

        Args:
            context: Context to resume (default: a fresh idle context)
            store: Persistence collaborator for save()
            random_seed: Seed for random number generation (for reproducibility)
        """
        self._context = context if context is not None else SimulationContext()
        self.store = store
        self.last_save: Optional[PersistenceResult[None]] = None
        self._random = random.Random(random_seed)

    @property
    def rng(self) -> random.Random:
        """The machine's random source, shared with content selection helpers."""
        return self._random

    def send(self, command: Command) -> SimulationContext:
        """Apply a command and return the resulting context.

        SAVE_SIMULATION records its PersistenceResult in `last_save`.
        """
        self._context = reduce(self._context, command, self._random)
        if isinstance(command, SaveSimulation):
            self.save()
        return self._context

    def _send_new(self, command_type: Callable[..., Command],
                  **fields: Any) -> SimulationContext:
        """Build a command from API arguments and send it."""
        try:
            command = command_type(**fields)
        except ValidationError as e:
            logger.warning(f"Rejected {command_type.__name__}: {e.error_count()} invalid field(s)")
            return self._context
        return self.send(command)

    # Command API

    def start(self, user_id: Optional[str] = None,
              total_budget: Optional[float] = None) -> SimulationContext:
        return self._send_new(StartSimulation, user_id=user_id, total_budget=total_budget)

    def set_strategy(self, **partial: Any) -> SimulationContext:
        return self._send_new(SetStrategy, strategy=partial)

    def complete_strategy_session(self) -> SimulationContext:
        return self._send_new(CompleteStrategySession)

    def add_tactic(self, quarter: QuarterKey | str, tactic: Tactic) -> SimulationContext:
        return self._send_new(AddTactic, quarter=quarter, tactic=tactic)

    def remove_tactic(self, quarter: QuarterKey | str, tactic_id: str) -> SimulationContext:
        return self._send_new(RemoveTactic, quarter=quarter, tactic_id=tactic_id)

    def trigger_wildcard(self, quarter: QuarterKey | str, wildcard: AnyWildcard) -> SimulationContext:
        return self._send_new(TriggerWildcard, quarter=quarter, wildcard=wildcard)

    def respond_to_wildcard(
        self,
        quarter: QuarterKey | str,
        wildcard: AnyWildcard,
        choice_id: str,
        impact: Optional[ImpactVector] = None,
    ) -> SimulationContext:
        return self._send_new(
            RespondToWildcard, quarter=quarter, wildcard=wildcard, choice_id=choice_id, impact=impact
        )

    def hire_talent(self, quarter: QuarterKey | str, talent: TalentCandidate) -> SimulationContext:
        return self._send_new(HireTalent, quarter=quarter, talent=talent)

    def make_big_bet(
        self,
        quarter: QuarterKey | str,
        option: BigBetOption,
        outcome: Optional[BigBetOutcome] = None,
    ) -> SimulationContext:
        return self._send_new(MakeBigBet, quarter=quarter, option=option, outcome=outcome)

    def complete_quarter(self, quarter: QuarterKey | str) -> SimulationContext:
        return self._send_new(CompleteQuarter, quarter=quarter)

    def complete_debrief(self) -> SimulationContext:
        return self._send_new(CompleteDebrief)

    def restart(self) -> SimulationContext:
        return self._send_new(RestartSimulation)

    def save(self) -> PersistenceResult[None]:
        """Hand the current snapshot to the store.

        Failures are reported, not retried; the in-memory context is
        unaffected either way. The result is also kept in `last_save`.
        """
        if self.store is None:
            result: PersistenceResult[None] = PersistenceResult(
                success=False, error="No store configured"
            )
        else:
            result = self.store.save(self._context)
        self.last_save = result
        return result

    # Query API

    @property
    def context(self) -> SimulationContext:
        return self._context

    @property
    def phase(self) -> Phase:
        return self._context.phase

    def is_idle(self) -> bool:
        return self._context.phase == Phase.IDLE

    def is_in_quarter(self, quarter: QuarterKey | str) -> bool:
        """Whether `quarter` is the active quarter; False for unknown keys."""
        try:
            key = QuarterKey(quarter)
        except ValueError:
            return False
        return self._context.current_quarter == key

    def is_in_debrief(self) -> bool:
        return self._context.phase == Phase.DEBRIEF

    def is_completed(self) -> bool:
        return self._context.phase == Phase.COMPLETED

    def current_quarter(self) -> Optional[QuarterKey]:
        return self._context.current_quarter
