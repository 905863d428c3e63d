"""Persistence service used by the simulation machine.

SimulationStore wraps a simulation repository and a leaderboard repository
and never raises: every operation returns a PersistenceResult. The caller
decides whether to retry; the simulation itself stays valid either way.

Usage:
    store = SimulationStore.from_environment()
    result = store.save(context)
    if not result.success:
        print(f"Could not save: {result.error}")
"""

from __future__ import annotations

import hashlib
import json
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field, ValidationError

from cmosim.models.state import SimulationContext
from cmosim.storage.config import StorageBackend, StorageSettings
from cmosim.storage.repository import LeaderboardRepository, SimulationRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Storage failures converted to PersistenceResult. Anything else is a bug
# and propagates.
STORAGE_ERRORS = (OSError, ValueError, ValidationError, sqlite3.Error, KeyError)


@dataclass
class PersistenceResult(Generic[T]):
    """Outcome of a persistence operation.

    Attributes:
        success: Whether the operation completed
        value: Loaded or stored value (None on failure or for saves)
        error: Error message if success=False
    """

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None


class LeaderboardEntry(BaseModel):
    """One leaderboard row: a user's best submission for a season."""

    id: Optional[str] = None
    user_id: str = Field(..., min_length=1)
    username: str
    company_name: str = "Anonymous Company"
    industry: str = "Technology"
    strategy_type: str = "Growth"
    target_audience: Optional[str] = None
    brand_positioning: Optional[str] = None
    primary_channels: list[str] = Field(default_factory=list)

    final_score: int
    grade: str
    total_revenue: float
    total_profit: float = 0.0
    quarterly_revenue: dict[str, float] = Field(default_factory=dict)
    final_market_share: float
    final_satisfaction: float
    final_awareness: float
    roi_percentage: float

    total_budget: float
    budget_utilized: float
    quarters_completed: int = 4
    wildcards_handled: int = 0
    talent_hired: int = 0
    big_bet_made: bool = False
    big_bet_success: bool = False

    season: str
    simulation_id: Optional[str] = None
    simulation_hash: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


def get_season(moment: Optional[datetime] = None) -> str:
    """Leaderboard season for a moment, e.g. "2026-Q4".

    Args:
        moment: Time of submission (default: now, UTC)
    """
    moment = moment or datetime.now(timezone.utc)
    quarter = (moment.month - 1) // 3 + 1
    return f"{moment.year}-Q{quarter}"


def compute_simulation_hash(context: SimulationContext) -> str:
    """SHA-256 over strategy, quarters and final results (canonical JSON)."""
    payload = context.model_dump(
        mode="json", include={"strategy", "quarters", "final_results"}
    )
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def build_leaderboard_entry(
    context: SimulationContext,
    user_id: str,
    username: str,
    moment: Optional[datetime] = None,
) -> LeaderboardEntry:
    """Build a leaderboard entry from a scored simulation.

    Raises:
        ValueError: If the simulation has no final results yet
    """
    final = context.final_results
    if final is None:
        raise ValueError("No final results available")

    strategy = context.strategy
    return LeaderboardEntry(
        user_id=user_id,
        username=username,
        company_name=strategy.company_name or "Anonymous Company",
        industry=strategy.industry or "Technology",
        strategy_type=strategy.strategy_type or "Growth",
        target_audience=strategy.target_audience,
        brand_positioning=strategy.brand_positioning,
        primary_channels=list(strategy.primary_channels),
        final_score=final.overall_score,
        grade=final.grade,
        total_revenue=final.total_revenue,
        total_profit=final.total_profit,
        quarterly_revenue=dict(final.quarterly_revenue),
        final_market_share=final.final_kpis.market_share,
        final_satisfaction=final.final_kpis.customer_satisfaction,
        final_awareness=final.final_kpis.brand_awareness,
        roi_percentage=final.roi,
        total_budget=context.total_budget,
        budget_utilized=final.total_budget_spent,
        quarters_completed=len(context.completed_quarters),
        wildcards_handled=len(context.wildcards),
        talent_hired=len(context.hired_talent),
        big_bet_made=context.selected_big_bet is not None,
        big_bet_success=bool(context.big_bet_outcome and context.big_bet_outcome.success),
        season=get_season(moment),
        simulation_id=context.simulation_id,
        simulation_hash=compute_simulation_hash(context),
    )


class SimulationStore:
    """Save/load simulations and submit leaderboard entries."""

    def __init__(
        self,
        simulations: SimulationRepository,
        leaderboard: LeaderboardRepository,
    ) -> None:
        self.simulations = simulations
        self.leaderboard = leaderboard

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> SimulationStore:
        return cls(*settings.repositories())

    @classmethod
    def from_environment(cls, backend: StorageBackend | None = None) -> SimulationStore:
        """Create a store from CMOSIM_* environment configuration.

        Args:
            backend: Overrides CMOSIM_STORAGE_BACKEND when given
        """
        settings = StorageSettings.from_environment()
        if backend is not None:
            settings = settings.model_copy(update={"backend": backend})
        return cls.from_settings(settings)

    def save(self, context: SimulationContext) -> PersistenceResult[None]:
        """Persist a snapshot of the context."""
        try:
            self.simulations.save_simulation(context.simulation_id, context.to_dict())
        except STORAGE_ERRORS as e:
            logger.error(f"Failed to save simulation {context.simulation_id}: {e}")
            return PersistenceResult(success=False, error=str(e))
        logger.debug(f"Saved simulation {context.simulation_id} ({context.phase.value})")
        return PersistenceResult(success=True)

    def load(self, simulation_id: str) -> PersistenceResult[SimulationContext]:
        """Load and validate a snapshot."""
        try:
            data = self.simulations.load_simulation(simulation_id)
            if data is None:
                return PersistenceResult(
                    success=False, error=f"Simulation not found: {simulation_id}"
                )
            context = SimulationContext.from_dict(data)
        except STORAGE_ERRORS as e:
            logger.error(f"Failed to load simulation {simulation_id}: {e}")
            return PersistenceResult(success=False, error=str(e))
        return PersistenceResult(success=True, value=context)

    def submit_leaderboard(
        self,
        context: SimulationContext,
        user_id: str,
        username: str,
    ) -> PersistenceResult[LeaderboardEntry]:
        """Submit a scored simulation; replaces the user's entry for the season."""
        try:
            entry = build_leaderboard_entry(context, user_id, username)
            stored = self.leaderboard.submit_entry(entry.model_dump(mode="json"))
            result = LeaderboardEntry.model_validate(stored)
        except STORAGE_ERRORS as e:
            logger.error(f"Failed to submit leaderboard entry for {user_id}: {e}")
            return PersistenceResult(success=False, error=str(e))
        logger.info(f"Leaderboard entry for {user_id}: {result.final_score} ({result.grade})")
        return PersistenceResult(success=True, value=result)

    def leaderboard_stats(self, season: Optional[str] = None) -> PersistenceResult[dict[str, Any]]:
        try:
            stats = self.leaderboard.get_stats(season)
        except STORAGE_ERRORS as e:
            logger.error(f"Failed to read leaderboard stats: {e}")
            return PersistenceResult(success=False, error=str(e))
        return PersistenceResult(success=True, value={**stats, "current_season": get_season()})
