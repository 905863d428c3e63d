"""Abstract repository interfaces for CMO Simulator storage.

This module defines the abstract base classes for simulation snapshot and
leaderboard repositories. Both file-based (JSON) and SQLite backends
implement these interfaces, so the SimulationStore works without knowing
which backend is active.

Repositories exchange plain JSON-compatible dicts; model validation happens
one layer up in the store.
"""

from abc import ABC, abstractmethod
from typing import Optional


class SimulationRepository(ABC):
    """Abstract base class for simulation snapshot storage."""

    @abstractmethod
    def save_simulation(self, simulation_id: str, data: dict) -> None:
        """Persist a complete simulation snapshot, replacing any previous one.

        Args:
            simulation_id: Unique identifier for the simulation
            data: SimulationContext serialized with model_dump(mode="json")

        Raises:
            ValueError: If simulation_id is empty
        """
        pass

    @abstractmethod
    def load_simulation(self, simulation_id: str) -> Optional[dict]:
        """Load a simulation snapshot by ID.

        Returns:
            Snapshot dict, or None if not found
        """
        pass

    @abstractmethod
    def list_simulations(self, user_id: Optional[str] = None) -> list[dict]:
        """List simulations, most recently updated first.

        Args:
            user_id: Optional user ID to filter by

        Returns:
            List of metadata dicts: {id, user_id, phase, updated_at}
        """
        pass

    @abstractmethod
    def delete_simulation(self, simulation_id: str) -> bool:
        """Delete a simulation snapshot.

        Returns:
            True if deleted, False if not found
        """
        pass


class LeaderboardRepository(ABC):
    """Abstract base class for leaderboard storage.

    A user has at most one entry per season; submitting again replaces it.
    """

    @abstractmethod
    def submit_entry(self, entry: dict) -> dict:
        """Insert or replace the entry for (entry["user_id"], entry["season"]).

        Args:
            entry: LeaderboardEntry serialized with model_dump(mode="json")

        Returns:
            The stored entry

        Raises:
            ValueError: If user_id or season is missing
        """
        pass

    @abstractmethod
    def list_entries(self, season: Optional[str] = None, limit: int = 50) -> list[dict]:
        """Entries ranked by score, highest first.

        Args:
            season: Optional season ("YYYY-Qn") to filter by
            limit: Maximum number of entries
        """
        pass

    @abstractmethod
    def get_user_rank(self, user_id: str, season: Optional[str] = None) -> Optional[dict]:
        """Rank and percentile of a user's entry.

        Returns:
            {rank, percentile}, or None if the user has no entry
        """
        pass

    @abstractmethod
    def get_stats(self, season: Optional[str] = None) -> dict:
        """Summary statistics.

        Returns:
            {total_entries, average_score, highest_score, most_common_industry,
            most_successful_strategy}
        """
        pass

    @abstractmethod
    def list_seasons(self) -> list[str]:
        """Seasons with at least one entry, newest first."""
        pass


def compute_rank(entries: list[dict], user_id: str) -> Optional[dict]:
    """Rank of user_id within entries already sorted by score descending."""
    for index, entry in enumerate(entries):
        if entry.get("user_id") == user_id:
            total = len(entries)
            return {
                "rank": index + 1,
                "percentile": round((total - index) / total * 100),
            }
    return None


def compute_stats(entries: list[dict]) -> dict:
    """Leaderboard statistics shared by both backends."""
    if not entries:
        return {
            "total_entries": 0,
            "average_score": 0,
            "highest_score": 0,
            "most_common_industry": None,
            "most_successful_strategy": None,
        }

    scores = [entry["final_score"] for entry in entries]

    industry_counts: dict[str, int] = {}
    strategy_scores: dict[str, list[int]] = {}
    for entry in entries:
        industry = entry.get("industry")
        industry_counts[industry] = industry_counts.get(industry, 0) + 1
        strategy_scores.setdefault(entry.get("strategy_type"), []).append(entry["final_score"])

    most_common_industry = max(industry_counts.items(), key=lambda item: item[1])[0]
    most_successful_strategy = max(
        strategy_scores.items(), key=lambda item: sum(item[1]) / len(item[1])
    )[0]

    return {
        "total_entries": len(entries),
        "average_score": round(sum(scores) / len(scores)),
        "highest_score": max(scores),
        "most_common_industry": most_common_industry,
        "most_successful_strategy": most_successful_strategy,
    }
