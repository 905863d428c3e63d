"""File-based repository implementations using JSON files.

Simulations are stored one JSON file per simulation in the simulations
directory. The leaderboard is a single JSON file holding a list of entries.
"""

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .repository import LeaderboardRepository, SimulationRepository, compute_rank, compute_stats


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FileSimulationRepository(SimulationRepository):
    """JSON file-based simulation repository.

    Stores each snapshot as <simulations_path>/<simulation_id>.json.
    """

    def __init__(self, simulations_path: str | Path = "simulations"):
        """Initialize repository.

        Args:
            simulations_path: Path to simulations directory
        """
        self.simulations_path = Path(simulations_path)
        self.simulations_path.mkdir(parents=True, exist_ok=True)

    def _get_simulation_path(self, simulation_id: str) -> Path:
        """Get path to simulation file."""
        return self.simulations_path / f"{simulation_id}.json"

    def save_simulation(self, simulation_id: str, data: dict) -> None:
        """Persist a complete simulation snapshot."""
        if not simulation_id:
            raise ValueError("Simulation must have an id")

        record = {
            "id": simulation_id,
            "user_id": data.get("user_id"),
            "phase": data.get("phase"),
            "updated_at": _now(),
            "context": data,
        }

        path = self._get_simulation_path(simulation_id)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(record, f, indent=2)

    def load_simulation(self, simulation_id: str) -> Optional[dict]:
        """Load a simulation snapshot by ID."""
        path = self._get_simulation_path(simulation_id)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            return json.load(f)["context"]

    def list_simulations(self, user_id: Optional[str] = None) -> list[dict]:
        """List simulations, optionally filtered by user."""
        simulations = []
        for path in self.simulations_path.glob("*.json"):
            with open(path, encoding="utf-8") as f:
                data = json.load(f)

            if user_id is not None and data.get("user_id") != user_id:
                continue

            simulations.append({
                "id": data.get("id", path.stem),
                "user_id": data.get("user_id"),
                "phase": data.get("phase"),
                "updated_at": data.get("updated_at", ""),
            })
        return sorted(simulations, key=lambda x: x.get("updated_at", ""), reverse=True)

    def delete_simulation(self, simulation_id: str) -> bool:
        """Delete simulation snapshot."""
        path = self._get_simulation_path(simulation_id)
        if path.exists():
            path.unlink()
            return True
        return False


class FileLeaderboardRepository(LeaderboardRepository):
    """JSON file-based leaderboard.

    All entries live in a single file, rewritten on each submission.
    """

    def __init__(self, leaderboard_path: str | Path = "leaderboard.json"):
        """Initialize repository.

        Args:
            leaderboard_path: Path to the leaderboard JSON file
        """
        self.leaderboard_path = Path(leaderboard_path)
        self.leaderboard_path.parent.mkdir(parents=True, exist_ok=True)

    def _read_all(self) -> list[dict]:
        if not self.leaderboard_path.exists():
            return []
        with open(self.leaderboard_path, encoding="utf-8") as f:
            return json.load(f)

    def _write_all(self, entries: list[dict]) -> None:
        with open(self.leaderboard_path, "w", encoding="utf-8") as f:
            json.dump(entries, f, indent=2)

    def submit_entry(self, entry: dict) -> dict:
        """Insert or replace the user's entry for the season."""
        user_id = entry.get("user_id")
        season = entry.get("season")
        if not user_id or not season:
            raise ValueError("Leaderboard entry must have 'user_id' and 'season'")

        entries = self._read_all()
        existing = next(
            (e for e in entries if e.get("user_id") == user_id and e.get("season") == season),
            None,
        )
        now = _now()
        stored = {
            **entry,
            "id": existing["id"] if existing else str(uuid.uuid4()),
            "created_at": existing["created_at"] if existing else now,
            "updated_at": now,
        }

        entries = [e for e in entries if e is not existing]
        entries.append(stored)
        self._write_all(entries)
        return stored

    def _ranked(self, season: Optional[str]) -> list[dict]:
        entries = self._read_all()
        if season is not None:
            entries = [e for e in entries if e.get("season") == season]
        return sorted(entries, key=lambda e: e.get("final_score", 0), reverse=True)

    def list_entries(self, season: Optional[str] = None, limit: int = 50) -> list[dict]:
        """Entries ranked by score, highest first."""
        return self._ranked(season)[:limit]

    def get_user_rank(self, user_id: str, season: Optional[str] = None) -> Optional[dict]:
        """Rank and percentile of a user's entry."""
        return compute_rank(self._ranked(season), user_id)

    def get_stats(self, season: Optional[str] = None) -> dict:
        """Summary statistics."""
        return compute_stats(self._ranked(season))

    def list_seasons(self) -> list[str]:
        """Seasons with at least one entry, newest first."""
        return sorted({e["season"] for e in self._read_all()}, reverse=True)
