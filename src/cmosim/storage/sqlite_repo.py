"""SQLite-based repository implementations.

This module provides SQLite storage for simulation snapshots and the
leaderboard using the standard library sqlite3 module. Snapshots are stored
as JSON text alongside a few indexed metadata columns.
"""

import json
import sqlite3
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .repository import LeaderboardRepository, SimulationRepository, compute_rank, compute_stats

# Leaderboard columns stored as JSON text
_JSON_COLUMNS = ("primary_channels", "quarterly_revenue")


def dict_factory(cursor: sqlite3.Cursor, row: tuple) -> dict:
    """Convert sqlite3 row to dict."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


class _SQLiteRepository(ABC):
    """Connection handling shared by the SQLite repositories."""

    def __init__(self, database_uri: str = "instance/cmosim.db"):
        """Initialize repository.

        Args:
            database_uri: Path to SQLite database file
        """
        self.database_path = Path(database_uri)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection."""
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = dict_factory
        return conn

    @abstractmethod
    def _init_db(self) -> None:
        """Create the tables this repository uses."""


class SQLiteSimulationRepository(_SQLiteRepository, SimulationRepository):
    """SQLite-based simulation repository."""

    def _init_db(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS simulations (
                id TEXT PRIMARY KEY,
                user_id TEXT,
                phase TEXT,
                data TEXT NOT NULL,
                created_at TEXT,
                updated_at TEXT
            )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_simulations_user_id ON simulations(user_id)")
        conn.commit()
        conn.close()

    def save_simulation(self, simulation_id: str, data: dict) -> None:
        """Persist a complete simulation snapshot."""
        if not simulation_id:
            raise ValueError("Simulation must have an id")

        now = datetime.now(timezone.utc).isoformat()

        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO simulations (id, user_id, phase, data, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                user_id = excluded.user_id,
                phase = excluded.phase,
                data = excluded.data,
                updated_at = excluded.updated_at
        """, (
            simulation_id,
            data.get("user_id"),
            data.get("phase"),
            json.dumps(data),
            now,
            now,
        ))
        conn.commit()
        conn.close()

    def load_simulation(self, simulation_id: str) -> Optional[dict]:
        """Load a simulation snapshot by ID."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT data FROM simulations WHERE id = ?", (simulation_id,))
        row = cursor.fetchone()
        conn.close()

        if row is None:
            return None
        return json.loads(row["data"])

    def list_simulations(self, user_id: Optional[str] = None) -> list[dict]:
        """List simulations, optionally filtered by user."""
        conn = self._get_connection()
        cursor = conn.cursor()

        if user_id is not None:
            cursor.execute("""
                SELECT id, user_id, phase, updated_at
                FROM simulations
                WHERE user_id = ?
                ORDER BY updated_at DESC
            """, (user_id,))
        else:
            cursor.execute("""
                SELECT id, user_id, phase, updated_at
                FROM simulations
                ORDER BY updated_at DESC
            """)

        rows = cursor.fetchall()
        conn.close()
        return rows

    def delete_simulation(self, simulation_id: str) -> bool:
        """Delete simulation snapshot."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM simulations WHERE id = ?", (simulation_id,))
        deleted = cursor.rowcount > 0
        conn.commit()
        conn.close()
        return deleted


class SQLiteLeaderboardRepository(_SQLiteRepository, LeaderboardRepository):
    """SQLite-based leaderboard with a UNIQUE(user_id, season) constraint."""

    _COLUMNS = (
        "id",
        "user_id",
        "username",
        "company_name",
        "industry",
        "strategy_type",
        "target_audience",
        "brand_positioning",
        "primary_channels",
        "final_score",
        "grade",
        "total_revenue",
        "total_profit",
        "quarterly_revenue",
        "final_market_share",
        "final_satisfaction",
        "final_awareness",
        "roi_percentage",
        "total_budget",
        "budget_utilized",
        "quarters_completed",
        "wildcards_handled",
        "talent_hired",
        "big_bet_made",
        "big_bet_success",
        "season",
        "simulation_id",
        "simulation_hash",
        "created_at",
        "updated_at",
    )

    def _init_db(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS leaderboard_entries (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                username TEXT,
                company_name TEXT,
                industry TEXT,
                strategy_type TEXT,
                target_audience TEXT,
                brand_positioning TEXT,
                primary_channels TEXT,
                final_score INTEGER NOT NULL,
                grade TEXT NOT NULL,
                total_revenue REAL,
                total_profit REAL,
                quarterly_revenue TEXT,
                final_market_share REAL,
                final_satisfaction REAL,
                final_awareness REAL,
                roi_percentage REAL,
                total_budget REAL,
                budget_utilized REAL,
                quarters_completed INTEGER,
                wildcards_handled INTEGER,
                talent_hired INTEGER,
                big_bet_made INTEGER,
                big_bet_success INTEGER,
                season TEXT NOT NULL,
                simulation_id TEXT,
                simulation_hash TEXT,
                created_at TEXT,
                updated_at TEXT,
                UNIQUE(user_id, season)
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_leaderboard_season_score "
            "ON leaderboard_entries(season, final_score)"
        )
        conn.commit()
        conn.close()

    def _decode(self, row: dict) -> dict:
        decoded = dict(row)
        for column in _JSON_COLUMNS:
            if decoded.get(column) is not None:
                decoded[column] = json.loads(decoded[column])
        for column in ("big_bet_made", "big_bet_success"):
            if decoded.get(column) is not None:
                decoded[column] = bool(decoded[column])
        return decoded

    def _fetch_one(self, cursor: sqlite3.Cursor, user_id: str, season: str) -> Optional[dict]:
        cursor.execute(
            "SELECT * FROM leaderboard_entries WHERE user_id = ? AND season = ?",
            (user_id, season),
        )
        return cursor.fetchone()

    def submit_entry(self, entry: dict) -> dict:
        """Insert or replace the user's entry for the season."""
        user_id = entry.get("user_id")
        season = entry.get("season")
        if not user_id or not season:
            raise ValueError("Leaderboard entry must have 'user_id' and 'season'")

        now = datetime.now(timezone.utc).isoformat()
        values = {column: entry.get(column) for column in self._COLUMNS}
        values["id"] = values["id"] or str(uuid.uuid4())
        values["created_at"] = now
        values["updated_at"] = now
        for column in _JSON_COLUMNS:
            values[column] = json.dumps(values[column])

        columns = ", ".join(self._COLUMNS)
        placeholders = ", ".join("?" for _ in self._COLUMNS)
        # Keep the original id and created_at when replacing
        updates = ", ".join(
            f"{c} = excluded.{c}" for c in self._COLUMNS if c not in ("id", "created_at")
        )

        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            f"INSERT INTO leaderboard_entries ({columns}) VALUES ({placeholders}) "
            f"ON CONFLICT(user_id, season) DO UPDATE SET {updates}",
            tuple(values[c] for c in self._COLUMNS),
        )
        conn.commit()
        row = self._fetch_one(cursor, user_id, season)
        conn.close()
        return self._decode(row)

    def _ranked(self, season: Optional[str], limit: Optional[int] = None) -> list[dict]:
        conn = self._get_connection()
        cursor = conn.cursor()
        query = "SELECT * FROM leaderboard_entries"
        params: tuple = ()
        if season is not None:
            query += " WHERE season = ?"
            params = (season,)
        query += " ORDER BY final_score DESC, updated_at ASC"
        if limit is not None:
            query += " LIMIT ?"
            params = params + (limit,)
        cursor.execute(query, params)
        rows = cursor.fetchall()
        conn.close()
        return [self._decode(row) for row in rows]

    def list_entries(self, season: Optional[str] = None, limit: int = 50) -> list[dict]:
        """Entries ranked by score, highest first."""
        return self._ranked(season, limit)

    def get_user_rank(self, user_id: str, season: Optional[str] = None) -> Optional[dict]:
        """Rank and percentile of a user's entry."""
        return compute_rank(self._ranked(season), user_id)

    def get_stats(self, season: Optional[str] = None) -> dict:
        """Summary statistics."""
        return compute_stats(self._ranked(season))

    def list_seasons(self) -> list[str]:
        """Seasons with at least one entry, newest first."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT DISTINCT season FROM leaderboard_entries ORDER BY season DESC")
        rows = cursor.fetchall()
        conn.close()
        return [row["season"] for row in rows]
