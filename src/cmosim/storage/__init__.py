"""Storage module for the CMO Simulator.

This module provides repository interfaces and implementations for
persisting simulation snapshots and leaderboard entries, plus the
SimulationStore service used by the state machine.

Usage:
    from cmosim.storage import SimulationStore

    # Use the configured backend (from environment)
    store = SimulationStore.from_environment()

    # Or specify backend explicitly
    from cmosim.storage import StorageBackend
    store = SimulationStore.from_environment(StorageBackend.SQLITE)

    # Or build the settings yourself
    from cmosim.storage import StorageSettings
    settings = StorageSettings(backend="sqlite", database_uri="run/cmosim.db")
    store = SimulationStore.from_settings(settings)

Configuration via environment variables:
    CMOSIM_STORAGE_BACKEND: "file" or "sqlite" (default: "file")
    CMOSIM_SIMULATIONS_PATH: Path to simulations directory (default: "simulations")
    CMOSIM_LEADERBOARD_PATH: Path to leaderboard JSON file (default: "leaderboard.json")
    CMOSIM_DATABASE_URI: SQLite database path (default: "instance/cmosim.db")
"""

from .config import StorageBackend, StorageSettings
from .file_repo import FileLeaderboardRepository, FileSimulationRepository
from .repository import LeaderboardRepository, SimulationRepository
from .service import (
    LeaderboardEntry,
    PersistenceResult,
    SimulationStore,
    build_leaderboard_entry,
    compute_simulation_hash,
    get_season,
)
from .sqlite_repo import SQLiteLeaderboardRepository, SQLiteSimulationRepository

__all__ = [
    # Abstract interfaces
    "SimulationRepository",
    "LeaderboardRepository",
    # File implementations
    "FileSimulationRepository",
    "FileLeaderboardRepository",
    # SQLite implementations
    "SQLiteSimulationRepository",
    "SQLiteLeaderboardRepository",
    # Configuration
    "StorageBackend",
    "StorageSettings",
    # Service
    "LeaderboardEntry",
    "PersistenceResult",
    "SimulationStore",
    "build_leaderboard_entry",
    "compute_simulation_hash",
    "get_season",
]
