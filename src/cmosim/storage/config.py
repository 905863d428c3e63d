"""Storage settings for the CMO Simulator.

A simulation store needs two repositories: one for simulation snapshots and
one for the leaderboard. StorageSettings reads every CMOSIM_* variable once
and builds both from the same backend, so snapshots and leaderboard rows
never end up split across backends.

Environment variables:
    CMOSIM_STORAGE_BACKEND: "file" or "sqlite" (default: "file")
    CMOSIM_SIMULATIONS_PATH: Directory of snapshot JSON files (file backend)
    CMOSIM_LEADERBOARD_PATH: Leaderboard JSON file (file backend)
    CMOSIM_DATABASE_URI: SQLite file holding both tables (sqlite backend)
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .file_repo import FileLeaderboardRepository, FileSimulationRepository
from .repository import LeaderboardRepository, SimulationRepository
from .sqlite_repo import SQLiteLeaderboardRepository, SQLiteSimulationRepository

logger = logging.getLogger(__name__)

ENV_VARIABLES = {
    "backend": "CMOSIM_STORAGE_BACKEND",
    "simulations_path": "CMOSIM_SIMULATIONS_PATH",
    "leaderboard_path": "CMOSIM_LEADERBOARD_PATH",
    "database_uri": "CMOSIM_DATABASE_URI",
}


class StorageBackend(str, Enum):
    """Available storage backends."""

    FILE = "file"
    SQLITE = "sqlite"


class StorageSettings(BaseModel):
    """Where simulations and leaderboard entries are kept.

    Attributes:
        backend: Backend used for both repositories
        simulations_path: Snapshot directory for the file backend
        leaderboard_path: Leaderboard file for the file backend
        database_uri: Database file shared by both tables for the sqlite backend
    """

    model_config = ConfigDict(frozen=True)

    backend: StorageBackend = StorageBackend.FILE
    simulations_path: Path = Path("simulations")
    leaderboard_path: Path = Path("leaderboard.json")
    database_uri: Path = Path("instance/cmosim.db")

    @field_validator("backend", mode="before")
    @classmethod
    def _parse_backend(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized not in {b.value for b in StorageBackend}:
                logger.warning(f"Unknown storage backend {value!r}, using file storage")
                return StorageBackend.FILE
            return normalized
        return value

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> StorageSettings:
        """Read CMOSIM_* variables; unset variables keep their defaults.

        Args:
            environ: Mapping to read instead of os.environ
        """
        environ = os.environ if environ is None else environ
        values = {
            field: environ[variable]
            for field, variable in ENV_VARIABLES.items()
            if environ.get(variable)
        }
        return cls(**values)

    def simulation_repository(self) -> SimulationRepository:
        if self.backend == StorageBackend.SQLITE:
            return SQLiteSimulationRepository(str(self.database_uri))
        return FileSimulationRepository(self.simulations_path)

    def leaderboard_repository(self) -> LeaderboardRepository:
        if self.backend == StorageBackend.SQLITE:
            return SQLiteLeaderboardRepository(str(self.database_uri))
        return FileLeaderboardRepository(self.leaderboard_path)

    def repositories(self) -> tuple[SimulationRepository, LeaderboardRepository]:
        """Build the snapshot and leaderboard repositories for this backend."""
        logger.info(f"Using {self.backend.value} storage ({self.location})")
        return self.simulation_repository(), self.leaderboard_repository()

    @property
    def location(self) -> str:
        """Human-readable location of the stored data."""
        if self.backend == StorageBackend.SQLITE:
            return str(self.database_uri)
        return f"{self.simulations_path}, {self.leaderboard_path}"
