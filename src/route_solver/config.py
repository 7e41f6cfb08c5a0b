"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTE_SOLVER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Route Solver API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for persisted solve runs.")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    max_iterations: int = Field(default=100, ge=0, description="Default number of solver iterations.")
    time_limit_seconds: Optional[float] = Field(
        default=None,
        ge=0.0,
        description="Cooperative deadline checked once per iteration. None disables it.",
    )
    seed: Optional[int] = Field(
        default=None,
        ge=0,
        description="Seed for the solver random source. None derives one from the clock.",
    )
    acceptance: Literal["greedy", "annealing"] = Field(
        default="greedy",
        description="Acceptance criterion for the working solution.",
    )
    initial_temperature: float = Field(default=100.0, gt=0.0)
    cooling_rate: float = Field(default=0.95, gt=0.0, le=1.0)

    unplanned_penalty: float = Field(
        default=1_000_000.0,
        ge=0.0,
        description="Weight of each unplanned stop. Must outweigh the longest detour, which is in meters without a matrix.",
    )
    distance_weight: float = Field(default=1.0, ge=0.0)
    vehicle_cost: float = Field(default=0.0, ge=0.0, description="Weight of each vehicle with a non-empty route.")

    repair_chance: float = Field(default=1.0, ge=0.0, le=1.0)
    destroy_chance: float = Field(default=0.5, ge=0.0, le=1.0)
    reset_chance: float = Field(default=0.05, ge=0.0, le=1.0)
    destroy_fraction: float = Field(default=0.2, ge=0.0)
    repair_units: float = Field(
        default=1.0,
        ge=0.0,
        description="Plan units each default repair inserts per run. 0 inserts every unplanned unit.",
    )
    operator_sequence: tuple[str, ...] = Field(
        default=(
            "destroy_random",
            "destroy_worst",
            "repair_nearest",
            "repair_random",
            "reset_partial",
        ),
        description="Registration order of the default operators.",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("operator_sequence", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
