"""Problem input and solve request schemas."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class LocationInput(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class InitialStopInput(BaseModel):
    id: str


class StopInput(BaseModel):
    id: str
    location: LocationInput
    precedes: Optional[List[str]] = Field(
        default=None,
        description="Ids of stops that must be visited after this one. At most one is supported.",
    )
    quantity: Dict[str, float] = Field(default_factory=dict)
    start_time_windows: Optional[List[float]] = Field(
        default=None,
        description="Earliest and latest arrival time as [start, end].",
    )
    compatible_vehicles: Optional[List[str]] = Field(
        default=None,
        description="Vehicle ids allowed to serve this stop. None allows every vehicle.",
    )

    @field_validator("start_time_windows")
    @classmethod
    def _check_window(cls, value: Optional[List[float]]) -> Optional[List[float]]:
        if value is None:
            return value
        if len(value) != 2:
            raise ValueError("start_time_windows must contain exactly two values.")
        if value[0] < 0 or value[1] < 0:
            raise ValueError("start_time_windows values must be non-negative.")
        return value


class VehicleInput(BaseModel):
    id: str
    capacity: Dict[str, float] = Field(default_factory=dict)
    speed: Optional[float] = Field(default=None, gt=0)
    initial_stops: Optional[List[InitialStopInput]] = None
    start_location: Optional[LocationInput] = None
    end_location: Optional[LocationInput] = None


class ProblemInput(BaseModel):
    stops: List[StopInput]
    vehicles: List[VehicleInput]
    distance_matrix: Optional[List[List[Optional[float]]]] = Field(
        default=None,
        description="Travel costs indexed in stop order. Null entries are missing arcs.",
    )
    options: Optional[dict] = Field(default=None, description="Reserved.")


class SolverParameters(BaseModel):
    max_iterations: Optional[int] = Field(default=None, ge=0)
    seed: Optional[int] = Field(default=None, ge=0)
    time_limit_seconds: Optional[float] = Field(default=None, ge=0)
    acceptance: Optional[Literal["greedy", "annealing"]] = None


class SolveRequest(ProblemInput):
    solver: SolverParameters = Field(default_factory=SolverParameters)
    persist: bool = False
    run_label: Optional[str] = Field(default=None, description="Friendly name for persisted outputs.")
