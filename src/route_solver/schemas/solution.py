"""Solve response schemas."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel


class RouteStopModel(BaseModel):
    stop_id: str
    sequence: int


class VehicleRouteModel(BaseModel):
    vehicle_id: str
    distance: Optional[float]
    stop_count: int
    stops: List[RouteStopModel]


class UnplannedStopModel(BaseModel):
    stop_id: str
    reason: str


class OperatorStatisticsModel(BaseModel):
    executed: int
    skipped: int
    improved: int
    failed: int


class SolveStatisticsModel(BaseModel):
    iterations: int
    duration_seconds: float
    cancelled: bool
    seed: int
    operators: Dict[str, OperatorStatisticsModel]


class SolveResponse(BaseModel):
    value: Optional[float]
    routes: List[VehicleRouteModel]
    unplanned: List[UnplannedStopModel]
    statistics: SolveStatisticsModel
    metadata: dict = {}
