"""Domain models for stops, vehicles and plan units."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True, slots=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class Stop:
    """A location to visit. ``precedes`` holds stop indices that must be visited after it."""

    id: str
    index: int
    location: Location
    quantities: dict[str, float] = field(default_factory=dict)
    precedes: tuple[int, ...] = ()
    time_window: Optional[tuple[float, float]] = None


@dataclass(frozen=True, slots=True)
class Vehicle:
    """A fleet unit. ``initial_stops`` are stop indices in visiting order."""

    id: str
    index: int
    capacity: dict[str, float] = field(default_factory=dict)
    speed: Optional[float] = None
    start_location: Optional[Location] = None
    end_location: Optional[Location] = None
    initial_stops: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class PlanUnit:
    """Stops that are always planned together, in precedence order."""

    index: int
    stops: tuple[int, ...]
