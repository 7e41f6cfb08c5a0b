"""Serialize solve responses into JSON and CSV artifacts."""

from __future__ import annotations

import csv
import io

from ...schemas.solution import SolveResponse


def solution_to_json(response: SolveResponse) -> dict:
    return response.model_dump()


def solution_to_csv(response: SolveResponse) -> str:
    """One row per planned stop followed by one row per unplanned stop."""
    buffer = io.StringIO()
    fieldnames = ["vehicle_id", "sequence", "stop_id", "status", "reason"]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames, lineterminator="\n")
    writer.writeheader()
    for route in response.routes:
        for stop in route.stops:
            writer.writerow(
                {
                    "vehicle_id": route.vehicle_id,
                    "sequence": stop.sequence,
                    "stop_id": stop.stop_id,
                    "status": "planned",
                    "reason": "",
                }
            )
    for item in response.unplanned:
        writer.writerow(
            {
                "vehicle_id": "",
                "sequence": "",
                "stop_id": item.stop_id,
                "status": "unplanned",
                "reason": item.reason,
            }
        )
    return buffer.getvalue()
