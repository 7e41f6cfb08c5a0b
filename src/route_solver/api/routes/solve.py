"""Solve endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.problem import SolveRequest
from ...schemas.solution import SolveResponse
from ...services.solver import solve_problem
from ...vrp import ModelError

router = APIRouter(tags=["solve"])


@router.post("/solve", response_model=SolveResponse, status_code=status.HTTP_200_OK)
def solve(payload: SolveRequest) -> SolveResponse:
    try:
        return solve_problem(payload)
    except ModelError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict()) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception("Error solving problem: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to solve problem: {exc}",
        ) from exc
