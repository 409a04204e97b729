"""Route planning endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...errors import AddressNotFoundError, RouteUnavailableError
from ...schemas.routing import (
    RouteAnalysisRequest,
    RoutePlanRequest,
    RoutePlanResponse,
    plan_result_to_response,
)
from ...services.planner import analyze_candidates, plan_routes

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/plan", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def plan(payload: RoutePlanRequest) -> RoutePlanResponse:
    try:
        result = plan_routes(
            payload.start.resolve_input(),
            payload.end.resolve_input(),
            [waypoint.resolve_input() for waypoint in payload.waypoints],
            load=payload.load.to_domain(),
            vehicle=payload.vehicle.to_domain(),
        )
    except AddressNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except RouteUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error planning route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to plan route.",
        ) from exc
    return plan_result_to_response(result)


@router.post("/analyze", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def analyze(payload: RouteAnalysisRequest) -> RoutePlanResponse:
    try:
        result = analyze_candidates(
            [route.to_domain() for route in payload.routes],
            load=payload.load.to_domain(),
            vehicle=payload.vehicle.to_domain(),
        )
    except Exception as exc:
        logger.exception(f"Error analysing routes: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to analyse routes.",
        ) from exc
    return plan_result_to_response(result)
