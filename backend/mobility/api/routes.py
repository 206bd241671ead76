"""API routes for City Mobility.

- POST /route/optimize: route optimizer form (validate → AI route → map)
- POST /parking/predict: AI peak-hour and alternative parking prediction

Services are created lazily from ``Settings`` on first use. Tests replace
them through ``app.dependency_overrides``.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from mobility.config import Settings, load_settings
from mobility.models import (
    AppError,
    ErrorCode,
    ParkingPrediction,
    ParkingPredictionRequest,
    RouteForm,
    RouteOptimizationState,
)
from mobility.services import (
    RouteIllustrator,
    RouteOptimizationService,
    RouteReasoner,
    create_illustrator,
    create_route_reasoner,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class ParkingPredictionResponse(BaseModel):
    """Response model for parking prediction."""
    success: bool
    prediction: Optional[ParkingPrediction] = None
    error: Optional[AppError] = None


# Service instances
_settings: Settings | None = None
_reasoner: RouteReasoner | None = None
_illustrator: RouteIllustrator | None = None
_optimizer: RouteOptimizationService | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def get_reasoner() -> RouteReasoner:
    global _reasoner
    if _reasoner is None:
        _reasoner = create_route_reasoner(get_settings().reasoning)
    return _reasoner


def get_illustrator() -> RouteIllustrator:
    global _illustrator
    if _illustrator is None:
        _illustrator = create_illustrator(get_settings().illustration)
    return _illustrator


def get_route_optimizer() -> RouteOptimizationService:
    global _optimizer
    if _optimizer is None:
        _optimizer = RouteOptimizationService(get_reasoner(), get_illustrator())
    return _optimizer


def reset_services() -> None:
    """Drop cached service instances so the next request rebuilds them."""
    global _settings, _reasoner, _illustrator, _optimizer
    _settings = None
    _reasoner = None
    _illustrator = None
    _optimizer = None


@router.post("/route/optimize", response_model=RouteOptimizationState)
async def optimize_route(
    form: RouteForm,
    response: Response,
    optimizer: Annotated[RouteOptimizationService, Depends(get_route_optimizer)],
) -> RouteOptimizationState:
    """Optimize a route between two locations.

    Always answers with a ``RouteOptimizationState``:
    - 200 with ``data`` on success (``mapImageUrl`` may be null)
    - 422 with field errors when the locations are too short
    - 502 with a single ``_form`` error when the AI backend fails
    """
    state = await optimizer.get_optimal_route(form)
    if state.errors:
        response.status_code = 502 if "_form" in state.errors else 422
    return state


@router.post("/parking/predict", response_model=ParkingPredictionResponse)
async def predict_parking(
    request: ParkingPredictionRequest,
    optimizer: Annotated[RouteOptimizationService, Depends(get_route_optimizer)],
) -> ParkingPredictionResponse:
    """Predict peak parking hours and suggest alternatives."""
    prediction, user_message = await optimizer.predict_parking(
        request.parking_location, request.current_time
    )
    if prediction is None:
        return ParkingPredictionResponse(
            success=False,
            error=AppError(
                code=ErrorCode.REASONING_ERROR,
                message="Parking prediction backend failed",
                user_message=user_message,
            ),
        )
    return ParkingPredictionResponse(success=True, prediction=prediction)
