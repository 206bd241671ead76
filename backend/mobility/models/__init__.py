"""Pydantic models for City Mobility."""

from .core import (
    MAX_HINT_LENGTH,
    MAX_LOCATION_LENGTH,
    MAX_TIME_LENGTH,
    MIN_LOCATION_LENGTH,
    AppError,
    ErrorCode,
    IllustrationResult,
    ParkingPrediction,
    ParkingPredictionRequest,
    PipelineStage,
    RouteForm,
    RouteOptimizationData,
    RouteOptimizationState,
    RouteRequest,
    RouteResult,
)

__all__ = [
    "MAX_HINT_LENGTH",
    "MAX_LOCATION_LENGTH",
    "MAX_TIME_LENGTH",
    "MIN_LOCATION_LENGTH",
    "AppError",
    "ErrorCode",
    "IllustrationResult",
    "ParkingPrediction",
    "ParkingPredictionRequest",
    "PipelineStage",
    "RouteForm",
    "RouteOptimizationData",
    "RouteOptimizationState",
    "RouteRequest",
    "RouteResult",
]
