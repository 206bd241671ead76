"""Route optimizer: the single entry point for the route optimizer form."""

from .service import (
    GENERIC_PARKING_ERROR,
    GENERIC_ROUTE_ERROR,
    INVALID_INPUT_MESSAGE,
    PipelineRun,
    RouteOptimizationService,
    merge_route_result,
)

__all__ = [
    "GENERIC_PARKING_ERROR",
    "GENERIC_ROUTE_ERROR",
    "INVALID_INPUT_MESSAGE",
    "PipelineRun",
    "RouteOptimizationService",
    "merge_route_result",
]
