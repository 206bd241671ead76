"""Core data models for City Mobility.

This module contains the Pydantic models used throughout the application for
representing route requests, AI route results, map illustrations, parking
predictions and the state handed back to the route optimizer form.

Wire names are camelCase (``startLocation``, ``routeSummary``) to match the
form fields and the JSON keys the reasoning backend is asked to return.
Python attributes stay snake_case.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


MIN_LOCATION_LENGTH = 3
MAX_LOCATION_LENGTH = 200
MAX_HINT_LENGTH = 200
MAX_TIME_LENGTH = 100


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RouteForm(CamelModel):
    """Raw route optimizer form input, exactly as submitted.

    Nothing is validated here: the route validator turns this into a
    ``RouteRequest`` or a set of field errors.
    """

    start_location: Optional[str] = None
    end_location: Optional[str] = None
    current_traffic_conditions: Optional[str] = None
    available_public_transport: Optional[str] = None
    available_micro_mobility: Optional[str] = None
    departure_time: Optional[str] = None


class RouteRequest(CamelModel):
    """A validated route request. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    start_location: str = Field(
        ...,
        min_length=MIN_LOCATION_LENGTH,
        max_length=MAX_LOCATION_LENGTH,
        description="Starting address or landmark",
    )
    end_location: str = Field(
        ...,
        min_length=MIN_LOCATION_LENGTH,
        max_length=MAX_LOCATION_LENGTH,
        description="Destination address or landmark",
    )
    current_traffic_conditions: Optional[str] = Field(
        None, max_length=MAX_HINT_LENGTH, description="Traffic hint, e.g. light, moderate, heavy"
    )
    available_public_transport: Optional[str] = Field(
        None, max_length=MAX_HINT_LENGTH, description="Transit hint, e.g. bus, metro, train"
    )
    available_micro_mobility: Optional[str] = Field(
        None, max_length=MAX_HINT_LENGTH, description="Micro-mobility hint, e.g. bike, e-scooter"
    )
    departure_time: Optional[str] = Field(
        None, max_length=MAX_HINT_LENGTH, description="Desired departure time, e.g. now or 18:30"
    )


class RouteResult(CamelModel):
    """Route suggestion returned by the reasoning backend.

    All four fields are free text. The backend returns prose for the travel
    time and the cost, not structured values.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    optimal_route: str = Field(
        ..., min_length=1, description="Step-by-step instructions for the suggested route"
    )
    estimated_travel_time: str = Field(
        ..., min_length=1, description="Estimated travel time for the suggested route"
    )
    cost_estimate: str = Field(
        ..., min_length=1, description="Estimated cost for the suggested route"
    )
    route_summary: str = Field(
        ..., min_length=1, description="A brief summary of the suggested route"
    )


class IllustrationResult(CamelModel):
    """Visual for a route. An empty ``image_url`` means no image is available."""

    model_config = ConfigDict(frozen=True)

    image_url: str = Field(default="", description="Image URI or data URI, empty if unavailable")
    directions_url: str = Field(
        default="", description="Google Maps directions URL for the live map widget"
    )

    @property
    def available(self) -> bool:
        return bool(self.image_url)


class RouteOptimizationData(RouteResult):
    """Route fields merged with the optional illustration."""

    map_image_url: Optional[str] = Field(None, description="Generated map image, if any")
    directions_url: Optional[str] = Field(None, description="Directions URL for the map widget")


class RouteOptimizationState(CamelModel):
    """State returned to the route optimizer form.

    ``errors`` uses the form field names as keys; ``_form`` holds form-level
    messages that are not tied to one field.
    """

    message: Optional[str] = None
    data: Optional[RouteOptimizationData] = None
    errors: Optional[dict[str, list[str]]] = None

    @property
    def success(self) -> bool:
        return self.data is not None and not self.errors


class ParkingPredictionRequest(CamelModel):
    """Request for a parking availability prediction."""

    parking_location: str = Field(
        ...,
        min_length=MIN_LOCATION_LENGTH,
        max_length=MAX_LOCATION_LENGTH,
        description="Parking location to predict for",
    )
    current_time: str = Field(
        ..., min_length=1, max_length=MAX_TIME_LENGTH, description="The current time"
    )


class ParkingPrediction(CamelModel):
    """AI parking prediction. Both fields are free text."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    peak_hours_prediction: str = Field(..., min_length=1)
    alternative_parking_suggestions: str = Field(..., min_length=1)


class PipelineStage(str, Enum):
    """Stages a single route optimization request moves through."""

    RECEIVED = "received"
    VALIDATING = "validating"
    REJECTED = "rejected"
    VALIDATED = "validated"
    REASONING_IN_FLIGHT = "reasoning_in_flight"
    REASONING_FAILED = "reasoning_failed"
    REASONING_SUCCEEDED = "reasoning_succeeded"
    ILLUSTRATION_IN_FLIGHT = "illustration_in_flight"
    ILLUSTRATION_DONE = "illustration_done"

    @property
    def is_terminal(self) -> bool:
        return self in (
            PipelineStage.REJECTED,
            PipelineStage.REASONING_FAILED,
            PipelineStage.ILLUSTRATION_DONE,
        )


class ErrorCode(str, Enum):
    """Error codes carried in API error envelopes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    REASONING_ERROR = "REASONING_ERROR"
    API_ERROR = "API_ERROR"


class AppError(BaseModel):
    """API error envelope.

    ``message`` is for developers and never contains raw backend output;
    ``user_message`` is safe to show as-is.
    """

    code: ErrorCode
    message: str
    user_message: str
