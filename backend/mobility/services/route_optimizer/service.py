"""Route Optimizer: validate, reason, then illustrate.

Single entry point for the route optimizer form:
1. Validate the raw form (no backend call on failure)
2. Ask the reasoning backend for the route (one call, no retry)
3. Best-effort illustration from the route summary
4. Merge into one RouteOptimizationState

Only a reasoning failure turns into a user-visible error, and then only as a
static message. Backend detail goes to the log.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from mobility.models import (
    IllustrationResult,
    ParkingPrediction,
    PipelineStage,
    RouteForm,
    RouteOptimizationData,
    RouteOptimizationState,
    RouteResult,
)
from mobility.services.ai_reasoning import RouteReasoner
from mobility.services.illustration import RouteIllustrator
from mobility.services.route_validator import validate_form

logger = logging.getLogger(__name__)

GENERIC_ROUTE_ERROR = "An unexpected error occurred while optimizing the route. Please try again."
GENERIC_PARKING_ERROR = "An unexpected error occurred while predicting parking. Please try again."

INVALID_INPUT_MESSAGE = "Invalid input. Please check the fields."
SUCCESS_MESSAGE = "Route optimized successfully."
FAILURE_MESSAGE = "An error occurred."


@dataclass
class PipelineRun:
    """One pass through the route optimization pipeline."""
    stages: list[PipelineStage] = field(default_factory=lambda: [PipelineStage.RECEIVED])
    state: Optional[RouteOptimizationState] = None
    illustration: Optional[IllustrationResult] = None

    @property
    def stage(self) -> PipelineStage:
        return self.stages[-1]

    def advance(self, stage: PipelineStage) -> None:
        if self.stage.is_terminal:
            raise RuntimeError(f"Pipeline already finished in {self.stage.value}")
        logger.debug(f"[ROUTE] {self.stage.value} -> {stage.value}")
        self.stages.append(stage)

    def finish(self, stage: PipelineStage, state: RouteOptimizationState) -> RouteOptimizationState:
        self.advance(stage)
        self.state = state
        return state


def merge_route_result(
    route: RouteResult, illustration: Optional[IllustrationResult]
) -> RouteOptimizationData:
    """Merge route fields with an optional illustration.

    A missing or empty illustration becomes ``None``; the route fields are
    copied unchanged either way.
    """
    map_image_url = None
    directions_url = None
    if illustration is not None:
        map_image_url = illustration.image_url or None
        directions_url = illustration.directions_url or None
    return RouteOptimizationData(
        **route.model_dump(),
        map_image_url=map_image_url,
        directions_url=directions_url,
    )


class RouteOptimizationService:
    """Runs the route optimizer form through validation, reasoning and illustration.

    Holds no per-request state, so one instance serves concurrent requests.
    """

    def __init__(self, reasoner: RouteReasoner, illustrator: RouteIllustrator) -> None:
        self._reasoner = reasoner
        self._illustrator = illustrator

    async def _illustrate(
        self, run: PipelineRun, route: RouteResult, start_location: str, end_location: str
    ) -> Optional[IllustrationResult]:
        run.advance(PipelineStage.ILLUSTRATION_IN_FLIGHT)
        try:
            illustration = await self._illustrator.illustrate(
                start_location, end_location, route.route_summary
            )
        except Exception as e:
            # Degrade: the route is still returned, just without a picture
            logger.warning(
                f"[MAP] {self._illustrator.name} illustration failed, proceeding without map: {e}"
            )
            return None
        run.illustration = illustration
        return illustration

    async def run(self, form: RouteForm) -> PipelineRun:
        """Run the full pipeline and return the run with its final state."""
        run = PipelineRun()

        run.advance(PipelineStage.VALIDATING)
        outcome = validate_form(form)
        if not outcome.is_valid:
            logger.info(f"[ROUTE] Rejected form fields: {sorted(outcome.errors)}")
            run.finish(
                PipelineStage.REJECTED,
                RouteOptimizationState(message=INVALID_INPUT_MESSAGE, errors=outcome.errors),
            )
            return run
        request = outcome.request
        run.advance(PipelineStage.VALIDATED)

        run.advance(PipelineStage.REASONING_IN_FLIGHT)
        try:
            route = await self._reasoner.optimize_route(request)
        except Exception:
            logger.exception(
                f"[ROUTE] Route optimization failed for "
                f"{request.start_location} -> {request.end_location}"
            )
            run.finish(
                PipelineStage.REASONING_FAILED,
                RouteOptimizationState(
                    message=FAILURE_MESSAGE, errors={"_form": [GENERIC_ROUTE_ERROR]}
                ),
            )
            return run
        run.advance(PipelineStage.REASONING_SUCCEEDED)

        illustration = await self._illustrate(
            run, route, request.start_location, request.end_location
        )
        run.finish(
            PipelineStage.ILLUSTRATION_DONE,
            RouteOptimizationState(
                message=SUCCESS_MESSAGE,
                data=merge_route_result(route, illustration),
            ),
        )
        return run

    async def get_optimal_route(self, form: RouteForm) -> RouteOptimizationState:
        """Validate, optimize and illustrate a route form submission."""
        run = await self.run(form)
        return run.state

    async def predict_parking(
        self, parking_location: str, current_time: str
    ) -> tuple[Optional[ParkingPrediction], Optional[str]]:
        """Predict parking availability.

        Returns:
            ``(prediction, None)`` on success, ``(None, user_message)`` on
            failure. The failure detail is only logged.
        """
        try:
            prediction = await self._reasoner.predict_parking(parking_location, current_time)
        except Exception:
            logger.exception(f"[PARKING] Prediction failed for {parking_location}")
            return None, GENERIC_PARKING_ERROR
        return prediction, None
