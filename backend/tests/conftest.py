"""Shared test doubles for the City Mobility services.

The reasoning and illustration backends are replaced by deterministic
subclasses of the service ABCs that record every call.
"""

import json

import pytest

from mobility.errors import IllustrationError
from mobility.models import IllustrationResult
from mobility.services.ai_reasoning import RouteReasoner
from mobility.services.illustration import RouteIllustrator

ROUTE_REPLY = {
    "optimalRoute": (
        "1. Walk to Central Secretariat metro station.\n"
        "2. Take the Yellow Line towards Millennium City Centre Gurugram.\n"
        "3. Get off at Qutub Minar station and take an e-rickshaw to the monument."
    ),
    "estimatedTravelTime": "40-50 minutes",
    "costEstimate": "₹60-₹90 (metro fare plus e-rickshaw)",
    "routeSummary": "Metro Yellow Line from Central Secretariat to Qutub Minar, then a short e-rickshaw ride.",
}

PARKING_REPLY = {
    "peakHoursPrediction": "Weekdays 9-11 AM and 5-8 PM",
    "alternativeParkingSuggestions": "Palika Bazaar underground parking; Shivaji Stadium multi-level lot",
}


class FakeRouteReasoner(RouteReasoner):
    """Returns canned replies (cycling through the last one) or raises."""

    def __init__(self, replies: list[str] | None = None, error: Exception | None = None) -> None:
        self.replies = replies if replies is not None else [json.dumps(ROUTE_REPLY)]
        self.error = error
        self.prompts: list[str] = []
        self._timeout = 1.0

    @property
    def provider_name(self) -> str:
        return "Fake"

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    async def _generate(self, prompt: str, timeout: float | None = None) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        index = min(len(self.prompts), len(self.replies)) - 1
        return self.replies[index]


class FakeIllustrator(RouteIllustrator):
    """Records calls; returns ``result`` or raises ``error``."""

    def __init__(
        self,
        result: IllustrationResult | None = None,
        error: Exception | None = None,
    ) -> None:
        self.result = result or IllustrationResult(
            image_url="data:image/png;base64,iVBORw0KGgo=",
            directions_url="https://www.google.com/maps/dir/?api=1&origin=a&destination=b",
        )
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def illustrate(
        self, start_location: str, end_location: str, route_summary: str
    ) -> IllustrationResult:
        self.calls.append((start_location, end_location, route_summary))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def reasoner() -> FakeRouteReasoner:
    return FakeRouteReasoner()


@pytest.fixture
def failing_reasoner() -> FakeRouteReasoner:
    return FakeRouteReasoner(error=RuntimeError("upstream 500: quota exhausted for key sk-secret"))


@pytest.fixture
def illustrator() -> FakeIllustrator:
    return FakeIllustrator()


@pytest.fixture
def failing_illustrator() -> FakeIllustrator:
    return FakeIllustrator(error=IllustrationError("Failed to generate map image."))


@pytest.fixture
def make_reasoner():
    return FakeRouteReasoner


@pytest.fixture
def make_illustrator():
    return FakeIllustrator


@pytest.fixture
def route_reply() -> dict:
    return dict(ROUTE_REPLY)


@pytest.fixture
def parking_reply() -> dict:
    return dict(PARKING_REPLY)
