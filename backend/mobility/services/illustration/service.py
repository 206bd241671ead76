"""Route illustration services.

Two interchangeable implementations of the same capability, picked by
``IllustrationConfig.backend``:
- MapWidgetIllustrator:   no external call; the frontend renders a live
  Google Maps widget from the address pair (default)
- GeminiImageIllustrator: asks a Gemini image model for a map-style picture

Illustration is best-effort. Implementations raise ``IllustrationError`` and
the route optimizer carries on without a picture.
"""

import asyncio
import base64
import logging
from abc import ABC, abstractmethod
from urllib.parse import quote_plus

from mobility.config import IllustrationConfig
from mobility.errors import ConfigurationError, IllustrationError
from mobility.models import IllustrationResult

logger = logging.getLogger(__name__)


def build_directions_url(start_location: str, end_location: str, travel_mode: str = "transit") -> str:
    """Build a Google Maps directions URL for an address pair.

    This is completely free - just URL construction, no API key needed.
    """
    origin = quote_plus(start_location)
    destination = quote_plus(end_location)
    return (
        f"https://www.google.com/maps/dir/?api=1&origin={origin}"
        f"&destination={destination}&travelmode={travel_mode}"
    )


class RouteIllustrator(ABC):
    """Base class for route illustration services."""

    @abstractmethod
    async def illustrate(
        self, start_location: str, end_location: str, route_summary: str
    ) -> IllustrationResult:
        """Return a visual for the route.

        Raises:
            IllustrationError: the visual could not be produced.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        ...


class MapWidgetIllustrator(RouteIllustrator):
    """Defers to the live map widget. Never calls out."""

    @property
    def name(self) -> str:
        return "map_widget"

    async def illustrate(
        self, start_location: str, end_location: str, route_summary: str
    ) -> IllustrationResult:
        return IllustrationResult(
            image_url="",
            directions_url=build_directions_url(start_location, end_location),
        )


class GeminiImageIllustrator(RouteIllustrator):
    """Gemini native image generation for a conceptual route map."""

    def __init__(self, config: IllustrationConfig) -> None:
        from google import genai

        if not config.api_key:
            raise ConfigurationError("Gemini API key is required for image illustration")
        self._config = config
        self._client = genai.Client(api_key=config.api_key)
        self._model_name = config.model_name
        self._timeout = config.timeout_seconds
        logger.info(f"[MAP] Gemini image model: {self._model_name}")

    @property
    def name(self) -> str:
        return "gemini_image"

    @staticmethod
    def build_prompt(start_location: str, end_location: str, route_summary: str) -> str:
        return (
            "Generate a visually appealing and clear map image that shows a route "
            f'from "{start_location}" to "{end_location}". '
            "The style should be a modern digital map. The route should be clearly "
            "highlighted. The map should be conceptual and represent the journey "
            f'described: "{route_summary}". Do not include any real-world street '
            "names unless they are in the locations. The image should be clean, "
            "with a clear path from start to finish."
        )

    def _generation_config(self):
        from google.genai import types

        return types.GenerateContentConfig(
            # Image models require both modalities
            response_modalities=["TEXT", "IMAGE"],
            safety_settings=[
                types.SafetySetting(category=category, threshold=threshold)
                for category, threshold in self._config.safety_settings
            ],
        )

    @staticmethod
    def _find_image(response) -> tuple[bytes, str] | None:
        for candidate in response.candidates or []:
            content = candidate.content
            if content is None:
                continue
            for part in content.parts or []:
                if part.inline_data is not None and part.inline_data.data:
                    return part.inline_data.data, part.inline_data.mime_type or "image/png"
        return None

    async def illustrate(
        self, start_location: str, end_location: str, route_summary: str
    ) -> IllustrationResult:
        prompt = self.build_prompt(start_location, end_location, route_summary)
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._model_name,
                    contents=prompt,
                    config=self._generation_config(),
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise IllustrationError(f"Map image generation timed out after {self._timeout}s") from e
        except Exception as e:
            raise IllustrationError(f"Map image generation failed: {e}") from e

        found = self._find_image(response)
        if found is None:
            raise IllustrationError("Failed to generate map image.")

        data, mime_type = found
        encoded = base64.b64encode(data).decode("ascii")
        logger.info(f"[MAP] Got image: {len(data)} bytes ({mime_type})")
        return IllustrationResult(
            image_url=f"data:{mime_type};base64,{encoded}",
            directions_url=build_directions_url(start_location, end_location),
        )


def create_illustrator(config: IllustrationConfig) -> RouteIllustrator:
    """Create the illustration service selected by ``config.backend``."""
    if config.backend == "map_widget":
        return MapWidgetIllustrator()
    if config.backend == "gemini_image":
        return GeminiImageIllustrator(config)
    raise ConfigurationError(f"Unknown illustration backend: {config.backend}")
