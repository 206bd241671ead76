"""AI Reasoning service — Gemini (default) or Groq.

Provider-agnostic base class with two concrete implementations:
- GeminiRouteReasoner: Google Gemini, gemini-2.5-flash
- GroqRouteReasoner:   Groq LPU, llama-3.1-8b-instant

The base class owns prompt construction and reply parsing. Replies must match
a fixed JSON shape; anything else is a ``ReasoningError``. There is no retry,
no caching and no fallback answer: the backend is non-deterministic and each
call stands on its own.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel, ValidationError

from mobility.config import ReasoningConfig
from mobility.errors import ConfigurationError, ReasoningError
from mobility.models import (
    MAX_HINT_LENGTH,
    MAX_LOCATION_LENGTH,
    MAX_TIME_LENGTH,
    ParkingPrediction,
    RouteRequest,
    RouteResult,
)
from mobility.services.route_validator import strip_control_characters

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an AI-powered urban mobility assistant for a city-mobility portal. "
    "You know road traffic patterns, public transport networks (bus, metro, "
    "suburban rail, ferries) and micro-mobility services (shared bikes, "
    "e-scooters, e-bikes). "
    "Suggest realistic multi-modal journeys that a commuter could follow today. "
    "Respond ONLY with valid JSON. No explanations, no markdown, no extra text."
)

# Labels used in the route prompt, in prompt order
ROUTE_PROMPT_LABELS = (
    ("start_location", "Start Location"),
    ("end_location", "End Location"),
    ("current_traffic_conditions", "Current Traffic Conditions"),
    ("available_public_transport", "Available Public Transport"),
    ("available_micro_mobility", "Available Micro-Mobility Options"),
    ("departure_time", "Departure Time"),
)

COST_CURRENCY = "Indian Rupees (INR, ₹)"


class RouteReasoner(ABC):
    """Base class for route reasoning services.

    All prompt construction, JSON parsing, and error policy lives here.
    Subclasses only implement ``_generate()`` for their specific API client.
    """

    _timeout: float

    @abstractmethod
    async def _generate(self, prompt: str, timeout: float | None = None) -> str:
        """Send prompt to the AI provider and return raw text."""
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Human-readable provider name for logging."""
        ...

    # ── Utilities ─────────────────────────────────────────────────────

    @staticmethod
    def _sanitize_input(text: str, max_length: int = 500) -> str:
        """Sanitize user input before passing to AI prompts.

        Strips control characters and limits length to prevent
        prompt injection and abuse.
        """
        return strip_control_characters(text)[:max_length].strip()

    @staticmethod
    def _extract_json(text: str) -> str:
        """Unwrap a reply that arrives inside a markdown code fence.

        Only a fence around the whole reply is removed. Backticks inside
        JSON string values are left alone.
        """
        text = text.strip()
        if not text.startswith("```"):
            return text
        body = text[3:]
        if body.startswith("json"):
            body = body[4:]
        if body.endswith("```"):
            body = body[:-3]
        return body.strip()

    def build_route_prompt(self, request: RouteRequest) -> str:
        """Build the route optimization prompt.

        Every field present on the request is embedded under its fixed label;
        absent optional hints are left out entirely.
        """
        lines = []
        for attr, label in ROUTE_PROMPT_LABELS:
            value = getattr(request, attr)
            if value is None:
                continue
            limit = MAX_LOCATION_LENGTH if attr.endswith("_location") else MAX_HINT_LENGTH
            lines.append(f"{label}: {self._sanitize_input(value, max_length=limit)}")

        return (
            "You are an AI-powered route optimization expert. Given the following "
            "information, suggest the optimal multi-modal travel route:\n\n"
            f"{chr(10).join(lines)}\n\n"
            "Consider real-time traffic, public transport schedules, and "
            "micro-mobility options to provide the most efficient route.\n\n"
            "Respond ONLY with a JSON object with exactly these keys:\n"
            '{"optimalRoute": "step-by-step instructions, one step per line", '
            '"estimatedTravelTime": "estimated travel time, e.g. 35-45 minutes", '
            '"costEstimate": "estimated total cost", '
            '"routeSummary": "one or two sentence summary of the route"}\n\n'
            f"Rules:\n- Give the cost estimate in {COST_CURRENCY}\n"
            "- Every value must be a non-empty string\n"
            "- Do not include coordinates"
        )

    def build_parking_prompt(self, parking_location: str, current_time: str) -> str:
        location = self._sanitize_input(parking_location, max_length=MAX_LOCATION_LENGTH)
        now = self._sanitize_input(current_time, max_length=MAX_TIME_LENGTH)
        return (
            "You are an AI assistant designed to predict peak parking hours and "
            "suggest alternative parking locations.\n\n"
            "Based on the given location and current time, provide predictions "
            "for peak parking hours and suggestions for alternative parking.\n\n"
            f"Location: {location}\n"
            f"Current Time: {now}\n\n"
            "Respond ONLY with a JSON object:\n"
            '{"peakHoursPrediction": "predicted peak hours", '
            '"alternativeParkingSuggestions": "suggested alternative locations"}'
        )

    async def _generate_model(self, prompt: str, model: type[BaseModel], what: str):
        """Run one backend call and parse the reply into ``model``.

        Raises:
            ReasoningError: the call failed, timed out, or the reply did not
                match the expected shape.
        """
        try:
            text = await self._generate(prompt)
        except asyncio.TimeoutError as e:
            raise ReasoningError(f"[{self.provider_name}] {what} timed out") from e
        except Exception as e:
            raise ReasoningError(f"[{self.provider_name}] {what} request failed: {e}") from e

        if not text:
            raise ReasoningError(f"[{self.provider_name}] {what} returned an empty reply")

        try:
            return model.model_validate_json(self._extract_json(text))
        except ValidationError as e:
            raise ReasoningError(
                f"[{self.provider_name}] {what} reply did not match the expected shape: {e}"
            ) from e

    # ── Operations ────────────────────────────────────────────────────

    async def optimize_route(self, request: RouteRequest) -> RouteResult:
        """Ask the backend for the optimal route between two locations.

        Makes exactly one backend call.

        Raises:
            ReasoningError: on any backend failure or malformed reply.
        """
        prompt = self.build_route_prompt(request)
        logger.info(
            f"[{self.provider_name}] Optimizing route: "
            f"{request.start_location} -> {request.end_location}"
        )
        result = await self._generate_model(prompt, RouteResult, "route optimization")
        logger.info(f"[{self.provider_name}] Route ready: {result.estimated_travel_time}")
        return result

    async def predict_parking(self, parking_location: str, current_time: str) -> ParkingPrediction:
        """Predict peak parking hours and alternatives for a location.

        Raises:
            ReasoningError: on any backend failure or malformed reply.
        """
        prompt = self.build_parking_prompt(parking_location, current_time)
        logger.info(f"[{self.provider_name}] Predicting parking for {parking_location}")
        return await self._generate_model(prompt, ParkingPrediction, "parking prediction")


# ═══════════════════════════════════════════════════════════════════════
# Provider: Gemini  (default)
# ═══════════════════════════════════════════════════════════════════════

class GeminiRouteReasoner(RouteReasoner):
    """Google Gemini with JSON response mode."""

    def __init__(self, config: ReasoningConfig) -> None:
        from google import genai

        self._config = config
        self._client = genai.Client(api_key=config.api_key)
        self._model_name = config.model_name
        self._timeout = config.timeout_seconds
        logger.info(f"[AI] Gemini ready: {self._model_name}")

    @property
    def provider_name(self) -> str:
        return "Gemini"

    async def _generate(self, prompt: str, timeout: float | None = None) -> str:
        from google.genai import types

        t = timeout or self._timeout
        try:
            resp = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._model_name,
                    contents=prompt,
                    config=types.GenerateContentConfig(
                        system_instruction=SYSTEM_PROMPT,
                        response_mime_type="application/json",
                        temperature=self._config.temperature,
                    ),
                ),
                timeout=t,
            )
            return (resp.text or "").strip()
        except asyncio.TimeoutError:
            logger.warning(f"[Gemini] Timeout after {t}s")
            raise
        except Exception as e:
            logger.warning(f"[Gemini] Error: {e}")
            raise


# ═══════════════════════════════════════════════════════════════════════
# Provider: Groq
# ═══════════════════════════════════════════════════════════════════════

class GroqRouteReasoner(RouteReasoner):
    """Groq LPU with Llama 3.1 8B Instant."""

    def __init__(self, config: ReasoningConfig) -> None:
        from groq import AsyncGroq

        self._config = config
        self._client = AsyncGroq(api_key=config.api_key)
        self._model_name = config.model_name
        self._timeout = config.timeout_seconds
        logger.info(f"[AI] Groq ready: {self._model_name}")

    @property
    def provider_name(self) -> str:
        return "Groq"

    async def _generate(self, prompt: str, timeout: float | None = None) -> str:
        t = timeout or self._timeout
        try:
            resp = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model_name,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=self._config.temperature,
                    max_tokens=2048,
                    response_format={"type": "json_object"},
                ),
                timeout=t,
            )
            return (resp.choices[0].message.content or "").strip()
        except asyncio.TimeoutError:
            logger.warning(f"[Groq] Timeout after {t}s")
            raise
        except Exception as e:
            logger.warning(f"[Groq] Error: {e}")
            raise


# ═══════════════════════════════════════════════════════════════════════
# Factory
# ═══════════════════════════════════════════════════════════════════════

_PROVIDERS: dict[str, type[RouteReasoner]] = {
    "gemini": GeminiRouteReasoner,
    "groq": GroqRouteReasoner,
}


def create_route_reasoner(config: ReasoningConfig) -> RouteReasoner:
    """Create the reasoning service selected by ``config.provider``."""
    try:
        provider_cls = _PROVIDERS[config.provider]
    except KeyError:
        raise ConfigurationError(
            f"Unknown reasoning provider: {config.provider}. Available: {list(_PROVIDERS)}"
        ) from None
    return provider_cls(config)
