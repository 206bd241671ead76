"""AI Reasoning — Gemini (default) or Groq."""

from .service import (
    GeminiRouteReasoner,
    GroqRouteReasoner,
    RouteReasoner,
    create_route_reasoner,
)

__all__ = [
    "GeminiRouteReasoner",
    "GroqRouteReasoner",
    "RouteReasoner",
    "create_route_reasoner",
]
