"""City Mobility Services.

Service layer components:
- Route Validator: checks raw form input before any backend call
- AI Reasoning: Gemini (default) or Groq for route and parking prompts
- Illustration: live map widget (default) or Gemini image generation
- Route Optimizer: validate → reason → illustrate, merged into one result
"""

from .route_validator import ValidationOutcome, validate_form, validate_route_form
from .ai_reasoning import (
    GeminiRouteReasoner,
    GroqRouteReasoner,
    RouteReasoner,
    create_route_reasoner,
)
from .illustration import (
    GeminiImageIllustrator,
    MapWidgetIllustrator,
    RouteIllustrator,
    create_illustrator,
)
from .route_optimizer import RouteOptimizationService

__all__ = [
    # Route validator
    "ValidationOutcome",
    "validate_form",
    "validate_route_form",
    # AI reasoning
    "GeminiRouteReasoner",
    "GroqRouteReasoner",
    "RouteReasoner",
    "create_route_reasoner",
    # Illustration
    "GeminiImageIllustrator",
    "MapWidgetIllustrator",
    "RouteIllustrator",
    "create_illustrator",
    # Route optimizer
    "RouteOptimizationService",
]
