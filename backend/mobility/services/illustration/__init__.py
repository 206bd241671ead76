"""Route illustration: live map widget (default) or Gemini image generation."""

from .service import (
    GeminiImageIllustrator,
    MapWidgetIllustrator,
    RouteIllustrator,
    build_directions_url,
    create_illustrator,
)

__all__ = [
    "GeminiImageIllustrator",
    "MapWidgetIllustrator",
    "RouteIllustrator",
    "build_directions_url",
    "create_illustrator",
]
