"""Route form validation.

Checks raw form strings before any backend is contacted. Start and end
locations must be between ``MIN_LOCATION_LENGTH`` and ``MAX_LOCATION_LENGTH``
characters once control characters and surrounding whitespace are removed;
optional context hints are passed through untouched, up to
``MAX_HINT_LENGTH`` characters.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from mobility.errors import RouteValidationError
from mobility.models import (
    MAX_HINT_LENGTH,
    MAX_LOCATION_LENGTH,
    MIN_LOCATION_LENGTH,
    RouteForm,
    RouteRequest,
)

START_FIELD = "startLocation"
END_FIELD = "endLocation"

FIELD_MESSAGES = {
    START_FIELD: f"Start location must be at least {MIN_LOCATION_LENGTH} characters.",
    END_FIELD: f"End location must be at least {MIN_LOCATION_LENGTH} characters.",
}

TOO_LONG_MESSAGES = {
    START_FIELD: f"Start location must be at most {MAX_LOCATION_LENGTH} characters.",
    END_FIELD: f"End location must be at most {MAX_LOCATION_LENGTH} characters.",
}

# Hint attribute -> (form field, label used in error messages)
HINT_FIELDS = {
    "current_traffic_conditions": ("currentTrafficConditions", "Current traffic conditions"),
    "available_public_transport": ("availablePublicTransport", "Available public transport"),
    "available_micro_mobility": ("availableMicroMobility", "Available micro-mobility options"),
    "departure_time": ("departureTime", "Departure time"),
}

# Keeps newlines and tabs
_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')


def strip_control_characters(text: str) -> str:
    """Remove control characters, keeping newlines and tabs."""
    return _CONTROL_CHARS.sub('', text)


@dataclass
class ValidationOutcome:
    """Either a validated request or field errors, never both."""
    request: Optional[RouteRequest] = None
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.request is not None and not self.errors

    def raise_for_errors(self) -> RouteRequest:
        """Return the request, or raise ``RouteValidationError``."""
        if not self.is_valid:
            raise RouteValidationError(self.errors)
        return self.request


def clean_location(value: Optional[str]) -> str:
    """The location text as it will reach the reasoning prompt."""
    if value is None:
        return ""
    return strip_control_characters(value).strip()


def _location_errors(cleaned: str, field_name: str) -> list[str]:
    if len(cleaned) < MIN_LOCATION_LENGTH:
        return [FIELD_MESSAGES[field_name]]
    if len(cleaned) > MAX_LOCATION_LENGTH:
        return [TOO_LONG_MESSAGES[field_name]]
    return []


def _optional(value: Optional[str]) -> Optional[str]:
    # Blank hints count as not supplied; anything else is kept verbatim
    if value is None or not strip_control_characters(value).strip():
        return None
    return value


def validate_route_form(
    start_location: Optional[str],
    end_location: Optional[str],
    current_traffic_conditions: Optional[str] = None,
    available_public_transport: Optional[str] = None,
    available_micro_mobility: Optional[str] = None,
    departure_time: Optional[str] = None,
) -> ValidationOutcome:
    """Validate raw route form strings.

    Args:
        start_location: Raw start location text.
        end_location: Raw end location text.
        current_traffic_conditions: Optional traffic hint, kept verbatim.
        available_public_transport: Optional transit hint, kept verbatim.
        available_micro_mobility: Optional micro-mobility hint, kept verbatim.
        departure_time: Optional departure time hint, kept verbatim.

    Returns:
        A ``ValidationOutcome`` holding a ``RouteRequest`` with the two
        locations cleaned of control characters and surrounding whitespace,
        or a mapping from field name to error messages.
    """
    errors: dict[str, list[str]] = {}
    locations = {
        START_FIELD: clean_location(start_location),
        END_FIELD: clean_location(end_location),
    }
    for field_name, cleaned in locations.items():
        messages = _location_errors(cleaned, field_name)
        if messages:
            errors[field_name] = messages

    raw_hints = {
        "current_traffic_conditions": current_traffic_conditions,
        "available_public_transport": available_public_transport,
        "available_micro_mobility": available_micro_mobility,
        "departure_time": departure_time,
    }
    hints = {attr: _optional(value) for attr, value in raw_hints.items()}
    for attr, value in hints.items():
        if value is not None and len(value) > MAX_HINT_LENGTH:
            field_name, label = HINT_FIELDS[attr]
            errors[field_name] = [f"{label} must be at most {MAX_HINT_LENGTH} characters."]

    if errors:
        return ValidationOutcome(errors=errors)

    request = RouteRequest(
        start_location=locations[START_FIELD],
        end_location=locations[END_FIELD],
        **hints,
    )
    return ValidationOutcome(request=request)


def validate_form(form: RouteForm) -> ValidationOutcome:
    """Validate a ``RouteForm`` body."""
    return validate_route_form(
        form.start_location,
        form.end_location,
        current_traffic_conditions=form.current_traffic_conditions,
        available_public_transport=form.available_public_transport,
        available_micro_mobility=form.available_micro_mobility,
        departure_time=form.departure_time,
    )
