"""Route validator service module.

Validates raw route optimizer form input before any AI backend is called.
"""

from .service import (
    END_FIELD,
    FIELD_MESSAGES,
    HINT_FIELDS,
    START_FIELD,
    TOO_LONG_MESSAGES,
    ValidationOutcome,
    clean_location,
    strip_control_characters,
    validate_form,
    validate_route_form,
)

__all__ = [
    "END_FIELD",
    "FIELD_MESSAGES",
    "HINT_FIELDS",
    "START_FIELD",
    "TOO_LONG_MESSAGES",
    "ValidationOutcome",
    "clean_location",
    "strip_control_characters",
    "validate_form",
    "validate_route_form",
]
