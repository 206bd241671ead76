"""Exceptions raised by the City Mobility services."""


class MobilityError(Exception):
    """Base class for all City Mobility errors."""


class ConfigurationError(MobilityError):
    """Raised when required configuration is missing or invalid."""


class RouteValidationError(MobilityError):
    """Raised when route form input fails validation.

    ``errors`` maps form field names to human-readable messages.
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        fields = ", ".join(sorted(errors))
        super().__init__(f"Invalid route form fields: {fields}")


class ReasoningError(MobilityError):
    """Raised when the reasoning backend fails or returns an unusable reply."""


class IllustrationError(MobilityError):
    """Raised when the illustration backend fails or returns no image."""
