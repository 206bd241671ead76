"""Configuration loaded from environment variables.

Each backend client receives its own frozen config object at construction;
no service reads the environment on its own. ``.env`` files are honoured
through python-dotenv.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from mobility.errors import ConfigurationError


REASONING_PROVIDERS = ("gemini", "groq")
ILLUSTRATION_BACKENDS = ("map_widget", "gemini_image")

DEFAULT_MODELS = {
    "gemini": "gemini-2.5-flash",
    "groq": "llama-3.1-8b-instant",
}
DEFAULT_IMAGE_MODEL = "gemini-2.0-flash-preview-image-generation"

# (category, threshold) pairs sent with every image request
DEFAULT_SAFETY_SETTINGS: tuple[tuple[str, str], ...] = (
    ("HARM_CATEGORY_DANGEROUS_CONTENT", "BLOCK_NONE"),
)


def get_required_env(key: str) -> str:
    """Get a required environment variable. Raises if not set."""
    value = os.environ.get(key)
    if value is None or value.strip() == "":
        raise ConfigurationError(
            f"Missing required environment variable: {key}\n"
            f"Please set {key} in your .env file or environment."
        )
    return value.strip()


def get_optional_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get an optional environment variable. Returns ``default`` if not set."""
    value = os.environ.get(key)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _get_float_env(key: str, default: float) -> float:
    raw = get_optional_env(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from e


@dataclass(frozen=True)
class ReasoningConfig:
    """Settings for the route reasoning backend."""

    provider: str
    api_key: str
    model_name: str
    timeout_seconds: float = 30.0
    temperature: float = 0.3

    def __post_init__(self) -> None:
        if self.provider not in REASONING_PROVIDERS:
            raise ConfigurationError(
                f"Unknown reasoning provider: {self.provider}. "
                f"Available: {list(REASONING_PROVIDERS)}"
            )
        if not self.api_key:
            raise ConfigurationError(f"{self.provider} API key is required")

    @classmethod
    def from_env(cls) -> "ReasoningConfig":
        provider = get_optional_env("REASONING_PROVIDER", "gemini").lower()
        if provider == "groq":
            api_key = get_required_env("GROQ_API_KEY")
            model_name = get_optional_env("GROQ_MODEL", DEFAULT_MODELS["groq"])
        else:
            api_key = get_required_env("GEMINI_API_KEY")
            model_name = get_optional_env("GEMINI_MODEL", DEFAULT_MODELS["gemini"])
        return cls(
            provider=provider,
            api_key=api_key,
            model_name=model_name,
            timeout_seconds=_get_float_env("REASONING_TIMEOUT", 30.0),
        )


@dataclass(frozen=True)
class IllustrationConfig:
    """Settings for the route illustration step.

    ``backend`` selects the implementation: ``map_widget`` defers to the live
    map component and makes no call; ``gemini_image`` generates an image.
    """

    backend: str = "map_widget"
    api_key: Optional[str] = None
    model_name: str = DEFAULT_IMAGE_MODEL
    timeout_seconds: float = 60.0
    safety_settings: tuple[tuple[str, str], ...] = field(
        default=DEFAULT_SAFETY_SETTINGS
    )

    def __post_init__(self) -> None:
        if self.backend not in ILLUSTRATION_BACKENDS:
            raise ConfigurationError(
                f"Unknown illustration backend: {self.backend}. "
                f"Available: {list(ILLUSTRATION_BACKENDS)}"
            )
        if self.backend == "gemini_image" and not self.api_key:
            raise ConfigurationError("gemini_image illustration requires GEMINI_API_KEY")

    @classmethod
    def from_env(cls) -> "IllustrationConfig":
        backend = get_optional_env("ILLUSTRATION_BACKEND", "map_widget").lower()
        return cls(
            backend=backend,
            api_key=get_optional_env("GEMINI_API_KEY"),
            model_name=get_optional_env("GEMINI_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            timeout_seconds=_get_float_env("ILLUSTRATION_TIMEOUT", 60.0),
        )


@dataclass(frozen=True)
class Settings:
    """Application configuration - immutable after creation."""

    reasoning: ReasoningConfig
    illustration: IllustrationConfig

    @classmethod
    def from_env(cls) -> "Settings":
        """Load configuration from environment variables."""
        return cls(
            reasoning=ReasoningConfig.from_env(),
            illustration=IllustrationConfig.from_env(),
        )

    def describe(self) -> dict[str, str]:
        """Return which backends are configured, without secrets."""
        return {
            "reasoning": f"{self.reasoning.provider}:{self.reasoning.model_name}",
            "illustration": self.illustration.backend,
        }


def load_settings() -> Settings:
    """Load and validate configuration."""
    from dotenv import load_dotenv

    # Load .env file if present
    load_dotenv()

    return Settings.from_env()
