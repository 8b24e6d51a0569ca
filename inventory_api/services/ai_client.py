import logging
from typing import Optional

from google import genai
from google.genai import errors as genai_errors

from inventory_api.config import Settings
from inventory_api.core.exceptions import (
    AppError, AIQueryError, ConfigurationError, ServiceUnavailableError
)

logger = logging.getLogger(__name__)

QUOTA_MARKERS = ("quota", "rate limit", "rate_limit", "resource_exhausted", "too many requests")
API_KEY_MARKERS = ("api_key", "api key", "permission_denied", "unauthenticated")


class TextGenerator:
    """Anything that turns a prompt into text. Implementations raise AppError subclasses."""

    def generate(self, prompt: str) -> str:
        raise NotImplementedError


class UnconfiguredTextGenerator(TextGenerator):
    """Stand-in used when no API key is configured."""

    def generate(self, prompt: str) -> str:
        raise ConfigurationError("GEMINI_API_KEY is not set")


def classify_error(exc: Exception) -> AppError:
    """
    Translate a provider exception into one of our error kinds.

    Quota and rate limiting -> ServiceUnavailableError, key problems ->
    ConfigurationError, everything else -> AIQueryError.
    """
    if isinstance(exc, AppError):
        return exc

    code: Optional[int] = getattr(exc, "code", None)
    text = " ".join(
        str(part) for part in (getattr(exc, "status", None), getattr(exc, "message", None), exc) if part
    ).lower()

    if code == 429 or any(marker in text for marker in QUOTA_MARKERS):
        return ServiceUnavailableError()
    if code in (401, 403) or any(marker in text for marker in API_KEY_MARKERS):
        return ConfigurationError()
    return AIQueryError()


class GeminiTextGenerator(TextGenerator):
    def __init__(self, api_key: str, model: str):
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY is not set")
        self.model = model
        self.client = genai.Client(api_key=api_key)

    def generate(self, prompt: str) -> str:
        try:
            response = self.client.models.generate_content(model=self.model, contents=prompt)
        except genai_errors.APIError as exc:
            error = classify_error(exc)
            logger.warning("Gemini call failed (%s): %s", error.kind.value, exc)
            raise error from exc
        except Exception as exc:
            error = classify_error(exc)
            logger.exception("Unexpected error calling Gemini")
            raise error from exc

        text = response.text
        if text is None:
            raise AIQueryError("The AI service returned no text")
        return text


def build_text_generator(settings: Settings) -> TextGenerator:
    """Factory used at startup and by the request dependency."""
    if not settings.GEMINI_API_KEY:
        raise ConfigurationError("GEMINI_API_KEY is not set")
    logger.info("Using Gemini model %s", settings.GEMINI_MODEL)
    return GeminiTextGenerator(settings.GEMINI_API_KEY, settings.GEMINI_MODEL)
