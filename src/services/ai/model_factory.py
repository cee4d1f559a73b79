"""Model factory for seed analysis.

Usage:
    from services.ai.model_factory import get_seed_analysis_model

    model = get_seed_analysis_model()  # Returns pydantic-ai Model
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from pydantic_ai.models import Model
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider

from core.config import get_settings


if TYPE_CHECKING:
    from httpx import AsyncClient

logger = logging.getLogger(__name__)


def _validate_gemini_credentials() -> bool:
    """Validate that Gemini API key is configured."""
    settings = get_settings()
    if not settings.GEMINI_API_KEY:
        logger.warning("Gemini API key not configured")
        return False
    return True


def _create_gemini_model(
    model_name: str,
    http_client: AsyncClient | None = None,
) -> Model:
    """Create a Google Gemini model with the specified model name."""
    settings = get_settings()
    provider = GoogleProvider(
        api_key=settings.GEMINI_API_KEY,
        http_client=http_client,
    )
    return cast(Model, GoogleModel(model_name, provider=provider))


def get_seed_analysis_model(http_client: AsyncClient | None = None) -> Model:
    """Get the model used for seed extraction.

    Args:
        http_client: Optional HTTP client for custom retry logic.

    Returns:
        A pydantic-ai Model for `SEED_ANALYSIS_MODEL`.

    Raises:
        ValueError: When no Gemini API key is configured.
    """
    settings = get_settings()

    if not _validate_gemini_credentials():
        raise ValueError(
            "No valid LLM provider configured. Set GEMINI_API_KEY to enable "
            "the seed assistant."
        )

    logger.info(f"Using Gemini seed analysis model: {settings.SEED_ANALYSIS_MODEL}")
    return _create_gemini_model(settings.SEED_ANALYSIS_MODEL, http_client)
