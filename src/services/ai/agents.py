"""pydantic-ai agent for seed extraction."""

from pydantic_ai import Agent
from pydantic_ai.models import Model

from schemas.seeds import ExtractionResult
from services.ai.model_factory import get_seed_analysis_model
from services.ai.prompts import SEED_ANALYSIS_PROMPT


def create_seed_agent(
    model: Model | str | None = None,
) -> Agent[None, ExtractionResult]:
    """Create the seed analysis agent.

    The output type is `ExtractionResult`, whose validators coerce whatever
    the model returns into a complete record.
    """
    return Agent(
        model if model is not None else get_seed_analysis_model(),
        system_prompt=SEED_ANALYSIS_PROMPT,
        output_type=ExtractionResult,
    )
