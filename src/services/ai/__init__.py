"""AI services package for seed extraction."""

from .agents import create_seed_agent
from .exceptions import (
    AIExtractionError,
    BackendError,
    ConversationBusy,
    ExtractionFailed,
)
from .invoker import ExtractionSnapshot, SeedPromptInvoker
from .normalizer import merge_drafts, normalize


__all__ = [
    "AIExtractionError",
    "BackendError",
    "ConversationBusy",
    "ExtractionFailed",
    "ExtractionSnapshot",
    "SeedPromptInvoker",
    "create_seed_agent",
    "merge_drafts",
    "normalize",
]
