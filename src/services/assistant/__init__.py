"""Conversational seed assistant: accumulator, registry and commit gate."""

from .commit import CommitGate
from .conversation import (
    FALLBACK_MESSAGE,
    GREETING,
    ContextWindowPolicy,
    SeedConversation,
    format_assistant_message,
)
from .registry import ConversationRegistry


__all__ = [
    "FALLBACK_MESSAGE",
    "GREETING",
    "CommitGate",
    "ContextWindowPolicy",
    "ConversationRegistry",
    "SeedConversation",
    "format_assistant_message",
]
