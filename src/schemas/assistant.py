"""Schemas for the seed assistant conversation and its SSE stream."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator

from .seeds import CamelModel, ExtractionResult, SeedDraft


MAX_SSE_EVENT_BYTES: int = 16_384


class ConversationStatus(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


class ChatTurn(CamelModel):
    """One entry in the conversation history."""

    role: Literal["user", "assistant"]
    content: str
    seed_data: ExtractionResult | None = Field(
        default=None, description="Extraction carried by an assistant turn"
    )


class AssistantMessageRequest(CamelModel):
    """Request payload for one assistant turn."""

    content: str = Field(..., min_length=1, max_length=4000)

    model_config = ConfigDict(extra="forbid")

    @field_validator("content")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content must not be empty")
        return v


class ConversationCreated(CamelModel):
    conversation_id: UUID
    greeting: str


class ConversationState(CamelModel):
    """Snapshot of a conversation for the client."""

    conversation_id: UUID
    status: ConversationStatus
    history: list[ChatTurn]
    running_draft: SeedDraft
    preview: ExtractionResult | None = Field(
        default=None, description="Latest streamed partial, never merged"
    )


class TurnResponse(CamelModel):
    """Result of a non-streaming turn."""

    turn: ChatTurn
    running_draft: SeedDraft


class CommitRequest(CamelModel):
    """Which assistant turn to commit; defaults to the latest one with data."""

    turn_index: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")


class AssistantSseEvent(CamelModel):
    """SSE envelope for streamed extraction.

    `snapshot` events carry a partial result, exactly one `final` event carries
    the authoritative result, and `error` replaces `final` when the turn failed.
    """

    event: Literal["snapshot", "final", "error", "done"]
    conversation_id: UUID | None = None
    data: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    def to_sse(self) -> str:
        """Serialize event to SSE format with size validation."""
        payload = self.model_dump_json(by_alias=True)
        if len(payload.encode("utf-8")) > MAX_SSE_EVENT_BYTES:
            raise ValueError("SSE payload exceeded MAX_SSE_EVENT_BYTES")
        return f"data: {payload}\n\n"
