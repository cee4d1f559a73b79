"""Conversation accumulator for the seed assistant.

A `SeedConversation` keeps the chat history and a running seed draft that is
refined turn by turn. It is a single-writer state machine: while a turn is
awaiting the model (`awaiting_response`) any other turn is rejected with
`ConversationBusy`. Extraction failures never escape a turn; they become a
fallback assistant message and leave the draft untouched.
"""

from __future__ import annotations

import json
import time
from collections.abc import AsyncGenerator, Sequence
from contextlib import aclosing
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID, uuid4

from core.error_handler import StructuredLogger
from schemas.assistant import ChatTurn, ConversationState, ConversationStatus
from schemas.seeds import MAX_PREVIOUS_CONTEXT_CHARS, ExtractionResult, SeedDraft
from services.ai.exceptions import AIExtractionError, ConversationBusy
from services.ai.invoker import ExtractionSnapshot
from services.ai.normalizer import merge_drafts


logger = StructuredLogger(__name__)

GREETING = (
    "Hi! I can help catalog your seeds. Tell me about a seed pack you'd like "
    "to add to your collection."
)
FALLBACK_MESSAGE = "Sorry, I had trouble processing that. Could you try rephrasing?"


class ExtractionInvoker(Protocol):
    """What the accumulator needs from `SeedPromptInvoker`."""

    async def invoke(
        self, message: str, previous_context: str | None = None
    ) -> ExtractionResult: ...

    def invoke_streaming(
        self, message: str, previous_context: str | None = None
    ) -> AsyncGenerator[ExtractionSnapshot, None]: ...


@dataclass(frozen=True, slots=True)
class ContextWindowPolicy:
    """Serializes the tail of the history into the `previousContext` string.

    The window includes the turn being submitted, so a size of 4 carries the
    new user message plus the three turns before it. Oldest turns are dropped
    until the encoding fits `max_chars`; if not even the newest turn fits,
    no context is sent.
    """

    size: int = 4
    max_chars: int = MAX_PREVIOUS_CONTEXT_CHARS

    def encode(self, turns: Sequence[ChatTurn]) -> str | None:
        window = list(turns)[-self.size :]
        while window:
            encoded = json.dumps(
                {"messages": [{"role": t.role, "content": t.content} for t in window]},
                ensure_ascii=False,
            )
            if len(encoded) <= self.max_chars:
                return encoded
            window = window[1:]
        return None


def format_assistant_message(result: ExtractionResult) -> str:
    """Human-readable summary of one extraction."""
    seed = result.seed
    text = "I've extracted information about your seeds.\n\n"
    if seed.breeder and seed.strain:
        text += f"I see you have {seed.strain} from {seed.breeder}.\n"
    if result.missing_info:
        text += "\nI still need some details:\n"
        for question in result.suggested_questions:
            text += f"• {question}\n"
    return text


class SeedConversation:
    """History plus running draft for one user's assistant session."""

    def __init__(
        self,
        invoker: ExtractionInvoker,
        owner_id: str,
        context_policy: ContextWindowPolicy | None = None,
        conversation_id: UUID | None = None,
    ) -> None:
        self.id = conversation_id or uuid4()
        self.owner_id = owner_id
        self._invoker = invoker
        self._policy = context_policy or ContextWindowPolicy()
        self.history: list[ChatTurn] = []
        self.running_draft = SeedDraft()
        self.preview: ExtractionResult | None = None
        self.status = ConversationStatus.IDLE
        self.generation = 0
        self.last_active = time.monotonic()
        self.last_error_code: str | None = None

    # ------------------------------------------------------------------ #
    # State transitions
    # ------------------------------------------------------------------ #
    def ensure_idle(self) -> None:
        if self.status is ConversationStatus.AWAITING_RESPONSE:
            raise ConversationBusy()

    def _begin(self) -> int:
        self.ensure_idle()
        self.status = ConversationStatus.AWAITING_RESPONSE
        self.last_error_code = None
        self.last_active = time.monotonic()
        return self.generation

    def _finish(self, generation: int) -> None:
        if generation == self.generation:
            self.status = ConversationStatus.IDLE
            self.preview = None
        self.last_active = time.monotonic()

    def _is_stale(self, generation: int) -> bool:
        if generation != self.generation:
            logger.info(
                "Discarding assistant turn started before reset",
                conversation_id=str(self.id),
            )
            return True
        return False

    def _accept(self, result: ExtractionResult) -> ChatTurn:
        self.running_draft = merge_drafts(self.running_draft, result.seed)
        return ChatTurn(
            role="assistant",
            content=format_assistant_message(result),
            seed_data=result,
        )

    def _fallback(self, exc: AIExtractionError) -> ChatTurn:
        self.last_error_code = exc.error_code
        logger.warning(
            "Assistant turn failed",
            conversation_id=str(self.id),
            error_code=exc.error_code,
        )
        return ChatTurn(role="assistant", content=FALLBACK_MESSAGE)

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #
    async def submit_turn(self, user_text: str) -> ChatTurn:
        """Run one request/response turn and return the assistant turn.

        The user turn is recorded immediately. On success the extraction is
        merged into the running draft; on failure a fallback turn without seed
        data is recorded instead.

        Raises:
            ConversationBusy: Another turn is still awaiting the model.
        """
        generation = self._begin()
        user_turn = ChatTurn(role="user", content=user_text)
        self.history.append(user_turn)
        try:
            context = self._policy.encode(self.history)
            try:
                result = await self._invoker.invoke(user_text, context)
            except AIExtractionError as exc:
                reply = self._fallback(exc)
                if not self._is_stale(generation):
                    self.history.append(reply)
                return reply
            if self._is_stale(generation):
                return ChatTurn(
                    role="assistant",
                    content=format_assistant_message(result),
                    seed_data=result,
                )
            reply = self._accept(result)
            self.history.append(reply)
            return reply
        finally:
            self._finish(generation)

    async def stream_turn(
        self, user_text: str
    ) -> AsyncGenerator[ExtractionSnapshot, None]:
        """Streamed turn: partials update `preview`, only the final one is merged.

        Nothing is recorded until the final snapshot arrives, so a consumer that
        stops iterating early leaves history and draft exactly as they were. A
        failure records the user turn and the fallback turn, then ends the
        stream without a final snapshot.

        Raises:
            ConversationBusy: Another turn is still awaiting the model.
        """
        generation = self._begin()
        user_turn = ChatTurn(role="user", content=user_text)
        context = self._policy.encode([*self.history, user_turn])
        snapshots = self._invoker.invoke_streaming(user_text, context)
        try:
            try:
                async with aclosing(snapshots):
                    async for snapshot in snapshots:
                        if self._is_stale(generation):
                            return
                        if not snapshot.final:
                            self.preview = snapshot.result
                            yield snapshot
                            continue
                        self.history.extend([user_turn, self._accept(snapshot.result)])
                        yield snapshot
            except AIExtractionError as exc:
                if not self._is_stale(generation):
                    self.history.extend([user_turn, self._fallback(exc)])
        finally:
            self._finish(generation)

    def reset(self) -> None:
        """Clear history, draft and preview. Safe to call at any time."""
        self.history = []
        self.running_draft = SeedDraft()
        self.preview = None
        self.status = ConversationStatus.IDLE
        self.generation += 1
        self.last_error_code = None
        self.last_active = time.monotonic()

    def discard_draft(self) -> None:
        """Drop the running draft after it has been committed."""
        self.running_draft = SeedDraft()
        self.preview = None

    def latest_extraction(
        self, turn_index: int | None = None
    ) -> ExtractionResult | None:
        """Seed data of the given turn, or of the newest turn that carries any."""
        if turn_index is not None:
            if turn_index >= len(self.history):
                return None
            return self.history[turn_index].seed_data
        for turn in reversed(self.history):
            if turn.seed_data is not None:
                return turn.seed_data
        return None

    def state(self) -> ConversationState:
        return ConversationState(
            conversation_id=self.id,
            status=self.status,
            history=list(self.history),
            running_draft=self.running_draft,
            preview=self.preview,
        )
