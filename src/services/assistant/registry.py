"""Process-local store of live assistant conversations.

Conversations are keyed by ``(owner_id, conversation_id)`` so one user can
never address another user's session, and expire after a period of inactivity.
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from uuid import UUID

from core.exceptions import ConversationNotFoundError
from services.assistant.conversation import (
    ContextWindowPolicy,
    ExtractionInvoker,
    SeedConversation,
)


logger = logging.getLogger(__name__)


class ConversationRegistry:
    def __init__(
        self,
        invoker: ExtractionInvoker,
        ttl: timedelta = timedelta(minutes=60),
        context_policy: ContextWindowPolicy | None = None,
    ) -> None:
        self._invoker = invoker
        self._ttl_seconds = ttl.total_seconds()
        self._policy = context_policy or ContextWindowPolicy()
        self._conversations: dict[tuple[str, UUID], SeedConversation] = {}

    def __len__(self) -> int:
        return len(self._conversations)

    def create(self, owner_id: str) -> SeedConversation:
        self.purge_expired()
        conversation = SeedConversation(
            self._invoker, owner_id=owner_id, context_policy=self._policy
        )
        self._conversations[(owner_id, conversation.id)] = conversation
        logger.info(f"Assistant conversation {conversation.id} created")
        return conversation

    def get(self, owner_id: str, conversation_id: UUID) -> SeedConversation:
        """Return a live conversation or raise `ConversationNotFoundError`."""
        self.purge_expired()
        conversation = self._conversations.get((owner_id, conversation_id))
        if conversation is None:
            raise ConversationNotFoundError(
                f"Conversation {conversation_id} not found"
            )
        return conversation

    def discard(self, owner_id: str, conversation_id: UUID) -> None:
        conversation = self._conversations.pop((owner_id, conversation_id), None)
        if conversation is None:
            raise ConversationNotFoundError(
                f"Conversation {conversation_id} not found"
            )
        # A turn still in flight sees the bumped generation and drops its result
        conversation.reset()

    def purge_expired(self, now: float | None = None) -> int:
        """Drop idle conversations older than the TTL; returns how many."""
        now = time.monotonic() if now is None else now
        expired = [
            key
            for key, conversation in self._conversations.items()
            if now - conversation.last_active > self._ttl_seconds
        ]
        for key in expired:
            del self._conversations[key]
        if expired:
            logger.info(f"Purged {len(expired)} expired assistant conversations")
        return len(expired)
