"""Dependencies wiring the seed assistant and catalog repositories."""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from core.config import get_settings
from dependencies.auth import CurrentUserDep
from dependencies.db import DbSession
from services.ai.invoker import SeedPromptInvoker
from services.assistant.commit import CommitGate
from services.assistant.conversation import ContextWindowPolicy
from services.assistant.registry import ConversationRegistry
from services.catalog import (
    CloneRepository,
    SeedRepository,
    SqlCloneRepository,
    SqlSeedRepository,
)


@lru_cache
def get_seed_invoker() -> SeedPromptInvoker:
    """Process-wide invoker; the agent itself is created on first use."""
    return SeedPromptInvoker()


@lru_cache
def get_conversation_registry() -> ConversationRegistry:
    settings = get_settings()
    return ConversationRegistry(
        get_seed_invoker(),
        ttl=timedelta(minutes=settings.ASSISTANT_CONVERSATION_TTL_MINUTES),
        context_policy=ContextWindowPolicy(size=settings.ASSISTANT_CONTEXT_WINDOW),
    )


def get_seed_repository(db: DbSession, current_user: CurrentUserDep) -> SeedRepository:
    return SqlSeedRepository(db, owner_id=current_user.id)


def get_clone_repository(
    db: DbSession, current_user: CurrentUserDep
) -> CloneRepository:
    return SqlCloneRepository(db, owner_id=current_user.id)


def get_commit_gate(
    repository: Annotated[SeedRepository, Depends(get_seed_repository)],
) -> CommitGate:
    return CommitGate(repository)


InvokerDep = Annotated[SeedPromptInvoker, Depends(get_seed_invoker)]
RegistryDep = Annotated[ConversationRegistry, Depends(get_conversation_registry)]
SeedRepositoryDep = Annotated[SeedRepository, Depends(get_seed_repository)]
CloneRepositoryDep = Annotated[CloneRepository, Depends(get_clone_repository)]
CommitGateDep = Annotated[CommitGate, Depends(get_commit_gate)]
