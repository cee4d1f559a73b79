"""Shared test fixtures for pytest.

We set minimal env defaults (e.g. SECRET_KEY) early so importing modules
that instantiate settings (core.security) succeeds without needing an
external .env file during tests.
"""

import os
import uuid
from collections.abc import AsyncGenerator, Generator, Iterable
from typing import Any

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient


os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")

from core.exceptions import CatalogWriteError, SeedNotFoundError
from dependencies.assistant import (
    get_conversation_registry,
    get_seed_invoker,
    get_seed_repository,
)
from dependencies.auth import get_current_user
from main import app
from schemas.auth import CurrentUser
from schemas.seeds import CatalogSeed, ExtractionResult, SeedUpdate
from services.ai.exceptions import AIExtractionError
from services.ai.invoker import ExtractionSnapshot
from services.assistant.registry import ConversationRegistry


TEST_USER = CurrentUser(id="user-123", email="grower@example.test")


# --------------------------------------------------------------------------- #
# Fakes
# --------------------------------------------------------------------------- #
Step = ExtractionResult | AIExtractionError


class FakeInvoker:
    """Scripted stand-in for `SeedPromptInvoker`.

    Each call consumes the next scripted step: an `ExtractionResult` is
    returned (or streamed after `partials`), an `AIExtractionError` is raised.
    Calls are recorded as ``(message, previous_context)`` tuples.
    """

    def __init__(
        self,
        steps: Iterable[Step] = (),
        partials: Iterable[ExtractionResult] = (),
    ) -> None:
        self.steps: list[Step] = list(steps)
        self.partials: list[ExtractionResult] = list(partials)
        self.calls: list[tuple[str, str | None]] = []

    def _next(self) -> ExtractionResult:
        step = self.steps.pop(0) if self.steps else ExtractionResult()
        if isinstance(step, AIExtractionError):
            raise step
        return step

    async def invoke(
        self, message: str, previous_context: str | None = None
    ) -> ExtractionResult:
        self.calls.append((message, previous_context))
        return self._next()

    async def invoke_streaming(
        self, message: str, previous_context: str | None = None
    ) -> AsyncGenerator[ExtractionSnapshot, None]:
        self.calls.append((message, previous_context))
        for partial in self.partials:
            yield ExtractionSnapshot(result=partial, final=False)
        yield ExtractionSnapshot(result=self._next(), final=True)


class InMemorySeedRepository:
    """`SeedRepository` backed by a list; can be told to fail writes."""

    def __init__(self, fail_writes: bool = False) -> None:
        self.seeds: list[CatalogSeed] = []
        self.fail_writes = fail_writes

    async def load(self) -> list[CatalogSeed]:
        return list(reversed(self.seeds))

    async def append(self, seed: CatalogSeed) -> CatalogSeed:
        if self.fail_writes:
            raise CatalogWriteError("Could not create catalog entry")
        self.seeds.append(seed)
        return seed

    async def update(self, seed_id: uuid.UUID, changes: SeedUpdate) -> CatalogSeed:
        for idx, seed in enumerate(self.seeds):
            if seed.id == seed_id:
                updated = seed.model_copy(update=changes.model_dump(exclude_unset=True))
                self.seeds[idx] = updated
                return updated
        raise SeedNotFoundError(f"Seed {seed_id} not found")

    async def remove(self, seed_id: uuid.UUID) -> None:
        for seed in self.seeds:
            if seed.id == seed_id:
                self.seeds.remove(seed)
                return
        raise SeedNotFoundError(f"Seed {seed_id} not found")


def make_result(
    seed: dict[str, Any] | None = None,
    confidence: float = 0.9,
    missing_info: list[str] | None = None,
    suggested_questions: list[str] | None = None,
) -> ExtractionResult:
    return ExtractionResult.model_validate(
        {
            "seed": seed or {},
            "confidence": confidence,
            "missingInfo": missing_info or [],
            "suggestedQuestions": suggested_questions or [],
        }
    )


# --------------------------------------------------------------------------- #
# Fixtures
# --------------------------------------------------------------------------- #
@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """
    Create a test client for the FastAPI application.
    """
    with TestClient(app) as client:
        yield client


@pytest.fixture
def result_factory():
    return make_result


@pytest.fixture
def fake_invoker() -> FakeInvoker:
    return FakeInvoker()


@pytest.fixture
def seed_repository() -> InMemorySeedRepository:
    return InMemorySeedRepository()


@pytest.fixture
def registry(fake_invoker: FakeInvoker) -> ConversationRegistry:
    return ConversationRegistry(fake_invoker)


async def _override_get_current_user() -> CurrentUser:
    return TEST_USER


@pytest_asyncio.fixture
async def async_client(
    fake_invoker: FakeInvoker,
    registry: ConversationRegistry,
    seed_repository: InMemorySeedRepository,
) -> AsyncGenerator[AsyncClient, None]:
    """Async client with auth, invoker, registry and seed store overridden."""
    app.dependency_overrides[get_current_user] = _override_get_current_user
    app.dependency_overrides[get_seed_invoker] = lambda: fake_invoker
    app.dependency_overrides[get_conversation_registry] = lambda: registry
    app.dependency_overrides[get_seed_repository] = lambda: seed_repository
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()
