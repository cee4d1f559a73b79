"""Seed prompt invoker: one user utterance in, one normalized extraction out.

The invoker is stateless between calls. The prompt name, its version and the
model id are fixed configuration; callers only supply the message and an
optional opaque context string.
"""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError
from pydantic_ai import Agent
from pydantic_ai.exceptions import AgentRunError, ModelHTTPError

from core.config import get_settings
from core.error_handler import StructuredLogger
from schemas.seeds import ExtractionRequest, ExtractionResult
from services.ai.agents import create_seed_agent
from services.ai.exceptions import AIExtractionError, BackendError, ExtractionFailed
from services.ai.normalizer import normalize
from services.ai.prompts import SEED_ANALYSIS_PROMPT_NAME, SEED_ANALYSIS_PROMPT_VERSION


logger = StructuredLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExtractionSnapshot:
    """One streamed state of an extraction; `final` marks the authoritative one."""

    result: ExtractionResult
    final: bool = False


def _translate_error(exc: Exception) -> AIExtractionError:
    if isinstance(exc, ModelHTTPError):
        return BackendError(f"Model provider returned HTTP {exc.status_code}")
    if isinstance(exc, httpx.HTTPError):
        return BackendError(f"Model provider unreachable: {type(exc).__name__}")
    if isinstance(exc, AgentRunError):
        return ExtractionFailed()
    return BackendError(f"Unexpected model failure: {type(exc).__name__}")


class SeedPromptInvoker:
    """Runs the `seed-analysis` prompt against the configured model.

    Args:
        agent: Pre-built agent (tests inject one backed by `TestModel`).
        agent_factory: Callable creating the agent on first use when no agent
            is injected. Lazy creation keeps imports free of API key checks.
    """

    def __init__(
        self,
        agent: Agent[None, ExtractionResult] | None = None,
        agent_factory: Callable[[], Agent[None, ExtractionResult]] = create_seed_agent,
    ) -> None:
        self._agent = agent
        self._agent_factory = agent_factory
        self.prompt_name = SEED_ANALYSIS_PROMPT_NAME
        self.prompt_version = SEED_ANALYSIS_PROMPT_VERSION
        self.model_name = get_settings().SEED_ANALYSIS_MODEL

    def _get_agent(self) -> Agent[None, ExtractionResult]:
        if self._agent is None:
            try:
                self._agent = self._agent_factory()
            except ValueError as exc:
                raise BackendError(str(exc)) from exc
        return self._agent

    def _build_request(
        self, message: str, previous_context: str | None
    ) -> ExtractionRequest:
        try:
            return ExtractionRequest(message=message, previous_context=previous_context)
        except ValidationError as exc:
            logger.warning(
                "Seed analysis request rejected",
                prompt=self.prompt_name,
                error_count=exc.error_count(),
            )
            raise ExtractionFailed() from exc

    def _log_call(self, kind: str, request: ExtractionRequest, **extra: Any) -> None:
        logger.info(
            f"Seed analysis {kind}",
            prompt=self.prompt_name,
            prompt_version=self.prompt_version,
            model=self.model_name,
            has_context=request.previous_context is not None,
            **extra,
        )

    async def invoke(
        self, message: str, previous_context: str | None = None
    ) -> ExtractionResult:
        """Run one extraction and return the normalized result.

        Raises:
            ExtractionFailed: The model produced no usable output.
            BackendError: The model provider could not be reached.
        """
        request = self._build_request(message, previous_context)
        agent = self._get_agent()
        self._log_call("started", request)
        started = time.perf_counter()
        try:
            run = await agent.run(request.to_prompt_payload())
        except Exception as exc:
            error = _translate_error(exc)
            logger.warning(
                "Seed analysis failed",
                prompt=self.prompt_name,
                error_code=error.error_code,
                error_type=type(exc).__name__,
            )
            raise error from exc

        output = getattr(run, "output", None)
        if output is None:
            raise ExtractionFailed()
        self._log_call(
            "completed",
            request,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return normalize(output)

    async def invoke_streaming(
        self, message: str, previous_context: str | None = None
    ) -> AsyncGenerator[ExtractionSnapshot, None]:
        """Yield partial snapshots, then exactly one final snapshot.

        Partial snapshots are normalized like final ones but are provisional.
        Errors are the same as `invoke`; a failure after some partials means no
        final snapshot is produced.
        """
        request = self._build_request(message, previous_context)
        agent = self._get_agent()
        self._log_call("stream started", request)
        partials = 0
        try:
            async with agent.run_stream(request.to_prompt_payload()) as run:
                async for partial in run.stream_output(debounce_by=None):
                    partials += 1
                    yield ExtractionSnapshot(result=normalize(partial), final=False)
                output = await run.get_output()
        except AIExtractionError:
            raise
        except Exception as exc:
            error = _translate_error(exc)
            logger.warning(
                "Seed analysis stream failed",
                prompt=self.prompt_name,
                error_code=error.error_code,
                error_type=type(exc).__name__,
                partials=partials,
            )
            raise error from exc

        if output is None:
            raise ExtractionFailed()
        self._log_call("stream completed", request, partials=partials)
        yield ExtractionSnapshot(result=normalize(output), final=True)
