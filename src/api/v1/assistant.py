"""Seed assistant endpoints: the `analyzeSeed` callable and chat conversations."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import aclosing
from typing import Annotated, Any, NoReturn
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from fastapi.responses import StreamingResponse

from core.ratelimit import check_rate_limit
from dependencies.assistant import CommitGateDep, InvokerDep, RegistryDep
from dependencies.auth import CurrentUserDep
from schemas.api import ApiResponse
from schemas.assistant import (
    AssistantMessageRequest,
    AssistantSseEvent,
    CommitRequest,
    ConversationCreated,
    ConversationState,
    TurnResponse,
)
from schemas.seeds import CatalogSeed, ExtractionRequest, ExtractionResult
from services.ai.exceptions import (
    AIExtractionError,
    BackendError,
    ConversationBusy,
    ExtractionFailed,
)
from services.assistant.conversation import GREETING, SeedConversation


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assistant", tags=["assistant"])


def _raise_http(exc: AIExtractionError) -> NoReturn:
    if isinstance(exc, ExtractionFailed):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.message
        ) from exc
    if isinstance(exc, ConversationBusy):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=exc.message
        ) from exc
    if isinstance(exc, BackendError):
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message
        ) from exc
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message
    ) from exc


def _error_event(
    message: str, error_code: str, conversation_id: UUID | None = None
) -> str:
    return AssistantSseEvent(
        event="error",
        conversation_id=conversation_id,
        data={"message": message, "errorCode": error_code},
    ).to_sse()


def _dump(result: ExtractionResult) -> dict[str, Any]:
    return result.model_dump(by_alias=True, mode="json")


# --------------------------------------------------------------------------- #
# analyzeSeed callable
# --------------------------------------------------------------------------- #
@router.post(
    "/analyze-seed",
    response_model=ExtractionResult,
    dependencies=[Depends(check_rate_limit)],
)
async def analyze_seed(
    payload: ExtractionRequest, invoker: InvokerDep
) -> ExtractionResult:
    """Extract a seed record from one message.

    `previousContext` is passed to the model verbatim and omitted when absent.
    Returns 422 with the failure message when the model produced nothing
    usable, 502 when the model provider is unavailable.
    """
    try:
        return await invoker.invoke(payload.message, payload.previous_context)
    except AIExtractionError as exc:
        _raise_http(exc)


@router.post(
    "/analyze-seed/stream",
    summary="Stream seed extraction snapshots via Server-Sent Events",
    dependencies=[Depends(check_rate_limit)],
)
async def analyze_seed_stream(
    payload: ExtractionRequest, invoker: InvokerDep
) -> StreamingResponse:
    """Streaming twin of `analyze-seed`.

    Event JSON schema (sent in `data:` lines):
      event: snapshot|final|error|done
      data: the (partial) ExtractionResult, or {message, errorCode} on error
    """

    async def event_stream() -> AsyncGenerator[str, None]:
        try:
            async with aclosing(
                invoker.invoke_streaming(payload.message, payload.previous_context)
            ) as snapshots:
                async for snapshot in snapshots:
                    yield AssistantSseEvent(
                        event="final" if snapshot.final else "snapshot",
                        data=_dump(snapshot.result),
                    ).to_sse()
        except AIExtractionError as exc:
            yield _error_event(exc.message, exc.error_code)
        yield AssistantSseEvent(event="done").to_sse()

    return StreamingResponse(event_stream(), media_type="text/event-stream")


# --------------------------------------------------------------------------- #
# Conversations
# --------------------------------------------------------------------------- #
@router.post(
    "/conversations",
    response_model=ApiResponse[ConversationCreated],
    status_code=status.HTTP_201_CREATED,
)
async def create_conversation(
    registry: RegistryDep, current_user: CurrentUserDep
) -> ApiResponse[ConversationCreated]:
    conversation = registry.create(current_user.id)
    return ApiResponse(
        data=ConversationCreated(conversation_id=conversation.id, greeting=GREETING),
        message="Conversation started",
    )


@router.get(
    "/conversations/{conversation_id}",
    response_model=ApiResponse[ConversationState],
)
async def get_conversation(
    conversation_id: UUID, registry: RegistryDep, current_user: CurrentUserDep
) -> ApiResponse[ConversationState]:
    conversation = registry.get(current_user.id, conversation_id)
    return ApiResponse(data=conversation.state(), message="Conversation retrieved")


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=ApiResponse[TurnResponse],
    dependencies=[Depends(check_rate_limit)],
)
async def post_message(
    conversation_id: UUID,
    payload: AssistantMessageRequest,
    registry: RegistryDep,
    current_user: CurrentUserDep,
) -> ApiResponse[TurnResponse]:
    """Submit one user message and return the assistant's reply.

    Extraction failures do not produce an error status: the reply is the
    fallback message and the running draft is unchanged.
    """
    conversation = registry.get(current_user.id, conversation_id)
    try:
        turn = await conversation.submit_turn(payload.content)
    except ConversationBusy as exc:
        _raise_http(exc)
    return ApiResponse(
        data=TurnResponse(turn=turn, running_draft=conversation.running_draft),
        message="Message processed",
    )


async def _conversation_events(
    conversation: SeedConversation, content: str
) -> AsyncGenerator[str, None]:
    final_sent = False
    try:
        async with aclosing(conversation.stream_turn(content)) as snapshots:
            async for snapshot in snapshots:
                final_sent = final_sent or snapshot.final
                yield AssistantSseEvent(
                    event="final" if snapshot.final else "snapshot",
                    conversation_id=conversation.id,
                    data=_dump(snapshot.result),
                ).to_sse()
    except ConversationBusy as exc:
        yield _error_event(exc.message, exc.error_code, conversation.id)
        return

    if not final_sent and conversation.last_error_code and conversation.history:
        # The failed turn was recorded with the fallback reply
        yield _error_event(
            conversation.history[-1].content,
            conversation.last_error_code,
            conversation.id,
        )
    yield AssistantSseEvent(
        event="done",
        conversation_id=conversation.id,
        data={
            "runningDraft": conversation.running_draft.model_dump(
                by_alias=True, mode="json"
            )
        },
    ).to_sse()


@router.post(
    "/conversations/{conversation_id}/messages/stream",
    summary="Stream one assistant turn via Server-Sent Events",
    dependencies=[Depends(check_rate_limit)],
)
async def post_message_stream(
    conversation_id: UUID,
    payload: AssistantMessageRequest,
    registry: RegistryDep,
    current_user: CurrentUserDep,
) -> StreamingResponse:
    """Partial snapshots are previews only; the `final` event is the one merged.

    A client that disconnects before `final` leaves the conversation unchanged.
    """
    conversation = registry.get(current_user.id, conversation_id)
    try:
        conversation.ensure_idle()
    except ConversationBusy as exc:
        _raise_http(exc)
    return StreamingResponse(
        _conversation_events(conversation, payload.content),
        media_type="text/event-stream",
    )


@router.post(
    "/conversations/{conversation_id}/commit",
    response_model=ApiResponse[CatalogSeed],
    status_code=status.HTTP_201_CREATED,
)
async def commit_conversation(
    conversation_id: UUID,
    registry: RegistryDep,
    gate: CommitGateDep,
    current_user: CurrentUserDep,
    payload: Annotated[CommitRequest | None, Body()] = None,
) -> ApiResponse[CatalogSeed]:
    """Add an extracted seed to the catalog.

    Commits the seed data of `turnIndex`, or of the latest assistant turn that
    carries any. The running draft is cleared only after the write succeeds.
    """
    conversation = registry.get(current_user.id, conversation_id)
    turn_index = payload.turn_index if payload else None
    extraction = conversation.latest_extraction(turn_index)
    if extraction is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="No extracted seed to commit",
        )
    seed = await gate.commit(extraction, owner_id=current_user.id)
    conversation.discard_draft()
    return ApiResponse(data=seed, message="Seed added to your catalog!")


@router.post(
    "/conversations/{conversation_id}/reset",
    response_model=ApiResponse[ConversationState],
)
async def reset_conversation(
    conversation_id: UUID, registry: RegistryDep, current_user: CurrentUserDep
) -> ApiResponse[ConversationState]:
    conversation = registry.get(current_user.id, conversation_id)
    conversation.reset()
    return ApiResponse(data=conversation.state(), message="Conversation reset")


@router.delete(
    "/conversations/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_conversation(
    conversation_id: UUID, registry: RegistryDep, current_user: CurrentUserDep
) -> Response:
    registry.discard(current_user.id, conversation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
