"""Assistant API tests: analyze-seed callable, conversations and commit."""

from __future__ import annotations

import json
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient

from main import app
from schemas.assistant import ConversationStatus
from services.ai.exceptions import BackendError, ExtractionFailed
from services.assistant.conversation import FALLBACK_MESSAGE, GREETING


def _events(body: str) -> list[dict]:
    return [
        json.loads(line[len("data: ") :])
        for line in body.splitlines()
        if line.startswith("data: ")
    ]


async def _start(client: AsyncClient) -> str:
    resp = await client.post("/api/v1/assistant/conversations")
    assert resp.status_code == 201
    return resp.json()["data"]["conversationId"]


# --------------------------------------------------------------------------- #
# analyze-seed
# --------------------------------------------------------------------------- #
@pytest.mark.asyncio
async def test_analyze_seed_returns_raw_result(
    async_client: AsyncClient, fake_invoker, result_factory
):
    fake_invoker.steps = [
        result_factory(
            seed={"breeder": "ABC Seeds", "strain": "Blue Dream", "numSeeds": 10},
            confidence=0.85,
            missing_info=["lineage"],
        )
    ]

    resp = await async_client.post(
        "/api/v1/assistant/analyze-seed",
        json={"message": "10 Blue Dream from ABC Seeds"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["seed"]["strain"] == "Blue Dream"
    assert body["seed"]["numSeeds"] == 10
    assert body["confidence"] == 0.85
    assert body["missingInfo"] == ["lineage"]
    assert fake_invoker.calls == [("10 Blue Dream from ABC Seeds", None)]


@pytest.mark.asyncio
async def test_analyze_seed_passes_context(async_client: AsyncClient, fake_invoker):
    context = json.dumps({"messages": [{"role": "user", "content": "hi"}]})

    await async_client.post(
        "/api/v1/assistant/analyze-seed",
        json={"message": "feminized", "previousContext": context},
    )

    assert fake_invoker.calls == [("feminized", context)]


@pytest.mark.asyncio
async def test_analyze_seed_extraction_failure_is_422(
    async_client: AsyncClient, fake_invoker
):
    fake_invoker.steps = [ExtractionFailed()]

    resp = await async_client.post(
        "/api/v1/assistant/analyze-seed", json={"message": "???"}
    )

    assert resp.status_code == 422
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Failed to generate valid seed analysis"


@pytest.mark.asyncio
async def test_analyze_seed_backend_failure_is_502(
    async_client: AsyncClient, fake_invoker
):
    fake_invoker.steps = [BackendError()]

    resp = await async_client.post(
        "/api/v1/assistant/analyze-seed", json={"message": "Blue Dream"}
    )

    assert resp.status_code == 502


@pytest.mark.asyncio
async def test_analyze_seed_rejects_blank_message(async_client: AsyncClient):
    resp = await async_client.post(
        "/api/v1/assistant/analyze-seed", json={"message": "   "}
    )

    assert resp.status_code == 422
    assert resp.json()["error"]["type"] == "validation_error"


@pytest.mark.asyncio
async def test_analyze_seed_stream_event_order(
    async_client: AsyncClient, fake_invoker, result_factory
):
    fake_invoker.partials = [result_factory(seed={"breeder": "ABC"})]
    fake_invoker.steps = [result_factory(seed={"breeder": "ABC Seeds"})]

    resp = await async_client.post(
        "/api/v1/assistant/analyze-seed/stream", json={"message": "ABC Seeds"}
    )

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    events = _events(resp.text)
    assert [e["event"] for e in events] == ["snapshot", "final", "done"]
    assert events[1]["data"]["seed"]["breeder"] == "ABC Seeds"


@pytest.mark.asyncio
async def test_analyze_seed_stream_error_event(
    async_client: AsyncClient, fake_invoker
):
    fake_invoker.steps = [BackendError()]

    resp = await async_client.post(
        "/api/v1/assistant/analyze-seed/stream", json={"message": "Blue Dream"}
    )

    events = _events(resp.text)
    assert [e["event"] for e in events] == ["error", "done"]
    assert events[0]["data"]["errorCode"] == "backend_error"


# --------------------------------------------------------------------------- #
# Conversations
# --------------------------------------------------------------------------- #
@pytest.mark.asyncio
async def test_create_conversation_returns_greeting(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/assistant/conversations")

    assert resp.status_code == 201
    assert resp.json()["data"]["greeting"] == GREETING


@pytest.mark.asyncio
async def test_message_turn_updates_running_draft(
    async_client: AsyncClient, fake_invoker, result_factory
):
    fake_invoker.steps = [
        result_factory(seed={"breeder": "ABC Seeds", "strain": "Blue Dream"}),
        result_factory(seed={"lineage": "Blueberry x Haze"}),
    ]
    conversation_id = await _start(async_client)
    url = f"/api/v1/assistant/conversations/{conversation_id}/messages"

    await async_client.post(url, json={"content": "Blue Dream from ABC Seeds"})
    resp = await async_client.post(url, json={"content": "Blueberry x Haze"})

    assert resp.status_code == 200
    draft = resp.json()["data"]["runningDraft"]
    assert draft["strain"] == "Blue Dream"
    assert draft["lineage"] == "Blueberry x Haze"

    state = await async_client.get(f"/api/v1/assistant/conversations/{conversation_id}")
    assert len(state.json()["data"]["history"]) == 4


@pytest.mark.asyncio
async def test_failed_turn_is_fallback_not_error(
    async_client: AsyncClient, fake_invoker
):
    fake_invoker.steps = [ExtractionFailed()]
    conversation_id = await _start(async_client)

    resp = await async_client.post(
        f"/api/v1/assistant/conversations/{conversation_id}/messages",
        json={"content": "???"},
    )

    assert resp.status_code == 200
    turn = resp.json()["data"]["turn"]
    assert turn["content"] == FALLBACK_MESSAGE
    assert turn["seedData"] is None


@pytest.mark.asyncio
async def test_stream_turn_events_and_done_carries_draft(
    async_client: AsyncClient, fake_invoker, result_factory
):
    fake_invoker.partials = [result_factory(seed={"strain": "Blue"})]
    fake_invoker.steps = [result_factory(seed={"strain": "Blue Dream"})]
    conversation_id = await _start(async_client)

    resp = await async_client.post(
        f"/api/v1/assistant/conversations/{conversation_id}/messages/stream",
        json={"content": "Blue Dream"},
    )

    events = _events(resp.text)
    assert [e["event"] for e in events] == ["snapshot", "final", "done"]
    assert all(e["conversationId"] == conversation_id for e in events)
    assert events[-1]["data"]["runningDraft"]["strain"] == "Blue Dream"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "error_code"),
    [(ExtractionFailed(), "extraction_failed"), (BackendError(), "backend_error")],
    ids=["extraction", "backend"],
)
async def test_stream_turn_failure_emits_error_event(
    async_client: AsyncClient, fake_invoker, error, error_code
):
    fake_invoker.steps = [error]
    conversation_id = await _start(async_client)

    resp = await async_client.post(
        f"/api/v1/assistant/conversations/{conversation_id}/messages/stream",
        json={"content": "???"},
    )

    events = _events(resp.text)
    assert [e["event"] for e in events] == ["error", "done"]
    assert events[0]["data"]["message"] == FALLBACK_MESSAGE
    assert events[0]["data"]["errorCode"] == error_code


@pytest.mark.asyncio
async def test_busy_conversation_is_409(async_client: AsyncClient, registry):
    conversation_id = await _start(async_client)
    conversation = registry.get("user-123", UUID(conversation_id))
    conversation.status = ConversationStatus.AWAITING_RESPONSE

    resp = await async_client.post(
        f"/api/v1/assistant/conversations/{conversation_id}/messages",
        json={"content": "hello"},
    )
    stream_resp = await async_client.post(
        f"/api/v1/assistant/conversations/{conversation_id}/messages/stream",
        json={"content": "hello"},
    )

    assert resp.status_code == 409
    assert stream_resp.status_code == 409


@pytest.mark.asyncio
async def test_unknown_conversation_is_404(async_client: AsyncClient):
    resp = await async_client.get(
        "/api/v1/assistant/conversations/00000000-0000-0000-0000-000000000000"
    )

    assert resp.status_code == 404
    assert resp.json()["message"] == "The assistant conversation was not found"


@pytest.mark.asyncio
async def test_reset_and_delete(async_client: AsyncClient):
    conversation_id = await _start(async_client)
    await async_client.post(
        f"/api/v1/assistant/conversations/{conversation_id}/messages",
        json={"content": "Blue Dream"},
    )

    reset = await async_client.post(
        f"/api/v1/assistant/conversations/{conversation_id}/reset"
    )
    assert reset.status_code == 200
    assert reset.json()["data"]["history"] == []

    deleted = await async_client.delete(
        f"/api/v1/assistant/conversations/{conversation_id}"
    )
    assert deleted.status_code == 204
    missing = await async_client.get(
        f"/api/v1/assistant/conversations/{conversation_id}"
    )
    assert missing.status_code == 404


# --------------------------------------------------------------------------- #
# Commit
# --------------------------------------------------------------------------- #
@pytest.mark.asyncio
async def test_commit_adds_latest_extraction(
    async_client: AsyncClient, fake_invoker, result_factory, seed_repository
):
    fake_invoker.steps = [
        result_factory(seed={"breeder": "ABC Seeds", "strain": "Blue Dream"})
    ]
    conversation_id = await _start(async_client)
    await async_client.post(
        f"/api/v1/assistant/conversations/{conversation_id}/messages",
        json={"content": "Blue Dream from ABC Seeds"},
    )

    resp = await async_client.post(
        f"/api/v1/assistant/conversations/{conversation_id}/commit"
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Seed added to your catalog!"
    assert body["data"]["strain"] == "Blue Dream"
    assert body["data"]["lineage"] == ""
    assert len(seed_repository.seeds) == 1
    assert seed_repository.seeds[0].user_id == "user-123"


@pytest.mark.asyncio
async def test_fem_pack_message_to_catalog_entry(
    async_client: AsyncClient, fake_invoker, result_factory, seed_repository
):
    fake_invoker.steps = [
        result_factory(
            seed={
                "breeder": "ABC Seeds",
                "strain": "Blue Dream",
                "numSeeds": 10,
                "feminized": True,
            },
            confidence=0.9,
            missing_info=[],
            suggested_questions=[],
        )
    ]
    conversation_id = await _start(async_client)
    base = f"/api/v1/assistant/conversations/{conversation_id}"

    turn = await async_client.post(
        f"{base}/messages",
        json={"content": "I have 10 fem seeds of Blue Dream from ABC Seeds"},
    )

    draft = turn.json()["data"]["runningDraft"]
    assert draft["breeder"] == "ABC Seeds"
    assert draft["quantity"] == 1
    assert draft["available"] is False
    assert draft["feminized"] is True

    resp = await async_client.post(f"{base}/commit")

    assert resp.status_code == 201
    seed = resp.json()["data"]
    assert seed["numSeeds"] == 10
    assert UUID(seed["id"])
    assert seed["dateAcquired"]
    assert seed_repository.seeds[0].num_seeds == 10


@pytest.mark.asyncio
async def test_commit_specific_turn(
    async_client: AsyncClient, fake_invoker, result_factory, seed_repository
):
    fake_invoker.steps = [
        result_factory(seed={"strain": "Blue Dream"}),
        result_factory(seed={"strain": "Sour Diesel"}),
    ]
    conversation_id = await _start(async_client)
    url = f"/api/v1/assistant/conversations/{conversation_id}"
    await async_client.post(f"{url}/messages", json={"content": "Blue Dream"})
    await async_client.post(f"{url}/messages", json={"content": "Sour Diesel"})

    resp = await async_client.post(f"{url}/commit", json={"turnIndex": 1})

    assert resp.status_code == 201
    assert seed_repository.seeds[0].strain == "Blue Dream"


@pytest.mark.asyncio
async def test_commit_without_extraction_is_422(
    async_client: AsyncClient, seed_repository
):
    conversation_id = await _start(async_client)

    resp = await async_client.post(
        f"/api/v1/assistant/conversations/{conversation_id}/commit"
    )

    assert resp.status_code == 422
    assert resp.json()["message"] == "No extracted seed to commit"
    assert seed_repository.seeds == []


@pytest.mark.asyncio
async def test_commit_store_failure_keeps_draft(
    async_client: AsyncClient, fake_invoker, result_factory, seed_repository
):
    fake_invoker.steps = [result_factory(seed={"strain": "Blue Dream"})]
    conversation_id = await _start(async_client)
    url = f"/api/v1/assistant/conversations/{conversation_id}"
    await async_client.post(f"{url}/messages", json={"content": "Blue Dream"})
    seed_repository.fail_writes = True

    resp = await async_client.post(f"{url}/commit")

    assert resp.status_code == 503
    state = await async_client.get(url)
    assert state.json()["data"]["runningDraft"]["strain"] == "Blue Dream"


@pytest.mark.asyncio
async def test_assistant_requires_auth():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        resp = await c.post("/api/v1/assistant/analyze-seed", json={"message": "x"})

    assert resp.status_code == 401
