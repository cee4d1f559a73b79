"""Tests for the in-process conversation registry."""

import time
import uuid
from datetime import timedelta

import pytest

from core.exceptions import ConversationNotFoundError
from services.assistant.registry import ConversationRegistry


def test_create_and_get(registry):
    conversation = registry.create("user-123")

    assert registry.get("user-123", conversation.id) is conversation
    assert len(registry) == 1


def test_other_owner_cannot_see_conversation(registry):
    conversation = registry.create("user-123")

    with pytest.raises(ConversationNotFoundError):
        registry.get("someone-else", conversation.id)


def test_unknown_conversation_raises(registry):
    with pytest.raises(ConversationNotFoundError):
        registry.get("user-123", uuid.uuid4())


def test_discard_removes_and_resets(registry):
    conversation = registry.create("user-123")
    generation = conversation.generation

    registry.discard("user-123", conversation.id)

    assert len(registry) == 0
    assert conversation.generation == generation + 1
    with pytest.raises(ConversationNotFoundError):
        registry.discard("user-123", conversation.id)


def test_purge_drops_only_idle_past_ttl(fake_invoker):
    registry = ConversationRegistry(fake_invoker, ttl=timedelta(minutes=10))
    stale = registry.create("user-123")
    fresh = registry.create("user-123")
    stale.last_active = time.monotonic() - 11 * 60

    purged = registry.purge_expired()

    assert purged == 1
    assert registry.get("user-123", fresh.id) is fresh
    with pytest.raises(ConversationNotFoundError):
        registry.get("user-123", stale.id)


def test_purge_with_explicit_clock(fake_invoker):
    registry = ConversationRegistry(fake_invoker, ttl=timedelta(seconds=30))
    registry.create("user-123")

    assert registry.purge_expired(now=time.monotonic() + 5) == 0
    assert registry.purge_expired(now=time.monotonic() + 60) == 1
    assert len(registry) == 0
