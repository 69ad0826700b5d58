"""Trigger processor: needs_forward -> forwarded, outbox needs_send -> sent."""

from unittest.mock import patch

import pytest

from agency.errors import ConflictError, NotFoundError
from agency.lib.queue import Queue
from agency.relay.forwarder import FORWARD_QUEUE, TriggerProcessor
from agency.relay.pipeline import TRIGGER_QUEUE, ChatRelay


@pytest.fixture
def processor(store):
    return TriggerProcessor(store)


@pytest.fixture
def trigger(store):
    store.write(
        "chat_history/scout",
        [
            {"sender": "user", "messageId": "m1", "message": "hi"},
            {"sender": "agent", "messageId": "m1", "message": None, "status": "pending",
             "sessionKey": "agent:scout:abc"},
        ],
    )
    ChatRelay(store).poll_once()
    return "m1"


def test_forward_moves_trigger_to_outbox(processor, store, trigger):
    assert processor.poll_once() == [trigger]

    assert Queue(store, TRIGGER_QUEUE).get(trigger)["status"] == "forwarded"
    [sendable] = processor.pending_sends()
    assert sendable["id"] == trigger
    assert sendable["status"] == "needs_send"
    assert sendable["sessionKey"] == "agent:scout:abc"
    assert sendable["message"] == '🔍 [Scout] Can says: "hi"'


def test_forward_is_idempotent(processor, trigger):
    processor.poll_once()

    assert processor.poll_once() == []
    assert len(processor.pending_sends()) == 1


def test_no_pending_triggers(processor):
    assert processor.poll_once() == []


def test_mark_sent(processor, store, trigger):
    processor.poll_once()

    processor.mark_sent(trigger)

    assert processor.pending_sends() == []
    assert Queue(store, FORWARD_QUEUE).get(trigger)["status"] == "sent"
    with pytest.raises(ConflictError):
        processor.mark_sent(trigger)


def test_mark_sent_unknown(processor):
    with pytest.raises(NotFoundError):
        processor.mark_sent("ghost")


def test_conflicting_trigger_skipped(processor, trigger):
    conflict = ConflictError(trigger, "needs_forward", "forwarded")
    with patch.object(processor.triggers, "transition", side_effect=conflict):
        assert processor.poll_once() == []
