"""Queue semantics: idempotent enqueue, optimistic status transitions."""

import pytest

from agency.errors import AlreadyCompletedError, ConflictError, NotFoundError
from agency.lib.queue import Queue
from agency.models import QueueItem, SpawnStatus


@pytest.fixture
def queue(store):
    return Queue(store, "spawn_queue")


def _item(item_id, status="pending", **payload):
    return {"id": item_id, "status": status, **payload}


def test_enqueue_appends(queue):
    assert queue.enqueue(_item("r1", agentId="scout")) is True

    items = queue.items()
    assert len(items) == 1
    assert items[0]["agentId"] == "scout"
    assert "createdAt" in items[0]


def test_enqueue_duplicate_is_noop(queue):
    queue.enqueue(_item("r1", task="first"))
    assert queue.enqueue(_item("r1", task="second")) is False

    items = queue.items()
    assert len(items) == 1
    assert items[0]["task"] == "first"


def test_enqueue_queue_item(queue):
    queue.enqueue(QueueItem(id="r2", status="pending", payload={"task": "x"}))

    assert queue.get("r2")["task"] == "x"


def test_enqueue_requires_id(queue):
    with pytest.raises(ValueError):
        queue.enqueue({"status": "pending"})


def test_get_missing_raises(queue):
    with pytest.raises(NotFoundError):
        queue.get("nope")


def test_list_by_status(queue):
    for item in (_item("a"), _item("b", "processing"), _item("c", "completed")):
        queue.enqueue(item)

    assert [d["id"] for d in queue.list_by_status("pending")] == ["a"]
    assert [d["id"] for d in queue.list_by_status(["pending", "processing"])] == ["a", "b"]


def test_list_by_status_accepts_enum(queue):
    queue.enqueue(_item("a"))
    queue.enqueue(_item("b", "processing"))

    wanted = {SpawnStatus.PENDING, SpawnStatus.PROCESSING}
    assert [d["id"] for d in queue.list_by_status(wanted)] == ["a", "b"]


def test_transition_updates_status_and_patch(queue):
    queue.enqueue(_item("r1"))

    doc = queue.transition("r1", "pending", "completed", {"sessionKey": "sess-42"})

    assert doc["status"] == "completed"
    stored = queue.get("r1")
    assert stored["status"] == "completed"
    assert stored["sessionKey"] == "sess-42"
    assert "updatedAt" in stored


def test_transition_stale_precondition_conflicts(queue, store):
    queue.enqueue(_item("r1", "completed"))
    before = store.read("spawn_queue")

    with pytest.raises(ConflictError) as exc:
        queue.transition("r1", "pending", "processing")

    assert exc.value.actual == "completed"
    assert store.read("spawn_queue") == before


def test_transition_custom_conflict_class(queue):
    queue.enqueue(_item("r1", "completed"))

    with pytest.raises(AlreadyCompletedError):
        queue.transition(
            "r1", {"pending", "processing"}, "completed", conflict_cls=AlreadyCompletedError
        )


def test_transition_missing_item(queue):
    with pytest.raises(NotFoundError):
        queue.transition("ghost", "pending", "processing")


def test_claim_only_once(queue):
    queue.enqueue(_item("r1"))

    queue.claim("r1", "pending", "processing")
    with pytest.raises(ConflictError):
        queue.claim("r1", "pending", "processing")


def test_corrupt_queue_reads_empty(queue, agency_home):
    (agency_home / "spawn_queue.json").write_text("[{")

    assert queue.items() == []
