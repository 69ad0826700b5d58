"""Named queues of status-tracked items on top of the document store.

A queue document is a JSON list of item dicts. Items are never removed; they
only change status in place. Every mutation re-reads the whole document,
applies the change and writes the whole document back.

What `transition` guarantees: a writer whose precondition on `status` no
longer holds gets a ConflictError instead of silently overwriting. What it
does not guarantee: two writers that both pass the check inside the same
read-to-replace window still race, and any field outside the status
precondition (for example an enqueue landing in that window) can be lost.
"""

import logging
from collections.abc import Collection
from typing import Any

from agency.errors import ConflictError, NotFoundError
from agency.lib.store import DocumentStore
from agency.models import QueueItem, utc_now

logger = logging.getLogger(__name__)


def _value(status) -> str:
    return str(getattr(status, "value", status))


def _status_set(statuses: str | Collection[str]) -> frozenset[str]:
    if isinstance(statuses, str):
        return frozenset({_value(statuses)})
    return frozenset(_value(s) for s in statuses)


class Queue:
    def __init__(self, store: DocumentStore, key: str):
        self.store = store
        self.key = key

    def items(self) -> list[dict[str, Any]]:
        docs = self.store.load(self.key, [])
        return [d for d in docs if isinstance(d, dict) and "id" in d]

    def _save(self, docs: list[dict[str, Any]]) -> None:
        self.store.write(self.key, docs)

    def enqueue(self, item: QueueItem | dict[str, Any]) -> bool:
        """Append item; a duplicate id is a no-op. Returns True if appended."""
        doc = item.to_dict() if isinstance(item, QueueItem) else dict(item)
        item_id = doc.get("id")
        if not item_id:
            raise ValueError("Queue item requires an id")
        doc.setdefault("createdAt", utc_now().isoformat())

        docs = self.items()
        if any(d["id"] == item_id for d in docs):
            logger.debug(f"{self.key}: {item_id} already queued, skipping")
            return False
        docs.append(doc)
        self._save(docs)
        return True

    def get(self, item_id: str) -> dict[str, Any]:
        for doc in self.items():
            if doc["id"] == item_id:
                return doc
        raise NotFoundError(f"{self.key}: item '{item_id}' not found")

    def list_by_status(self, status: str | Collection[str]) -> list[dict[str, Any]]:
        wanted = _status_set(status)
        return [d for d in self.items() if d.get("status") in wanted]

    def transition(
        self,
        item_id: str,
        from_status: str | Collection[str],
        to_status: str,
        patch: dict[str, Any] | None = None,
        conflict_cls: type[ConflictError] = ConflictError,
    ) -> dict[str, Any]:
        """Move an item from one status to another under an optimistic check.

        Raises:
            NotFoundError: no item with this id
            ConflictError: current status is not in `from_status`; nothing written
        """
        expected = _status_set(from_status)
        docs = self.items()
        for doc in docs:
            if doc["id"] != item_id:
                continue
            current = doc.get("status")
            if current not in expected:
                raise conflict_cls(
                    item_id, next(iter(expected)) if len(expected) == 1 else expected, current
                )
            if patch:
                doc.update(patch)
            doc["status"] = _value(to_status)
            doc["updatedAt"] = utc_now().isoformat()
            self._save(docs)
            return doc
        raise NotFoundError(f"{self.key}: item '{item_id}' not found")

    def claim(self, item_id: str, from_status: str, to_status: str) -> dict[str, Any]:
        """Take one item for processing; a second claimant gets ConflictError."""
        return self.transition(item_id, from_status, to_status)
