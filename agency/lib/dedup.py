"""Process-local record of handled ids.

Lives only as long as the process. After a restart every id is unseen again,
so a message forwarded just before a crash can be forwarded a second time:
delivery is at-least-once, and consumers must tolerate a repeated id.
"""


class DedupGuard:
    def __init__(self):
        self._seen: set[str] = set()

    def seen(self, item_id: str) -> bool:
        return item_id in self._seen

    def mark_seen(self, item_id: str) -> None:
        self._seen.add(item_id)

    def forget(self, item_id: str) -> None:
        self._seen.discard(item_id)
