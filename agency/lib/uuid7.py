from __future__ import annotations

import secrets
import threading
import time
import uuid as _uuid

_lock = threading.Lock()
_last_ms = 0
_seq = 0

_NATIVE = hasattr(_uuid, "uuid7")


def uuid7() -> str:
    """Generate a time-ordered UUID v7 so queue ids sort by creation time."""
    if _NATIVE:
        return str(_uuid.uuid7())

    global _last_ms, _seq

    with _lock:
        now_ms = int(time.time() * 1000)
        # Same millisecond: bump the 12-bit sequence so ids stay monotonic
        if now_ms == _last_ms:
            _seq = (_seq + 1) & 0xFFF
        else:
            _seq = secrets.randbits(12)
            _last_ms = now_ms

        value = (now_ms & 0xFFFFFFFFFFFF) << 80
        value |= 0x7 << 76
        value |= _seq << 64
        value |= 0b10 << 62
        value |= secrets.randbits(62)
        return str(_uuid.UUID(int=value))


def short_id(full_uuid: str) -> str:
    """Return the last 8 chars; the tail is random, the head is a timestamp."""
    return full_uuid[-8:]


def session_uuid(session_key: str) -> str:
    """Take the uuid embedded as the last ':' segment of a session key, else mint one."""
    tail = session_key.rsplit(":", 1)[-1] if ":" in session_key else ""
    return tail or uuid7()


__all__ = ["uuid7", "short_id", "session_uuid"]
