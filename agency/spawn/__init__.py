from .manager import (
    SESSION_REGISTRY,
    SPAWN_LOG,
    SPAWN_QUEUE,
    SleepResult,
    SpawnManager,
    WorkOrder,
    build_identity_context,
)

__all__ = [
    "SESSION_REGISTRY",
    "SPAWN_LOG",
    "SPAWN_QUEUE",
    "SleepResult",
    "SpawnManager",
    "WorkOrder",
    "build_identity_context",
]
