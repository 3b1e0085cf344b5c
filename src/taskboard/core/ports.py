# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the cloud store and the alert channel swappable and makes testing easier.
"""

from collections.abc import Awaitable, Mapping
from typing import Any, Protocol

Record = dict[str, Any]
# A stored document: camelCase keys, JSON-compatible values.


class RemoteStore(Protocol):
    """
    Cloud document store with named collections.

    Only two operations are needed: fetch everything, and upsert one
    document by id with merge semantics. There is no batch guarantee:
    callers upsert records one by one and must tolerate partial failure.
    Implementations raise on transport/auth errors; the caller decides
    what to log.
    """

    def is_configured(self) -> bool: ...

    def fetch_all(self, collection: str) -> Awaitable[list[Record]]: ...

    def upsert(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> Awaitable[None]: ...


class Notifier(Protocol):
    """
    Alert channel used by the reminder monitor.

    Given a task, produce an audible cue and a user-facing alert with the
    task title. If alerts are not permitted the call is a no-op.
    """

    def notify(self, task: Any) -> None: ...
