"""NotificationPublisher — best-effort fanout of lifecycle events.

publish() never raises and never blocks on delivery: it serializes the
payload, schedules delivery as a detached task, and returns.  Every
failure along the way is logged and discarded.  Delivery is at most once.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from pydantic import BaseModel

logger = logging.getLogger(__name__)

OCCURRENCE_CREATED = "occurrence:created"
OCCURRENCE_UPDATED = "occurrence:updated"
OCCURRENCE_DELETED = "occurrence:deleted"


class Transport(Protocol):
    """Real-time channel that broadcasts a JSON message to subscribers."""

    async def broadcast_json(self, data: dict[str, Any]) -> None: ...


def _to_jsonable(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json")
    return payload


class NotificationPublisher:
    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        # Strong references so pending deliveries are not garbage collected
        self._pending: set[asyncio.Task] = set()

    def publish(self, event: str, payload: Any) -> None:
        """Schedule delivery of *event*.  Returns immediately, never raises."""
        try:
            message = {"event": event, "data": _to_jsonable(payload)}
            task = asyncio.get_running_loop().create_task(self._deliver(event, message))
        except Exception as exc:
            logger.warning("Could not publish %s: %s", event, exc, exc_info=True)
            return
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, event: str, message: dict[str, Any]) -> None:
        try:
            await self._transport.broadcast_json(message)
        except Exception as exc:
            logger.warning("Delivery of %s failed: %s", event, exc)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for deliveries already scheduled.  Used at shutdown and in tests."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
