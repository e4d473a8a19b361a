from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from sinapse_regulation.services.pubsub import RegulationPubSub

logger = logging.getLogger(__name__)


class RegulationNotifier:
    """Tells the other side of the workflow that a regulation row changed.

    Care-team signals reach the NIR panel and NIR decisions reach the unit
    through the same topic. Delivery never blocks or fails the write that
    triggered it.
    """

    def __init__(self, pubsub: RegulationPubSub | None) -> None:
        self._pubsub = pubsub
        self._pending: set[asyncio.Task] = set()

    def notify(
        self,
        event_type: str,
        regulation_id: str,
        patient_id: str,
        actor_id: str,
        payload: dict[str, Any] | None = None,
    ) -> None:
        if self._pubsub is None:
            return
        event = {
            "event_type": event_type,
            "regulation_id": regulation_id,
            "patient_id": patient_id,
            "actor_id": actor_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **(payload or {}),
        }
        # Fire-and-forget; keep a reference so the task is not collected mid-flight
        task = asyncio.create_task(self._safe_publish(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _safe_publish(self, data: dict) -> None:
        try:
            await self._pubsub.publish_regulation_event(data)
        except Exception:
            logger.exception(
                "Failed to publish regulation event %s for %s",
                data.get("event_type"),
                data.get("regulation_id"),
            )
