from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sinapse_regulation.errors import InvalidTransition, NotFound, ValidationError
from sinapse_regulation.logging_config import regulation_log_context
from sinapse_regulation.models import Actor, RegulationRequest
from sinapse_regulation.notifications.notifier import RegulationNotifier
from sinapse_regulation.services.firestore import RegulationFirestore
from sinapse_regulation.workflow.transitions import FINAL_STATUSES

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def require_text(value: str | None, message: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(message)
    return text


def reject_final_status(regulation: RegulationRequest, action: str) -> None:
    if regulation.status in FINAL_STATUSES:
        raise InvalidTransition(
            f"Cannot {action} on a regulation in final status '{regulation.status.value}'"
        )


class RegulationWorkflow:
    """Shared plumbing for the care-team and NIR sides of the workflow."""

    def __init__(
        self,
        store: RegulationFirestore,
        notifier: RegulationNotifier | None = None,
    ) -> None:
        self._store = store
        self._notifier = notifier or RegulationNotifier(None)

    async def get(self, regulation_id: str, include_inactive: bool = False) -> RegulationRequest:
        data = await self._store.get_request(regulation_id)
        if data is None:
            raise NotFound(f"Regulation {regulation_id} not found")
        regulation = RegulationRequest.from_document(regulation_id, data)
        if not regulation.is_active and not include_inactive:
            raise NotFound(f"Regulation {regulation_id} not found")
        return regulation

    async def _apply(
        self,
        actor: Actor,
        regulation: RegulationRequest,
        fields: dict[str, Any],
        event_type: str,
    ) -> RegulationRequest:
        """Persist ``fields`` in one update call and return the merged view."""
        fields = {
            **fields,
            "updated_at": utc_now().isoformat(),
            "updated_by": actor.uid,
        }
        with regulation_log_context(regulation.id):
            await self._store.update_request(regulation.id, fields)
            updated = RegulationRequest.model_validate({**regulation.model_dump(), **fields})
            self._notifier.notify(
                event_type,
                regulation_id=updated.id,
                patient_id=updated.patient_id,
                actor_id=actor.uid,
                payload={"status": updated.status.value},
            )
            logger.info(
                "Regulation %s: %s by %s (status=%s)",
                updated.id,
                event_type,
                actor.uid,
                updated.status.value,
            )
        return updated
