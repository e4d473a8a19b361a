from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone

from sinapse_regulation.errors import PermissionDenied, ValidationError
from sinapse_regulation.models import (
    Actor,
    PendingSignals,
    RegulationRequest,
    RegulationStatus,
)
from sinapse_regulation.workflow.base import (
    RegulationWorkflow,
    reject_final_status,
    require_text,
    utc_now,
)
from sinapse_regulation.workflow.deadline import is_deadline_expired
from sinapse_regulation.workflow.transitions import (
    ACTIVE_STATUSES,
    DENIAL_STATUSES,
    check_transition,
)

logger = logging.getLogger(__name__)


def pending_signals(regulation: RegulationRequest, now: datetime | None = None) -> PendingSignals:
    """Care-team signals the NIR still has to look at. Reading them consumes nothing."""
    return PendingSignals(
        cancel_requested=regulation.team_cancel_requested_at is not None,
        relisting_requested=regulation.relisting_requested_at is not None,
        clinical_hold=regulation.clinical_hold_at is not None,
        team_confirmed=regulation.team_confirmed_at is not None,
        deadline_expired=is_deadline_expired(regulation, now),
    )


class CoordinatorWorkflow(RegulationWorkflow):
    def _authorize(self, actor: Actor) -> None:
        if not actor.can_regulate:
            raise PermissionDenied("Only the NIR can change regulation status")

    async def inspect(self, actor: Actor, regulation_id: str) -> RegulationRequest:
        self._authorize(actor)
        return await self.get(regulation_id)

    async def queue(self, actor: Actor) -> tuple[list[RegulationRequest], dict[str, int]]:
        """Active requests awaiting NIR work, oldest first, with per-status counts."""
        self._authorize(actor)
        rows = await self._store.list_requests(
            statuses=[status.value for status in ACTIVE_STATUSES]
        )
        regulations = [RegulationRequest.from_document(row["id"], row) for row in rows]
        counts = Counter(reg.status.value for reg in regulations)
        return regulations, {status.value: counts.get(status.value, 0) for status in ACTIVE_STATUSES}

    async def advance_status(
        self,
        actor: Actor,
        regulation_id: str,
        next_status: RegulationStatus | str,
        denial_reason: str | None = None,
    ) -> RegulationRequest:
        self._authorize(actor)
        try:
            target = RegulationStatus(next_status)
        except ValueError:
            raise ValidationError(f"Unknown status '{next_status}'")

        reason: str | None = None
        if target in DENIAL_STATUSES:
            reason = require_text(denial_reason, "Justification is required to deny a regulation")

        regulation = await self.get(regulation_id)
        check_transition(regulation.status, target)

        now = utc_now().isoformat()
        fields: dict = {"status": target.value}
        if target == RegulationStatus.regulado:
            fields["regulated_at"] = now
            fields["regulated_by"] = actor.uid
        elif target == RegulationStatus.aguardando_transferencia:
            fields["confirmed_at"] = now
        elif target == RegulationStatus.transferido:
            fields["transferred_at"] = now

        if target in DENIAL_STATUSES:
            fields["denied_at"] = now
            fields["denial_reason"] = reason
        else:
            fields["denial_reason"] = None

        return await self._apply(actor, regulation, fields, "status_changed")

    async def set_clinical_hold_deadline(
        self, actor: Actor, regulation_id: str, deadline: datetime
    ) -> RegulationRequest:
        self._authorize(actor)
        if deadline is None:
            raise ValidationError("deadline is required")
        if deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=timezone.utc)

        regulation = await self.get(regulation_id)
        reject_final_status(regulation, "set a clinical hold deadline")
        if regulation.clinical_hold_at is None:
            raise ValidationError("The care team has not requested a clinical hold")

        fields = {
            "clinical_hold_deadline": deadline.astimezone(timezone.utc).isoformat(),
            "clinical_hold_deadline_set_by": actor.uid,
        }
        return await self._apply(actor, regulation, fields, "clinical_hold_deadline_set")
