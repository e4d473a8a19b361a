"""Care-team side of the regulation workflow.

The care team opens transfer requests and layers signals on top of the
status the NIR controls: readiness, clinical hold, cancellation and
relisting. None of the signals moves ``status`` by itself; the NIR reads
them and decides.
"""

from __future__ import annotations

import logging

from sinapse_regulation.errors import InvalidTransition, PermissionDenied, ValidationError
from sinapse_regulation.logging_config import regulation_log_context
from sinapse_regulation.models import Actor, RegulationRequest, RegulationStatus, SupportType
from sinapse_regulation.workflow.base import (
    RegulationWorkflow,
    reject_final_status,
    require_text,
    utc_now,
)

logger = logging.getLogger(__name__)

CLINICAL_HOLD_CLEARED = {
    "clinical_hold_at": None,
    "clinical_hold_by": None,
    "clinical_hold_reason": None,
    "clinical_hold_deadline": None,
    "clinical_hold_deadline_set_by": None,
}

TEAM_CONFIRMATION_CLEARED = {
    "team_confirmed_at": None,
    "team_confirmed_by": None,
}

SPECIALTY_RESET = {
    "status": RegulationStatus.aguardando_regulacao.value,
    "regulated_at": None,
    "confirmed_at": None,
    "transferred_at": None,
    "denied_at": None,
    "denial_reason": None,
}


def _parse_support_type(value: str | SupportType | None) -> SupportType:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("support_type is required")
    try:
        return SupportType(value)
    except ValueError:
        raise ValidationError(f"Unknown support_type '{value}'")


class CareTeamWorkflow(RegulationWorkflow):
    def _authorize(self, actor: Actor) -> None:
        if not actor.can_manage_requests:
            raise PermissionDenied("Only the care team can manage regulation requests")

    @staticmethod
    def _require_awaiting_transfer(regulation: RegulationRequest, action: str) -> None:
        if regulation.status != RegulationStatus.aguardando_transferencia:
            raise InvalidTransition(
                f"Cannot {action} while status is '{regulation.status.value}'"
            )

    async def list_for_patient(self, patient_id: str) -> list[RegulationRequest]:
        rows = await self._store.list_requests(patient_id=patient_id)
        return [RegulationRequest.from_document(row["id"], row) for row in rows]

    async def add_request(
        self,
        actor: Actor,
        patient_id: str,
        support_type: str | SupportType | None,
        notes: str | None = None,
    ) -> RegulationRequest:
        self._authorize(actor)
        if not patient_id:
            raise ValidationError("patient_id is required")
        parsed = _parse_support_type(support_type)

        now = utc_now().isoformat()
        data = {
            "patient_id": patient_id,
            "support_type": parsed.value,
            "status": RegulationStatus.aguardando_regulacao.value,
            "requested_at": now,
            "created_by": actor.uid,
            "notes": (notes or "").strip() or None,
            "is_active": True,
            "updated_at": now,
            "updated_by": actor.uid,
        }
        regulation_id = await self._store.insert_request(data)
        regulation = RegulationRequest.from_document(regulation_id, data)
        with regulation_log_context(regulation_id):
            self._notifier.notify(
                "regulation_requested",
                regulation_id=regulation_id,
                patient_id=patient_id,
                actor_id=actor.uid,
                payload={"support_type": parsed.value},
            )
            logger.info(
                "Regulation %s requested for patient %s (%s) by %s",
                regulation_id,
                patient_id,
                parsed.value,
                actor.uid,
            )
        return regulation

    async def remove_request(self, actor: Actor, regulation_id: str) -> RegulationRequest:
        """Soft-delete. Calling it on an already removed request is a no-op success."""
        self._authorize(actor)
        regulation = await self.get(regulation_id, include_inactive=True)
        return await self._apply(actor, regulation, {"is_active": False}, "regulation_removed")

    async def confirm_readiness(self, actor: Actor, regulation_id: str) -> RegulationRequest:
        self._authorize(actor)
        regulation = await self.get(regulation_id)
        self._require_awaiting_transfer(regulation, "confirm readiness")
        fields = {
            "team_confirmed_at": utc_now().isoformat(),
            "team_confirmed_by": actor.uid,
            **CLINICAL_HOLD_CLEARED,
        }
        return await self._apply(actor, regulation, fields, "team_confirmed")

    async def request_clinical_hold(
        self, actor: Actor, regulation_id: str, reason: str | None
    ) -> RegulationRequest:
        self._authorize(actor)
        text = require_text(reason, "Justification is required for a clinical hold")
        regulation = await self.get(regulation_id)
        self._require_awaiting_transfer(regulation, "request a clinical hold")
        fields = {
            "clinical_hold_at": utc_now().isoformat(),
            "clinical_hold_by": actor.uid,
            "clinical_hold_reason": text,
            **TEAM_CONFIRMATION_CLEARED,
        }
        return await self._apply(actor, regulation, fields, "clinical_hold_requested")

    async def request_cancellation(
        self, actor: Actor, regulation_id: str, reason: str | None
    ) -> RegulationRequest:
        self._authorize(actor)
        text = require_text(reason, "Justification is required to request cancellation")
        regulation = await self.get(regulation_id)
        reject_final_status(regulation, "request cancellation")
        fields = {
            "team_cancel_requested_at": utc_now().isoformat(),
            "team_cancel_requested_by": actor.uid,
            "team_cancel_reason": text,
        }
        return await self._apply(actor, regulation, fields, "cancellation_requested")

    async def request_relisting(
        self, actor: Actor, regulation_id: str, reason: str | None
    ) -> RegulationRequest:
        self._authorize(actor)
        text = require_text(reason, "Justification is required to request relisting")
        regulation = await self.get(regulation_id)
        reject_final_status(regulation, "request relisting")
        fields = {
            "relisting_requested_at": utc_now().isoformat(),
            "relisting_requested_by": actor.uid,
            "relisting_reason": text,
        }
        return await self._apply(actor, regulation, fields, "relisting_requested")

    async def change_specialty(
        self,
        actor: Actor,
        regulation_id: str,
        new_type: str | SupportType | None,
        reason: str | None,
    ) -> RegulationRequest:
        """Switch the requested specialty and restart the process from the top."""
        self._authorize(actor)
        parsed = _parse_support_type(new_type)
        text = require_text(reason, "Justification is required to change specialty")
        regulation = await self.get(regulation_id)
        if parsed == regulation.support_type:
            raise ValidationError("Select a specialty different from the current one")
        reject_final_status(regulation, "change specialty")
        fields = {
            "previous_support_type": regulation.support_type.value,
            "support_type": parsed.value,
            "change_reason": text,
            "changed_at": utc_now().isoformat(),
            "changed_by": actor.uid,
            **SPECIALTY_RESET,
        }
        return await self._apply(actor, regulation, fields, "specialty_changed")
