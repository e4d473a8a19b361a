"""Clinical-hold deadline checks and the forced decision once a deadline lapses.

The deadline is plain data set by the NIR. Nothing expires on a schedule:
every check compares it against "now" at the moment it is evaluated.
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sinapse_regulation.errors import InvalidTransition
from sinapse_regulation.models import Actor, RegulationRequest, RegulationStatus
from sinapse_regulation.workflow.base import require_text

if TYPE_CHECKING:
    from sinapse_regulation.workflow.care_team import CareTeamWorkflow

logger = logging.getLogger(__name__)


class AlertState(str, enum.Enum):
    pending_cancel = "pending_cancel"
    relisting = "relisting"
    deadline_expired = "deadline_expired"
    clinical_hold = "clinical_hold"
    vacancy_available = "vacancy_available"


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def is_deadline_expired(regulation: RegulationRequest, now: datetime | None = None) -> bool:
    if regulation.status != RegulationStatus.aguardando_transferencia:
        return False
    if regulation.clinical_hold_deadline is None:
        return False
    now = _as_aware(now) if now is not None else datetime.now(timezone.utc)
    return _as_aware(regulation.clinical_hold_deadline) < now


def alert_state(regulation: RegulationRequest, now: datetime | None = None) -> AlertState | None:
    """What the care team should be prompted about once a vacancy is confirmed."""
    if regulation.status != RegulationStatus.aguardando_transferencia:
        return None
    if regulation.team_cancel_requested_at is not None:
        return AlertState.pending_cancel
    if regulation.relisting_requested_at is not None:
        return AlertState.relisting
    if is_deadline_expired(regulation, now):
        return AlertState.deadline_expired
    if regulation.clinical_hold_at is not None:
        return AlertState.clinical_hold
    return AlertState.vacancy_available


class DialogState(str, enum.Enum):
    menu = "menu"
    relisting_form = "relisting_form"
    cancel_form = "cancel_form"


class DeadlineExpiredDialog:
    """Decision point shown when a clinical-hold deadline has passed.

    Lives only for one UI session. Every exit goes through a care-team
    operation; a failed write leaves the dialog open in the state it was in.
    """

    def __init__(
        self,
        workflow: CareTeamWorkflow,
        actor: Actor,
        regulation: RegulationRequest,
    ) -> None:
        self._workflow = workflow
        self._actor = actor
        self.regulation = regulation
        self.state = DialogState.menu
        self.justification = ""
        self.closed = False

    def _expect(self, *states: DialogState) -> None:
        if self.closed:
            raise InvalidTransition("Dialog is already closed")
        if self.state not in states:
            raise InvalidTransition(f"Action not available from '{self.state.value}'")

    def open_relisting(self) -> None:
        self._expect(DialogState.menu)
        self.state = DialogState.relisting_form

    def open_cancel(self) -> None:
        self._expect(DialogState.menu)
        self.state = DialogState.cancel_form

    def back(self) -> None:
        self._expect(DialogState.relisting_form, DialogState.cancel_form)
        self.justification = ""
        self.state = DialogState.menu

    async def confirm_transfer(self) -> RegulationRequest:
        self._expect(DialogState.menu)
        self.regulation = await self._workflow.confirm_readiness(self._actor, self.regulation.id)
        self._close()
        return self.regulation

    async def submit(self, justification: str | None) -> RegulationRequest:
        self._expect(DialogState.relisting_form, DialogState.cancel_form)
        self.justification = justification or ""
        text = require_text(justification, "Justification is required")
        if self.state == DialogState.relisting_form:
            self.regulation = await self._workflow.request_relisting(
                self._actor, self.regulation.id, text
            )
        else:
            self.regulation = await self._workflow.request_cancellation(
                self._actor, self.regulation.id, text
            )
        self._close()
        return self.regulation

    def _close(self) -> None:
        logger.debug(
            "Deadline dialog for %s closed from %s", self.regulation.id, self.state.value
        )
        self.closed = True
        self.justification = ""
        self.state = DialogState.menu
