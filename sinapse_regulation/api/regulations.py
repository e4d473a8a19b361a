"""Care-team routes: open, signal, re-specify and remove transfer requests."""

import logging

from fastapi import APIRouter, Depends, Request

from sinapse_regulation.api.deps import get_care_team_workflow
from sinapse_regulation.errors import InvalidTransition
from sinapse_regulation.middleware.auth import get_current_actor
from sinapse_regulation.middleware.rate_limit import CARE_TEAM_RATE_LIMIT, limiter
from sinapse_regulation.models import (
    Actor,
    AddRegulationBody,
    ChangeSpecialtyBody,
    DeadlineDecisionBody,
    JustificationBody,
    RegulationListResponse,
    RegulationRequest,
    RegulationView,
)
from sinapse_regulation.workflow.care_team import CareTeamWorkflow
from sinapse_regulation.workflow.deadline import (
    DeadlineExpiredDialog,
    alert_state,
    is_deadline_expired,
)
from sinapse_regulation.workflow.transitions import status_label, support_label

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["regulation"])


def to_view(regulation: RegulationRequest) -> RegulationView:
    state = alert_state(regulation)
    return RegulationView(
        regulation=regulation,
        support_label=support_label(regulation.support_type),
        status_label=status_label(regulation.status),
        alert_state=state.value if state else None,
    )


@router.get("/patients/{patient_id}/regulations", response_model=RegulationListResponse)
@limiter.limit(CARE_TEAM_RATE_LIMIT)
async def list_patient_regulations(
    request: Request,
    patient_id: str,
    actor: Actor = Depends(get_current_actor),
    workflow: CareTeamWorkflow = Depends(get_care_team_workflow),
) -> RegulationListResponse:
    regulations = await workflow.list_for_patient(patient_id)
    return RegulationListResponse(
        patient_id=patient_id,
        regulations=[to_view(reg) for reg in regulations],
    )


@router.post("/patients/{patient_id}/regulations", response_model=RegulationView, status_code=201)
@limiter.limit(CARE_TEAM_RATE_LIMIT)
async def add_regulation(
    request: Request,
    patient_id: str,
    body: AddRegulationBody,
    actor: Actor = Depends(get_current_actor),
    workflow: CareTeamWorkflow = Depends(get_care_team_workflow),
) -> RegulationView:
    regulation = await workflow.add_request(actor, patient_id, body.support_type, body.notes)
    return to_view(regulation)


@router.delete("/regulations/{regulation_id}", response_model=RegulationView)
@limiter.limit(CARE_TEAM_RATE_LIMIT)
async def remove_regulation(
    request: Request,
    regulation_id: str,
    actor: Actor = Depends(get_current_actor),
    workflow: CareTeamWorkflow = Depends(get_care_team_workflow),
) -> RegulationView:
    return to_view(await workflow.remove_request(actor, regulation_id))


@router.post("/regulations/{regulation_id}/confirm-readiness", response_model=RegulationView)
@limiter.limit(CARE_TEAM_RATE_LIMIT)
async def confirm_readiness(
    request: Request,
    regulation_id: str,
    actor: Actor = Depends(get_current_actor),
    workflow: CareTeamWorkflow = Depends(get_care_team_workflow),
) -> RegulationView:
    return to_view(await workflow.confirm_readiness(actor, regulation_id))


@router.post("/regulations/{regulation_id}/clinical-hold", response_model=RegulationView)
@limiter.limit(CARE_TEAM_RATE_LIMIT)
async def request_clinical_hold(
    request: Request,
    regulation_id: str,
    body: JustificationBody,
    actor: Actor = Depends(get_current_actor),
    workflow: CareTeamWorkflow = Depends(get_care_team_workflow),
) -> RegulationView:
    return to_view(await workflow.request_clinical_hold(actor, regulation_id, body.reason))


@router.post("/regulations/{regulation_id}/cancel-request", response_model=RegulationView)
@limiter.limit(CARE_TEAM_RATE_LIMIT)
async def request_cancellation(
    request: Request,
    regulation_id: str,
    body: JustificationBody,
    actor: Actor = Depends(get_current_actor),
    workflow: CareTeamWorkflow = Depends(get_care_team_workflow),
) -> RegulationView:
    return to_view(await workflow.request_cancellation(actor, regulation_id, body.reason))


@router.post("/regulations/{regulation_id}/relisting-request", response_model=RegulationView)
@limiter.limit(CARE_TEAM_RATE_LIMIT)
async def request_relisting(
    request: Request,
    regulation_id: str,
    body: JustificationBody,
    actor: Actor = Depends(get_current_actor),
    workflow: CareTeamWorkflow = Depends(get_care_team_workflow),
) -> RegulationView:
    return to_view(await workflow.request_relisting(actor, regulation_id, body.reason))


@router.post("/regulations/{regulation_id}/specialty", response_model=RegulationView)
@limiter.limit(CARE_TEAM_RATE_LIMIT)
async def change_specialty(
    request: Request,
    regulation_id: str,
    body: ChangeSpecialtyBody,
    actor: Actor = Depends(get_current_actor),
    workflow: CareTeamWorkflow = Depends(get_care_team_workflow),
) -> RegulationView:
    regulation = await workflow.change_specialty(
        actor, regulation_id, body.new_support_type, body.reason
    )
    return to_view(regulation)


@router.post("/regulations/{regulation_id}/deadline-decision", response_model=RegulationView)
@limiter.limit(CARE_TEAM_RATE_LIMIT)
async def deadline_decision(
    request: Request,
    regulation_id: str,
    body: DeadlineDecisionBody,
    actor: Actor = Depends(get_current_actor),
    workflow: CareTeamWorkflow = Depends(get_care_team_workflow),
) -> RegulationView:
    """Resolve an expired clinical-hold deadline in one round trip."""
    regulation = await workflow.get(regulation_id)
    if not is_deadline_expired(regulation):
        raise InvalidTransition("Clinical-hold deadline has not expired")

    dialog = DeadlineExpiredDialog(workflow, actor, regulation)
    if body.action == "confirm_transfer":
        regulation = await dialog.confirm_transfer()
    else:
        if body.action == "relisting":
            dialog.open_relisting()
        else:
            dialog.open_cancel()
        regulation = await dialog.submit(body.justification)

    logger.info("Deadline decision '%s' on %s by %s", body.action, regulation_id, actor.uid)
    return to_view(regulation)
