"""NIR (central coordinator) routes."""

from fastapi import APIRouter, Depends, Request

from sinapse_regulation.api.deps import get_coordinator_workflow
from sinapse_regulation.middleware.auth import get_current_actor
from sinapse_regulation.middleware.rate_limit import NIR_RATE_LIMIT, limiter
from sinapse_regulation.models import (
    Actor,
    AdvanceStatusBody,
    DeadlineBody,
    NIRQueueItem,
    NIRQueueResponse,
    RegulationRequest,
    TransitionOut,
)
from sinapse_regulation.workflow.coordinator import CoordinatorWorkflow, pending_signals
from sinapse_regulation.workflow.transitions import allowed_transitions, status_label, support_label

router = APIRouter(prefix="/api/nir", tags=["nir"])


def to_queue_item(regulation: RegulationRequest) -> NIRQueueItem:
    return NIRQueueItem(
        regulation=regulation,
        support_label=support_label(regulation.support_type),
        status_label=status_label(regulation.status),
        signals=pending_signals(regulation),
        transitions=[
            TransitionOut(
                status=t.status,
                label=t.label,
                requires_justification=t.requires_justification,
            )
            for t in allowed_transitions(regulation.status)
        ],
    )


@router.get("/regulations", response_model=NIRQueueResponse)
@limiter.limit(NIR_RATE_LIMIT)
async def list_queue(
    request: Request,
    actor: Actor = Depends(get_current_actor),
    workflow: CoordinatorWorkflow = Depends(get_coordinator_workflow),
) -> NIRQueueResponse:
    regulations, counts = await workflow.queue(actor)
    return NIRQueueResponse(items=[to_queue_item(reg) for reg in regulations], counts=counts)


@router.get("/regulations/{regulation_id}/transitions", response_model=NIRQueueItem)
@limiter.limit(NIR_RATE_LIMIT)
async def get_transitions(
    request: Request,
    regulation_id: str,
    actor: Actor = Depends(get_current_actor),
    workflow: CoordinatorWorkflow = Depends(get_coordinator_workflow),
) -> NIRQueueItem:
    return to_queue_item(await workflow.inspect(actor, regulation_id))


@router.post("/regulations/{regulation_id}/status", response_model=NIRQueueItem)
@limiter.limit(NIR_RATE_LIMIT)
async def advance_status(
    request: Request,
    regulation_id: str,
    body: AdvanceStatusBody,
    actor: Actor = Depends(get_current_actor),
    workflow: CoordinatorWorkflow = Depends(get_coordinator_workflow),
) -> NIRQueueItem:
    regulation = await workflow.advance_status(
        actor, regulation_id, body.status, body.denial_reason
    )
    return to_queue_item(regulation)


@router.post("/regulations/{regulation_id}/deadline", response_model=NIRQueueItem)
@limiter.limit(NIR_RATE_LIMIT)
async def set_deadline(
    request: Request,
    regulation_id: str,
    body: DeadlineBody,
    actor: Actor = Depends(get_current_actor),
    workflow: CoordinatorWorkflow = Depends(get_coordinator_workflow),
) -> NIRQueueItem:
    regulation = await workflow.set_clinical_hold_deadline(actor, regulation_id, body.deadline)
    return to_queue_item(regulation)
