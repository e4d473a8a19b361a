from fastapi import HTTPException, Request

from sinapse_regulation.notifications.notifier import RegulationNotifier
from sinapse_regulation.services.firestore import RegulationFirestore
from sinapse_regulation.workflow.care_team import CareTeamWorkflow
from sinapse_regulation.workflow.coordinator import CoordinatorWorkflow

# Services are placed on app.state by the lifespan handler (or by tests).


def _store(request: Request) -> RegulationFirestore:
    store = getattr(request.app.state, "firestore", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Regulation store not initialized")
    return store


def _notifier(request: Request) -> RegulationNotifier | None:
    return getattr(request.app.state, "notifier", None)


def get_care_team_workflow(request: Request) -> CareTeamWorkflow:
    return CareTeamWorkflow(_store(request), _notifier(request))


def get_coordinator_workflow(request: Request) -> CoordinatorWorkflow:
    return CoordinatorWorkflow(_store(request), _notifier(request))
