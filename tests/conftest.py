import copy
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from sinapse_regulation.errors import NotFound
from sinapse_regulation.middleware.rate_limit import limiter
from sinapse_regulation.models import Actor
from sinapse_regulation.notifications.notifier import RegulationNotifier
from sinapse_regulation.services.pubsub import RegulationPubSub
from sinapse_regulation.workflow.care_team import CareTeamWorkflow
from sinapse_regulation.workflow.coordinator import CoordinatorWorkflow

limiter.enabled = False


class InMemoryRegulationStore:
    """Dict-backed stand-in for RegulationFirestore with the same call surface."""

    def __init__(self) -> None:
        self.docs: dict[str, dict] = {}
        self.updates: list[tuple[str, dict]] = []

    async def insert_request(self, data: dict) -> str:
        regulation_id = f"reg-{uuid.uuid4().hex[:8]}"
        self.docs[regulation_id] = copy.deepcopy(data)
        return regulation_id

    async def get_request(self, regulation_id: str) -> dict | None:
        if regulation_id not in self.docs:
            return None
        return {**copy.deepcopy(self.docs[regulation_id]), "id": regulation_id}

    async def update_request(self, regulation_id: str, fields: dict) -> None:
        if regulation_id not in self.docs:
            raise NotFound(f"Regulation {regulation_id} not found")
        self.updates.append((regulation_id, copy.deepcopy(fields)))
        self.docs[regulation_id].update(copy.deepcopy(fields))

    async def list_requests(self, patient_id=None, statuses=None, active_only=True) -> list[dict]:
        rows = []
        for regulation_id, data in self.docs.items():
            if patient_id is not None and data.get("patient_id") != patient_id:
                continue
            if statuses and data.get("status") not in statuses:
                continue
            if active_only and not data.get("is_active", True):
                continue
            rows.append({**copy.deepcopy(data), "id": regulation_id})
        rows.sort(key=lambda row: row.get("requested_at", ""))
        return rows

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        return None

    def seed(self, regulation_id: str = "reg-001", **fields) -> str:
        now = datetime.now(timezone.utc)
        self.docs[regulation_id] = {
            "patient_id": "pat-001",
            "support_type": "ONCOLOGIA",
            "status": "aguardando_regulacao",
            "requested_at": (now - timedelta(hours=6)).isoformat(),
            "created_by": "nurse-001",
            "is_active": True,
            **fields,
        }
        return regulation_id


@pytest.fixture
def store():
    return InMemoryRegulationStore()


@pytest.fixture
def mock_pubsub():
    pub = AsyncMock(spec=RegulationPubSub)
    pub.publish_regulation_event.return_value = None
    return pub


@pytest.fixture
def notifier(mock_pubsub):
    return RegulationNotifier(mock_pubsub)


@pytest.fixture
def care_team(store, notifier):
    return CareTeamWorkflow(store, notifier)


@pytest.fixture
def coordinator(store, notifier):
    return CoordinatorWorkflow(store, notifier)


@pytest.fixture
def nurse():
    return Actor(uid="nurse-001", email="enf@sinapse.test", roles=("plantonista",))


@pytest.fixture
def physician():
    return Actor(uid="doc-002", email="diarista@sinapse.test", roles=("diarista",))


@pytest.fixture
def nir_user():
    return Actor(uid="nir-001", email="nir@sinapse.test", roles=("nir",))


@pytest.fixture
def pending_user():
    return Actor(uid="new-001", roles=("plantonista",), approval_status="pending")


@pytest.fixture
def past_deadline():
    return (datetime.now(timezone.utc) - timedelta(hours=2)).isoformat()


@pytest.fixture
def future_deadline():
    return (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()
