from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class RegulationStatus(str, enum.Enum):
    aguardando_regulacao = "aguardando_regulacao"
    regulado = "regulado"
    aguardando_transferencia = "aguardando_transferencia"
    transferido = "transferido"
    negado_nir = "negado_nir"
    negado_hospital = "negado_hospital"


class SupportType(str, enum.Enum):
    NEUROLOGIA = "NEUROLOGIA"
    CARDIOLOGIA = "CARDIOLOGIA"
    CRONICOS = "CRONICOS"
    TORACICA = "TORACICA"
    ONCOLOGIA = "ONCOLOGIA"
    NEFROLOGIA = "NEFROLOGIA"
    OUTROS = "OUTROS"


CARE_TEAM_ROLES: frozenset[str] = frozenset({"admin", "diarista", "plantonista", "coordenador"})
COORDINATOR_ROLES: frozenset[str] = frozenset({"nir", "admin"})


class Actor(BaseModel):
    """Authenticated user acting on a regulation request.

    Built once per HTTP request from the verified identity token and handed
    explicitly to every workflow call that stamps an ``*_by`` field.
    """

    model_config = ConfigDict(frozen=True)

    uid: str
    email: str = ""
    roles: tuple[str, ...] = ()
    approval_status: str = "approved"

    @property
    def is_approved(self) -> bool:
        return self.approval_status == "approved"

    @property
    def is_nir(self) -> bool:
        return "nir" in self.roles

    @property
    def can_manage_requests(self) -> bool:
        # NIR users steer status from their own panel, never the care-team actions
        return (
            self.is_approved
            and not self.is_nir
            and any(role in CARE_TEAM_ROLES for role in self.roles)
        )

    @property
    def can_regulate(self) -> bool:
        return self.is_approved and any(role in COORDINATOR_ROLES for role in self.roles)


class RegulationRequest(BaseModel):
    """One patient-transfer episode as stored in the ``patient_regulation`` collection."""

    model_config = ConfigDict(extra="ignore")

    id: str
    patient_id: str
    support_type: SupportType
    previous_support_type: SupportType | None = None
    status: RegulationStatus = RegulationStatus.aguardando_regulacao

    requested_at: datetime
    created_by: str

    regulated_at: datetime | None = None
    regulated_by: str | None = None
    confirmed_at: datetime | None = None
    transferred_at: datetime | None = None
    denied_at: datetime | None = None
    denial_reason: str | None = None

    clinical_hold_at: datetime | None = None
    clinical_hold_by: str | None = None
    clinical_hold_reason: str | None = None
    clinical_hold_deadline: datetime | None = None
    clinical_hold_deadline_set_by: str | None = None

    team_confirmed_at: datetime | None = None
    team_confirmed_by: str | None = None
    team_cancel_requested_at: datetime | None = None
    team_cancel_requested_by: str | None = None
    team_cancel_reason: str | None = None
    relisting_requested_at: datetime | None = None
    relisting_requested_by: str | None = None
    relisting_reason: str | None = None

    change_reason: str | None = None
    changed_at: datetime | None = None
    changed_by: str | None = None

    notes: str | None = None
    is_active: bool = True
    updated_at: datetime | None = None
    updated_by: str | None = None

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> RegulationRequest:
        return cls.model_validate({**data, "id": doc_id})


# --- API bodies -------------------------------------------------------------


class AddRegulationBody(BaseModel):
    support_type: str | None = None
    notes: str | None = None


class JustificationBody(BaseModel):
    reason: str = ""


class ChangeSpecialtyBody(BaseModel):
    new_support_type: str | None = None
    reason: str = ""


class AdvanceStatusBody(BaseModel):
    status: RegulationStatus
    denial_reason: str | None = None


class DeadlineBody(BaseModel):
    deadline: datetime


class DeadlineDecisionBody(BaseModel):
    action: Literal["confirm_transfer", "relisting", "cancel"]
    justification: str = ""


# --- API responses ----------------------------------------------------------


class TransitionOut(BaseModel):
    status: RegulationStatus
    label: str
    requires_justification: bool


class PendingSignals(BaseModel):
    cancel_requested: bool = False
    relisting_requested: bool = False
    clinical_hold: bool = False
    team_confirmed: bool = False
    deadline_expired: bool = False


class RegulationView(BaseModel):
    regulation: RegulationRequest
    support_label: str
    status_label: str
    alert_state: str | None = None


class RegulationListResponse(BaseModel):
    patient_id: str
    regulations: list[RegulationView]


class NIRQueueItem(BaseModel):
    regulation: RegulationRequest
    support_label: str
    status_label: str
    signals: PendingSignals
    transitions: list[TransitionOut]


class NIRQueueResponse(BaseModel):
    items: list[NIRQueueItem]
    counts: dict[str, int]


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str = "0.1.0"
    environment: str
    checks: dict[str, str] = Field(default_factory=dict)
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
