from dataclasses import dataclass

from sinapse_regulation.errors import InvalidTransition
from sinapse_regulation.models import RegulationStatus, SupportType


@dataclass(frozen=True)
class SupportTypeConfig:
    label: str
    emoji: str


@dataclass(frozen=True)
class StatusConfig:
    label: str
    short_label: str
    description: str


@dataclass(frozen=True)
class Transition:
    status: RegulationStatus
    label: str
    requires_justification: bool = False


S = RegulationStatus

SUPPORT_TYPES: dict[SupportType, SupportTypeConfig] = {
    SupportType.NEUROLOGIA:  SupportTypeConfig("Neurologia", "🧠"),
    SupportType.CARDIOLOGIA: SupportTypeConfig("Cardiologia", "❤️"),
    SupportType.CRONICOS:    SupportTypeConfig("Crônicos", "🏥"),
    SupportType.TORACICA:    SupportTypeConfig("Torácica", "🫁"),
    SupportType.ONCOLOGIA:   SupportTypeConfig("Oncologia", "🎗️"),
    SupportType.NEFROLOGIA:  SupportTypeConfig("Nefrologia", "💧"),
    SupportType.OUTROS:      SupportTypeConfig("Outros", "📋"),
}

STATUS_CONFIG: dict[RegulationStatus, StatusConfig] = {
    S.aguardando_regulacao:     StatusConfig("Aguardando Regulação", "Aguard. Reg.", "Aguardando NIR registrar no sistema"),
    S.regulado:                 StatusConfig("Regulado", "Regulado", "NIR listou na central de regulação"),
    S.aguardando_transferencia: StatusConfig("Aguard. Transferência", "Aguard. Transf.", "Vaga confirmada, aguardando transporte"),
    S.transferido:              StatusConfig("Transferido", "Transferido", "Paciente transferido com sucesso"),
    S.negado_nir:               StatusConfig("Negado (NIR)", "Neg. NIR", "NIR recusou regular esta solicitação"),
    S.negado_hospital:          StatusConfig("Negado (Hospital)", "Neg. Hospital", "Hospital destino recusou a vaga"),
}

# Coordinator (NIR) moves. Anything missing here is rejected before the store is touched.
NIR_TRANSITIONS: dict[RegulationStatus, tuple[Transition, ...]] = {
    S.aguardando_regulacao: (
        Transition(S.regulado, "Marcar Regulado"),
        Transition(S.negado_nir, "Negar Regulação", requires_justification=True),
    ),
    S.regulado: (
        Transition(S.aguardando_transferencia, "Confirmar Vaga"),
        Transition(S.negado_hospital, "Negado pelo Hospital", requires_justification=True),
    ),
    S.aguardando_transferencia: (
        Transition(S.transferido, "Marcar Transferido"),
    ),
    S.transferido: (),
    S.negado_nir: (),
    S.negado_hospital: (
        Transition(S.regulado, "Re-regular"),
    ),
}

DENIAL_STATUSES: frozenset[RegulationStatus] = frozenset({S.negado_nir, S.negado_hospital})
FINAL_STATUSES: frozenset[RegulationStatus] = frozenset({S.transferido, S.negado_nir})
ACTIVE_STATUSES: tuple[RegulationStatus, ...] = (
    S.aguardando_regulacao,
    S.regulado,
    S.aguardando_transferencia,
)


def allowed_transitions(current: RegulationStatus) -> tuple[Transition, ...]:
    return NIR_TRANSITIONS[current]


def check_transition(current: RegulationStatus, target: RegulationStatus) -> Transition:
    """Return the map entry for ``current -> target`` or raise InvalidTransition."""
    for transition in NIR_TRANSITIONS[current]:
        if transition.status == target:
            return transition
    if current in FINAL_STATUSES:
        raise InvalidTransition(
            f"Regulation is in final status '{current.value}'; no further transitions allowed"
        )
    raise InvalidTransition(
        f"Transition {current.value} -> {target.value} is not allowed"
    )


def support_label(support_type: SupportType | str) -> str:
    try:
        config = SUPPORT_TYPES[SupportType(support_type)]
    except ValueError:
        return str(support_type)
    return f"{config.emoji} {config.label}"


def status_label(status: RegulationStatus) -> str:
    return STATUS_CONFIG[status].label
