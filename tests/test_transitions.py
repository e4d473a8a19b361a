import itertools

import pytest

from sinapse_regulation.errors import InvalidTransition
from sinapse_regulation.models import RegulationStatus as S
from sinapse_regulation.models import SupportType
from sinapse_regulation.workflow.transitions import (
    DENIAL_STATUSES,
    FINAL_STATUSES,
    NIR_TRANSITIONS,
    STATUS_CONFIG,
    allowed_transitions,
    check_transition,
    support_label,
)

EXPECTED = {
    S.aguardando_regulacao: {S.regulado, S.negado_nir},
    S.regulado: {S.aguardando_transferencia, S.negado_hospital},
    S.aguardando_transferencia: {S.transferido},
    S.transferido: set(),
    S.negado_nir: set(),
    S.negado_hospital: {S.regulado},
}


class TestTransitionMap:
    def test_every_status_has_an_entry(self):
        assert set(NIR_TRANSITIONS) == set(S)
        assert set(STATUS_CONFIG) == set(S)

    def test_allowed_targets_match_table(self):
        for current, targets in EXPECTED.items():
            assert {t.status for t in allowed_transitions(current)} == targets

    def test_only_denials_require_justification(self):
        for transitions in NIR_TRANSITIONS.values():
            for t in transitions:
                assert t.requires_justification == (t.status in DENIAL_STATUSES)

    def test_final_statuses_have_no_exit(self):
        for status in FINAL_STATUSES:
            assert allowed_transitions(status) == ()

    @pytest.mark.parametrize("current,target", list(itertools.product(S, S)))
    def test_check_transition_accepts_iff_in_table(self, current, target):
        if target in EXPECTED[current]:
            assert check_transition(current, target).status == target
        else:
            with pytest.raises(InvalidTransition):
                check_transition(current, target)

    def test_rereguler_is_only_exit_from_hospital_denial(self):
        assert check_transition(S.negado_hospital, S.regulado).label == "Re-regular"
        with pytest.raises(InvalidTransition):
            check_transition(S.negado_hospital, S.transferido)


class TestLabels:
    def test_support_label_known(self):
        assert support_label(SupportType.CARDIOLOGIA) == "❤️ Cardiologia"
        assert support_label("NEFROLOGIA") == "💧 Nefrologia"

    def test_support_label_unknown_falls_back_to_raw(self):
        assert support_label("PEDIATRIA") == "PEDIATRIA"
