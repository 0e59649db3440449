"""Тесты для STAGE 2: Opposition Classifier

Покрытие:
- Вид позиции (atom / relationship) и пропуск малформированных term-ов
- Сторона (support / oppose) только по равенству идентификаторов
- Opposition ratio по парным vault-ам и его fallback-и
- human_readable и fallback-метки
- Детерминизм
"""

import pytest

from stakegraph.core.domain import AtomType, PositionKind, RawPosition, Stance, Triple
from stakegraph.pipeline.stages import classify_position, describe_triple, resolve_stance
from tests.builders import (
    COUNTER_TERM_ID,
    TRIPLE_TERM_ID,
    VIEWER_ID,
    make_account,
    make_atom_position,
    make_triple,
    make_triple_position,
)


def classify(record: dict, viewer: str = VIEWER_ID):
    return classify_position(RawPosition.model_validate(record), viewer)


# =============================================================================
# KIND
# =============================================================================


class TestKind:
    """Вид позиции"""

    def test_relationship_position(self) -> None:
        pos = classify(make_triple_position("100"))
        assert pos.type is PositionKind.RELATIONSHIP
        assert pos.triple_id == TRIPLE_TERM_ID
        assert pos.atom_id is None

    def test_atom_position(self) -> None:
        pos = classify(make_atom_position("5", label="Ethereum"))
        assert pos.type is PositionKind.ATOM
        assert pos.atom_id == "0xatom-Ethereum"
        assert pos.human_readable == "Ethereum"
        assert pos.position_type is None
        assert pos.opposition_metrics is None

    def test_neither_atom_nor_triple_skipped(self) -> None:
        record = {"id": "p", "shares": "10", "term": {"term_id": "0x1", "vaults": []}}
        assert classify(record) is None

    def test_missing_term_skipped(self) -> None:
        assert classify({"id": "p", "shares": "10"}) is None


# =============================================================================
# STANCE
# =============================================================================


class TestStance:
    """Сторона позиции по идентификаторам"""

    def test_support(self) -> None:
        assert classify(make_triple_position("1", stance="support")).position_type is Stance.SUPPORT

    def test_oppose(self) -> None:
        assert classify(make_triple_position("1", stance="oppose")).position_type is Stance.OPPOSE

    def test_unmatched_term_id_has_no_stance(self) -> None:
        record = make_triple_position("1")
        record["term"]["term_id"] = "0xsomething-else"
        assert classify(record).position_type is None

    def test_labels_never_used(self) -> None:
        """Метки вида 'not' или 'oppose' не влияют на сторону"""
        triple = make_triple(subject="Alice", predicate="does not oppose", obj="Bob")
        pos = classify(make_triple_position("1", stance="support", triple=triple))
        assert pos.position_type is Stance.SUPPORT

    def test_position_level_term_id_takes_precedence(self) -> None:
        record = make_triple_position("1", stance="support")
        record["term_id"] = COUNTER_TERM_ID
        assert classify(record).position_type is Stance.OPPOSE

    def test_term_id_from_vault_fallback(self) -> None:
        record = make_triple_position("1", stance="oppose")
        del record["term"]["term_id"]
        assert classify(record).position_type is Stance.OPPOSE

    def test_resolve_stance_without_id(self) -> None:
        assert resolve_stance(None, Triple(term_id="a", counter_term_id="b")) is None
        assert resolve_stance("", Triple(term_id="", counter_term_id="")) is None


# =============================================================================
# OPPOSITION METRICS
# =============================================================================


class TestOppositionMetrics:
    """Opposition ratio по парным vault-ам"""

    def test_ratio_one_third(self) -> None:
        pos = classify(make_triple_position("50", stance="oppose"))
        metrics = pos.opposition_metrics
        assert metrics.opposition_ratio == pytest.approx(1 / 3)
        assert metrics.opposition_percent == 33
        assert metrics.support_shares == "100"
        assert metrics.oppose_shares == "50"

    def test_both_vaults_empty(self) -> None:
        triple = make_triple(support_total="0", oppose_total="0")
        metrics = classify(make_triple_position("1", triple=triple)).opposition_metrics
        assert metrics.opposition_ratio == 0
        assert metrics.opposition_percent == 0

    def test_missing_vaults_degrade_to_zero(self) -> None:
        triple = make_triple()
        triple["term"] = None
        triple["counter_term"] = None
        record = make_triple_position("7", stance="support", triple=triple)
        record["term"]["vaults"] = []
        metrics = classify(record).opposition_metrics
        assert metrics.opposition_ratio == 0

    def test_own_vault_fallback_for_support(self) -> None:
        """Без triple.term own vault берётся из term самой позиции"""
        triple = make_triple(oppose_total="30")
        triple["term"] = None
        record = make_triple_position("70", stance="support", triple=triple)
        metrics = classify(record).opposition_metrics
        assert metrics.support_shares == "70"
        assert metrics.opposition_ratio == pytest.approx(0.3)

    def test_counter_vault_from_position_level(self) -> None:
        triple = make_triple(support_total="60")
        triple["counter_term"] = None
        record = make_triple_position("1", triple=triple)
        record["counter_term"] = {"vaults": [{"curve_id": "1", "total_shares": "40"}]}
        metrics = classify(record).opposition_metrics
        assert metrics.opposition_ratio == pytest.approx(0.4)

    def test_counter_vault_fallback_for_oppose(self) -> None:
        triple = make_triple(support_total="25")
        triple["counter_term"] = None
        record = make_triple_position("75", stance="oppose", triple=triple)
        assert classify(record).opposition_metrics.opposition_percent == 75

    def test_huge_vaults(self) -> None:
        triple = make_triple(support_total=str(2**90), oppose_total=str(2**90))
        metrics = classify(make_triple_position("1", triple=triple)).opposition_metrics
        assert metrics.opposition_ratio == 0.5


# =============================================================================
# HUMAN READABLE
# =============================================================================


class TestHumanReadable:
    """human_readable и fallback-метки"""

    def test_full_triple(self) -> None:
        assert classify(make_triple_position("1")).human_readable == "Alice knows Bob"

    def test_missing_predicate_label(self) -> None:
        triple = make_triple(predicate=None)
        assert classify(make_triple_position("1", triple=triple)).human_readable == (
            "Alice relates to Bob"
        )

    def test_missing_subject_and_object(self) -> None:
        triple = make_triple(subject="", obj=None)
        assert classify(make_triple_position("1", triple=triple)).human_readable == (
            "Unknown knows Unknown"
        )

    def test_absent_nodes(self) -> None:
        triple = make_triple()
        triple["subject"] = None
        triple["predicate"] = None
        triple["object"] = None
        pos = classify(make_triple_position("1", triple=triple))
        assert pos.human_readable == "Unknown relates to Unknown"
        assert pos.relationship.subject.type is AtomType.UNKNOWN

    def test_describe_none(self) -> None:
        assert describe_triple(None) == "Unknown relates to Unknown"

    def test_atom_data_fallback(self) -> None:
        pos = classify(make_atom_position("1", label=None, data="ipfs://Qm"))
        assert pos.human_readable == "ipfs://Qm"

    def test_atom_unknown_fallback(self) -> None:
        pos = classify(make_atom_position("1", label=None, data=None))
        assert pos.human_readable == "Unknown"

    def test_relationship_nodes(self) -> None:
        triple = make_triple(obj="vitalik.eth", object_kind="account", object_id="0xv")
        rel = classify(make_triple_position("1", triple=triple)).relationship
        assert rel.subject.label == "Alice"
        assert rel.subject.type is AtomType.THING
        assert rel.object.type is AtomType.ACCOUNT
        assert rel.object.id == "0xv"


# =============================================================================
# VIEWER / DETERMINISM
# =============================================================================


class TestDeterminism:
    """Детерминизм и контекст viewer-а"""

    def test_identical_input_identical_output(self) -> None:
        record = make_triple_position("50", stance="oppose")
        first = classify(record)
        second = classify(record)
        assert first.human_readable == second.human_readable
        assert first.opposition_metrics == second.opposition_metrics
        assert first.model_dump_json(by_alias=True) == second.model_dump_json(by_alias=True)

    def test_held_by_viewer_case_insensitive(self) -> None:
        record = make_triple_position("1", account=make_account("0xABCDEF"))
        assert classify(record, viewer="0xabcdef").held_by_viewer
        assert not classify(record, viewer="0x123").held_by_viewer
        assert not classify(record, viewer=None).held_by_viewer

    def test_shares_preserved_exactly(self) -> None:
        pos = classify(make_triple_position("18446744073709551616"))
        assert pos.shares == "18446744073709551616"
        assert pos.shares_int == 2**64
