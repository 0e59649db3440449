"""
Тесты для JSON Schema контрактов envelope-ов

Проверяет:
1. Валидность самих схем (meta-validation)
2. Принятие корректных envelope-ов
3. Отклонение envelope-ов без списка записей
4. Строгость только на уровне envelope: отдельные записи не проверяются
5. UpstreamFailure с phase='validation'
"""

import pytest
from jsonschema import ValidationError

from stakegraph.core.contracts import (
    AccountsEnvelopeValidator,
    AtomsEnvelopeValidator,
    PositionsEnvelopeValidator,
    SchemaLoader,
)
from stakegraph.errors import PHASE_VALIDATION, UpstreamFailure
from tests.builders import make_triple_position


class TestSchemaLoader:
    """Тесты для SchemaLoader"""

    @pytest.mark.parametrize(
        "name", ["positions_envelope", "accounts_envelope", "atoms_envelope"]
    )
    def test_schemas_load(self, name: str) -> None:
        schema = SchemaLoader().load_schema(name)
        assert schema["type"] == "object"

    def test_missing_schema(self) -> None:
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("nope")


class TestPositionsEnvelope:
    """Тесты для PositionsEnvelopeValidator"""

    def test_valid(self) -> None:
        PositionsEnvelopeValidator().validate({"positions": [make_triple_position("1")]})

    def test_empty_list_valid(self) -> None:
        PositionsEnvelopeValidator().validate({"positions": []})

    def test_missing_key(self) -> None:
        with pytest.raises(ValidationError):
            PositionsEnvelopeValidator().validate({"data": []})

    def test_positions_not_list(self) -> None:
        with pytest.raises(ValidationError):
            PositionsEnvelopeValidator().validate({"positions": None})

    def test_malformed_entries_pass_through(self) -> None:
        """Малформированные записи не отклоняют весь envelope"""
        good = make_triple_position("1")
        records = PositionsEnvelopeValidator().records(
            {"positions": [good, None, "x", {"shares": 1.5}]}, "get_followers"
        )
        assert records == [good, None, "x", {"shares": 1.5}]

    def test_records_returns_list(self) -> None:
        records = PositionsEnvelopeValidator().records(
            {"positions": [{"shares": "1"}]}, "get_followers"
        )
        assert records == [{"shares": "1"}]

    def test_records_raises_upstream_failure(self) -> None:
        with pytest.raises(UpstreamFailure) as exc:
            PositionsEnvelopeValidator().records(None, "get_followers", {"account_id": "0x1"})
        assert exc.value.phase == PHASE_VALIDATION
        assert exc.value.operation == "get_followers"
        assert exc.value.arguments == {"account_id": "0x1"}
        assert "Invalid response from graph API" in str(exc.value)


class TestAccountsAndAtomsEnvelope:
    """Тесты для accounts/atoms envelope-ов"""

    def test_accounts_entries_not_checked(self) -> None:
        records = AccountsEnvelopeValidator().records(
            {"accounts": [{"id": "0x1"}, {"label": "x"}, None]}, "search_account_ids"
        )
        assert len(records) == 3

    def test_accounts_must_be_list(self) -> None:
        with pytest.raises(UpstreamFailure):
            AccountsEnvelopeValidator().records({"accounts": {"id": "0x1"}}, "get_account_info")

    def test_atoms(self) -> None:
        validator = AtomsEnvelopeValidator()
        validator.validate({"atoms": [{"term_id": "1", "as_subject_triples": []}, None]})
        with pytest.raises(ValidationError):
            validator.validate({"atoms": {"term_id": "1"}})
        with pytest.raises(ValidationError):
            validator.validate({})
