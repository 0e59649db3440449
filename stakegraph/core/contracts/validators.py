"""
JSON Schema Envelope Validators

Модуль для валидации response envelope-ов источника данных согласно
формальным JSON Schema контрактам. Использует библиотеку jsonschema.

Строгой проверке подлежит только envelope (наличие и тип списка записей);
содержимое отдельных записей деградирует через lenient модели.

Схемы:
- positions_envelope.json
- accounts_envelope.json
- atoms_envelope.json
"""

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

from stakegraph.errors import PHASE_VALIDATION, UpstreamFailure


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы поставляются вместе с пакетом в каталоге schema/ рядом с модулем.
    """

    def __init__(self, schema_dir: Optional[Path] = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'positions_envelope')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если схема не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Meta-validation самой схемы
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# ENVELOPE VALIDATORS
# =============================================================================


class EnvelopeValidator:
    """
    Базовый класс для валидаторов envelope-ов.

    Инкапсулирует валидацию против JSON Schema и извлечение списка записей.
    """

    # Ключ списка записей в envelope
    records_key: str = ""

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Any) -> None:
        """
        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def records(
        self,
        data: Any,
        operation: str,
        arguments: Optional[Mapping[str, Any]] = None,
    ) -> list[dict]:
        """
        Валидация envelope и извлечение записей.

        Args:
            data: Сырой ответ источника данных
            operation: Имя операции (для UpstreamFailure)
            arguments: Аргументы операции (для UpstreamFailure)

        Returns:
            Список сырых записей

        Raises:
            UpstreamFailure: Если envelope невалиден (phase='validation')
        """
        try:
            self.validate(data)
        except ValidationError as e:
            raise UpstreamFailure(
                f"Invalid response from graph API - {self.records_key}: {e.message}",
                operation,
                arguments,
                PHASE_VALIDATION,
            ) from e
        return list(data[self.records_key])


class PositionsEnvelopeValidator(EnvelopeValidator):
    """Валидатор envelope-а {"positions": [...]}"""

    records_key = "positions"

    def __init__(self):
        super().__init__("positions_envelope")


class AccountsEnvelopeValidator(EnvelopeValidator):
    """Валидатор envelope-а {"accounts": [...]}"""

    records_key = "accounts"

    def __init__(self):
        super().__init__("accounts_envelope")


class AtomsEnvelopeValidator(EnvelopeValidator):
    """Валидатор envelope-а {"atoms": [...]}"""

    records_key = "atoms"

    def __init__(self):
        super().__init__("atoms_envelope")

