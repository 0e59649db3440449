"""
Atom — Модель узла графа знаний

Immutable Pydantic модели для atom-ов и их вариантов значения
(thing/account/person/organization).

Вариант значения моделируется как явный tagged union: ровно одна
функция resolve_atom_type определяет дискриминант, порядок проверок
фиксирован и нигде больше не повторяется.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .labels import safe_label


# =============================================================================
# ENUMS
# =============================================================================


class AtomType(str, Enum):
    """Дискриминант варианта значения atom-а"""

    THING = "thing"
    ACCOUNT = "account"
    PERSON = "person"
    ORGANIZATION = "organization"
    UNKNOWN = "unknown"


# =============================================================================
# VALUE VARIANTS
# =============================================================================

# Сырые записи приходят из внешнего backend-а: лишние поля игнорируются,
# все поля опциональны, модели неизменяемы.
LENIENT_CONFIG = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class ThingValue(BaseModel):
    """Вариант thing: произвольная сущность или концепт"""

    name: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None

    model_config = LENIENT_CONFIG


class AccountValue(BaseModel):
    """Вариант account: on-chain аккаунт"""

    id: Optional[str] = None
    label: Optional[str] = None

    model_config = LENIENT_CONFIG


class PersonValue(BaseModel):
    """Вариант person"""

    name: Optional[str] = None
    description: Optional[str] = None
    email: Optional[str] = None
    url: Optional[str] = None
    identifier: Optional[str] = None

    model_config = LENIENT_CONFIG


class OrganizationValue(BaseModel):
    """Вариант organization"""

    name: Optional[str] = None
    description: Optional[str] = None
    email: Optional[str] = None
    url: Optional[str] = None

    model_config = LENIENT_CONFIG


class AtomValue(BaseModel):
    """
    Контейнер tagged union.

    Заполнен ровно один вариант; дискриминант вычисляет resolve_atom_type.
    """

    thing: Optional[ThingValue] = None
    account: Optional[AccountValue] = None
    person: Optional[PersonValue] = None
    organization: Optional[OrganizationValue] = None

    model_config = LENIENT_CONFIG


def resolve_atom_type(value: Optional[AtomValue]) -> AtomType:
    """
    Единственная функция разрешения дискриминанта.

    Порядок: thing → account → person → organization → unknown.

    Args:
        value: Значение atom-а (может отсутствовать)

    Returns:
        AtomType заполненного варианта, UNKNOWN если ни один не заполнен
    """
    if value is None:
        return AtomType.UNKNOWN
    if value.thing is not None:
        return AtomType.THING
    if value.account is not None:
        return AtomType.ACCOUNT
    if value.person is not None:
        return AtomType.PERSON
    if value.organization is not None:
        return AtomType.ORGANIZATION
    return AtomType.UNKNOWN


# =============================================================================
# ATOM MODEL
# =============================================================================


class Atom(BaseModel):
    """
    Узел графа (atom).

    Идентифицируется term_id; label — основная человекочитаемая метка,
    data — сырое содержимое atom-а (fallback для label).
    """

    term_id: Optional[str] = None
    label: Optional[str] = None
    data: Optional[str] = None
    image: Optional[str] = None
    type: Optional[str] = Field(None, description="Тип atom-а по данным backend-а")
    value: Optional[AtomValue] = None

    model_config = LENIENT_CONFIG

    @property
    def atom_type(self) -> AtomType:
        """Дискриминант варианта значения"""
        return resolve_atom_type(self.value)

    @property
    def description(self) -> Optional[str]:
        """Описание из заполненного варианта (если есть)"""
        atom_type = self.atom_type
        if atom_type is AtomType.THING:
            return self.value.thing.description
        if atom_type is AtomType.PERSON:
            return self.value.person.description
        if atom_type is AtomType.ORGANIZATION:
            return self.value.organization.description
        return None

    def display_label(self) -> str:
        """Метка atom-а: label → data → 'Unknown'"""
        return safe_label(self.label, self.data)
