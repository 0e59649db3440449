"""
Position — Модели позиций (stake аккаунта в vault-е)

RawPosition — сырая запись от backend-а графа (lenient, все вложенные поля
опциональны: малформированные данные деградируют в fallback-и, а не падают).

ProcessedPosition — результат классификации: immutable модель, которую
ранжирует Ranker и форматирует Shaper. Сериализуется по alias-ам
(positionType, oppositionMetrics, oppositionRatio) для потребителей JSON.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stakegraph.core.math.shares import parse_shares

from .atom import LENIENT_CONFIG, AtomType
from .term import Term, Vault, VaultHolder, coerce_decimal_string


# =============================================================================
# ENUMS
# =============================================================================


class PositionKind(str, Enum):
    """Вид позиции: stake на atom или на отношение (triple)"""

    ATOM = "atom_position"
    RELATIONSHIP = "relationship_position"


class Stance(str, Enum):
    """
    Сторона позиции по отношению к triple.

    Конвенция: term_id triple → SUPPORT, counter_term_id → OPPOSE.
    """

    SUPPORT = "support"
    OPPOSE = "oppose"


# =============================================================================
# RAW MODELS
# =============================================================================


class Account(BaseModel):
    """Аккаунт-владелец позиции"""

    id: Optional[str] = None
    label: Optional[str] = None
    image: Optional[str] = None

    model_config = LENIENT_CONFIG


class RawPosition(BaseModel):
    """
    Сырая позиция: stake одного аккаунта в vault-е одного term-а.

    shares хранится как decimal-строка и парсится только parse_shares.
    """

    id: Optional[str] = None
    shares: Optional[str] = Field(None, description="Shares (decimal string)")
    term_id: Optional[str] = None
    account: Optional[Account] = None
    term: Optional[Term] = None
    counter_term: Optional[VaultHolder] = None

    model_config = LENIENT_CONFIG

    @field_validator("shares", "id", "term_id", mode="before")
    @classmethod
    def coerce_decimal(cls, v: object) -> Optional[str]:
        return coerce_decimal_string(v)

    @property
    def shares_int(self) -> int:
        return parse_shares(self.shares)


# =============================================================================
# PROCESSED MODELS
# =============================================================================

# Выходные модели: строгие, неизменяемые, с alias-ами для JSON
OUTPUT_CONFIG = ConfigDict(frozen=True, populate_by_name=True)


class OppositionMetrics(BaseModel):
    """
    Метрики оппозиции по паре (term, counter-term).

    opposition_ratio = oppose_shares / (support_shares + oppose_shares),
    вычисляется точно (Fraction) и только затем приводится к float.
    """

    opposition_ratio: float = Field(
        ..., ge=0, le=1, alias="oppositionRatio", description="Доля оппозиции (0-1)"
    )
    opposition_percent: int = Field(
        ..., ge=0, le=100, alias="oppositionPercent", description="Доля оппозиции в %"
    )
    support_shares: str = Field(..., alias="supportShares", description="Total shares term-а")
    oppose_shares: str = Field(
        ..., alias="opposeShares", description="Total shares counter-term-а"
    )

    model_config = OUTPUT_CONFIG


class RelationshipNode(BaseModel):
    """Узел отношения (subject/predicate/object) в выходной форме"""

    id: Optional[str] = None
    label: Optional[str] = None
    type: AtomType = AtomType.UNKNOWN

    model_config = OUTPUT_CONFIG


class Relationship(BaseModel):
    """Отношение (subject, predicate, object)"""

    subject: RelationshipNode
    predicate: RelationshipNode
    object: RelationshipNode

    model_config = OUTPUT_CONFIG


class ProcessedPosition(BaseModel):
    """
    Классифицированная позиция.

    Immutable модель (frozen=True). Поля relationship/position_type/
    predicate_label/opposition_metrics заполняются только для
    relationship_position; atom_id — только для atom_position.
    """

    type: PositionKind
    id: Optional[str] = None
    atom_id: Optional[str] = None
    triple_id: Optional[str] = None
    shares: str = Field(..., pattern=r"^\d+$", description="Shares (decimal string)")

    account_id: Optional[str] = None
    account_label: Optional[str] = None
    held_by_viewer: bool = False

    position_type: Optional[Stance] = Field(None, alias="positionType")
    predicate_label: Optional[str] = None
    relationship: Optional[Relationship] = None
    opposition_metrics: Optional[OppositionMetrics] = Field(None, alias="oppositionMetrics")

    vault_info: Optional[Vault] = None
    human_readable: str = Field(..., min_length=1)

    model_config = OUTPUT_CONFIG

    @property
    def shares_int(self) -> int:
        """Shares как int произвольной точности"""
        return parse_shares(self.shares)

    @property
    def is_relationship(self) -> bool:
        return self.type is PositionKind.RELATIONSHIP

    @property
    def is_opposing(self) -> bool:
        return self.position_type is Stance.OPPOSE

    def to_payload(self) -> dict:
        """JSON-совместимое представление (по alias-ам, без None)"""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
