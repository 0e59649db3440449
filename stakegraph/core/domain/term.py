"""
Term / Vault / Triple — Модели staking-единиц графа

Term — адресуемая единица staking-а: atom-term или triple-term.
Каждый term владеет одним или несколькими vault-ами (по одному на вариант
bonding curve); ядро всегда использует primary curve.

Triple — направленное ребро (subject, predicate, object) с парным
counter-term, представляющим противоположную позицию по тому же отношению.
"""

from typing import Final, Optional

from pydantic import BaseModel, Field, field_validator

from stakegraph.core.math.shares import parse_shares

from .atom import LENIENT_CONFIG, Atom

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Идентификатор primary bonding curve
PRIMARY_CURVE_ID: Final[str] = "1"


def coerce_decimal_string(value: object) -> Optional[str]:
    """
    Нормализация decimal-значения из upstream в строку.

    int сериализуется без потери точности; float и bool отбрасываются,
    т.к. их точность уже не гарантирована.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    return None


# =============================================================================
# VAULT
# =============================================================================


class Vault(BaseModel):
    """
    Агрегированный stake на term-е для одного варианта bonding curve.

    total_shares хранится как decimal-строка; численное значение — только
    через total_shares_int (произвольная точность).
    """

    term_id: Optional[str] = None
    curve_id: Optional[str] = None
    position_count: Optional[int] = None
    total_shares: Optional[str] = Field(None, description="Total shares (decimal string)")
    current_share_price: Optional[str] = Field(
        None, description="Текущая цена share (decimal string)"
    )

    model_config = LENIENT_CONFIG

    @field_validator("total_shares", "current_share_price", "curve_id", "term_id", mode="before")
    @classmethod
    def coerce_decimal(cls, v: object) -> Optional[str]:
        return coerce_decimal_string(v)

    @field_validator("position_count", mode="before")
    @classmethod
    def coerce_count(cls, v: object) -> Optional[int]:
        if isinstance(v, bool):
            return None
        if isinstance(v, int):
            return v
        if isinstance(v, str) and v.isdigit():
            return int(v)
        return None

    @property
    def total_shares_int(self) -> int:
        """Total shares как int произвольной точности (малформированные → 0)"""
        return parse_shares(self.total_shares)


class VaultHolder(BaseModel):
    """Term, у которого запрошены только vault-ы"""

    term_id: Optional[str] = None
    vaults: list[Vault] = Field(default_factory=list)

    model_config = LENIENT_CONFIG

    @field_validator("vaults", mode="before")
    @classmethod
    def none_to_empty(cls, v: object) -> object:
        return [] if v is None else v

    def primary_vault(self) -> Optional[Vault]:
        """
        Vault primary curve.

        Если ни один vault не помечен curve_id, primary считается первый
        (upstream уже отфильтровал vault-ы по curve).
        """
        if not self.vaults:
            return None
        for vault in self.vaults:
            if vault.curve_id == PRIMARY_CURVE_ID:
                return vault
        if all(vault.curve_id is None for vault in self.vaults):
            return self.vaults[0]
        return None


# =============================================================================
# TRIPLE
# =============================================================================


class Triple(BaseModel):
    """
    Направленное ребро (subject, predicate, object).

    term_id — term самого triple (support), counter_term_id — парный
    counter-term (oppose). term/counter_term содержат vault-ы обеих сторон.
    """

    term_id: Optional[str] = None
    counter_term_id: Optional[str] = None
    subject: Optional[Atom] = None
    predicate: Optional[Atom] = None
    object: Optional[Atom] = None
    term: Optional[VaultHolder] = None
    counter_term: Optional[VaultHolder] = None

    model_config = LENIENT_CONFIG


# =============================================================================
# TERM
# =============================================================================


class Term(VaultHolder):
    """
    Staking-единица: atom-term или triple-term.

    Заполнено не более одного из atom/triple; если не заполнено ни одно,
    запись считается малформированной и пропускается классификатором.
    """

    atom: Optional[Atom] = None
    triple: Optional[Triple] = None

    @property
    def is_atom_term(self) -> bool:
        return self.atom is not None and self.triple is None

    @property
    def is_triple_term(self) -> bool:
        return self.triple is not None
