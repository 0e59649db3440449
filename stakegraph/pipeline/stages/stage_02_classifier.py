"""STAGE 2: Opposition Classifier

Для каждой позиции определяет:
- Вид: atom_position (stake на atom) или relationship_position (stake на triple)
- Сторону для relationship: support (term_id triple) или oppose (counter_term_id)
- Opposition ratio по парным vault-ам: counter / (own + counter)
- Детерминированную человекочитаемую строку human_readable

Сторона определяется ТОЛЬКО равенством идентификаторов, никогда по меткам.
Позиции, term которых не atom и не triple, пропускаются (None).
"""

from typing import Final, Optional

from stakegraph.core.domain.atom import Atom, resolve_atom_type
from stakegraph.core.domain.labels import UNKNOWN_PREDICATE_LABEL, safe_label
from stakegraph.core.domain.position import (
    OppositionMetrics,
    PositionKind,
    ProcessedPosition,
    RawPosition,
    Relationship,
    RelationshipNode,
    Stance,
)
from stakegraph.core.domain.term import Term, Triple, Vault, VaultHolder
from stakegraph.core.math.shares import opposition_ratio, ratio_to_percent

# =============================================================================
# CONSTANTS
# =============================================================================

# Префикс EVM-адресов: такие идентификаторы сравниваются без учёта регистра
HEX_ADDRESS_PREFIX: Final[str] = "0x"


# =============================================================================
# HELPERS
# =============================================================================


def normalize_account_id(account_id: Optional[str]) -> Optional[str]:
    """Hex-адреса приводятся к нижнему регистру, прочие id не меняются"""
    if account_id and account_id.lower().startswith(HEX_ADDRESS_PREFIX):
        return account_id.lower()
    return account_id


def position_term_id(position: RawPosition) -> Optional[str]:
    """Term id позиции: position.term_id → term.term_id → term_id primary vault"""
    if position.term_id:
        return position.term_id
    term = position.term
    if term is None:
        return None
    if term.term_id:
        return term.term_id
    vault = term.primary_vault()
    return vault.term_id if vault is not None else None


def resolve_stance(term_id: Optional[str], triple: Triple) -> Optional[Stance]:
    """
    Сторона позиции относительно triple.

    Конвенция: term_id == triple.term_id → SUPPORT,
    term_id == triple.counter_term_id → OPPOSE, иначе None.
    """
    if not term_id:
        return None
    if triple.term_id and term_id == triple.term_id:
        return Stance.SUPPORT
    if triple.counter_term_id and term_id == triple.counter_term_id:
        return Stance.OPPOSE
    return None


def _primary(holder: Optional[VaultHolder]) -> Optional[Vault]:
    return holder.primary_vault() if holder is not None else None


def _vault_shares(vault: Optional[Vault]) -> int:
    return vault.total_shares_int if vault is not None else 0


def describe_triple(triple: Optional[Triple]) -> str:
    """
    human_readable для отношения: "{subject} {predicate} {object}".

    Отсутствующие метки subject/object → 'Unknown', predicate → 'relates to'.
    """
    subject = triple.subject if triple is not None else None
    predicate = triple.predicate if triple is not None else None
    obj = triple.object if triple is not None else None

    return " ".join(
        (
            safe_label(subject.label if subject else None),
            safe_label(
                predicate.label if predicate else None, fallback=UNKNOWN_PREDICATE_LABEL
            ),
            safe_label(obj.label if obj else None),
        )
    )


def describe_atom(atom: Optional[Atom]) -> str:
    """human_readable для atom-а: label → data → 'Unknown'"""
    if atom is None:
        return safe_label()
    return atom.display_label()


def relationship_node(atom: Optional[Atom]) -> RelationshipNode:
    if atom is None:
        return RelationshipNode()
    return RelationshipNode(
        id=atom.term_id,
        label=atom.label,
        type=resolve_atom_type(atom.value),
    )


def build_relationship(triple: Triple) -> Relationship:
    """Выходное представление (subject, predicate, object)"""
    return Relationship(
        subject=relationship_node(triple.subject),
        predicate=relationship_node(triple.predicate),
        object=relationship_node(triple.object),
    )


def build_opposition_metrics(own_shares: int, counter_shares: int) -> OppositionMetrics:
    """
    Метрики оппозиции по total shares обеих сторон.

    Ratio считается точно (Fraction); float — только на выходе.
    """
    ratio = opposition_ratio(own_shares, counter_shares)
    return OppositionMetrics(
        opposition_ratio=float(ratio),
        opposition_percent=ratio_to_percent(ratio),
        support_shares=str(max(own_shares, 0)),
        oppose_shares=str(max(counter_shares, 0)),
    )


def triple_opposition_metrics(
    triple: Triple,
    stance: Optional[Stance] = None,
    own_term: Optional[VaultHolder] = None,
    counter_term: Optional[VaultHolder] = None,
) -> OppositionMetrics:
    """
    Opposition metrics для triple.

    Own vault: triple.term, иначе (для SUPPORT) vault самой позиции.
    Counter vault: triple.counter_term, иначе counter_term записи,
    иначе (для OPPOSE) vault самой позиции.
    """
    own_vault = _primary(triple.term)
    if own_vault is None and stance is Stance.SUPPORT:
        own_vault = _primary(own_term)

    counter_vault = _primary(triple.counter_term) or _primary(counter_term)
    if counter_vault is None and stance is Stance.OPPOSE:
        counter_vault = _primary(own_term)

    return build_opposition_metrics(_vault_shares(own_vault), _vault_shares(counter_vault))


# =============================================================================
# CLASSIFIER
# =============================================================================


def _classify_relationship(
    position: RawPosition, term: Term, held_by_viewer: bool
) -> ProcessedPosition:
    triple = term.triple
    stance = resolve_stance(position_term_id(position), triple)

    return ProcessedPosition(
        type=PositionKind.RELATIONSHIP,
        id=position.id,
        triple_id=triple.term_id,
        shares=str(position.shares_int),
        account_id=position.account.id if position.account else None,
        account_label=position.account.label if position.account else None,
        held_by_viewer=held_by_viewer,
        position_type=stance,
        predicate_label=triple.predicate.label if triple.predicate else None,
        relationship=build_relationship(triple),
        opposition_metrics=triple_opposition_metrics(
            triple, stance, own_term=term, counter_term=position.counter_term
        ),
        vault_info=term.primary_vault(),
        human_readable=describe_triple(triple),
    )


def _classify_atom(
    position: RawPosition, term: Term, held_by_viewer: bool
) -> ProcessedPosition:
    atom = term.atom

    return ProcessedPosition(
        type=PositionKind.ATOM,
        id=position.id,
        atom_id=atom.term_id or position_term_id(position),
        shares=str(position.shares_int),
        account_id=position.account.id if position.account else None,
        account_label=position.account.label if position.account else None,
        held_by_viewer=held_by_viewer,
        vault_info=term.primary_vault(),
        human_readable=describe_atom(atom),
    )


def classify_position(
    position: RawPosition, viewer_id: Optional[str] = None
) -> Optional[ProcessedPosition]:
    """Классификация одной позиции с учётом оппозиции.

    Args:
        position: Сырая позиция (после Normalizer)
        viewer_id: Аккаунт, с точки зрения которого строится ответ

    Returns:
        ProcessedPosition, либо None если term не atom и не triple
    """
    term = position.term
    if term is None:
        return None

    owner_id = position.account.id if position.account else None
    held_by_viewer = bool(viewer_id) and normalize_account_id(owner_id) == normalize_account_id(
        viewer_id
    )

    if term.is_triple_term:
        return _classify_relationship(position, term, held_by_viewer)
    if term.is_atom_term:
        return _classify_atom(position, term, held_by_viewer)
    return None
