"""
Domain models and value objects.

Contains graph entities (Atom, Term, Triple, Vault) and positions
(RawPosition, ProcessedPosition).
"""

from stakegraph.core.domain.atom import (
    AccountValue,
    Atom,
    AtomType,
    AtomValue,
    OrganizationValue,
    PersonValue,
    ThingValue,
    resolve_atom_type,
)
from stakegraph.core.domain.labels import (
    UNKNOWN_LABEL,
    UNKNOWN_PREDICATE_LABEL,
    safe_label,
)
from stakegraph.core.domain.position import (
    Account,
    OppositionMetrics,
    PositionKind,
    ProcessedPosition,
    RawPosition,
    Relationship,
    RelationshipNode,
    Stance,
)
from stakegraph.core.domain.term import (
    PRIMARY_CURVE_ID,
    Term,
    Triple,
    Vault,
    VaultHolder,
)

__all__ = [
    # Labels
    "UNKNOWN_LABEL",
    "UNKNOWN_PREDICATE_LABEL",
    "safe_label",
    # Atom
    "Atom",
    "AtomType",
    "AtomValue",
    "ThingValue",
    "AccountValue",
    "PersonValue",
    "OrganizationValue",
    "resolve_atom_type",
    # Term / Vault / Triple
    "PRIMARY_CURVE_ID",
    "Term",
    "Triple",
    "Vault",
    "VaultHolder",
    # Position
    "Account",
    "RawPosition",
    "PositionKind",
    "Stance",
    "OppositionMetrics",
    "Relationship",
    "RelationshipNode",
    "ProcessedPosition",
]
