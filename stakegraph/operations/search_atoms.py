"""
Search Atoms — поиск atom-ов и их отношений (as_subject_triples)

Каждое отношение аннотируется human_readable и метриками оппозиции по
паре vault-ов (term, counter_term) triple-а. Объём ответа ограничен:
не более MAX_QUERIES поисковых строк, MAX_ATOMS atom-ов и
MAX_TRIPLES_PER_ATOM отношений на atom.
"""

import logging
from typing import Any, Final, Sequence

from pydantic import ValidationError

from stakegraph.core.contracts.validators import AtomsEnvelopeValidator
from stakegraph.core.domain.atom import Atom
from stakegraph.core.domain.term import Triple, VaultHolder
from stakegraph.operations.base import Operation
from stakegraph.operations.response import ToolResult, build_result, remove_empty_fields
from stakegraph.pipeline.stages.stage_02_classifier import (
    describe_triple,
    triple_opposition_metrics,
)
from stakegraph.pipeline.stages.stage_04_shaper import format_numbered_list

logger = logging.getLogger(__name__)

MAX_QUERIES: Final[int] = 5
MAX_ATOMS: Final[int] = 10
MAX_TRIPLES_PER_ATOM: Final[int] = 10


def process_subject_triple(atom: Atom, record: dict) -> dict[str, Any] | None:
    """Отношение, где atom — subject; None если запись не парсится"""
    try:
        triple = Triple.model_validate(record)
    except ValidationError:
        logger.debug("Skipping unparseable triple %r", record)
        return None

    if triple.subject is None:
        triple = triple.model_copy(update={"subject": atom})

    metrics = triple_opposition_metrics(triple)
    return {
        "term_id": triple.term_id,
        "predicate": {"term_id": triple.predicate.term_id, "label": triple.predicate.label}
        if triple.predicate
        else None,
        "object": {
            "term_id": triple.object.term_id,
            "label": triple.object.label,
            "type": triple.object.type,
        }
        if triple.object
        else None,
        "human_readable": describe_triple(triple),
        "opposition_metrics": metrics.model_dump(by_alias=True, mode="json"),
    }


def process_atom(record: dict) -> dict[str, Any] | None:
    if not isinstance(record, dict):
        logger.debug("Skipping non-object atom %r", record)
        return None
    try:
        atom = Atom.model_validate(record)
        holder = VaultHolder.model_validate(record.get("term") or {})
    except ValidationError:
        logger.debug("Skipping unparseable atom %r", record)
        return None

    triples = [
        processed
        for processed in (
            process_subject_triple(atom, t)
            for t in (record.get("as_subject_triples") or [])[:MAX_TRIPLES_PER_ATOM]
        )
        if processed is not None
    ]
    vault = holder.primary_vault()

    return {
        "term_id": atom.term_id,
        "label": atom.label,
        "image": atom.image,
        "type": atom.type or atom.atom_type.value,
        "description": atom.description,
        "creator": record.get("creator"),
        "value": atom.value.model_dump(mode="json", exclude_none=True) if atom.value else None,
        "vault": vault.model_dump(mode="json") if vault else None,
        "as_subject_triples": triples,
    }


class SearchAtomsOperation(Operation):
    """Поиск аккаунтов, вещей, людей и концептов по имени, описанию, URL."""

    name = "search_atoms"

    def __init__(self, source):
        super().__init__(source)
        self.validator = AtomsEnvelopeValidator()

    async def run(self, queries: Sequence[str]) -> ToolResult:
        arguments = {"queries": list(queries)}
        queries = [q for q in queries if q][:MAX_QUERIES]
        logger.info("Search strings: %s", queries)

        envelope = await self.fetch(self.source.search_atoms(queries), arguments)
        atoms = self.validator.records(envelope, self.name, arguments)
        logger.info("Number of results: %d", len(atoms))

        results = [
            processed
            for processed in (process_atom(a) for a in atoms[:MAX_ATOMS])
            if processed is not None
        ]

        text = "\n".join(
            (
                f'**ATOMS** ({len(atoms)} found for {", ".join(queries)}, '
                f"showing top {len(results)}):",
                format_numbered_list(
                    [
                        f"{r['label'] or r['term_id']} ({len(r['as_subject_triples'])} relationships)"
                        for r in results
                    ]
                ),
            )
        )

        return build_result("atom-search-result", remove_empty_fields(results) or [], text)
