"""
Account Info — сведения об аккаунте: отношения, позиции, atom-ы

Позиции проходят полный pipeline (Normalizer → Classifier → Ranker →
Shaper) с top-K = 10; отношения (claims) форматируются тем же
describe_triple, что и позиции.
"""

import logging
from typing import Any, Final, Optional

from pydantic import ValidationError

from stakegraph.core.contracts.validators import AccountsEnvelopeValidator
from stakegraph.core.domain.atom import Atom
from stakegraph.core.domain.term import Triple, VaultHolder
from stakegraph.operations.base import Operation
from stakegraph.operations.response import ToolResult, build_result, text_result
from stakegraph.pipeline.runner import PositionPipeline
from stakegraph.pipeline.stages.stage_02_classifier import (
    build_relationship,
    describe_triple,
    normalize_account_id,
)
from stakegraph.pipeline.stages.stage_04_shaper import ShaperConfig, format_numbered_list

logger = logging.getLogger(__name__)

# Top-K для отношений и позиций аккаунта
ACCOUNT_TOP_K: Final[int] = 10


def process_claims(triples: Optional[list[dict]]) -> list[dict[str, Any]]:
    """
    Отношения (triples), созданные аккаунтом, в человекочитаемой форме.

    Записи, которые не парсятся даже lenient-моделью, пропускаются.
    """
    claims = []
    for record in triples or ():
        try:
            triple = Triple.model_validate(record)
        except ValidationError:
            logger.debug("Skipping unparseable triple %r", record)
            continue
        claims.append(
            {
                "id": triple.term_id,
                "relationship": build_relationship(triple).model_dump(mode="json"),
                "human_readable": describe_triple(triple),
            }
        )
    return claims


def process_atoms(atoms: Optional[list[dict]]) -> list[dict[str, Any]]:
    """Atom-ы, связанные с аккаунтом, с агрегатами их primary vault"""
    processed = []
    for record in atoms or ():
        if not isinstance(record, dict):
            logger.debug("Skipping non-object atom %r", record)
            continue
        try:
            atom = Atom.model_validate(record)
            holder = VaultHolder.model_validate(record.get("term") or {})
        except ValidationError:
            logger.debug("Skipping unparseable atom %r", record)
            continue
        vault = holder.primary_vault()
        processed.append(
            {
                "id": atom.term_id,
                "label": atom.label,
                "data": atom.data,
                "description": atom.description,
                "total_shares": vault.total_shares if vault else None,
                "position_count": vault.position_count if vault else None,
            }
        )
    return processed


class AccountInfoOperation(Operation):
    """Сведения об аккаунте по адресу или идентификатору."""

    name = "get_account_info"

    def __init__(self, source, shaper_config: Optional[ShaperConfig] = None):
        super().__init__(source)
        self.pipeline = PositionPipeline(
            shaper_config or ShaperConfig(top_k=ACCOUNT_TOP_K, title="POSITIONS")
        )
        self.validator = AccountsEnvelopeValidator()

    async def run(
        self, address: Optional[str] = None, identifier: Optional[str] = None
    ) -> ToolResult:
        arguments = {"address": address, "identifier": identifier}
        if not (address or identifier):
            return text_result(
                "Error: Either address or identifier must be provided", is_error=True
            )

        address = normalize_account_id(address or identifier)
        logger.info("Address: %s", address)

        envelope = await self.fetch(self.source.get_account_info(address), arguments)
        records = self.validator.records(envelope, self.name, arguments)
        accounts = [account for account in records if isinstance(account, dict)]
        if not accounts:
            return text_result(f"No account found for address {address}")

        account = accounts[0]
        claims = process_claims(account.get("triples"))
        atoms = process_atoms(account.get("atoms"))

        result = self.pipeline.run(account.get("positions") or [], viewer_id=address)
        shaped = self.pipeline.shape(result)

        top_claims = claims[:ACCOUNT_TOP_K]
        label = account.get("label") or address

        payload = {
            "account": {
                "id": account.get("id"),
                "label": account.get("label"),
                "image": account.get("image"),
                "atom_id": account.get("atom_id"),
                "type": account.get("type"),
            },
            "summary": {
                "relationships_count": len(claims),
                "positions_count": shaped.totals.total,
                "atoms_count": len(atoms),
            },
            "top_relationships": [
                {"id": c["id"], "human_readable": c["human_readable"]} for c in top_claims
            ],
            "positions": shaped.payload,
            "associated_atoms": atoms,
        }

        text = "\n".join(
            (
                f"Account: **{label}** ({account.get('id')})",
                "",
                f"**RELATIONSHIPS** ({len(claims)} total, showing top {len(top_claims)}):",
                format_numbered_list([c["human_readable"] for c in top_claims])
                or "No relationships found.",
                "",
                shaped.digest,
                "",
                f"**ATOMS** ({len(atoms)} associated)",
                "",
                f'*Use search_atoms with "{label}" for additional relationship discovery.*',
            )
        )

        return build_result("account-info-result", payload, text)
