"""
Search Account IDs — адреса аккаунтов по идентификатору (обычно ENS)
"""

import logging
from typing import Final

from stakegraph.core.contracts.validators import AccountsEnvelopeValidator
from stakegraph.operations.base import Operation
from stakegraph.operations.response import ToolResult, build_result
from stakegraph.pipeline.stages.stage_04_shaper import format_numbered_list

logger = logging.getLogger(__name__)

MAX_ACCOUNT_IDS: Final[int] = 10


class SearchAccountIdsOperation(Operation):
    """Поиск адреса аккаунта по идентификатору."""

    name = "search_account_ids"

    def __init__(self, source):
        super().__init__(source)
        self.validator = AccountsEnvelopeValidator()

    async def run(self, identifier: str) -> ToolResult:
        arguments = {"identifier": identifier}
        logger.info("Identifier: %s", identifier)

        envelope = await self.fetch(self.source.search_accounts(identifier), arguments)
        # Записи без непустого id не адресуемы и в выдачу не попадают
        accounts = [
            account
            for account in self.validator.records(envelope, self.name, arguments)
            if isinstance(account, dict) and isinstance(account.get("id"), str) and account["id"]
        ]
        shown = accounts[:MAX_ACCOUNT_IDS]

        if not accounts:
            footer = (
                "No accounts found matching this identifier. "
                "Try a different search term or check the spelling."
            )
        elif len(accounts) > MAX_ACCOUNT_IDS:
            footer = (
                f"...and {len(accounts) - MAX_ACCOUNT_IDS} more results. "
                "Use specific account IDs with other tools for detailed information."
            )
        else:
            footer = (
                "Use these account IDs with other tools to get detailed information "
                "about each account."
            )

        payload = {
            "query": identifier,
            "results": [{"id": account["id"]} for account in shown],
            "total_found": len(accounts),
            "showing": len(shown),
        }
        text = "\n".join(
            (
                f'Search Results for "{identifier}":',
                "",
                f"Found {len(accounts)} matching account(s):",
                format_numbered_list([account["id"] for account in shown]),
                "",
                footer,
            )
        )
        return build_result("search-account-ids-result", payload, text)
