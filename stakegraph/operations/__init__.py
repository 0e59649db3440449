"""Operations — call sites pipeline-а поверх внедряемого источника данных.

- get_account_info: отношения, позиции (top 10), atom-ы аккаунта
- get_followers / get_following: fan-out по связанным аккаунтам (top 5)
- search_atoms: atom-ы и их отношения с метриками оппозиции
- search_account_ids: адреса аккаунтов по идентификатору
"""

from .account_info import AccountInfoOperation, process_atoms, process_claims
from .base import Operation
from .followers import (
    AccountInterests,
    FanOutConfig,
    FollowersOperation,
    FollowGraph,
    FollowGraphOperation,
    FollowingOperation,
    RelatedAccount,
)
from .response import (
    ResourceContent,
    TextContent,
    ToolResult,
    build_result,
    error_result,
    remove_empty_fields,
    text_result,
)
from .search_account_ids import SearchAccountIdsOperation
from .search_atoms import SearchAtomsOperation
from .source import GraphSource

__all__ = [
    "Operation",
    "GraphSource",
    "AccountInfoOperation",
    "process_atoms",
    "process_claims",
    "FanOutConfig",
    "RelatedAccount",
    "AccountInterests",
    "FollowGraph",
    "FollowGraphOperation",
    "FollowersOperation",
    "FollowingOperation",
    "SearchAtomsOperation",
    "SearchAccountIdsOperation",
    "ToolResult",
    "TextContent",
    "ResourceContent",
    "build_result",
    "error_result",
    "remove_empty_fields",
    "text_result",
]
