"""
GraphSource — контракт внедряемого источника данных

Источник принадлежит внешнему слою построения запросов: ядро вызывает его
методы по имени и получает сырые response envelope-ы. Ядро никогда не
мутирует источник и не использует глобальный клиент.
"""

from typing import Any, Protocol, Sequence, runtime_checkable


@runtime_checkable
class GraphSource(Protocol):
    """Асинхронный источник сырых записей графа."""

    async def get_account_info(self, address: str) -> dict[str, Any]:
        """{"accounts": [...]} — аккаунт с triples, positions и atoms"""
        ...

    async def get_follower_positions(self, account_id: str) -> dict[str, Any]:
        """{"positions": [...]} — позиции на triple "X follows account_id" """
        ...

    async def get_following_positions(self, account_id: str) -> dict[str, Any]:
        """{"positions": [...]} — позиции account_id на triple "account_id follows X" """
        ...

    async def get_interest_positions(
        self, account_id: str, predicate: str, limit: int
    ) -> dict[str, Any]:
        """{"positions": [...]} — позиции account_id на triple с данным predicate"""
        ...

    async def search_atoms(self, queries: Sequence[str]) -> dict[str, Any]:
        """{"atoms": [...]} — atom-ы, совпавшие с поисковыми строками"""
        ...

    async def search_accounts(self, identifier: str) -> dict[str, Any]:
        """{"accounts": [...]} — аккаунты, чья метка совпала с identifier"""
        ...
