"""
Followers / Following — социальный граф аккаунта и интересы связанных аккаунтов

1. Получить позиции follow-отношений (кто подписан на аккаунт / на кого
   подписан аккаунт)
2. Для каждого связанного аккаунта (не более FanOutConfig.max_accounts)
   параллельно запросить его позиции по predicate и прогнать их через
   pipeline; сбой одной ветки деградирует в пустой набор интересов
3. Ранжировать связанные аккаунты по stake follow-позиции (точный int)
4. Построить payload и digest (top-K аккаунтов)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Final, Optional

from stakegraph.core.contracts.validators import PositionsEnvelopeValidator
from stakegraph.core.domain.position import PositionKind, ProcessedPosition, RawPosition
from stakegraph.core.domain.term import Vault
from stakegraph.errors import PHASE_ENRICHMENT, UpstreamFailure
from stakegraph.operations.base import Operation
from stakegraph.operations.response import ToolResult, build_result, error_result
from stakegraph.pipeline.runner import parse_raw_position, process_positions
from stakegraph.pipeline.stages.stage_01_normalizer import filter_zero_share_positions
from stakegraph.pipeline.stages.stage_02_classifier import normalize_account_id
from stakegraph.pipeline.stages.stage_03_ranker import rank_by_shares
from stakegraph.pipeline.stages.stage_04_shaper import (
    ELLIPSIS,
    OPPOSITION_MATERIALITY_THRESHOLD,
    format_position_summary,
    truncate_text,
)

logger = logging.getLogger(__name__)

# Predicate по умолчанию для интересов связанных аккаунтов
DEFAULT_PREDICATE: Final[str] = "follow"

# Направления обхода follow-отношений
FOLLOWERS: Final[str] = "followers"
FOLLOWING: Final[str] = "following"


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class FanOutConfig:
    """Конфигурация fan-out по связанным аккаунтам."""

    # Максимум параллельных вторичных запросов (защита от rate limit)
    max_accounts: int = 20

    # Лимит интересов, запрашиваемых на один аккаунт
    interests_limit: int = 20

    # Сколько интересов сохраняется в payload на один аккаунт
    interests_kept: int = 10

    # Сколько интересов попадает в relationship_summary
    summary_interests: int = 5

    # Длина relationship_summary в digest
    summary_max_chars: int = 100

    # Top-K аккаунтов в digest и в кратком списке payload
    top_k_accounts: int = 5

    opposition_threshold: float = OPPOSITION_MATERIALITY_THRESHOLD

    def __post_init__(self):
        if self.max_accounts < 1:
            raise ValueError(f"max_accounts must be positive, got {self.max_accounts}")
        if self.summary_max_chars <= len(ELLIPSIS):
            raise ValueError(
                f"summary_max_chars {self.summary_max_chars} must exceed ellipsis length"
            )


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class RelatedAccount:
    """Связанный аккаунт (follower или followed) и его follow-позиция."""

    account_id: str
    label: Optional[str]
    image: Optional[str]
    follow_shares: str
    vault_info: Optional[Vault]


@dataclass(frozen=True)
class AccountInterests:
    """Связанный аккаунт с его интересами (после pipeline)."""

    account: RelatedAccount
    interests: tuple[ProcessedPosition, ...]
    interests_count: int
    opposition_count: int
    relationship_summary: str
    failed: bool = False

    def to_payload(self, include_interests: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "account_id": self.account.account_id,
            "label": self.account.label,
            "shares": self.account.follow_shares,
            "interests_count": self.interests_count,
            "opposition_count": self.opposition_count,
        }
        if include_interests:
            data["image"] = self.account.image
            data["vault_info"] = (
                self.account.vault_info.model_dump(mode="json")
                if self.account.vault_info
                else None
            )
            data["interests"] = [interest.to_payload() for interest in self.interests]
            data["relationship_summary"] = self.relationship_summary
            data["enrichment_failed"] = self.failed
        return data


@dataclass(frozen=True)
class FollowGraph:
    """Результат обхода: ранжированные связанные аккаунты."""

    target_account: str
    direction: str
    predicate: str
    accounts: tuple[AccountInterests, ...] = field(default_factory=tuple)

    @property
    def total_interests(self) -> int:
        return sum(a.interests_count for a in self.accounts)

    @property
    def failed_count(self) -> int:
        return sum(1 for a in self.accounts if a.failed)


# =============================================================================
# HELPERS
# =============================================================================


def related_account(position: RawPosition, direction: str) -> Optional[RelatedAccount]:
    """
    Связанный аккаунт из follow-позиции.

    followers: владелец позиции (тот, кто подписан).
    following: объект triple (на кого подписан), account-вариант значения
    atom-а, иначе сам atom объекта.
    """
    vault = position.term.primary_vault() if position.term else None

    if direction == FOLLOWERS:
        account = position.account
        if account is None or not account.id:
            return None
        return RelatedAccount(
            account_id=account.id,
            label=account.label,
            image=account.image,
            follow_shares=str(position.shares_int),
            vault_info=vault,
        )

    triple = position.term.triple if position.term else None
    obj = triple.object if triple else None
    if obj is None:
        return None

    value = obj.value.account if obj.value else None
    account_id = (value.id if value else None) or obj.term_id
    if not account_id:
        return None
    return RelatedAccount(
        account_id=account_id,
        label=(value.label if value else None) or obj.label,
        image=obj.image,
        follow_shares=str(position.shares_int),
        vault_info=vault,
    )


def collect_related_accounts(
    records: list[dict], direction: str, max_accounts: int
) -> list[RelatedAccount]:
    """
    Связанные аккаунты, ранжированные по follow stake, без дублей, не более max_accounts.

    При дублях сохраняется позиция с наибольшим stake.
    """
    positions = [
        raw
        for raw in (parse_raw_position(r) for r in filter_zero_share_positions(records))
        if raw is not None
    ]

    related: list[RelatedAccount] = []
    seen: set[str] = set()
    for position in rank_by_shares(positions, lambda p: p.shares):
        account = related_account(position, direction)
        if account is None:
            continue
        key = normalize_account_id(account.account_id)
        if key in seen:
            continue
        seen.add(key)
        related.append(account)
        if len(related) >= max_accounts:
            break
    return related


def summarize_interests(
    interests: list[ProcessedPosition], config: FanOutConfig
) -> str:
    """Краткое описание top интересов через '; ' с аннотациями оппозиции"""
    return "; ".join(
        format_position_summary(p, config.opposition_threshold)
        for p in interests[: config.summary_interests]
    )


# =============================================================================
# OPERATION
# =============================================================================


class FollowGraphOperation(Operation):
    """Обход follow-отношений с параллельным обогащением интересами."""

    name = "get_followers"
    direction = FOLLOWERS

    def __init__(self, source, config: Optional[FanOutConfig] = None):
        super().__init__(source)
        self.config = config or FanOutConfig()
        self.validator = PositionsEnvelopeValidator()

    async def fetch_related_positions(self, account_id: str) -> Any:
        if self.direction == FOLLOWERS:
            return await self.source.get_follower_positions(account_id)
        return await self.source.get_following_positions(account_id)

    async def fetch_interests(
        self, account: RelatedAccount, predicate: str
    ) -> list[ProcessedPosition]:
        """Интересы одного связанного аккаунта: только relationship-позиции, ранжированные"""
        arguments = {"account_id": account.account_id, "predicate": predicate}
        envelope = await self.fetch(
            self.source.get_interest_positions(
                account.account_id, predicate, self.config.interests_limit
            ),
            arguments,
            PHASE_ENRICHMENT,
        )
        records = self.validator.records(envelope, self.name, arguments)
        result = process_positions(
            records, viewer_id=account.account_id, kind=PositionKind.RELATIONSHIP
        )
        return list(result.ranked)

    def build_interests(
        self,
        account: RelatedAccount,
        interests: list[ProcessedPosition],
        failed: bool = False,
    ) -> AccountInterests:
        return AccountInterests(
            account=account,
            interests=tuple(interests[: self.config.interests_kept]),
            interests_count=len(interests),
            opposition_count=sum(1 for p in interests if p.is_opposing),
            relationship_summary=summarize_interests(interests, self.config),
            failed=failed,
        )

    async def enrich(
        self, accounts: list[RelatedAccount], predicate: str
    ) -> list[AccountInterests]:
        """
        Параллельный fan-out по связанным аккаунтам.

        Ожидаются ВСЕ ветки; упавшая ветка даёт пустой набор интересов,
        а не ошибку всего batch-а.
        """
        results = await asyncio.gather(
            *(self.fetch_interests(account, predicate) for account in accounts),
            return_exceptions=True,
        )

        enriched = []
        for account, result in zip(accounts, results):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            if isinstance(result, Exception):
                logger.warning(
                    "Interests lookup failed for %s, treating as empty: %s",
                    account.account_id,
                    result,
                )
                enriched.append(self.build_interests(account, [], failed=True))
            else:
                enriched.append(self.build_interests(account, result))
        return enriched

    async def collect(self, account_id: str, predicate: str) -> FollowGraph:
        arguments = {"account_id": account_id, "predicate": predicate}
        envelope = await self.fetch(self.fetch_related_positions(account_id), arguments)
        records = self.validator.records(envelope, self.name, arguments)

        accounts = collect_related_accounts(records, self.direction, self.config.max_accounts)
        logger.info("Enriching %d %s of %s", len(accounts), self.direction, account_id)

        enriched = await self.enrich(accounts, predicate)
        ranked = rank_by_shares(enriched, lambda a: a.account.follow_shares)

        return FollowGraph(
            target_account=account_id,
            direction=self.direction,
            predicate=predicate,
            accounts=tuple(ranked),
        )

    def render(self, graph: FollowGraph) -> ToolResult:
        top = graph.accounts[: self.config.top_k_accounts]
        heading = self.direction.upper()
        title = "Followers" if self.direction == FOLLOWERS else "Following"

        payload = {
            "target_account": graph.target_account,
            self.direction: [a.to_payload(include_interests=False) for a in top],
            "accounts": [a.to_payload() for a in graph.accounts],
            f"total_{self.direction}": len(graph.accounts),
            "total_interests": graph.total_interests,
            "failed_lookups": graph.failed_count,
            "predicate_filter": graph.predicate,
        }

        lines = [
            f"{title} Analysis for {graph.target_account}:",
            "",
            f"**{heading}** ({len(graph.accounts)} accounts, top {len(top)} shown):",
        ]
        for i, entry in enumerate(top, start=1):
            opposing = (
                f" ({entry.opposition_count} opposing)" if entry.opposition_count else ""
            )
            lines.append(
                f"{i}. **{entry.account.label or entry.account.account_id}** "
                f"({entry.account.follow_shares} shares)"
            )
            lines.append(f"   {entry.interests_count} {graph.predicate} interests{opposing}")
            if entry.relationship_summary:
                lines.append(
                    "   "
                    + truncate_text(entry.relationship_summary, self.config.summary_max_chars)
                )
            lines.append("")

        lines.append(
            f"**Summary**: {len(graph.accounts)} {self.direction} with "
            f"{graph.total_interests} total relationship patterns discovered."
        )

        return build_result(f"get-{self.direction}-result", payload, "\n".join(lines))

    async def run(self, account_id: str, predicate: Optional[str] = None) -> ToolResult:
        graph = await self.collect(account_id, predicate or DEFAULT_PREDICATE)
        return self.render(graph)

    def on_failure(self, failure: UpstreamFailure) -> ToolResult:
        return error_result(failure, fan_out_cap=self.config.max_accounts)


class FollowersOperation(FollowGraphOperation):
    """Подписчики аккаунта и их интересы."""

    name = "get_followers"
    direction = FOLLOWERS


class FollowingOperation(FollowGraphOperation):
    """Аккаунты, на которые подписан аккаунт, и их интересы."""

    name = "get_following"
    direction = FOLLOWING
