"""STAGE 4: Response Shaper

Строит два согласованных представления одного ранжированного списка:
- payload: полный ранжированный список + агрегаты без усечения (для машин)
- digest: top-K нумерованным списком + строка итогов (для текстового потребителя)

Оба представления выводятся из одного и того же списка и сообщают
одинаковые итоги. Длина каждой строки digest ограничена (ellipsis).
"""

from dataclasses import dataclass
from typing import Any, Final, Iterable, Optional, Sequence

from stakegraph.core.domain.position import ProcessedPosition

# =============================================================================
# CONSTANTS
# =============================================================================

# Маркер позиции против отношения
OPPOSING_MARKER: Final[str] = "[OPPOSING]"

# Маркер обрезанной строки
ELLIPSIS: Final[str] = "..."

# Порог существенной оппозиции для аннотации в digest
OPPOSITION_MATERIALITY_THRESHOLD: Final[float] = 0.25


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class ShaperConfig:
    """Конфигурация Response Shaper.

    top_k зависит от call site (наблюдаемые значения 5, 10, 20).
    """

    top_k: int = 10
    opposition_threshold: float = OPPOSITION_MATERIALITY_THRESHOLD
    entry_max_chars: int = 200
    ellipsis: str = ELLIPSIS
    title: str = "POSITIONS"

    def __post_init__(self):
        if self.top_k < 0:
            raise ValueError(f"top_k must be non-negative, got {self.top_k}")
        if not 0.0 <= self.opposition_threshold <= 1.0:
            raise ValueError(
                f"opposition_threshold must be in [0, 1], got {self.opposition_threshold}"
            )
        if self.entry_max_chars <= len(self.ellipsis):
            raise ValueError(
                f"entry_max_chars {self.entry_max_chars} must exceed ellipsis length"
            )


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class PositionTotals:
    """Агрегаты по ПОЛНОМУ (неусечённому) ранжированному списку."""

    total: int
    relationships: int
    atoms: int
    support: int
    oppose: int

    @classmethod
    def from_positions(cls, positions: Iterable[ProcessedPosition]) -> "PositionTotals":
        positions = list(positions)
        relationships = sum(1 for p in positions if p.is_relationship)
        return cls(
            total=len(positions),
            relationships=relationships,
            atoms=len(positions) - relationships,
            support=sum(1 for p in positions if p.position_type is not None and not p.is_opposing),
            oppose=sum(1 for p in positions if p.is_opposing),
        )

    def to_payload(self) -> dict[str, int]:
        return {
            "total": self.total,
            "relationships": self.relationships,
            "atoms": self.atoms,
            "supportCount": self.support,
            "oppositionCount": self.oppose,
        }


@dataclass(frozen=True)
class ShapedResponse:
    """Результат Shaper: машинный payload и текстовый digest."""

    payload: dict[str, Any]
    digest: str
    totals: PositionTotals
    shown: int


# =============================================================================
# FORMATTING
# =============================================================================


def truncate_text(text: str, max_chars: int, ellipsis: str = ELLIPSIS) -> str:
    """
    Обрезка строки до max_chars с маркером ellipsis.

    Examples:
        >>> truncate_text("abcdef", 5)
        'ab...'
        >>> truncate_text("abc", 5)
        'abc'
    """
    if len(text) <= max_chars:
        return text
    return text[: max(max_chars - len(ellipsis), 0)] + ellipsis


def format_position_summary(
    position: ProcessedPosition,
    opposition_threshold: float = OPPOSITION_MATERIALITY_THRESHOLD,
) -> str:
    """
    human_readable с аннотациями оппозиции.

    [OPPOSING] — для позиций oppose; [N% opposition] — если ratio строго
    больше порога.
    """
    summary = position.human_readable
    if position.is_opposing:
        summary += f" {OPPOSING_MARKER}"

    metrics = position.opposition_metrics
    if metrics is not None and metrics.opposition_ratio > opposition_threshold:
        summary += f" [{metrics.opposition_percent}% opposition]"

    return summary


def format_numbered_list(lines: Sequence[str]) -> str:
    return "\n".join(f"{i}. {line}" for i, line in enumerate(lines, start=1))


# =============================================================================
# SHAPER
# =============================================================================


class ResponseShaper:
    """STAGE 4: Response Shaper.

    Порядок:
    1. Агрегаты по полному списку
    2. payload: полный список (по alias-ам) + агрегаты
    3. digest: top-K строки + строка итогов
    """

    def __init__(self, config: Optional[ShaperConfig] = None):
        self.config = config or ShaperConfig()

    def format_entry(self, position: ProcessedPosition) -> str:
        """Одна строка digest (без номера), ограниченная entry_max_chars"""
        return truncate_text(
            format_position_summary(position, self.config.opposition_threshold),
            self.config.entry_max_chars,
            self.config.ellipsis,
        )

    def summary_line(self, totals: PositionTotals) -> str:
        return (
            f"Summary: {totals.total} positions "
            f"({totals.relationships} relationships, {totals.atoms} atoms); "
            f"{totals.support} supporting, {totals.oppose} opposing."
        )

    def shape(self, ranked: Sequence[ProcessedPosition]) -> ShapedResponse:
        """Построение payload и digest из ранжированного списка.

        Args:
            ranked: Полный ранжированный список (результат Ranker)

        Returns:
            ShapedResponse с согласованными представлениями
        """
        totals = PositionTotals.from_positions(ranked)
        top = list(ranked[: self.config.top_k])

        payload = {
            "positions": [position.to_payload() for position in ranked],
            "shown": len(top),
            "totals": totals.to_payload(),
        }

        header = (
            f"**{self.config.title}** ({totals.total} total, showing top {len(top)}):"
        )
        body = format_numbered_list([self.format_entry(p) for p in top]) or "No positions found."
        digest = "\n".join((header, body, "", self.summary_line(totals)))

        return ShapedResponse(payload=payload, digest=digest, totals=totals, shown=len(top))


def shape_positions(
    ranked: Sequence[ProcessedPosition], config: Optional[ShaperConfig] = None
) -> ShapedResponse:
    """Функциональная обёртка над ResponseShaper"""
    return ResponseShaper(config).shape(ranked)
