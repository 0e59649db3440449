"""STAGE 1: Position Normalizer

Отбрасывает позиции с нулевым или отсутствующим stake.

- shares парсится как int произвольной точности (parse_shares)
- Отсутствующие/малформированные shares считаются нулём
- Относительный порядок оставшихся позиций сохраняется
"""

from typing import Iterable, TypeVar

from stakegraph.core.domain.position import RawPosition
from stakegraph.core.math.shares import has_stake

P = TypeVar("P", RawPosition, dict)


def _raw_shares(position: RawPosition | dict) -> object:
    if isinstance(position, RawPosition):
        return position.shares
    return position.get("shares")


def filter_zero_share_positions(positions: Iterable[P]) -> list[P]:
    """Подпоследовательность позиций с shares > 0 (порядок сохраняется).

    Принимает как RawPosition, так и сырые dict-записи upstream-а;
    записи другого типа исключаются.

    Args:
        positions: Последовательность позиций

    Returns:
        Новый список позиций со строго положительным stake
    """
    return [
        position
        for position in positions or ()
        if isinstance(position, (RawPosition, dict)) and has_stake(_raw_shares(position))
    ]
