"""STAGE 3: Relevance Ranker

Стабильная сортировка по stake (shares) по убыванию.

- Сравнение только через int произвольной точности (не float, не строки)
- Равные stake сохраняют исходный относительный порядок
- Ни одна запись не теряется и не дублируется
"""

from typing import Callable, Iterable, TypeVar

from stakegraph.core.domain.position import ProcessedPosition
from stakegraph.core.math.shares import parse_shares

T = TypeVar("T")


def rank_by_shares(items: Iterable[T], shares_of: Callable[[T], object]) -> list[T]:
    """Стабильная сортировка произвольных записей по shares (убывание).

    sorted(..., reverse=True) в Python сохраняет порядок равных элементов,
    поэтому результат стабилен и повторное ранжирование идемпотентно.

    Args:
        items: Записи для ранжирования
        shares_of: Извлечение сырого значения shares из записи

    Returns:
        Новый отсортированный список
    """
    return sorted(items, key=lambda item: parse_shares(shares_of(item)), reverse=True)


def rank_positions(positions: Iterable[ProcessedPosition]) -> list[ProcessedPosition]:
    """Ранжирование классифицированных позиций по shares (убывание)"""
    return rank_by_shares(positions, lambda position: position.shares)
