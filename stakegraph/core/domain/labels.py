"""
Labels — единый resolver человекочитаемых меток

Все пути форматирования используют safe_label вместо разрозненных
проверок на None: порядок fallback-ов фиксирован и одинаков везде.
"""

from typing import Final

# =============================================================================
# FALLBACK-МЕТКИ
# =============================================================================

# Метка для отсутствующего subject/object/атома
UNKNOWN_LABEL: Final[str] = "Unknown"

# Метка для отсутствующего predicate
UNKNOWN_PREDICATE_LABEL: Final[str] = "relates to"


def safe_label(*candidates: object, fallback: str = UNKNOWN_LABEL) -> str:
    """
    Первая непустая строка из candidates, иначе fallback.

    Пустые строки, None и не-строки пропускаются.

    Examples:
        >>> safe_label(None, "", "vitalik.eth")
        'vitalik.eth'
        >>> safe_label(None, fallback="relates to")
        'relates to'
    """
    for candidate in candidates:
        if isinstance(candidate, str) and candidate:
            return candidate
    return fallback
