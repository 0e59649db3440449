"""
Shares — точная арифметика по долям (shares) в vault-ах

Модуль обеспечивает единственный допустимый способ работы с shares:
- Парсинг decimal-строк в Python int (произвольная точность)
- Сравнение stake-ов только через int (никогда float или строки)
- Расчёт opposition ratio через fractions.Fraction
- Округление процентов half-up без промежуточного float

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. shares никогда не парсятся как float или fixed-width integer (значения > 2**64)
2. Малформированные значения превращаются в 0, исключения не пропагируют
3. Деление на ноль никогда не происходит (оба vault-а пусты → ratio = 0)
4. Все операции детерминированы и воспроизводимы
"""

from fractions import Fraction
from typing import Final

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Нулевой stake (результат парсинга отсутствующих/малформированных значений)
ZERO_SHARES: Final[int] = 0

# Нулевой ratio для пустых vault-ов (защита от деления на ноль)
ZERO_RATIO: Final[Fraction] = Fraction(0)


# =============================================================================
# ПАРСИНГ
# =============================================================================


def parse_shares(value: object) -> int:
    """
    Парсинг shares в целое произвольной точности.

    Принимает decimal-строку (как её сериализует upstream) или int.
    float и bool отвергаются: float уже потерял точность, bool — не число.

    Args:
        value: Сырое значение shares (str | int | None | ...)

    Returns:
        Неотрицательный int; 0 для отсутствующих, пустых, отрицательных
        и не-десятичных значений

    Examples:
        >>> parse_shares("18446744073709551616")
        18446744073709551616
        >>> parse_shares(None)
        0
        >>> parse_shares("1.5")
        0
        >>> parse_shares("-10")
        0
    """
    if isinstance(value, bool):
        return ZERO_SHARES

    if isinstance(value, int):
        return value if value > 0 else ZERO_SHARES

    if not isinstance(value, str):
        return ZERO_SHARES

    text = value.strip()
    if not text.isascii() or not text.isdigit():
        # Отсекает "", "-5", "1e3", "1.0", а также не-ASCII цифры
        return ZERO_SHARES

    return int(text)


def has_stake(value: object) -> bool:
    """
    Проверка, что shares строго больше нуля.

    Args:
        value: Сырое значение shares

    Returns:
        True если parse_shares(value) > 0
    """
    return parse_shares(value) > ZERO_SHARES


# =============================================================================
# OPPOSITION RATIO
# =============================================================================


def opposition_ratio(own_shares: int, counter_shares: int) -> Fraction:
    """
    Доля противоположной стороны в совокупном stake.

    Формула: counter / (own + counter)

    Args:
        own_shares: Total shares в vault-е самого triple (support)
        counter_shares: Total shares в vault-е counter-term (oppose)

    Returns:
        Fraction в [0, 1]; ровно 0 если оба vault-а пусты

    Examples:
        >>> opposition_ratio(100, 50)
        Fraction(1, 3)
        >>> opposition_ratio(0, 0)
        Fraction(0, 1)
    """
    own = max(own_shares, ZERO_SHARES)
    counter = max(counter_shares, ZERO_SHARES)

    total = own + counter
    if total == 0:
        return ZERO_RATIO

    return Fraction(counter, total)


def ratio_to_percent(ratio: Fraction) -> int:
    """
    Конверсия ratio в целый процент с округлением half-up.

    Округление выполняется точно на Fraction (0.125 → 13, а не 12
    как у banker's rounding встроенного round()).

    Args:
        ratio: Ratio в [0, 1]

    Returns:
        Целый процент в [0, 100]
    """
    scaled = ratio * 100
    return int(scaled + Fraction(1, 2)) if scaled >= 0 else 0
