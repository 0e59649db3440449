"""
Errors — таксономия ошибок уровня операции

- DataShapeError (отсутствующие/null вложенные поля) — не исключение:
  обрабатывается локально через safe_label и lenient модели.
- SkippedRecord (term не atom и не triple) — не исключение: классификатор
  возвращает None, запись выпадает из результата.
- UpstreamFailure — источник данных недоступен, отклонил запрос или вернул
  невалидный envelope. Одна ошибка на операцию, без retry.
- RateLimitFailure — UpstreamFailure с подсказками retry-after и remaining.
"""

from typing import Any, Final, Mapping, Optional

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# HTTP статус rate limit
HTTP_TOO_MANY_REQUESTS: Final[int] = 429

# Значения по умолчанию, если upstream не прислал заголовки
DEFAULT_RETRY_AFTER: Final[str] = "60"
DEFAULT_REMAINING: Final[str] = "0"

# Фазы, в которых может упасть операция
PHASE_FETCH: Final[str] = "fetch"
PHASE_VALIDATION: Final[str] = "validation"
PHASE_ENRICHMENT: Final[str] = "enrichment"


# =============================================================================
# EXCEPTIONS
# =============================================================================


class OperationFailure(Exception):
    """
    Ошибка уровня операции.

    Несёт имя операции, входные аргументы и фазу, в которой произошёл сбой.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        arguments: Optional[Mapping[str, Any]] = None,
        phase: str = PHASE_FETCH,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.arguments = dict(arguments or {})
        self.phase = phase

    def context(self) -> dict[str, Any]:
        """Контекст для логирования"""
        return {
            "operation": self.operation,
            "args": self.arguments,
            "phase": self.phase,
        }


class UpstreamFailure(OperationFailure):
    """Источник данных недоступен, отклонил запрос или вернул невалидный envelope"""


class RateLimitFailure(UpstreamFailure):
    """
    Upstream вернул 429.

    Ядро не делает retry; граница передаёт пользователю retry_after и
    remaining как подсказку.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        arguments: Optional[Mapping[str, Any]] = None,
        phase: str = PHASE_FETCH,
        retry_after: str = DEFAULT_RETRY_AFTER,
        remaining: str = DEFAULT_REMAINING,
    ):
        super().__init__(message, operation, arguments, phase)
        self.retry_after = retry_after
        self.remaining = remaining


# =============================================================================
# КЛАССИФИКАЦИЯ
# =============================================================================


def _response_status(response: Any) -> Optional[int]:
    status = getattr(response, "status_code", None)
    if status is None:
        status = getattr(response, "status", None)
    return status if isinstance(status, int) else None


def _header(headers: Any, *names: str) -> Optional[str]:
    if headers is None:
        return None
    for name in names:
        value = headers.get(name)
        if value:
            return str(value)
    return None


def classify_upstream_error(
    error: BaseException,
    operation: str,
    arguments: Optional[Mapping[str, Any]] = None,
    phase: str = PHASE_FETCH,
) -> UpstreamFailure:
    """
    Приведение произвольной ошибки источника к UpstreamFailure.

    Если к ошибке прикреплён HTTP-ответ со статусом 429, возвращается
    RateLimitFailure с retry-after/remaining из заголовков.

    Args:
        error: Исходная ошибка источника данных
        operation: Имя операции (например, 'get_followers')
        arguments: Входные аргументы операции
        phase: Фаза сбоя

    Returns:
        UpstreamFailure (или RateLimitFailure); уже классифицированные
        ошибки возвращаются как есть
    """
    if isinstance(error, UpstreamFailure):
        return error

    message = str(error) or error.__class__.__name__
    response = getattr(error, "response", None)

    if response is not None and _response_status(response) == HTTP_TOO_MANY_REQUESTS:
        headers = getattr(response, "headers", None)
        return RateLimitFailure(
            message,
            operation,
            arguments,
            phase,
            retry_after=_header(headers, "retry-after", "ratelimit-reset")
            or DEFAULT_RETRY_AFTER,
            remaining=_header(headers, "x-ratelimit-remaining-minute", "ratelimit-remaining")
            or DEFAULT_REMAINING,
        )

    return UpstreamFailure(message, operation, arguments, phase)
