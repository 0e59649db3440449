"""
Response — модели tool result и построение ответов

ToolResult — transport-независимый envelope: список content-блоков
(text / resource с JSON) и флаг isError. Транспортный слой только
сериализует его.
"""

import json
import logging
from typing import Any, Final, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from stakegraph.errors import OperationFailure, RateLimitFailure

logger = logging.getLogger(__name__)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

JSON_MIME_TYPE: Final[str] = "application/json"

# Операции с fan-out, для которых ошибка rate limit дополняется пояснением
FAN_OUT_OPERATIONS: Final[frozenset[str]] = frozenset({"get_followers", "get_following"})

FAN_OUT_RATE_LIMIT_NOTE: Final[str] = (
    "Note: This operation analyzes many accounts at once. The system is limited "
    "to top {cap} accounts to prevent rate limits."
)


# =============================================================================
# MODELS
# =============================================================================

RESULT_CONFIG = ConfigDict(frozen=True, populate_by_name=True)


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str

    model_config = RESULT_CONFIG


class ResourceBody(BaseModel):
    uri: str
    text: str
    mime_type: str = Field(JSON_MIME_TYPE, alias="mimeType")

    model_config = RESULT_CONFIG


class ResourceContent(BaseModel):
    type: Literal["resource"] = "resource"
    resource: ResourceBody

    model_config = RESULT_CONFIG

    def data(self) -> Any:
        """Декодированный JSON ресурса"""
        return json.loads(self.resource.text)


class ToolResult(BaseModel):
    """Результат операции: content-блоки + флаг ошибки"""

    content: list[Union[ResourceContent, TextContent]] = Field(default_factory=list)
    is_error: bool = Field(False, alias="isError")

    model_config = RESULT_CONFIG

    def text(self) -> str:
        """Все text-блоки, склеенные через перевод строки"""
        return "\n".join(c.text for c in self.content if isinstance(c, TextContent))

    def resource(self) -> Any:
        """JSON первого resource-блока (None если его нет)"""
        for c in self.content:
            if isinstance(c, ResourceContent):
                return c.data()
        return None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")

    def size(self) -> int:
        """Размер сериализованного ответа в символах"""
        return len(json.dumps(self.to_payload()))


# =============================================================================
# BUILDERS
# =============================================================================


def json_resource(uri: str, data: Any) -> ResourceContent:
    return ResourceContent(resource=ResourceBody(uri=uri, text=json.dumps(data)))


def build_result(uri: str, data: Any, text: str | None = None) -> ToolResult:
    """Стандартный ответ: JSON resource + (опционально) текстовый digest"""
    content: list[Union[ResourceContent, TextContent]] = [json_resource(uri, data)]
    if text is not None:
        content.append(TextContent(text=text))
    return ToolResult(content=content)


def text_result(text: str, is_error: bool = False) -> ToolResult:
    return ToolResult(content=[TextContent(text=text)], is_error=is_error)


def error_result(failure: OperationFailure, fan_out_cap: int = 20) -> ToolResult:
    """
    Ответ об ошибке уровня операции.

    Для RateLimitFailure сообщение содержит actionable подсказку:
    сколько ждать и сколько запросов осталось.
    """
    logger.error("Error in operation %s: %s", failure.operation, failure.message)
    logger.error("Error context: %s", failure.context())

    message = failure.message
    if isinstance(failure, RateLimitFailure):
        message = (
            f"API rate limit exceeded. Please wait {failure.retry_after} seconds before "
            f"trying again. ({failure.remaining} requests remaining)"
        )
        if failure.operation in FAN_OUT_OPERATIONS:
            message += "\n\n" + FAN_OUT_RATE_LIMIT_NOTE.format(cap=fan_out_cap)

    return ToolResult(content=[TextContent(text=f"Error: {message}")], is_error=True)


# =============================================================================
# CLEANUP
# =============================================================================


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, list) and not value)


def remove_empty_fields(obj: Any) -> Any:
    """
    Рекурсивное удаление пустых значений.

    Удаляются None, пустые строки, пустые списки и dict-ы, ставшие пустыми
    после очистки (такой dict сам превращается в None). Примитивы
    возвращаются как есть.

    Examples:
        >>> remove_empty_fields({"a": "", "b": [None, "x"], "c": {"d": None}})
        {'b': ['x']}
    """
    if obj is None:
        return None

    if isinstance(obj, list):
        cleaned = (remove_empty_fields(item) for item in obj)
        return [item for item in cleaned if not _is_empty(item)]

    if isinstance(obj, dict):
        result = {}
        for key, value in obj.items():
            processed = remove_empty_fields(value)
            if not _is_empty(processed):
                result[key] = processed
        return result or None

    return obj
