"""
Operation — базовый класс операций над графом

Операция получает источник данных явно (dependency injection), вызывает
его через fetch() и возвращает ToolResult. Любой сбой получения данных
превращается в ОДНУ ошибку уровня операции с именем операции, аргументами
и фазой; внутри ядра retry не выполняется.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Mapping, Optional

from stakegraph.errors import PHASE_FETCH, UpstreamFailure, classify_upstream_error
from stakegraph.operations.response import ToolResult, error_result
from stakegraph.operations.source import GraphSource

logger = logging.getLogger(__name__)


class Operation(ABC):
    """Базовая операция.

    Подклассы задают name и реализуют run(); execute() оборачивает run()
    логированием и обработкой UpstreamFailure.
    """

    name: str = "operation"

    def __init__(self, source: GraphSource):
        self.source = source

    async def fetch(
        self,
        call: Awaitable[Any],
        arguments: Optional[Mapping[str, Any]] = None,
        phase: str = PHASE_FETCH,
    ) -> Any:
        """
        Вызов источника с классификацией ошибок.

        Raises:
            UpstreamFailure: Источник недоступен или отклонил запрос
            RateLimitFailure: Источник вернул 429
        """
        try:
            return await call
        except Exception as e:
            raise classify_upstream_error(e, self.name, arguments, phase) from e

    @abstractmethod
    async def run(self, **arguments: Any) -> ToolResult:
        """Тело операции; сбои источника поднимаются как UpstreamFailure"""

    def on_failure(self, failure: UpstreamFailure) -> ToolResult:
        return error_result(failure)

    async def execute(self, **arguments: Any) -> ToolResult:
        """Выполнение операции с преобразованием UpstreamFailure в error result"""
        logger.info("=== Starting %s ===", self.name)
        try:
            result = await self.run(**arguments)
        except UpstreamFailure as failure:
            return self.on_failure(failure)

        logger.info("%s response size: %d characters", self.name, result.size())
        return result
