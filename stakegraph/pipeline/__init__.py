"""Pipeline — обработка позиций с учётом оппозиции.

Normalizer → Classifier → Ranker → Shaper; чистое request-scoped
преобразование без состояния между вызовами.
"""

from .runner import PipelineResult, PositionPipeline, parse_raw_position, process_positions

__all__ = [
    "PipelineResult",
    "PositionPipeline",
    "parse_raw_position",
    "process_positions",
]
