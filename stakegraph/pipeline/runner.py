"""Position Pipeline — последовательное применение стадий 1-4.

Данные проходят строго вперёд: Normalizer → Classifier → Ranker → Shaper.
Никакая стадия не зависит от call site, кроме top-K (ShaperConfig) и
опционального фильтра по виду позиции.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from pydantic import ValidationError

from stakegraph.core.domain.position import PositionKind, ProcessedPosition, RawPosition
from stakegraph.pipeline.stages.stage_01_normalizer import filter_zero_share_positions
from stakegraph.pipeline.stages.stage_02_classifier import classify_position
from stakegraph.pipeline.stages.stage_03_ranker import rank_positions
from stakegraph.pipeline.stages.stage_04_shaper import (
    PositionTotals,
    ResponseShaper,
    ShapedResponse,
    ShaperConfig,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    """Результат стадий 1-3."""

    ranked: tuple[ProcessedPosition, ...]
    totals: PositionTotals

    # Диагностика
    input_count: int
    discarded_count: int  # нулевой/малформированный stake
    skipped_count: int  # term не atom и не triple, либо запись не парсится


def parse_raw_position(record: RawPosition | dict) -> Optional[RawPosition]:
    """Lenient-парсинг сырой записи; None если запись не парсится вовсе"""
    if isinstance(record, RawPosition):
        return record
    try:
        return RawPosition.model_validate(record)
    except ValidationError as e:
        logger.debug("Skipping unparseable position %r: %s", record.get("id"), e)
        return None


def process_positions(
    records: Iterable[RawPosition | dict],
    viewer_id: Optional[str] = None,
    kind: Optional[PositionKind] = None,
) -> PipelineResult:
    """Стадии 1-3: normalize → classify → rank.

    Args:
        records: Сырые позиции (dict от upstream или RawPosition)
        viewer_id: Аккаунт, с точки зрения которого строится ответ
        kind: Оставить только позиции данного вида (опционально)

    Returns:
        PipelineResult с ранжированным списком и агрегатами
    """
    records = list(records or ())
    non_zero = filter_zero_share_positions(records)

    processed: list[ProcessedPosition] = []
    skipped = 0
    for record in non_zero:
        raw = parse_raw_position(record)
        entry = classify_position(raw, viewer_id) if raw is not None else None
        if entry is None:
            skipped += 1
            continue
        if kind is not None and entry.type is not kind:
            continue
        processed.append(entry)

    if skipped:
        logger.debug("Skipped %d malformed position(s)", skipped)

    ranked = rank_positions(processed)
    return PipelineResult(
        ranked=tuple(ranked),
        totals=PositionTotals.from_positions(ranked),
        input_count=len(records),
        discarded_count=len(records) - len(non_zero),
        skipped_count=skipped,
    )


class PositionPipeline:
    """Полный pipeline: стадии 1-3 + Response Shaper."""

    def __init__(self, shaper_config: Optional[ShaperConfig] = None):
        self.shaper = ResponseShaper(shaper_config)

    def run(
        self,
        records: Iterable[RawPosition | dict],
        viewer_id: Optional[str] = None,
        kind: Optional[PositionKind] = None,
    ) -> PipelineResult:
        return process_positions(records, viewer_id, kind)

    def shape(self, ranked: Sequence[ProcessedPosition] | PipelineResult) -> ShapedResponse:
        if isinstance(ranked, PipelineResult):
            ranked = ranked.ranked
        return self.shaper.shape(ranked)
