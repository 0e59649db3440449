"""Stages — стадии pipeline обработки позиций.

- STAGE 1: Position Normalizer (отбрасывает нулевой stake)
- STAGE 2: Opposition Classifier (atom/relationship, support/oppose, ratio)
- STAGE 3: Relevance Ranker (стабильная сортировка по shares)
- STAGE 4: Response Shaper (payload + digest)
"""

from .stage_01_normalizer import filter_zero_share_positions
from .stage_02_classifier import (
    build_opposition_metrics,
    build_relationship,
    classify_position,
    describe_atom,
    describe_triple,
    normalize_account_id,
    position_term_id,
    resolve_stance,
    triple_opposition_metrics,
)
from .stage_03_ranker import rank_by_shares, rank_positions
from .stage_04_shaper import (
    ELLIPSIS,
    OPPOSING_MARKER,
    OPPOSITION_MATERIALITY_THRESHOLD,
    PositionTotals,
    ResponseShaper,
    ShapedResponse,
    ShaperConfig,
    format_numbered_list,
    format_position_summary,
    shape_positions,
    truncate_text,
)

__all__ = [
    "filter_zero_share_positions",
    "build_opposition_metrics",
    "build_relationship",
    "classify_position",
    "describe_atom",
    "describe_triple",
    "normalize_account_id",
    "position_term_id",
    "resolve_stance",
    "triple_opposition_metrics",
    "rank_by_shares",
    "rank_positions",
    "ELLIPSIS",
    "OPPOSING_MARKER",
    "OPPOSITION_MATERIALITY_THRESHOLD",
    "PositionTotals",
    "ResponseShaper",
    "ShapedResponse",
    "ShaperConfig",
    "format_numbered_list",
    "format_position_summary",
    "shape_positions",
    "truncate_text",
]
