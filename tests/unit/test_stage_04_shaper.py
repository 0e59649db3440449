"""Тесты для STAGE 4: Response Shaper

Покрытие:
- Согласованность payload и digest (одинаковые итоги)
- top-K и пустой список
- Аннотации [OPPOSING] и [N% opposition] (строго больше порога)
- Усечение строк с ellipsis
"""

import pytest

from stakegraph.core.domain import OppositionMetrics, PositionKind, ProcessedPosition, Stance
from stakegraph.pipeline.stages import (
    PositionTotals,
    ResponseShaper,
    ShaperConfig,
    format_position_summary,
    shape_positions,
    truncate_text,
)


def relationship(
    shares: str,
    text: str = "Alice knows Bob",
    stance: Stance = Stance.SUPPORT,
    ratio: float = 0.0,
    percent: int = 0,
) -> ProcessedPosition:
    return ProcessedPosition(
        type=PositionKind.RELATIONSHIP,
        shares=shares,
        position_type=stance,
        opposition_metrics=OppositionMetrics(
            opposition_ratio=ratio, opposition_percent=percent, support_shares="0", oppose_shares="0"
        ),
        human_readable=text,
    )


def atom(shares: str, text: str = "Ethereum") -> ProcessedPosition:
    return ProcessedPosition(type=PositionKind.ATOM, shares=shares, human_readable=text)


# =============================================================================
# CONFIG
# =============================================================================


class TestShaperConfig:
    """Валидация ShaperConfig"""

    def test_defaults(self) -> None:
        config = ShaperConfig()
        assert config.top_k == 10
        assert config.opposition_threshold == 0.25
        assert config.ellipsis == "..."

    def test_negative_top_k(self) -> None:
        with pytest.raises(ValueError):
            ShaperConfig(top_k=-1)

    def test_threshold_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            ShaperConfig(opposition_threshold=1.5)

    def test_entry_shorter_than_ellipsis(self) -> None:
        with pytest.raises(ValueError):
            ShaperConfig(entry_max_chars=3)


# =============================================================================
# FORMATTING
# =============================================================================


class TestFormatting:
    """Форматирование строк digest"""

    def test_plain_support(self) -> None:
        assert format_position_summary(relationship("1")) == "Alice knows Bob"

    def test_opposing_marker(self) -> None:
        pos = relationship("1", stance=Stance.OPPOSE)
        assert format_position_summary(pos) == "Alice knows Bob [OPPOSING]"

    def test_material_opposition_annotated(self) -> None:
        pos = relationship("1", stance=Stance.OPPOSE, ratio=1 / 3, percent=33)
        assert format_position_summary(pos) == "Alice knows Bob [OPPOSING] [33% opposition]"

    def test_threshold_is_strict(self) -> None:
        """Ровно 25% не аннотируется"""
        assert "opposition]" not in format_position_summary(relationship("1", ratio=0.25, percent=25))
        assert "[26% opposition]" in format_position_summary(
            relationship("1", ratio=0.26, percent=26)
        )

    def test_atom_has_no_annotations(self) -> None:
        assert format_position_summary(atom("1")) == "Ethereum"

    def test_truncate(self) -> None:
        assert truncate_text("abcdef", 5) == "ab..."
        assert truncate_text("abcde", 5) == "abcde"
        assert truncate_text("abcdef", 5, "~") == "abcd~"


# =============================================================================
# SHAPER
# =============================================================================


class TestResponseShaper:
    """Тесты для ResponseShaper.shape"""

    def test_payload_and_digest_agree(self) -> None:
        ranked = [
            relationship("100"),
            relationship("50", stance=Stance.OPPOSE, ratio=1 / 3, percent=33),
            atom("10"),
        ]
        shaped = shape_positions(ranked)

        totals = shaped.payload["totals"]
        assert totals == {
            "total": 3,
            "relationships": 2,
            "atoms": 1,
            "supportCount": 1,
            "oppositionCount": 1,
        }
        assert "Summary: 3 positions (2 relationships, 1 atoms); 1 supporting, 1 opposing." in (
            shaped.digest
        )
        assert shaped.totals == PositionTotals(3, 2, 1, 1, 1)

    def test_digest_layout(self) -> None:
        ranked = [relationship("100"), atom("10")]
        digest = shape_positions(ranked, ShaperConfig(title="TOP POSITIONS")).digest
        lines = digest.split("\n")
        assert lines[0] == "**TOP POSITIONS** (2 total, showing top 2):"
        assert lines[1] == "1. Alice knows Bob"
        assert lines[2] == "2. Ethereum"
        assert lines[3] == ""
        assert lines[4].startswith("Summary:")

    def test_top_k_limits_digest_not_payload(self) -> None:
        ranked = [atom(str(100 - i), f"atom-{i}") for i in range(12)]
        shaped = ResponseShaper(ShaperConfig(top_k=5)).shape(ranked)

        assert shaped.shown == 5
        assert shaped.payload["shown"] == 5
        assert len(shaped.payload["positions"]) == 12
        assert "5. atom-4" in shaped.digest
        assert "6. atom-5" not in shaped.digest
        assert "(12 total, showing top 5)" in shaped.digest

    def test_digest_order_matches_payload(self) -> None:
        ranked = [atom("3", "first"), atom("2", "second")]
        shaped = shape_positions(ranked)
        assert [p["human_readable"] for p in shaped.payload["positions"]] == ["first", "second"]
        assert shaped.digest.index("first") < shaped.digest.index("second")

    def test_empty(self) -> None:
        shaped = shape_positions([])
        assert "No positions found." in shaped.digest
        assert shaped.payload["positions"] == []
        assert shaped.payload["totals"]["total"] == 0

    def test_long_entry_truncated(self) -> None:
        shaped = shape_positions([atom("1", "x" * 500)], ShaperConfig(entry_max_chars=50))
        line = shaped.digest.split("\n")[1]
        assert line == "1. " + "x" * 47 + "..."
        # payload не усекается
        assert shaped.payload["positions"][0]["human_readable"] == "x" * 500

    def test_unclassified_stance_not_counted(self) -> None:
        pos = ProcessedPosition(
            type=PositionKind.RELATIONSHIP, shares="1", human_readable="Alice knows Bob"
        )
        totals = PositionTotals.from_positions([pos])
        assert totals.support == 0
        assert totals.oppose == 0
        assert totals.relationships == 1
