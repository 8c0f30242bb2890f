"""
Unit tests for the shared risk vocabulary.
"""
import pytest

from app.core.risk import RiskClassification, RiskLevel, max_level


@pytest.mark.unit
class TestRiskLevel:

    def test_ordering(self):
        assert RiskLevel.HIGH.at_least(RiskLevel.MODERATE)
        assert RiskLevel.MODERATE.at_least(RiskLevel.MODERATE)
        assert not RiskLevel.LOW.at_least(RiskLevel.MODERATE)
        assert RiskLevel.VERY_HIGH.rank > RiskLevel.HIGH.rank

    def test_unknown_has_no_rank(self):
        assert RiskLevel.UNKNOWN.rank is None
        assert not RiskLevel.UNKNOWN.is_known
        assert not RiskLevel.UNKNOWN.at_least(RiskLevel.MINIMAL)
        assert not RiskLevel.HIGH.at_least(RiskLevel.UNKNOWN)

    def test_serializes_as_string(self):
        assert RiskLevel.VERY_HIGH.value == "very_high"
        assert RiskLevel("elevated") is RiskLevel.ELEVATED


@pytest.mark.unit
class TestMaxLevel:

    def test_highest_known(self):
        levels = [RiskLevel.LOW, RiskLevel.UNKNOWN, RiskLevel.ELEVATED]
        assert max_level(levels) == RiskLevel.ELEVATED

    def test_empty_is_unknown(self):
        assert max_level([]) == RiskLevel.UNKNOWN

    def test_all_unknown_is_unknown(self):
        assert max_level([RiskLevel.UNKNOWN]) == RiskLevel.UNKNOWN


@pytest.mark.unit
def test_classification_is_frozen():
    classification = RiskClassification(level=RiskLevel.LOW, explanation="ok")
    assert classification.recommendations == []
    with pytest.raises(Exception):
        classification.level = RiskLevel.HIGH
