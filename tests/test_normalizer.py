"""Tests for answer parsing and Stage 1 normalization."""

import pytest

from readiness_engine.models.schemas import AssessmentAnswers, Category, MRRLevel
from readiness_engine.stages.stage1_normalizer import AnswerNormalizationStage
from readiness_engine.config.settings import UNKNOWN_SIGNAL


# ============================================================================
# AssessmentAnswers parsing
# ============================================================================


class TestAssessmentAnswers:
    def test_unknown_string_becomes_none(self):
        answers = AssessmentAnswers(prototype="unknown", mrr="unknown")
        assert answers.prototype is None
        assert answers.mrr is None

    def test_yes_no_strings(self):
        answers = AssessmentAnswers(prototype="yes", revenue="No", capTable="true")
        assert answers.prototype is True
        assert answers.revenue is False
        assert answers.capTable is True

    def test_out_of_domain_enum_is_unknown(self):
        answers = AssessmentAnswers(mrr="enormous", employees=12, milestones=["scale"])
        assert answers.mrr is None
        assert answers.employees is None
        assert answers.milestones is None

    def test_enum_values_parsed(self):
        answers = AssessmentAnswers(mrr="medium", investors="lateStage")
        assert answers.mrr == MRRLevel.MEDIUM
        assert answers.investors.value == "lateStage"

    def test_funding_goal_blank_is_unknown(self):
        assert AssessmentAnswers(fundingGoal="").fundingGoal is None
        assert AssessmentAnswers(fundingGoal="unknown").fundingGoal is None
        assert AssessmentAnswers(fundingGoal=500000).fundingGoal == "500000"

    def test_extra_fields_ignored(self):
        answers = AssessmentAnswers(prototype=True, favouriteColour="blue")
        assert not hasattr(answers, "favouriteColour")


# ============================================================================
# Stage 1
# ============================================================================


class TestAnswerNormalizationStage:
    def setup_method(self):
        self.stage = AnswerNormalizationStage()

    def test_boolean_signals(self):
        assert self.stage.signal_for("prototype", True) == 100.0
        assert self.stage.signal_for("prototype", False) == 0.0

    def test_unknown_differs_from_false(self):
        unknown = self.stage.signal_for("prototype", None)
        assert unknown == UNKNOWN_SIGNAL
        assert unknown != self.stage.signal_for("prototype", False)

    @pytest.mark.parametrize(
        "field_name,value,expected",
        [
            ("mrr", "none", 0.0),
            ("mrr", "low", 25.0),
            ("mrr", "medium", 60.0),
            ("mrr", "high", 100.0),
            ("milestones", "launch", 35.0),
            ("employees", "11-50", 70.0),
            ("investors", "angels", 35.0),
        ],
    )
    def test_ordinal_tables(self, field_name, value, expected):
        assert self.stage.signal_for(field_name, value) == expected

    def test_ordinals_are_monotonic(self):
        levels = [self.stage.signal_for("mrr", m) for m in MRRLevel]
        assert levels == sorted(levels)

    def test_signal_layout(self, strong_answers):
        result = self.stage.process(strong_answers)

        assert set(result.signals[Category.BUSINESS_IDEA]) == {"prototype", "milestones"}
        assert set(result.signals[Category.FINANCIALS]) == {
            "revenue", "mrr", "capTable", "externalCapital",
        }
        assert set(result.signals[Category.TEAM]) == {"fullTimeTeam", "employees"}
        assert set(result.signals[Category.TRACTION]) == {
            "termSheets", "investors", "revenue", "mrr",
        }

    def test_unknown_fields_reported_once(self):
        result = self.stage.process(AssessmentAnswers(prototype=True))
        assert "prototype" not in result.unknown_fields
        assert result.unknown_fields.count("mrr") == 1
        assert result.signals[Category.FINANCIALS]["mrr"] == UNKNOWN_SIGNAL

    def test_signals_bounded(self, max_answers, weak_answers):
        for answers in (max_answers, weak_answers, AssessmentAnswers()):
            result = self.stage.process(answers)
            for signals in result.signals.values():
                assert all(0 <= v <= 100 for v in signals.values())
