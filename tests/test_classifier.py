"""Tests for the investor classifier."""

import pytest
from pydantic import ValidationError

from readiness_engine.classifier import InvestorClassifier
from readiness_engine.models.schemas import InvestorIntake, InvestorCategory, ResultSource
from readiness_engine.llm_client import LLMResponseError

from tests.fakes import FakeLLMClient


# ============================================================================
# Rule-table fallback
# ============================================================================


class TestFallbackClassification:
    def setup_method(self):
        self.classifier = InvestorClassifier()

    def test_personal_capital_small_checks_is_angel(self):
        intake = InvestorIntake(personalCapital=True, checkSize="low")
        result = self.classifier.process(intake)

        assert result.category == InvestorCategory.ANGEL
        assert result.confidence == pytest.approx(0.6)
        assert result.source == ResultSource.FALLBACK

    def test_very_high_checks_is_institutional(self):
        intake = InvestorIntake(structuredFund=True, checkSize="veryHigh")
        result = self.classifier.process(intake)

        assert result.category == InvestorCategory.INSTITUTIONAL
        assert result.confidence == pytest.approx(0.5)

    def test_esg_and_public_deals_is_crowdfunding(self):
        intake = InvestorIntake(esgMetrics=True, dealSource="public", checkSize="high")
        result = self.classifier.process(intake)
        assert result.category == InvestorCategory.CROWDFUNDING

    def test_tie_resolved_by_precedence(self):
        # VC 20 vs Family Office 20
        intake = InvestorIntake(structuredFund=True, frequency="portfolio", objective="strategic")
        result = self.classifier.process(intake)

        assert result.category == InvestorCategory.VC
        assert result.confidence == pytest.approx(0.4)

    def test_empty_intake_is_angel_with_zero_confidence(self):
        result = self.classifier.process(InvestorIntake())
        assert result.category == InvestorCategory.ANGEL
        assert result.confidence == 0

    def test_angel_override_after_max_score(self):
        intake = InvestorIntake(
            personalCapital=True,
            checkSize="medium",
            esgMetrics=True,
            dealSource="public",
            structuredFund=True,
        )
        scores = self.classifier.score_categories(intake)
        assert scores["Angel"] == 30
        assert self.classifier.process(intake).category == InvestorCategory.ANGEL

    def test_personal_capital_beats_structured_fund(self):
        intake = InvestorIntake(personalCapital=True, checkSize="low", structuredFund=True)
        assert self.classifier.process(intake).category == InvestorCategory.ANGEL

    def test_confidence_capped_at_one(self):
        intake = InvestorIntake(
            personalCapital=True,
            checkSize="low",
            stage="preSeed",
            dealSource="personal",
            objective="support",
        )
        scores = self.classifier.score_categories(intake)
        assert scores["Angel"] == 60
        assert self.classifier.process(intake).confidence == 1

    def test_explanation_mentions_basis(self):
        intake = InvestorIntake(personalCapital=True, checkSize="low", stage="seed")
        result = self.classifier.process(intake)
        assert result.explanation == (
            "Angel classification based on personal capital, low check size, and seed stage focus."
        )

    def test_invalid_enum_rejected(self):
        with pytest.raises(ValidationError):
            InvestorIntake(checkSize="gigantic")


# ============================================================================
# AI path
# ============================================================================


class TestAIClassification:
    def test_valid_reply_used(self):
        client = FakeLLMClient(reply={
            "category": "Family Office",
            "confidence": 0.82,
            "explanation": "Strategic portfolio investor.",
        })
        result = InvestorClassifier(llm_client=client).process(InvestorIntake(frequency="portfolio"))

        assert result.category == InvestorCategory.FAMILY_OFFICE
        assert result.confidence == pytest.approx(0.82)
        assert result.source == ResultSource.LLM
        assert '"frequency": "portfolio"' in client.calls[0]

    def test_confidence_clamped(self):
        client = FakeLLMClient(reply={"category": "VC", "confidence": 3, "explanation": "x"})
        result = InvestorClassifier(llm_client=client).process(InvestorIntake())
        assert result.confidence == 1.0

    def test_missing_explanation_filled(self):
        client = FakeLLMClient(reply={"category": "VC", "confidence": 0.5})
        result = InvestorClassifier(llm_client=client).process(InvestorIntake())
        assert result.explanation == "VC classification."

    @pytest.mark.parametrize(
        "reply",
        [
            {"category": "Hedge Fund", "confidence": 0.9, "explanation": "x"},
            {"category": "VC", "confidence": "high", "explanation": "x"},
            {"category": "VC", "confidence": True, "explanation": "x"},
            {"category": None},
        ],
    )
    def test_unusable_reply_falls_back(self, reply):
        client = FakeLLMClient(reply=reply)
        intake = InvestorIntake(personalCapital=True, checkSize="low")
        result = InvestorClassifier(llm_client=client).process(intake)

        assert result.source == ResultSource.FALLBACK
        assert result.category == InvestorCategory.ANGEL

    @pytest.mark.parametrize("error", [TimeoutError("timed out"), LLMResponseError("not json")])
    def test_service_errors_fall_back(self, error):
        client = FakeLLMClient(error=error)
        result = InvestorClassifier(llm_client=client).process(InvestorIntake(structuredFund=True))

        assert result.source == ResultSource.FALLBACK
        assert result.category == InvestorCategory.VC
