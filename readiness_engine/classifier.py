"""
Investor Classifier
===================
Assigns an investor to one of five categories: Angel, VC, Family Office,
Institutional, Crowdfunding.

Primary path asks the text-generation service. Whenever it is missing, fails,
times out or answers with something unusable, a deterministic point table
decides instead. Callers always get a ClassificationResult.
"""

import json
import time
from typing import Optional, Dict, Any

from .models.schemas import (
    InvestorIntake,
    ClassificationResult,
    InvestorCategory,
    CheckSize,
    ResultSource,
)
from .config.settings import (
    INVESTOR_CATEGORIES,
    INVESTOR_RULES,
    INVESTOR_CONFIDENCE_DIVISOR,
)
from .config.logging import get_logger
from .llm_client import TextGenerationClient, LLMResponseError

logger = get_logger(__name__)


class InvestorClassifier:
    """
    Stateless investor classification with an AI path and a rule-based fallback.
    """

    def __init__(self, llm_client: Optional[TextGenerationClient] = None):
        self.llm_client = llm_client

    def process(self, intake: InvestorIntake) -> ClassificationResult:
        """
        Classify an investor.

        Args:
            intake: Validated investor intake answers

        Returns:
            ClassificationResult (never raises for external-service problems)
        """
        start_time = time.time()

        # If no LLM client, return the rule-based classification
        if not self.llm_client or not self.llm_client.available:
            return self.fallback_classification(intake)

        try:
            data = self.llm_client.generate_json(
                system_prompt="You are an expert investor classifier. Always respond with valid JSON only.",
                prompt=self._generate_prompt(intake),
            )
            result = self._parse_response(data)
        except Exception as e:
            logger.warning(f"AI classification failed, using fallback: {str(e)[:100]}")
            return self.fallback_classification(intake)

        logger.debug(f"AI classification took {(time.time() - start_time) * 1000:.1f}ms")
        return result

    def _generate_prompt(self, intake: InvestorIntake) -> str:
        """Describe the intake and the scoring rules in plain language"""
        payload = json.dumps(intake.model_dump(mode="json", exclude_none=True))
        categories = ", ".join(INVESTOR_CATEGORIES[:-1]) + f", or {INVESTOR_CATEGORIES[-1]}"

        return f"""Given a JSON input from an investor assessment form, classify the investor into one category: {categories}.

Scoring rules:
- personalCapital (Yes: +20 to Angel)
- structuredFund (Yes: +20 to VC)
- esgMetrics (Yes: +15 to Crowdfunding)
- checkSize (veryHigh: +25 to Institutional, low/medium: +10 to Angel)
- Tiebreaker: Prioritize Angel if personalCapital is true and checkSize is low/medium

Input: {payload}

Return a JSON object with category, confidence (0-1), and explanation (<50 words)."""

    def _parse_response(self, data: Dict[str, Any]) -> ClassificationResult:
        """Validate the model's JSON reply"""
        try:
            category = InvestorCategory(data.get("category"))
        except (ValueError, TypeError) as e:
            raise LLMResponseError(f"Unknown investor category: {data.get('category')!r}") from e

        confidence = data.get("confidence")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            raise LLMResponseError(f"Confidence is not a number: {confidence!r}")

        explanation = data.get("explanation")
        if not isinstance(explanation, str) or not explanation.strip():
            explanation = f"{category.value} classification."

        return ClassificationResult(
            category=category,
            confidence=max(0.0, min(1.0, float(confidence))),
            explanation=explanation.strip(),
            source=ResultSource.LLM,
        )

    # =========================================================================
    # Deterministic fallback
    # =========================================================================

    def score_categories(self, intake: InvestorIntake) -> Dict[str, int]:
        """Accumulate rule points per category"""
        scores = {category: 0 for category in INVESTOR_CATEGORIES}

        for field_name, matches, category, points in INVESTOR_RULES:
            value = getattr(intake, field_name)
            raw = value.value if hasattr(value, "value") else value
            if raw in matches:
                scores[category] += points

        return scores

    def fallback_classification(self, intake: InvestorIntake) -> ClassificationResult:
        """Rule-table classification used whenever the AI path is not usable"""
        scores = self.score_categories(intake)

        # Strictly greater keeps the earlier (higher precedence) category on ties
        max_score = 0
        category = INVESTOR_CATEGORIES[0]
        for name in INVESTOR_CATEGORIES:
            if scores[name] > max_score:
                max_score = scores[name]
                category = name

        # Applied after the max-score selection
        if intake.personalCapital and intake.checkSize in (CheckSize.LOW, CheckSize.MEDIUM):
            category = InvestorCategory.ANGEL.value

        confidence = min(max_score / INVESTOR_CONFIDENCE_DIVISOR, 1)

        return ClassificationResult(
            category=InvestorCategory(category),
            confidence=confidence,
            explanation=self._fallback_explanation(category, intake),
            source=ResultSource.FALLBACK,
        )

    @staticmethod
    def _fallback_explanation(category: str, intake: InvestorIntake) -> str:
        parts = []
        if intake.personalCapital:
            parts.append("personal capital")
        parts.append(f"{intake.checkSize.value if intake.checkSize else 'unspecified'} check size")
        parts.append(f"{intake.stage.value if intake.stage else 'unspecified'} stage focus")

        basis = ", ".join(parts[:-1]) + f", and {parts[-1]}"
        return f"{category} classification based on {basis}."
