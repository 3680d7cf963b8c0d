"""
Stage 5: Badges & Recommendations
=================================
Qualitative output for a scored assessment.

Badges:
- Fixed catalog, each earned by one threshold over a score or one raw answer

Recommendations:
- Categories below the threshold are sent to the text-generation service
- Everything else, and anything the service fails to deliver, comes from a
  static table of three suggestions per category
"""

import time
from typing import Optional, Dict, Any, List

from ..models.schemas import (
    AssessmentAnswers,
    ScoreResult,
    Badge,
    BadgeResult,
    Recommendations,
    ResultSource,
    Category,
)
from ..config.settings import (
    BADGE_CATALOG,
    DEFAULT_THRESHOLDS,
    FALLBACK_RECOMMENDATIONS,
    RECOMMENDATIONS_PER_CATEGORY,
)
from ..config.logging import get_logger
from ..llm_client import TextGenerationClient

logger = get_logger(__name__)

CATEGORY_LABELS = {
    "businessIdea": "Business Idea",
    "financials": "Financials",
    "team": "Team",
    "traction": "Traction",
}

CATEGORY_FOCUS = {
    "businessIdea": "suggest actions to clarify value proposition or market size",
    "financials": "recommend steps for revenue, MRR, or cap table clarity",
    "team": "advise on expertise or hiring",
    "traction": "suggest customer validation or investor outreach",
}


class BadgeRecommendationStage:
    """
    Stage 5: Select badges and improvement recommendations.
    """

    def __init__(
        self,
        llm_client: Optional[TextGenerationClient] = None,
        thresholds: Optional[Dict[str, int]] = None,
    ):
        self.llm_client = llm_client
        self.thresholds = {**DEFAULT_THRESHOLDS, **(thresholds or {})}

    def process(self, score: ScoreResult, answers: AssessmentAnswers) -> BadgeResult:
        """
        Derive badges and recommendations.

        Args:
            score: ScoreResult from Stage 3
            answers: The raw answers that produced it

        Returns:
            BadgeResult with the full badge catalog and recommendations
        """
        return BadgeResult(
            badges=self.select_badges(score, answers),
            recommendations=self.select_recommendations(score, answers),
        )

    # =========================================================================
    # Badges
    # =========================================================================

    def select_badges(self, score: ScoreResult, answers: AssessmentAnswers) -> List[Badge]:
        """Evaluate every badge in the catalog"""
        return [self._evaluate_badge(entry, score, answers) for entry in BADGE_CATALOG]

    def _evaluate_badge(
        self, entry: Dict[str, Any], score: ScoreResult, answers: AssessmentAnswers
    ) -> Badge:
        rule = entry["rule"]

        if "answer" in rule:
            field_name = rule["answer"]
            earned = getattr(answers, field_name) is True
            progress = 100 if earned else entry["progress_unearned"]
            criterion = f"{field_name} is true"
        else:
            threshold = self.thresholds[rule["threshold"]]
            value = self._score_value(score, rule["score"])
            earned = value >= threshold
            progress = min(100, value * 100 // threshold) if threshold else 100
            criterion = f"{rule['score']} >= {threshold}"

        return Badge(
            id=entry["id"],
            name=entry["name"],
            description=entry["description"],
            earned=earned,
            progress=progress,
            criterion=criterion,
        )

    @staticmethod
    def _score_value(score: ScoreResult, name: str) -> int:
        if name == "totalScore":
            return score.totalScore
        return getattr(score, name).score

    # =========================================================================
    # Recommendations
    # =========================================================================

    def select_recommendations(
        self, score: ScoreResult, answers: AssessmentAnswers
    ) -> Recommendations:
        """Three suggestions per category, generated where possible"""
        threshold = self.thresholds["recommendation_threshold"]
        category_scores = score.category_scores()
        focus = [name for name, value in category_scores.items() if value < threshold]

        generated: Dict[str, List[str]] = {}
        if focus:
            generated = self._generate(score, answers, focus)

        picked: Dict[str, List[str]] = {}
        sources: Dict[str, ResultSource] = {}
        for category in Category:
            name = category.value
            if name in generated:
                picked[name] = generated[name]
                sources[name] = ResultSource.LLM
            else:
                picked[name] = list(FALLBACK_RECOMMENDATIONS[name])
                sources[name] = ResultSource.FALLBACK

        return Recommendations(**picked, sources=sources, focus_categories=focus)

    def _generate(
        self, score: ScoreResult, answers: AssessmentAnswers, focus: List[str]
    ) -> Dict[str, List[str]]:
        """Ask the text-generation service; empty dict when it cannot help"""
        if not self.llm_client or not self.llm_client.available:
            return {}

        start_time = time.time()
        try:
            data = self.llm_client.generate_json(
                system_prompt=(
                    "You are an expert startup advisor specializing in helping pre-seed "
                    "startups become investor-ready. Always respond with valid JSON only, "
                    "no additional text."
                ),
                prompt=self._generate_prompt(score, answers, focus),
            )
        except Exception as e:
            logger.warning(f"Recommendation generation failed, using fallback: {str(e)[:100]}")
            return {}

        generated = {}
        for name in focus:
            items = _valid_recommendations(data.get(name))
            if items is None:
                logger.warning(f"Generated recommendations for {name} unusable, using fallback")
                continue
            generated[name] = items

        logger.debug(f"Recommendations generated in {(time.time() - start_time) * 1000:.1f}ms")
        return generated

    def _generate_prompt(
        self, score: ScoreResult, answers: AssessmentAnswers, focus: List[str]
    ) -> str:
        """Generate the recommendation prompt with context"""

        def fmt(value):
            if value is None:
                return "Not answered"
            return value.value if hasattr(value, "value") else value

        answer_lines = "\n".join(
            f"- {name}: {fmt(getattr(answers, name))}"
            for name in AssessmentAnswers.model_fields
        )
        score_lines = "\n".join(
            f"- {CATEGORY_LABELS[name]}: {value}/100"
            for name, value in score.category_scores().items()
        )
        focus_lines = "\n".join(
            f"- {name} ({CATEGORY_LABELS[name]}): {CATEGORY_FOCUS[name]}" for name in focus
        )
        example = ",\n".join(
            f'  "{name}": ["recommendation 1", "recommendation 2", "recommendation 3"]'
            for name in focus
        )

        return f"""Given a startup assessment and scores, provide {RECOMMENDATIONS_PER_CATEGORY} actionable recommendations per category to improve investor readiness.

Assessment Data:
{answer_lines}

Scores:
{score_lines}
- Total: {score.totalScore}/999

Categories needing improvement:
{focus_lines}

Return ONLY a JSON object with {RECOMMENDATIONS_PER_CATEGORY} recommendations (50 words max each) for each listed category:

{{
{example}
}}"""


def _valid_recommendations(value: Any) -> Optional[List[str]]:
    """Exactly three non-empty strings, or None"""
    if not isinstance(value, list) or len(value) != RECOMMENDATIONS_PER_CATEGORY:
        return None
    items = [item.strip() for item in value if isinstance(item, str) and item.strip()]
    if len(items) != RECOMMENDATIONS_PER_CATEGORY:
        return None
    return items
