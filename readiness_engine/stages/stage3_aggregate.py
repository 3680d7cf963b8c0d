"""
Stage 3: Total Score Aggregation
================================
Combines the four category scores into a single 0-999 total:

    total = round(999 * sum(weight_c * score_c / 100))

Weights come from the caller's ScoringProfile (renormalized to sum to 1.0),
or the default 30/25/25/20 split.
"""

from typing import Dict, Optional

from ..models.schemas import Category, CategoryScore, ScoreResult
from ..models.scoring_profile import ScoringProfile, create_default_profile
from ..config.settings import MAX_TOTAL_SCORE
from .stage2_category import round_half_up, clamp


class TotalScoreStage:
    """
    Stage 3: Weighted aggregation of category scores.
    """

    def process(
        self,
        category_scores: Dict[Category, CategoryScore],
        profile: Optional[ScoringProfile] = None,
    ) -> ScoreResult:
        """
        Build the final ScoreResult.

        Args:
            category_scores: Output of Stage 2
            profile: Active weighting profile (defaults used if not provided)

        Returns:
            Immutable ScoreResult
        """
        weights = (profile or create_default_profile()).normalized().weights
        total = self.total_score({c.value: s.score for c, s in category_scores.items()}, weights)

        return ScoreResult(
            businessIdea=category_scores[Category.BUSINESS_IDEA],
            financials=category_scores[Category.FINANCIALS],
            team=category_scores[Category.TEAM],
            traction=category_scores[Category.TRACTION],
            totalScore=total,
            weights=weights,
        )

    @staticmethod
    def total_score(scores: Dict[str, int], weights: Dict[str, float]) -> int:
        """Weighted 0-999 total for already-normalized weights"""
        fraction = sum(weights[name] * scores[name] / 100 for name in weights)
        return round_half_up(clamp(MAX_TOTAL_SCORE * fraction, 0, MAX_TOTAL_SCORE))
