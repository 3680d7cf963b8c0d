"""
Stage 2: Category Scoring
=========================
Deterministic weighted scoring of the four readiness categories.

Categories:
- Business Idea: prototype (60%), milestones (40%)
- Financials: revenue (30%), MRR (35%), cap table (20%), external capital (15%)
- Team: full-time team (60%), team size (40%)
- Traction: term sheets (40%), investors (30%), revenue (15%), MRR (15%)
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

from ..models.schemas import NormalizedAnswers, CategoryScore, Category
from ..config.settings import (
    CATEGORY_SIGNAL_WEIGHTS,
    SIGNAL_PHRASES,
    STRONG_SIGNAL_MIN,
    WEAK_SIGNAL_MAX,
    UNKNOWN_SIGNAL,
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero"""
    # Trim float noise first so 92.49999999999999 and 92.5 agree
    trimmed = Decimal(repr(round(value, 9)))
    return int(trimmed.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class CategoryScoringStage:
    """
    Stage 2: Calculate a 0-100 score and explanation per category.
    """

    def __init__(self, signal_weights: Optional[Dict[str, Dict[str, float]]] = None):
        self.signal_weights = signal_weights or CATEGORY_SIGNAL_WEIGHTS

    def process(self, normalized: NormalizedAnswers) -> Dict[Category, CategoryScore]:
        """
        Score every category.

        Args:
            normalized: Signals from Stage 1

        Returns:
            Mapping of category to CategoryScore
        """
        return {
            category: self.score_category(category, normalized.signals[category])
            for category in Category
        }

    def score_category(self, category: Category, signals: Dict[str, float]) -> CategoryScore:
        """Weighted sum of a category's signals, clamped and rounded"""
        weights = self.signal_weights[category.value]

        weighted = sum(signals.get(name, UNKNOWN_SIGNAL) * weight for name, weight in weights.items())
        score = round_half_up(clamp(weighted, 0, 100))

        return CategoryScore(
            score=score,
            explanation=self._explain(signals, weights),
            signals=dict(signals),
        )

    def _explain(self, signals: Dict[str, float], weights: Dict[str, float]) -> str:
        """Pick phrases for the strongest and weakest signals"""
        # Ties resolve to the heavier-weighted signal
        strongest = min(weights, key=lambda name: (-signals.get(name, UNKNOWN_SIGNAL), -weights[name]))
        weakest = min(weights, key=lambda name: (signals.get(name, UNKNOWN_SIGNAL), -weights[name]))

        parts = [self._phrase(strongest, signals.get(strongest, UNKNOWN_SIGNAL))]
        if weakest != strongest:
            weak_phrase = self._phrase(weakest, signals.get(weakest, UNKNOWN_SIGNAL))
            if weak_phrase not in parts:
                parts.append(weak_phrase)

        text = ", ".join(parts)
        return text[0].upper() + text[1:]

    def _phrase(self, name: str, value: float) -> str:
        strong, partial, weak, unanswered = SIGNAL_PHRASES[name]
        if value == UNKNOWN_SIGNAL:
            return unanswered
        if value >= STRONG_SIGNAL_MIN:
            return strong
        if value <= WEAK_SIGNAL_MAX:
            return weak
        return partial
