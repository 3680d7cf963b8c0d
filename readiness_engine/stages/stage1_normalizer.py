"""
Stage 1: Answer Normalization
=============================
Maps raw assessment answers into bounded numeric signals per category.

Rules:
- Boolean answers: yes -> 100, no -> 0
- Enumerated answers: fixed ordinal tables (e.g. MRR none/low/medium/high)
- Unanswered questions: a neutral non-zero value, so partial assessments
  are not scored like explicit "no" answers
"""

from typing import Dict, List, Optional, Any

from ..models.schemas import AssessmentAnswers, NormalizedAnswers, Category
from ..config.settings import (
    BOOLEAN_SIGNALS,
    ORDINAL_TABLES,
    CATEGORY_SIGNAL_WEIGHTS,
    UNKNOWN_SIGNAL,
)


class AnswerNormalizationStage:
    """
    Stage 1: Turn AssessmentAnswers into per-category signals in [0, 100].
    """

    def __init__(
        self,
        ordinal_tables: Optional[Dict[str, Dict[str, float]]] = None,
        unknown_signal: float = UNKNOWN_SIGNAL,
    ):
        self.ordinal_tables = ordinal_tables or ORDINAL_TABLES
        self.unknown_signal = unknown_signal

    def process(self, answers: AssessmentAnswers) -> NormalizedAnswers:
        """
        Normalize answers.

        Args:
            answers: Raw assessment answers (any field may be unknown)

        Returns:
            NormalizedAnswers with signals grouped by category
        """
        signals: Dict[Category, Dict[str, float]] = {}
        unknown: List[str] = []

        for category in Category:
            signals[category] = {}
            for field_name in CATEGORY_SIGNAL_WEIGHTS[category.value]:
                value = getattr(answers, field_name)
                if value is None and field_name not in unknown:
                    unknown.append(field_name)
                signals[category][field_name] = self.signal_for(field_name, value)

        return NormalizedAnswers(signals=signals, unknown_fields=unknown)

    def signal_for(self, field_name: str, value: Any) -> float:
        """Normalized contribution of a single answer"""
        if value is None:
            return self.unknown_signal

        if field_name in self.ordinal_tables:
            raw = value.value if hasattr(value, "value") else value
            return self.ordinal_tables[field_name].get(raw, self.unknown_signal)

        if isinstance(value, bool):
            return BOOLEAN_SIGNALS[value]

        return self.unknown_signal
