"""
Readiness Scoring Engine - Main Orchestrator
============================================
Orchestrates the five-stage pipeline:
  Stage 1: Answer Normalization → Stage 2: Category Scoring →
  Stage 3: Total Aggregation → Stage 4: Cluster Mapping →
  Stage 5: Badges & Recommendations

The investor classifier runs beside the pipeline on its own input.

Key properties:
- Scoring is pure; identical answers and weights give identical results
- Scores are cached in-process by answer payload + normalized weights
- AI-backed features always resolve, falling back to rule tables
"""

import logging
import threading
import time
from datetime import datetime
from typing import Optional, Dict, Any

from .models.schemas import (
    AssessmentAnswers,
    InvestorIntake,
    ScoreResult,
    ClusterPlacement,
    BadgeResult,
    Recommendations,
    ClassificationResult,
    AssessmentReport,
    RescoreResult,
    ResultSource,
)
from .models.scoring_profile import ScoringProfile, create_default_profile
from .stages.stage1_normalizer import AnswerNormalizationStage
from .stages.stage2_category import CategoryScoringStage
from .stages.stage3_aggregate import TotalScoreStage
from .stages.stage4_cluster import ClusterMappingStage
from .stages.stage5_badges import BadgeRecommendationStage
from .classifier import InvestorClassifier
from .llm_client import TextGenerationClient
from .db.store import ReadinessStore, InMemoryStore, PersistenceError, payload_hash
from .config.logging import get_logger, log_with_context

logger = get_logger(__name__)

SCORE_CACHE_SIZE = 1024


class AssessmentNotFoundError(Exception):
    """No stored assessment with the given id"""


class ReadinessScoringEngine:
    """
    Main Readiness Scoring Engine that orchestrates all stages.
    """

    def __init__(
        self,
        store: Optional[ReadinessStore] = None,
        llm_client: Optional[TextGenerationClient] = None,
        thresholds: Optional[Dict[str, int]] = None,
    ):
        """
        Initialize the scoring engine.

        Args:
            store: Persistence backend (in-memory if not provided)
            llm_client: Text-generation client for AI features (fallbacks only if None)
            thresholds: Overrides for DEFAULT_THRESHOLDS
        """
        self.store = store or InMemoryStore()
        self.llm_client = llm_client

        # Initialize stages
        self.stage1 = AnswerNormalizationStage()
        self.stage2 = CategoryScoringStage()
        self.stage3 = TotalScoreStage()
        self.stage4 = ClusterMappingStage()
        self.stage5 = BadgeRecommendationStage(llm_client=llm_client, thresholds=thresholds)
        self.classifier = InvestorClassifier(llm_client=llm_client)

        self._score_cache: Dict[str, ScoreResult] = {}
        self._lock = threading.Lock()

        self.reset_stats()

    # =========================================================================
    # Scoring
    # =========================================================================

    def score_assessment(
        self,
        answers: AssessmentAnswers,
        profile: Optional[ScoringProfile] = None,
    ) -> ScoreResult:
        """
        Run stages 1-3 for one set of answers.

        Args:
            answers: Raw assessment answers
            profile: Weighting profile (defaults used if not provided)

        Returns:
            Immutable ScoreResult
        """
        profile = profile or create_default_profile()
        key = self._score_key(answers, profile)

        with self._lock:
            self.stats["assessments_scored"] += 1
            cached = self._score_cache.get(key)
            if cached is not None:
                self.stats["score_cache_hits"] += 1
                return cached

        # =====================================================================
        # STAGE 1: Answer Normalization
        # =====================================================================
        normalized = self.stage1.process(answers)

        # =====================================================================
        # STAGE 2: Category Scoring
        # =====================================================================
        category_scores = self.stage2.process(normalized)

        # =====================================================================
        # STAGE 3: Total Aggregation
        # =====================================================================
        result = self.stage3.process(category_scores, profile)

        with self._lock:
            if len(self._score_cache) >= SCORE_CACHE_SIZE:
                self._score_cache.pop(next(iter(self._score_cache)))
            self._score_cache[key] = result

        return result

    def place_in_cluster(
        self, total_score: int, answers: Optional[AssessmentAnswers] = None
    ) -> ClusterPlacement:
        """Stage 4, with sector/stage hints when the answers are known"""
        if answers is None:
            return self.stage4.process(total_score)
        return self.stage4.process(
            total_score,
            sector=self.stage4.determine_sector(answers),
            stage=self.stage4.determine_stage(answers),
        )

    def select_badges(self, score: ScoreResult, answers: AssessmentAnswers) -> BadgeResult:
        """Stage 5"""
        result = self.stage5.process(score, answers)
        self._count_recommendation_sources(result.recommendations)
        return result

    def recommend(self, score: ScoreResult, answers: AssessmentAnswers) -> Recommendations:
        recommendations = self.stage5.select_recommendations(score, answers)
        self._count_recommendation_sources(recommendations)
        return recommendations

    def evaluate(
        self,
        answers: AssessmentAnswers,
        profile: Optional[ScoringProfile] = None,
        user_id: Optional[str] = None,
    ) -> AssessmentReport:
        """
        Run the full pipeline without persisting anything.

        Args:
            answers: Raw assessment answers
            profile: Weighting profile; the caller's saved default is used
                when omitted and user_id is given
            user_id: Caller identity

        Returns:
            AssessmentReport with score, cluster, badges and recommendations
        """
        start_time = time.time()

        if profile is None and user_id:
            profile = self.get_profile(user_id)

        score = self.score_assessment(answers, profile)
        cluster = self.place_in_cluster(score.totalScore, answers)
        badge_result = self.select_badges(score, answers)

        total_time = (time.time() - start_time) * 1000
        self._bump("total_processing_time_ms", total_time)
        self._bump("reports_generated")

        logger.debug(f"Evaluated assessment in {total_time:.1f}ms (total={score.totalScore})")

        return AssessmentReport(
            user_id=user_id,
            processed_at=datetime.utcnow(),
            score=score,
            cluster=cluster,
            badges=badge_result.badges,
            recommendations=badge_result.recommendations,
            sector=cluster.sector,
            stage=cluster.stage,
            total_processing_time_ms=round(total_time, 2),
        )

    def submit_assessment(self, user_id: str, answers: AssessmentAnswers) -> AssessmentReport:
        """
        Evaluate and persist an assessment for the caller.

        Raises:
            PersistenceError: the store rejected the write; the computed
                report is attached as `result`
        """
        report = self.evaluate(answers, user_id=user_id)

        try:
            assessment_id = self.store.save_assessment(user_id, answers, report.score)
        except PersistenceError as e:
            self._bump("persistence_failures")
            log_with_context(
                logger, logging.ERROR, "Failed to persist assessment",
                user_id=user_id, total_score=report.score.totalScore, error=str(e),
            )
            e.result = report
            raise

        logger.info(f"Stored assessment {assessment_id} for user {user_id}")
        return report.model_copy(update={"assessment_id": assessment_id})

    def rescore(self, assessment_id: str, user_id: Optional[str] = None) -> RescoreResult:
        """
        Recompute a stored assessment with the owner's current profile.

        Args:
            assessment_id: Stored assessment id
            user_id: When given, only the owner's assessments are visible

        Raises:
            AssessmentNotFoundError: unknown assessment id (or not owned by user_id)
            PersistenceError: store read or update failed
        """
        stored = self.store.get_assessment(assessment_id)
        if stored is None or (user_id is not None and stored["user_id"] != user_id):
            raise AssessmentNotFoundError(f"Assessment {assessment_id} not found")

        profile = self.get_profile(stored["user_id"]) if stored["user_id"] else None
        result = self.score_assessment(stored["answers"], profile)

        try:
            self.store.update_score(assessment_id, result)
        except PersistenceError as e:
            self._bump("persistence_failures")
            e.result = result
            raise

        old_score = int(stored["total_score"] or 0)
        return RescoreResult(
            assessment_id=assessment_id,
            old_score=old_score,
            new_score=result.totalScore,
            score_difference=result.totalScore - old_score,
            result=result,
        )

    # =========================================================================
    # Scoring profiles
    # =========================================================================

    def get_profile(self, user_id: str) -> ScoringProfile:
        """The caller's saved default profile, or the built-in one"""
        profile = self.store.get_default_profile(user_id)
        return profile or create_default_profile(user_id)

    def save_profile(self, user_id: str, profile: ScoringProfile) -> ScoringProfile:
        """Renormalize and upsert the caller's default profile"""
        normalized = profile.normalized().model_copy(
            update={"user_id": user_id, "is_default": True, "updated_at": datetime.utcnow()}
        )
        try:
            return self.store.upsert_default_profile(normalized)
        except PersistenceError as e:
            self._bump("persistence_failures")
            e.result = normalized
            raise

    # =========================================================================
    # Investor classification
    # =========================================================================

    def classify_investor(self, intake: InvestorIntake) -> ClassificationResult:
        """
        Classify an investor, reusing a cached response for an identical intake.

        Only AI answers are cached, so a rule-table result is recomputed until
        the text-generation service answers again. Cache read/write failures
        are logged and never fail the request.
        """
        self._bump("classifications")
        key = payload_hash(intake.model_dump(mode="json"))

        try:
            cached = self.store.get_cached_response(key)
        except PersistenceError as e:
            logger.warning(f"Classification cache read failed: {e}")
            cached = None

        if cached and cached.get("source") == ResultSource.LLM.value:
            try:
                result = ClassificationResult(**cached)
            except ValueError as e:
                logger.warning(f"Ignoring malformed cached classification: {e}")
            else:
                self._bump("classification_cache_hits")
                return result.model_copy(update={"source": ResultSource.CACHE})

        result = self.classifier.process(intake)
        if result.source == ResultSource.FALLBACK:
            self._bump("llm_fallbacks")
            return result

        try:
            self.store.cache_response(key, result.model_dump(mode="json"))
        except PersistenceError as e:
            logger.warning(f"Classification cache write failed: {e}")

        return result

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics"""
        with self._lock:
            stats = self.stats.copy()
        if stats["assessments_scored"] > 0:
            stats["score_cache_hit_rate"] = round(
                stats["score_cache_hits"] / stats["assessments_scored"] * 100, 1
            )
        if stats["reports_generated"] > 0:
            stats["avg_processing_time_ms"] = round(
                stats["total_processing_time_ms"] / stats["reports_generated"], 2
            )
        stats["store_backend"] = self.store.backend
        stats["llm_configured"] = bool(self.llm_client and self.llm_client.available)
        return stats

    def reset_stats(self):
        """Reset engine statistics"""
        with self._lock:
            self.stats = {
                "assessments_scored": 0,
                "score_cache_hits": 0,
                "reports_generated": 0,
                "classifications": 0,
                "classification_cache_hits": 0,
                "llm_fallbacks": 0,
                "persistence_failures": 0,
                "total_processing_time_ms": 0,
            }

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @staticmethod
    def _score_key(answers: AssessmentAnswers, profile: ScoringProfile) -> str:
        return payload_hash(answers.model_dump(mode="json")) + ":" + profile.version_key()

    def _bump(self, key: str, amount: float = 1):
        with self._lock:
            self.stats[key] += amount

    def _count_recommendation_sources(self, recommendations: Recommendations):
        for category in recommendations.focus_categories:
            if recommendations.sources.get(category) == ResultSource.FALLBACK:
                self._bump("llm_fallbacks")


# =============================================================================
# Convenience Functions
# =============================================================================

def create_engine(
    llm_api_key: Optional[str] = None,
    llm_provider: Optional[str] = None,
    store: Optional[ReadinessStore] = None,
) -> ReadinessScoringEngine:
    """
    Factory function to create a Readiness Scoring Engine from settings.

    Args:
        llm_api_key: API key for the text-generation provider (env if not provided)
        llm_provider: "openrouter", "openai" or "anthropic"
        store: Persistence backend (Supabase when configured, else in-memory)

    Returns:
        Configured ReadinessScoringEngine instance
    """
    if store is None:
        from .db.store import create_store
        store = create_store()

    llm_client = TextGenerationClient(api_key=llm_api_key, provider=llm_provider)
    return ReadinessScoringEngine(store=store, llm_client=llm_client)


def quick_score(answers: Dict[str, Any]) -> ScoreResult:
    """
    Quick scoring function for a raw answers dict with default weights.
    """
    engine = ReadinessScoringEngine()
    return engine.score_assessment(AssessmentAnswers(**answers))
