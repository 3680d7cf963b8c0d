"""
Persistence for assessments, scores, scoring profiles and AI responses.

Two implementations share the ReadinessStore interface:
- SupabaseStore: hosted Postgres tables via the Supabase client
- InMemoryStore: process-local dictionaries for development and tests
"""

import hashlib
import json
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional

from ..models.schemas import AssessmentAnswers, ScoreResult
from ..models.scoring_profile import ScoringProfile
from ..config.settings import SUPABASE_CONFIG
from ..config.logging import get_logger

logger = get_logger(__name__)

TABLES = SUPABASE_CONFIG["tables"]

ANSWER_COLUMNS = {
    "prototype": "prototype",
    "externalCapital": "external_capital",
    "revenue": "revenue",
    "fullTimeTeam": "full_time_team",
    "termSheets": "term_sheets",
    "capTable": "cap_table",
    "mrr": "mrr",
    "employees": "employees",
    "fundingGoal": "funding_goal",
    "investors": "investors",
    "milestones": "milestones",
}

SCORE_COLUMNS = {
    "businessIdea": "business_idea",
    "financials": "financials",
    "team": "team",
    "traction": "traction",
}


class PersistenceError(Exception):
    """A store operation failed. Safe to retry; `result` holds any computed value."""

    retryable = True

    def __init__(self, message: str, result: Any = None):
        super().__init__(message)
        self.result = result


def payload_hash(payload: Any) -> str:
    """Stable key for a JSON-compatible payload"""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def answers_to_row(answers: AssessmentAnswers) -> Dict[str, Any]:
    data = answers.model_dump(mode="json")
    return {column: data[field] for field, column in ANSWER_COLUMNS.items()}


def row_to_answers(row: Dict[str, Any]) -> AssessmentAnswers:
    return AssessmentAnswers(**{field: row.get(column) for field, column in ANSWER_COLUMNS.items()})


def score_to_row(result: ScoreResult) -> Dict[str, Any]:
    row: Dict[str, Any] = {"total_score": result.totalScore}
    for field, column in SCORE_COLUMNS.items():
        category = getattr(result, field)
        row[column] = category.score
        row[f"{column}_explanation"] = category.explanation
    return row


class ReadinessStore(ABC):
    """Keyed insert/select/upsert access to the readiness tables."""

    backend = "abstract"

    @abstractmethod
    def save_assessment(self, user_id: str, answers: AssessmentAnswers, result: ScoreResult) -> str:
        """Insert an assessment and its score; returns the assessment id."""

    @abstractmethod
    def get_assessment(self, assessment_id: str) -> Optional[Dict[str, Any]]:
        """Return {id, user_id, answers, total_score} or None."""

    @abstractmethod
    def update_score(self, assessment_id: str, result: ScoreResult) -> None:
        """Overwrite the score row of an assessment."""

    @abstractmethod
    def get_default_profile(self, user_id: str) -> Optional[ScoringProfile]:
        """The user's default scoring profile, if any."""

    @abstractmethod
    def upsert_default_profile(self, profile: ScoringProfile) -> ScoringProfile:
        """Last-writer-wins save of the user's default profile."""

    @abstractmethod
    def get_cached_response(self, key: str) -> Optional[Dict[str, Any]]:
        """Cached AI response for a payload hash."""

    @abstractmethod
    def cache_response(self, key: str, response: Dict[str, Any]) -> None:
        """Store an AI response under a payload hash."""


# =============================================================================
# Supabase
# =============================================================================

class SupabaseStore(ReadinessStore):
    """Store backed by Supabase tables."""

    backend = "supabase"

    def __init__(self, client=None):
        if client is None:
            from .supabase_client import get_supabase
            client = get_supabase()
        self.client = client

    def save_assessment(self, user_id: str, answers: AssessmentAnswers, result: ScoreResult) -> str:
        try:
            assessment = (
                self.client.table(TABLES["assessments"])
                .insert({"user_id": user_id, **answers_to_row(answers)})
                .execute()
            )
            assessment_id = str(assessment.data[0]["id"])
        except Exception as e:
            raise PersistenceError(f"Failed to save assessment: {e}") from e

        # An assessment row never outlives a failed score insert
        try:
            self.client.table(TABLES["scores"]).insert(
                {"assessment_id": assessment_id, **score_to_row(result)}
            ).execute()
        except Exception as e:
            self._discard_assessment(assessment_id)
            raise PersistenceError(f"Failed to save score for assessment {assessment_id}: {e}") from e
        return assessment_id

    def _discard_assessment(self, assessment_id: str) -> None:
        try:
            self.client.table(TABLES["assessments"]).delete().eq("id", assessment_id).execute()
        except Exception as e:
            logger.error(f"Failed to remove unscored assessment {assessment_id}: {e}")

    def get_assessment(self, assessment_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = (
                self.client.table(TABLES["assessments"])
                .select("*, scores(*)")
                .eq("id", assessment_id)
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Failed to load assessment {assessment_id}: {e}") from e

        if not response.data:
            return None
        row = response.data[0]
        scores = row.get("scores") or []
        return {
            "id": str(row["id"]),
            "user_id": row.get("user_id"),
            "answers": row_to_answers(row),
            "total_score": scores[0].get("total_score", 0) if scores else 0,
        }

    def update_score(self, assessment_id: str, result: ScoreResult) -> None:
        try:
            (
                self.client.table(TABLES["scores"])
                .update(score_to_row(result))
                .eq("assessment_id", assessment_id)
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Failed to update score for {assessment_id}: {e}") from e

    def get_default_profile(self, user_id: str) -> Optional[ScoringProfile]:
        try:
            response = (
                self.client.table(TABLES["profiles"])
                .select("*")
                .eq("user_id", user_id)
                .eq("is_default", True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Failed to load scoring profile: {e}") from e
        return ScoringProfile.from_record(response.data[0]) if response.data else None

    def upsert_default_profile(self, profile: ScoringProfile) -> ScoringProfile:
        try:
            response = (
                self.client.table(TABLES["profiles"])
                .upsert(profile.to_record(), on_conflict="user_id,is_default")
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Failed to save scoring profile: {e}") from e
        return ScoringProfile.from_record(response.data[0]) if response.data else profile

    def get_cached_response(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            response = (
                self.client.table(TABLES["ai_responses"])
                .select("response_data")
                .eq("assessment_data", key)
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Failed to read response cache: {e}") from e
        return response.data[0]["response_data"] if response.data else None

    def cache_response(self, key: str, response: Dict[str, Any]) -> None:
        try:
            self.client.table(TABLES["ai_responses"]).insert(
                {"assessment_data": key, "response_data": response}
            ).execute()
        except Exception as e:
            raise PersistenceError(f"Failed to write response cache: {e}") from e


# =============================================================================
# In-memory
# =============================================================================

class InMemoryStore(ReadinessStore):
    """Process-local store (replace with Supabase in production)."""

    backend = "memory"

    def __init__(self):
        self.assessments: Dict[str, Dict[str, Any]] = {}
        self.scores: Dict[str, Dict[str, Any]] = {}
        self.profiles: Dict[str, ScoringProfile] = {}
        self.ai_responses: Dict[str, Dict[str, Any]] = {}

    def save_assessment(self, user_id: str, answers: AssessmentAnswers, result: ScoreResult) -> str:
        assessment_id = str(uuid.uuid4())
        self.assessments[assessment_id] = {
            "id": assessment_id,
            "user_id": user_id,
            **answers_to_row(answers),
            "created_at": datetime.utcnow().isoformat(),
        }
        self.scores[assessment_id] = {"assessment_id": assessment_id, **score_to_row(result)}
        return assessment_id

    def get_assessment(self, assessment_id: str) -> Optional[Dict[str, Any]]:
        row = self.assessments.get(assessment_id)
        if row is None:
            return None
        return {
            "id": assessment_id,
            "user_id": row["user_id"],
            "answers": row_to_answers(row),
            "total_score": self.scores.get(assessment_id, {}).get("total_score", 0),
        }

    def update_score(self, assessment_id: str, result: ScoreResult) -> None:
        self.scores[assessment_id] = {"assessment_id": assessment_id, **score_to_row(result)}

    def get_default_profile(self, user_id: str) -> Optional[ScoringProfile]:
        return self.profiles.get(user_id)

    def upsert_default_profile(self, profile: ScoringProfile) -> ScoringProfile:
        existing = self.profiles.get(profile.user_id)
        profile_id = existing.profile_id if existing else str(uuid.uuid4())
        saved = profile.model_copy(update={"profile_id": profile_id, "is_default": True})
        self.profiles[profile.user_id] = saved
        return saved

    def get_cached_response(self, key: str) -> Optional[Dict[str, Any]]:
        return self.ai_responses.get(key)

    def cache_response(self, key: str, response: Dict[str, Any]) -> None:
        self.ai_responses[key] = response


def create_store() -> ReadinessStore:
    """Supabase when credentials are configured, otherwise in-memory"""
    from .supabase_client import supabase_configured

    if supabase_configured():
        return SupabaseStore()
    logger.info("Supabase not configured, using in-memory store")
    return InMemoryStore()
