"""Tests for the persistence layer (in-memory and mocked Supabase)."""

from unittest.mock import MagicMock, patch

import pytest

from readiness_engine.db.store import (
    InMemoryStore,
    SupabaseStore,
    PersistenceError,
    create_store,
    payload_hash,
    answers_to_row,
    score_to_row,
)
from readiness_engine.models.schemas import AssessmentAnswers
from readiness_engine.models.scoring_profile import ScoringProfile

from tests.fakes import supabase_response


@pytest.fixture
def score_result(engine, strong_answers):
    return engine.score_assessment(strong_answers)


# ============================================================================
# Row mapping
# ============================================================================


class TestRowMapping:
    def test_answers_use_snake_case_columns(self, strong_answers):
        row = answers_to_row(strong_answers)
        assert row["full_time_team"] is True
        assert row["external_capital"] is None
        assert row["mrr"] == "high"
        assert row["funding_goal"] == "2M"

    def test_score_row(self, score_result):
        row = score_to_row(score_result)
        assert row["total_score"] == 893
        assert row["business_idea"] == 88
        assert row["traction_explanation"] == score_result.traction.explanation

    def test_payload_hash_is_order_independent(self):
        assert payload_hash({"a": 1, "b": 2}) == payload_hash({"b": 2, "a": 1})
        assert payload_hash({"a": 1}) != payload_hash({"a": 2})


# ============================================================================
# In-memory store
# ============================================================================


class TestInMemoryStore:
    def test_save_and_load_assessment(self, store, strong_answers, score_result):
        assessment_id = store.save_assessment("user-1", strong_answers, score_result)
        stored = store.get_assessment(assessment_id)

        assert stored["user_id"] == "user-1"
        assert stored["answers"] == strong_answers
        assert stored["total_score"] == 893

    def test_missing_assessment(self, store):
        assert store.get_assessment("nope") is None

    def test_profile_upsert_is_last_writer_wins(self, store):
        first = store.upsert_default_profile(ScoringProfile(user_id="u", traction=0.9))
        second = store.upsert_default_profile(ScoringProfile(user_id="u", traction=0.1))

        assert first.profile_id == second.profile_id
        assert store.get_default_profile("u").traction == 0.1

    def test_response_cache(self, store):
        store.cache_response("k", {"category": "VC"})
        assert store.get_cached_response("k") == {"category": "VC"}
        assert store.get_cached_response("other") is None


# ============================================================================
# Supabase store
# ============================================================================


class TestSupabaseStore:
    def setup_method(self):
        self.client = MagicMock()
        self.store = SupabaseStore(client=self.client)

    def test_save_assessment_inserts_both_rows(self, strong_answers, score_result):
        table = self.client.table.return_value
        table.insert.return_value.execute.return_value = supabase_response([{"id": 42}])

        assessment_id = self.store.save_assessment("user-1", strong_answers, score_result)

        assert assessment_id == "42"
        tables = [call.args[0] for call in self.client.table.call_args_list]
        assert tables == ["assessments", "scores"]
        score_row = table.insert.call_args_list[1].args[0]
        assert score_row["assessment_id"] == "42"
        assert score_row["total_score"] == 893

    def test_insert_failure_becomes_persistence_error(self, strong_answers, score_result):
        self.client.table.return_value.insert.return_value.execute.side_effect = Exception("down")

        with pytest.raises(PersistenceError) as exc_info:
            self.store.save_assessment("user-1", strong_answers, score_result)

        assert exc_info.value.retryable
        assert "down" in str(exc_info.value)

    def _split_tables(self):
        tables = {"assessments": MagicMock(), "scores": MagicMock()}
        self.client.table.side_effect = lambda name: tables[name]
        tables["assessments"].insert.return_value.execute.return_value = supabase_response([{"id": 42}])
        tables["scores"].insert.return_value.execute.side_effect = Exception("scores down")
        return tables

    def test_score_insert_failure_removes_assessment(self, strong_answers, score_result):
        tables = self._split_tables()

        # a retrying caller must not accumulate unscored assessments
        for _ in range(2):
            with pytest.raises(PersistenceError) as exc_info:
                self.store.save_assessment("user-1", strong_answers, score_result)
            assert "scores down" in str(exc_info.value)

        delete = tables["assessments"].delete
        assert delete.call_count == 2
        delete.return_value.eq.assert_called_with("id", "42")
        assert delete.return_value.eq.return_value.execute.call_count == 2

    def test_cleanup_failure_still_reports_original_error(self, strong_answers, score_result):
        tables = self._split_tables()
        tables["assessments"].delete.return_value.eq.return_value.execute.side_effect = Exception("gone")

        with pytest.raises(PersistenceError) as exc_info:
            self.store.save_assessment("user-1", strong_answers, score_result)

        assert "scores down" in str(exc_info.value)

    def test_get_assessment_maps_row(self):
        query = self.client.table.return_value.select.return_value.eq.return_value
        query.execute.return_value = supabase_response([{
            "id": "a1",
            "user_id": "user-1",
            "prototype": True,
            "mrr": "low",
            "full_time_team": False,
            "scores": [{"total_score": 512}],
        }])

        stored = self.store.get_assessment("a1")

        assert stored["answers"] == AssessmentAnswers(prototype=True, mrr="low", fullTimeTeam=False)
        assert stored["total_score"] == 512

    def test_profile_upsert_conflict_target(self):
        upsert = self.client.table.return_value.upsert
        upsert.return_value.execute.return_value = supabase_response([])

        profile = ScoringProfile(user_id="user-1")
        assert self.store.upsert_default_profile(profile) is profile

        self.client.table.assert_called_once_with("user_scoring_profiles")
        assert upsert.call_args.kwargs["on_conflict"] == "user_id,is_default"

    def test_cache_read_failure(self):
        self.client.table.side_effect = Exception("timeout")
        with pytest.raises(PersistenceError):
            self.store.get_cached_response("k")


class TestCreateStore:
    def test_in_memory_without_credentials(self):
        assert isinstance(create_store(), InMemoryStore)

    def test_supabase_when_configured(self):
        with patch("readiness_engine.db.supabase_client.supabase_configured", return_value=True), \
                patch("readiness_engine.db.supabase_client.get_supabase") as mock_get:
            store = create_store()

        assert isinstance(store, SupabaseStore)
        assert store.client is mock_get.return_value
