"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; no network backends in tests.
os.environ["READINESS_ENV"] = "test"
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = ""
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["LLM_API_KEY"] = ""

import pytest

from readiness_engine.db.store import InMemoryStore
from readiness_engine.engine import ReadinessScoringEngine
from readiness_engine.models.schemas import AssessmentAnswers


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def engine(store):
    return ReadinessScoringEngine(store=store)


@pytest.fixture
def strong_answers():
    """Near-complete answers with external capital left unknown."""
    return AssessmentAnswers(
        prototype=True,
        externalCapital="unknown",
        revenue=True,
        fullTimeTeam=True,
        termSheets=True,
        capTable=True,
        mrr="high",
        employees="11-50",
        fundingGoal="2M",
        investors="vc",
        milestones="scale",
    )


@pytest.fixture
def weak_answers():
    return AssessmentAnswers(
        prototype=False,
        externalCapital=False,
        revenue=False,
        fullTimeTeam=False,
        termSheets=False,
        capTable=False,
        mrr="none",
        employees="1-2",
        investors="none",
        milestones="concept",
    )


@pytest.fixture
def max_answers():
    return AssessmentAnswers(
        prototype=True,
        externalCapital=True,
        revenue=True,
        fullTimeTeam=True,
        termSheets=True,
        capTable=True,
        mrr="high",
        employees="50+",
        investors="lateStage",
        milestones="exit",
    )
