"""
FastAPI Endpoints for the Readiness Scoring Engine
==================================================
RESTful API for startup readiness scoring and investor classification.

Base URL: http://localhost:8000

Endpoints:
- GET  /                                       - API info
- GET  /api/health                             - Health check
- GET  /api/stats                              - Engine statistics
- POST /api/assessments/score                  - Category scores + total only
- POST /api/assessments/evaluate               - Full report, not persisted
- POST /api/assessments                        - Evaluate and persist (X-User-Id)
- POST /api/assessments/{assessment_id}/rescore - Rescore with current profile
- GET  /api/profiles/default                   - Caller's default scoring profile
- PUT  /api/profiles/default                   - Save caller's default profile
- GET  /api/clusters                           - All cluster bands
- GET  /api/clusters/{score}                   - Band for a total score
- POST /api/badges                             - Badges for an assessment
- POST /api/recommendations                    - Recommendations for an assessment
- POST /api/investors/classify                 - Classify an investor
"""

from fastapi import FastAPI, HTTPException, Header, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from ..models.schemas import (
    AssessmentAnswers,
    InvestorIntake,
    ScoreResult,
    AssessmentReport,
    ClusterPlacement,
    Recommendations,
    ClassificationResult,
    RescoreResult,
)
from ..models.scoring_profile import ScoringProfile
from ..engine import ReadinessScoringEngine, AssessmentNotFoundError, create_engine
from ..db.store import PersistenceError
from ..config.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# FastAPI App Initialization
# =============================================================================

app = FastAPI(
    title="Readiness Scoring Engine API",
    description="""
## Startup Investment Readiness Scoring

Turns assessment answers into category scores, a 0-999 readiness total,
a peer cluster, badges and recommendations, and classifies investors.

### Features:
- **5-Stage Pipeline**: Normalize → Category Scores → Total → Cluster → Badges
- **Custom Weights**: Per-user scoring profiles
- **AI Recommendations**: Text generation via OpenRouter with static fallbacks
- **Investor Classification**: AI classification with a rule-table fallback

### Quick Start:
1. Use `/api/assessments/score` for scores only
2. Use `/api/assessments/evaluate` for the full report
3. Send `X-User-Id` to `/api/assessments` to store the result
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware - Allow all origins for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Engine Initialization
# =============================================================================

default_engine: ReadinessScoringEngine = create_engine()


def optional_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> Optional[str]:
    """Caller identity from the auth provider, when present"""
    return x_user_id or None


def required_user_id(user_id: Optional[str] = Depends(optional_user_id)) -> str:
    if not user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    return user_id


# =============================================================================
# Request Models
# =============================================================================

class AssessmentRequest(BaseModel):
    """Assessment answers with an optional inline scoring profile"""
    answers: AssessmentAnswers
    profile: Optional[ScoringProfile] = Field(
        None, description="Inline weights; the caller's saved profile is used when omitted"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "answers": {
                    "prototype": True,
                    "externalCapital": "unknown",
                    "revenue": True,
                    "fullTimeTeam": True,
                    "termSheets": True,
                    "capTable": True,
                    "mrr": "high",
                    "employees": "11-50",
                    "fundingGoal": "2M",
                    "investors": "vc",
                    "milestones": "scale",
                }
            }
        }


class SubmitRequest(BaseModel):
    answers: AssessmentAnswers


class ClassifyRequest(BaseModel):
    """Investor intake wrapped as {"data": {...}}"""
    data: InvestorIntake


# =============================================================================
# Health & Info Endpoints
# =============================================================================

@app.get("/", tags=["Info"])
async def root():
    """API information and available endpoints"""
    return {
        "service": "Readiness Scoring Engine",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "Score": "POST /api/assessments/score",
            "Evaluate": "POST /api/assessments/evaluate",
            "Submit": "POST /api/assessments",
            "Rescore": "POST /api/assessments/{assessment_id}/rescore",
            "Profile": "GET|PUT /api/profiles/default",
            "Clusters": "GET /api/clusters",
            "Classify Investor": "POST /api/investors/classify",
            "Health": "GET /api/health",
        }
    }


@app.get("/api/health", tags=["Info"])
async def health_check():
    """Health check endpoint for monitoring"""
    stats = default_engine.get_stats()
    return {
        "status": "healthy",
        "service": "Readiness Scoring Engine",
        "version": "1.0.0",
        "timestamp": datetime.utcnow().isoformat(),
        "llm_configured": stats["llm_configured"],
        "store_backend": stats["store_backend"],
    }


@app.get("/api/stats", tags=["Info"])
async def get_stats():
    """Get engine statistics"""
    return default_engine.get_stats()


# =============================================================================
# Assessment Endpoints
# =============================================================================

def _resolve_profile(request: AssessmentRequest, user_id: Optional[str]) -> Optional[ScoringProfile]:
    if request.profile is not None:
        return request.profile
    if user_id:
        return default_engine.get_profile(user_id)
    return None


@app.post("/api/assessments/score", response_model=ScoreResult, tags=["Assessments"])
def score_assessment(
    request: AssessmentRequest,
    user_id: Optional[str] = Depends(optional_user_id),
):
    """
    Category scores and the 0-999 total only (fast, no AI calls)
    """
    profile = _resolve_profile(request, user_id)
    return default_engine.score_assessment(request.answers, profile)


@app.post("/api/assessments/evaluate", response_model=AssessmentReport, tags=["Assessments"])
def evaluate_assessment(
    request: AssessmentRequest,
    user_id: Optional[str] = Depends(optional_user_id),
):
    """
    Full readiness report without storing it

    Includes:
    - Category scores and total
    - Cluster band and percentile
    - Badges with progress
    - Three recommendations per category
    - Detected sector and funding stage
    """
    profile = _resolve_profile(request, user_id)
    return default_engine.evaluate(request.answers, profile=profile, user_id=user_id)


@app.post("/api/assessments", response_model=AssessmentReport, tags=["Assessments"])
def submit_assessment(
    request: SubmitRequest,
    user_id: str = Depends(required_user_id),
):
    """
    Evaluate and store an assessment for the caller

    Returns 503 with the computed report when the store is unavailable.
    """
    return default_engine.submit_assessment(user_id, request.answers)


@app.post(
    "/api/assessments/{assessment_id}/rescore",
    response_model=RescoreResult,
    tags=["Assessments"],
)
def rescore_assessment(
    assessment_id: str,
    user_id: str = Depends(required_user_id),
):
    """Recompute a stored assessment with the caller's current scoring profile"""
    try:
        return default_engine.rescore(assessment_id, user_id=user_id)
    except AssessmentNotFoundError:
        raise HTTPException(status_code=404, detail="Assessment not found")


# =============================================================================
# Scoring Profile Endpoints
# =============================================================================

@app.get("/api/profiles/default", response_model=ScoringProfile, tags=["Profiles"])
def get_default_profile(user_id: str = Depends(required_user_id)):
    """The caller's default profile (built-in weights if none saved)"""
    return default_engine.get_profile(user_id)


@app.put("/api/profiles/default", response_model=ScoringProfile, tags=["Profiles"])
def save_default_profile(
    profile: ScoringProfile,
    user_id: str = Depends(required_user_id),
):
    """Save the caller's default profile; weights are renormalized to sum to 1"""
    return default_engine.save_profile(user_id, profile)


# =============================================================================
# Cluster, Badge & Recommendation Endpoints
# =============================================================================

@app.get("/api/clusters", tags=["Clusters"])
async def list_clusters():
    """All cluster bands, lowest first"""
    bands = default_engine.stage4.bands
    return {"count": len(bands), "clusters": bands}


@app.get("/api/clusters/{score}", response_model=ClusterPlacement, tags=["Clusters"])
async def get_cluster(score: int):
    """Cluster band for a total score (clamped to 0-999)"""
    return default_engine.place_in_cluster(score)


@app.post("/api/badges", tags=["Badges"])
def get_badges(
    request: AssessmentRequest,
    user_id: Optional[str] = Depends(optional_user_id),
):
    """Full badge catalog with earned flags and progress"""
    score = default_engine.score_assessment(request.answers, _resolve_profile(request, user_id))
    badges = default_engine.stage5.select_badges(score, request.answers)
    return {
        "totalScore": score.totalScore,
        "badges": badges,
        "earned": [b.id for b in badges if b.earned],
    }


@app.post("/api/recommendations", response_model=Recommendations, tags=["Badges"])
def get_recommendations(
    request: AssessmentRequest,
    user_id: Optional[str] = Depends(optional_user_id),
):
    """Three improvement suggestions for each category"""
    score = default_engine.score_assessment(request.answers, _resolve_profile(request, user_id))
    return default_engine.recommend(score, request.answers)


# =============================================================================
# Investor Classification
# =============================================================================

@app.post("/api/investors/classify", response_model=ClassificationResult, tags=["Investors"])
def classify_investor(request: ClassifyRequest):
    """
    Classify an investor as Angel, VC, Family Office, Institutional or Crowdfunding

    Always answers: the rule table decides when the AI service cannot.
    """
    return default_engine.classify_investor(request.data)


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(PersistenceError)
async def persistence_exception_handler(request, exc: PersistenceError):
    result = exc.result.model_dump(mode="json") if exc.result is not None else None
    return JSONResponse(
        status_code=503,
        content={
            "error": "Persistence unavailable",
            "detail": str(exc),
            "retryable": exc.retryable,
            "result": result,
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc),
            "type": type(exc).__name__,
        }
    )
