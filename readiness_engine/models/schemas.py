"""
Pydantic schemas for the Readiness Scoring Engine
"""

from enum import Enum
from typing import List, Dict, Optional, Any
from pydantic import BaseModel, Field, field_validator
from datetime import datetime


# =============================================================================
# ENUMS
# =============================================================================

class Category(str, Enum):
    """Assessment score categories"""
    BUSINESS_IDEA = "businessIdea"
    FINANCIALS = "financials"
    TEAM = "team"
    TRACTION = "traction"


class MRRLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EmployeeRange(str, Enum):
    SOLO = "1-2"
    SMALL = "3-10"
    MEDIUM = "11-50"
    LARGE = "50+"


class InvestorEngagement(str, Enum):
    NONE = "none"
    ANGELS = "angels"
    VC = "vc"
    LATE_STAGE = "lateStage"


class Milestone(str, Enum):
    CONCEPT = "concept"
    LAUNCH = "launch"
    SCALE = "scale"
    EXIT = "exit"


class InvestorCategory(str, Enum):
    """Investor classification labels"""
    ANGEL = "Angel"
    VC = "VC"
    FAMILY_OFFICE = "Family Office"
    INSTITUTIONAL = "Institutional"
    CROWDFUNDING = "Crowdfunding"


class CheckSize(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "veryHigh"


class InvestmentStage(str, Enum):
    PRE_SEED = "preSeed"
    SEED = "seed"
    SERIES_B = "seriesB"
    PRE_IPO = "preIPO"


class DealSource(str, Enum):
    PERSONAL = "personal"
    PLATFORMS = "platforms"
    FUNDS = "funds"
    PUBLIC = "public"


class InvestmentFrequency(str, Enum):
    OCCASIONAL = "occasional"
    FREQUENT = "frequent"
    QUARTERLY = "quarterly"
    PORTFOLIO = "portfolio"


class InvestmentObjective(str, Enum):
    SUPPORT = "support"
    RETURNS = "returns"
    STRATEGIC = "strategic"
    IMPACT = "impact"


class ResultSource(str, Enum):
    """Where an AI-backed result came from"""
    LLM = "llm"
    FALLBACK = "fallback"
    CACHE = "cache"


# =============================================================================
# INPUT SCHEMAS
# =============================================================================

UNKNOWN = "unknown"

_TRUE_STRINGS = {"true", "yes", "y", "1"}
_FALSE_STRINGS = {"false", "no", "n", "0"}


def _coerce_tri_state(value: Any) -> Optional[bool]:
    """Map an answer to True/False, or None for unknown."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


def _coerce_enum(enum_cls, value: Any):
    """Map an answer to an enum member, or None for unknown / out-of-domain."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None


class AssessmentAnswers(BaseModel):
    """
    Raw answers for one startup assessment.

    None means "unknown" (unanswered). It is never the same as False.
    """
    prototype: Optional[bool] = None
    externalCapital: Optional[bool] = None
    revenue: Optional[bool] = None
    fullTimeTeam: Optional[bool] = None
    termSheets: Optional[bool] = None
    capTable: Optional[bool] = None
    mrr: Optional[MRRLevel] = None
    employees: Optional[EmployeeRange] = None
    investors: Optional[InvestorEngagement] = None
    milestones: Optional[Milestone] = None
    fundingGoal: Optional[str] = None

    @field_validator(
        "prototype", "externalCapital", "revenue", "fullTimeTeam", "termSheets", "capTable",
        mode="before",
    )
    @classmethod
    def _tri_state(cls, value):
        return _coerce_tri_state(value)

    @field_validator("mrr", mode="before")
    @classmethod
    def _mrr(cls, value):
        return _coerce_enum(MRRLevel, value)

    @field_validator("employees", mode="before")
    @classmethod
    def _employees(cls, value):
        return _coerce_enum(EmployeeRange, value)

    @field_validator("investors", mode="before")
    @classmethod
    def _investors(cls, value):
        return _coerce_enum(InvestorEngagement, value)

    @field_validator("milestones", mode="before")
    @classmethod
    def _milestones(cls, value):
        return _coerce_enum(Milestone, value)

    @field_validator("fundingGoal", mode="before")
    @classmethod
    def _funding_goal(cls, value):
        if value is None or (isinstance(value, str) and value.strip().lower() in ("", UNKNOWN)):
            return None
        return str(value)

    class Config:
        extra = "ignore"


class InvestorIntake(BaseModel):
    """Investor intake form answers"""
    personalCapital: bool = False
    structuredFund: bool = False
    registeredEntity: bool = False
    dueDiligence: bool = False
    esgMetrics: bool = False
    checkSize: Optional[CheckSize] = None
    stage: Optional[InvestmentStage] = None
    dealSource: Optional[DealSource] = None
    frequency: Optional[InvestmentFrequency] = None
    objective: Optional[InvestmentObjective] = None

    class Config:
        extra = "ignore"
        json_schema_extra = {
            "example": {
                "personalCapital": True,
                "structuredFund": False,
                "registeredEntity": False,
                "dueDiligence": True,
                "esgMetrics": False,
                "checkSize": "low",
                "stage": "preSeed",
                "dealSource": "personal",
                "frequency": "occasional",
                "objective": "support",
            }
        }


# =============================================================================
# STAGE RESULT SCHEMAS
# =============================================================================

class NormalizedAnswers(BaseModel):
    """Result from Stage 1: per-category signals in [0, 100]"""
    signals: Dict[Category, Dict[str, float]]
    unknown_fields: List[str] = Field(default_factory=list)


class CategoryScore(BaseModel):
    """Score for a single category"""
    score: int = Field(..., ge=0, le=100)
    explanation: str
    signals: Dict[str, float] = Field(default_factory=dict)

    class Config:
        frozen = True


class ScoreResult(BaseModel):
    """Category scores and total for one assessment (immutable)"""
    businessIdea: CategoryScore
    financials: CategoryScore
    team: CategoryScore
    traction: CategoryScore
    totalScore: int = Field(..., ge=0, le=999)
    weights: Dict[str, float] = Field(default_factory=dict)

    class Config:
        frozen = True

    def category_scores(self) -> Dict[str, int]:
        return {c.value: getattr(self, c.value).score for c in Category}


class ClusterBand(BaseModel):
    """Static score band with peer-group metadata"""
    name: str
    description: str
    min_score: int
    max_score: int
    percentile_rank: int
    success_rate: int
    funding_stage: str
    common_sectors: List[str] = Field(default_factory=list)
    key_strengths: List[str] = Field(default_factory=list)
    improvement_areas: List[str] = Field(default_factory=list)

    class Config:
        frozen = True


class ClusterPlacement(BaseModel):
    """Result from Stage 4: Cluster Mapping"""
    score: int
    band: ClusterBand
    sector: Optional[str] = None
    stage: Optional[str] = None


class Badge(BaseModel):
    """A readiness badge and whether it was earned"""
    id: str
    name: str
    description: str
    earned: bool
    progress: int = Field(..., ge=0, le=100)
    criterion: str


class Recommendations(BaseModel):
    """Three improvement suggestions per category"""
    businessIdea: List[str]
    financials: List[str]
    team: List[str]
    traction: List[str]
    sources: Dict[str, ResultSource] = Field(default_factory=dict)
    focus_categories: List[str] = Field(default_factory=list)


class BadgeResult(BaseModel):
    """Result from Stage 5: badges and recommendations"""
    badges: List[Badge]
    recommendations: Recommendations

    @property
    def earned(self) -> List[Badge]:
        return [b for b in self.badges if b.earned]


class ClassificationResult(BaseModel):
    """Investor classification outcome"""
    category: InvestorCategory
    confidence: float = Field(..., ge=0, le=1)
    explanation: str
    source: ResultSource = ResultSource.FALLBACK


# =============================================================================
# UNIFIED OUTPUT SCHEMA
# =============================================================================

class AssessmentReport(BaseModel):
    """Complete readiness evaluation combining all stages"""
    assessment_id: Optional[str] = None
    user_id: Optional[str] = None
    processed_at: datetime = Field(default_factory=datetime.utcnow)

    score: ScoreResult
    cluster: ClusterPlacement
    badges: List[Badge]
    recommendations: Recommendations

    sector: str
    stage: str

    total_processing_time_ms: float = 0


class RescoreResult(BaseModel):
    """Outcome of re-scoring a stored assessment"""
    assessment_id: str
    old_score: int
    new_score: int
    score_difference: int
    result: ScoreResult
