"""
Configuration settings for the Readiness Scoring Engine
"""

from typing import Dict, List, Any
import os

# =============================================================================
# ENVIRONMENT
# =============================================================================

READINESS_ENV = os.getenv("READINESS_ENV", "dev")  # dev, test, prod

# =============================================================================
# LLM CONFIGURATION (OpenRouter)
# =============================================================================

LLM_CONFIG = {
    "provider": os.getenv("LLM_PROVIDER", "openrouter"),  # openrouter, openai, anthropic
    "model": os.getenv("LLM_MODEL", "openai/gpt-4o-mini"),  # OpenRouter model format
    "api_key": os.getenv("OPENROUTER_API_KEY") or os.getenv("LLM_API_KEY", ""),
    "base_url": os.getenv("LLM_BASE_URL", "https://openrouter.ai/api/v1"),
    "timeout_seconds": float(os.getenv("LLM_TIMEOUT_SECONDS", "20")),
    "max_tokens": 1000,
    "temperature": 0.3,
    # OpenRouter specific headers
    "site_url": os.getenv("OPENROUTER_SITE_URL", "http://localhost:8000"),
    "app_name": os.getenv("OPENROUTER_APP_NAME", "Readiness Scoring Engine"),
}

# =============================================================================
# PERSISTENCE (Supabase)
# =============================================================================

SUPABASE_CONFIG = {
    "url": os.getenv("SUPABASE_URL", ""),
    "service_role_key": os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
    "tables": {
        "assessments": "assessments",
        "scores": "scores",
        "profiles": "user_scoring_profiles",
        "ai_responses": "ai_responses",
    },
}

# =============================================================================
# DEFAULT SCORING WEIGHTS
# =============================================================================

DEFAULT_WEIGHTS = {
    "businessIdea": 0.30,
    "financials": 0.25,
    "team": 0.25,
    "traction": 0.20,
}

MAX_TOTAL_SCORE = 999

# =============================================================================
# DEFAULT THRESHOLDS
# =============================================================================

DEFAULT_THRESHOLDS = {
    "recommendation_threshold": int(os.getenv("RECOMMENDATION_THRESHOLD", "50")),
    "investor_ready_total": 700,
    "growth_ready_traction": 70,
}

# =============================================================================
# ANSWER NORMALIZATION
# =============================================================================

# Contribution of an unanswered question. Must differ from the "false" value (0).
UNKNOWN_SIGNAL = 40.0

BOOLEAN_SIGNALS = {
    True: 100.0,
    False: 0.0,
}

ORDINAL_TABLES = {
    "mrr": {"none": 0.0, "low": 25.0, "medium": 60.0, "high": 100.0},
    "milestones": {"concept": 0.0, "launch": 35.0, "scale": 70.0, "exit": 100.0},
    "employees": {"1-2": 0.0, "3-10": 35.0, "11-50": 70.0, "50+": 100.0},
    "investors": {"none": 0.0, "angels": 35.0, "vc": 70.0, "lateStage": 100.0},
}

# =============================================================================
# CATEGORY SIGNAL WEIGHTS
# =============================================================================

# Signal weights inside each category sum to 1.0
CATEGORY_SIGNAL_WEIGHTS = {
    "businessIdea": {
        "prototype": 0.60,
        "milestones": 0.40,
    },
    "financials": {
        "revenue": 0.30,
        "mrr": 0.35,
        "capTable": 0.20,
        "externalCapital": 0.15,
    },
    "team": {
        "fullTimeTeam": 0.60,
        "employees": 0.40,
    },
    "traction": {
        "termSheets": 0.40,
        "investors": 0.30,
        "revenue": 0.15,
        "mrr": 0.15,
    },
}

# (strong, partial, weak, unanswered) phrase per signal
SIGNAL_PHRASES = {
    "prototype": ("strong prototype foundation", "prototype in progress", "no prototype limits validation", "prototype status not provided"),
    "milestones": ("proven model at scale", "MVP launched", "early concept stage", "milestones not provided"),
    "revenue": ("revenue generating", "early revenue", "pre-revenue stage", "revenue status not provided"),
    "mrr": ("strong MRR", "solid MRR", "low or no recurring revenue", "MRR not provided"),
    "capTable": ("documented cap table", "partially documented cap table", "missing cap table", "cap table status not provided"),
    "externalCapital": ("external funding received", "some outside capital", "no external capital yet", "external capital not provided"),
    "fullTimeTeam": ("full-time committed team", "partly full-time team", "part-time team commitment", "team commitment not provided"),
    "employees": ("established team", "growing team", "small founding team", "team size not provided"),
    "termSheets": ("term sheets received", "term sheets in discussion", "no term sheets yet", "term sheet status not provided"),
    "investors": ("VC or late-stage engagement", "angel investor interest", "no investor engagement", "investor engagement not provided"),
}

STRONG_SIGNAL_MIN = 70.0
WEAK_SIGNAL_MAX = 30.0

# =============================================================================
# CLUSTER BANDS
# =============================================================================

# (min_score inclusive, max_score exclusive except the top band)
CLUSTER_BANDS: List[Dict[str, Any]] = [
    {
        "name": "Foundation Builders",
        "min_score": 0,
        "max_score": 350,
        "description": "Very early startups focusing on core development and validation",
        "percentile_rank": 15,
        "success_rate": 10,
        "funding_stage": "Ideation to Bootstrap",
        "common_sectors": ["Various", "Concept Stage"],
        "key_strengths": ["Vision", "Determination", "Learning mindset"],
        "improvement_areas": ["All areas need development", "Focus on MVP", "Market validation"],
    },
    {
        "name": "Development Stage",
        "min_score": 350,
        "max_score": 500,
        "description": "Early-stage startups building foundations for future growth",
        "percentile_rank": 35,
        "success_rate": 25,
        "funding_stage": "Bootstrap to Pre-Seed",
        "common_sectors": ["Early SaaS", "Hardware", "Local Services"],
        "key_strengths": ["Founder commitment", "Initial concept", "Learning agility"],
        "improvement_areas": ["Product development", "Market research", "Financial planning"],
    },
    {
        "name": "Growth Candidates",
        "min_score": 500,
        "max_score": 650,
        "description": "Promising startups with solid fundamentals needing focused improvements",
        "percentile_rank": 55,
        "success_rate": 45,
        "funding_stage": "Pre-Seed to Seed",
        "common_sectors": ["Consumer Apps", "Marketplace", "Social Impact"],
        "key_strengths": ["Clear vision", "Basic traction", "Market opportunity"],
        "improvement_areas": ["Revenue model", "Team development", "Customer validation"],
    },
    {
        "name": "Scaling Accelerators",
        "min_score": 650,
        "max_score": 800,
        "description": "High-potential startups ready for significant growth capital",
        "percentile_rank": 75,
        "success_rate": 65,
        "funding_stage": "Seed to Series A",
        "common_sectors": ["B2B SaaS", "E-commerce", "EdTech"],
        "key_strengths": ["Product-market fit", "Growing revenue", "Solid foundations"],
        "improvement_areas": ["Team scaling", "Financial projections", "Market expansion"],
    },
    {
        "name": "Investment Ready Leaders",
        "min_score": 800,
        "max_score": 999,
        "description": "Top 10% of startups with exceptional readiness across all metrics",
        "percentile_rank": 95,
        "success_rate": 85,
        "funding_stage": "Series A+",
        "common_sectors": ["Enterprise SaaS", "FinTech", "HealthTech"],
        "key_strengths": ["Strong team track record", "Proven traction", "Clear market fit"],
        "improvement_areas": ["Scale preparation", "International expansion"],
    },
]

# =============================================================================
# BADGE CATALOG
# =============================================================================

BADGE_CATALOG: List[Dict[str, Any]] = [
    {
        "id": "mvp-ready",
        "name": "MVP Ready",
        "description": "Has a working prototype and basic functionality",
        "rule": {"answer": "prototype"},
        "progress_unearned": 30,
    },
    {
        "id": "revenue-generator",
        "name": "Revenue Generator",
        "description": "Successfully generating recurring revenue",
        "rule": {"answer": "revenue"},
        "progress_unearned": 20,
    },
    {
        "id": "team-committed",
        "name": "Team Committed",
        "description": "Full-time founding team with complementary skills",
        "rule": {"answer": "fullTimeTeam"},
        "progress_unearned": 50,
    },
    {
        "id": "investor-ready",
        "name": "Investor Ready",
        "description": "Meets key criteria that angel investors look for",
        "rule": {"score": "totalScore", "threshold": "investor_ready_total"},
    },
    {
        "id": "market-validated",
        "name": "Market Validated",
        "description": "Proven market demand and customer validation",
        "rule": {"answer": "termSheets"},
        "progress_unearned": 40,
    },
    {
        "id": "growth-ready",
        "name": "Growth Ready",
        "description": "Positioned for rapid scaling and growth",
        "rule": {"score": "traction", "threshold": "growth_ready_traction"},
    },
]

# =============================================================================
# FALLBACK RECOMMENDATIONS
# =============================================================================

FALLBACK_RECOMMENDATIONS: Dict[str, List[str]] = {
    "businessIdea": [
        "Survey 10 customers to refine your value proposition and market fit.",
        "Research market size using industry reports and competitor analysis.",
        "Develop a compelling prototype demo for investor presentations.",
    ],
    "financials": [
        "Build a lean financial model using SCORE templates or similar tools.",
        "Document your cap table clearly for investor transparency.",
        "Create 12-month revenue projections with realistic assumptions.",
    ],
    "team": [
        "Validate team expertise with advisor endorsements and credentials.",
        "Consider recruiting a technical co-founder for scalability.",
        "Document team commitment and equity agreements in pitch materials.",
    ],
    "traction": [
        "Conduct 5 customer interviews for market validation feedback.",
        "Secure 2 letters of intent (LOIs) from potential clients.",
        "Implement analytics tracking to measure user engagement metrics.",
    ],
}

RECOMMENDATIONS_PER_CATEGORY = 3

# =============================================================================
# INVESTOR CLASSIFICATION RULES
# =============================================================================

# Order doubles as tie-break precedence
INVESTOR_CATEGORIES = ["Angel", "VC", "Family Office", "Institutional", "Crowdfunding"]

# (field, matching values, category, points)
INVESTOR_RULES = [
    ("personalCapital", [True], "Angel", 20),
    ("structuredFund", [True], "VC", 20),
    ("esgMetrics", [True], "Crowdfunding", 15),
    ("checkSize", ["veryHigh"], "Institutional", 25),
    ("checkSize", ["low", "medium"], "Angel", 10),
    ("stage", ["preSeed", "seed"], "Angel", 10),
    ("dealSource", ["personal"], "Angel", 10),
    ("dealSource", ["public"], "Crowdfunding", 10),
    ("frequency", ["portfolio"], "Family Office", 10),
    ("objective", ["strategic"], "Family Office", 10),
    ("objective", ["support"], "Angel", 10),
]

INVESTOR_CONFIDENCE_DIVISOR = 50

# =============================================================================
# SECTOR & STAGE DETECTION
# =============================================================================

SECTORS = ["B2B SaaS", "FinTech", "B2C Consumer", "E-commerce"]
DEFAULT_SECTOR = "B2B SaaS"
STAGES = ["pre-seed", "seed"]
