"""
Scoring Profile Models
"""

import math
from typing import Dict, Optional
from pydantic import BaseModel, Field
from datetime import datetime

from ..config.settings import DEFAULT_WEIGHTS

WEIGHT_SUM_TOLERANCE = 1e-9


class ScoringProfile(BaseModel):
    """User-owned weights for combining category scores into the total"""
    profile_id: Optional[str] = None
    user_id: Optional[str] = None
    name: str = "My Scoring Model"

    businessIdea: float = Field(DEFAULT_WEIGHTS["businessIdea"], ge=0)
    financials: float = Field(DEFAULT_WEIGHTS["financials"], ge=0)
    team: float = Field(DEFAULT_WEIGHTS["team"], ge=0)
    traction: float = Field(DEFAULT_WEIGHTS["traction"], ge=0)

    is_default: bool = True
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def weights(self) -> Dict[str, float]:
        return {
            "businessIdea": self.businessIdea,
            "financials": self.financials,
            "team": self.team,
            "traction": self.traction,
        }

    @property
    def total_weight(self) -> float:
        return sum(self.weights.values())

    def normalized(self) -> "ScoringProfile":
        """
        Return a copy whose weights sum to 1.0.

        Weights are divided by their sum when it deviates from 1.0. A zero sum
        is returned unchanged.
        """
        total = self.total_weight
        if total == 0 or math.isclose(total, 1.0, abs_tol=WEIGHT_SUM_TOLERANCE):
            return self.model_copy()

        return self.model_copy(
            update={name: value / total for name, value in self.weights.items()}
        )

    def version_key(self) -> str:
        """Stable key for the active weights, used in score cache keys"""
        normalized = self.normalized()
        return ",".join(f"{name}={value:.12f}" for name, value in normalized.weights.items())

    def to_record(self) -> Dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "weights": self.weights,
            "is_default": self.is_default,
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: Dict) -> "ScoringProfile":
        """Build a profile from a stored row, mapping only known weight keys"""
        weights = record.get("weights") or {}
        return cls(
            profile_id=str(record["id"]) if record.get("id") is not None else None,
            user_id=record.get("user_id"),
            name=record.get("name") or "My Scoring Model",
            businessIdea=float(weights.get("businessIdea", DEFAULT_WEIGHTS["businessIdea"])),
            financials=float(weights.get("financials", DEFAULT_WEIGHTS["financials"])),
            team=float(weights.get("team", DEFAULT_WEIGHTS["team"])),
            traction=float(weights.get("traction", DEFAULT_WEIGHTS["traction"])),
            is_default=record.get("is_default", True),
        )


def create_default_profile(user_id: Optional[str] = None) -> ScoringProfile:
    """
    Factory function for the built-in weighting profile
    """
    return ScoringProfile(user_id=user_id, name="Default", **DEFAULT_WEIGHTS)
