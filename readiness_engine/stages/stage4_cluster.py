"""
Stage 4: Cluster Mapping
========================
Places a total score into one of five contiguous peer-group bands:

  [0, 350)    Foundation Builders
  [350, 500)  Development Stage
  [500, 650)  Growth Candidates
  [650, 800)  Scaling Accelerators
  [800, 999]  Investment Ready Leaders

Sector and stage hints are detected from the answers and carried along with
the placement. They do not change which band a score lands in.
"""

from typing import List, Dict, Optional, Any

from ..models.schemas import (
    AssessmentAnswers,
    ClusterBand,
    ClusterPlacement,
    MRRLevel,
)
from ..config.settings import CLUSTER_BANDS, MAX_TOTAL_SCORE, DEFAULT_SECTOR, SECTORS, STAGES

SAAS, FINTECH, CONSUMER, ECOMMERCE = SECTORS
PRE_SEED, SEED = STAGES


class ClusterMappingStage:
    """
    Stage 4: Map a total score to its ClusterBand.
    """

    def __init__(self, bands: Optional[List[Dict[str, Any]]] = None):
        self.bands = [ClusterBand(**b) for b in (bands or CLUSTER_BANDS)]
        self.bands.sort(key=lambda b: b.min_score)

    def process(
        self,
        total_score: int,
        sector: Optional[str] = None,
        stage: Optional[str] = None,
    ) -> ClusterPlacement:
        """
        Find the band for a score.

        Args:
            total_score: Total readiness score (clamped to 0-999)
            sector: Optional sector hint (reserved for segmentation)
            stage: Optional funding stage hint (reserved for segmentation)

        Returns:
            ClusterPlacement with the matching band
        """
        score = max(0, min(MAX_TOTAL_SCORE, int(total_score)))
        return ClusterPlacement(
            score=score,
            band=self.band_for(score),
            sector=sector,
            stage=stage,
        )

    def band_for(self, score: int) -> ClusterBand:
        """Bands are half-open except the top one, which includes 999"""
        top = self.bands[-1]
        if top.min_score <= score <= top.max_score:
            return top

        for band in self.bands[:-1]:
            if band.min_score <= score < band.max_score:
                return band

        raise ValueError(f"No cluster band covers score {score}")

    # =========================================================================
    # Sector & stage hints
    # =========================================================================

    @staticmethod
    def determine_sector(answers: AssessmentAnswers) -> str:
        """Best-guess sector from business model answers"""
        has_recurring = answers.mrr not in (None, MRRLevel.NONE)
        has_revenue = answers.revenue is True
        b2b_indicators = answers.termSheets is True or (has_revenue and has_recurring)

        if b2b_indicators and has_recurring:
            return SAAS
        if answers.externalCapital is True and answers.termSheets is True:
            return FINTECH
        if answers.prototype is True and not has_revenue:
            return CONSUMER
        if has_revenue and not has_recurring:
            return ECOMMERCE
        return DEFAULT_SECTOR

    @staticmethod
    def determine_stage(answers: AssessmentAnswers) -> str:
        """pre-seed unless there is outside capital, term sheets or meaningful MRR"""
        significant_mrr = answers.mrr in (MRRLevel.MEDIUM, MRRLevel.HIGH)
        if answers.externalCapital is True or answers.termSheets is True or significant_mrr:
            return SEED
        return PRE_SEED
