"""Tests for Stage 4 cluster mapping and sector/stage detection."""

import pytest

from readiness_engine.models.schemas import AssessmentAnswers
from readiness_engine.stages.stage4_cluster import ClusterMappingStage
from readiness_engine.config.settings import SECTORS, STAGES


class TestClusterBands:
    def setup_method(self):
        self.stage = ClusterMappingStage()

    @pytest.mark.parametrize(
        "total,expected",
        [
            (0, "Foundation Builders"),
            (349, "Foundation Builders"),
            (350, "Development Stage"),
            (499, "Development Stage"),
            (500, "Growth Candidates"),
            (649, "Growth Candidates"),
            (650, "Scaling Accelerators"),
            (799, "Scaling Accelerators"),
            (800, "Investment Ready Leaders"),
            (999, "Investment Ready Leaders"),
        ],
    )
    def test_boundaries(self, total, expected):
        assert self.stage.process(total).band.name == expected

    def test_every_score_has_exactly_one_band(self):
        for total in range(0, 1000):
            matches = [
                b for b in self.stage.bands
                if b.min_score <= total < b.max_score
                or (b is self.stage.bands[-1] and total == b.max_score)
            ]
            assert len(matches) == 1
            assert self.stage.band_for(total) is matches[0]

    def test_out_of_range_scores_clamped(self):
        assert self.stage.process(-20).band.name == "Foundation Builders"
        assert self.stage.process(1200).score == 999

    def test_hints_echoed_without_changing_band(self):
        plain = self.stage.process(720)
        hinted = self.stage.process(720, sector="FinTech", stage="seed")
        assert hinted.band == plain.band
        assert hinted.sector == "FinTech"
        assert hinted.stage == "seed"

    def test_band_metadata(self):
        band = self.stage.process(900).band
        assert band.percentile_rank == 95
        assert band.funding_stage == "Series A+"
        assert band.key_strengths


class TestSectorAndStage:
    def test_recurring_revenue_is_saas(self):
        answers = AssessmentAnswers(revenue=True, mrr="medium")
        assert ClusterMappingStage.determine_sector(answers) == "B2B SaaS"

    def test_capital_and_term_sheets_without_mrr_is_fintech(self):
        answers = AssessmentAnswers(externalCapital=True, termSheets=True, mrr="none")
        assert ClusterMappingStage.determine_sector(answers) == "FinTech"

    def test_prototype_without_revenue_is_consumer(self):
        answers = AssessmentAnswers(prototype=True, revenue=False)
        assert ClusterMappingStage.determine_sector(answers) == "B2C Consumer"

    def test_one_off_revenue_is_ecommerce(self):
        answers = AssessmentAnswers(revenue=True, mrr="none")
        assert ClusterMappingStage.determine_sector(answers) == "E-commerce"

    def test_default_sector(self):
        assert ClusterMappingStage.determine_sector(AssessmentAnswers()) == "B2B SaaS"

    def test_stage_detection(self):
        assert ClusterMappingStage.determine_stage(AssessmentAnswers()) == "pre-seed"
        assert ClusterMappingStage.determine_stage(AssessmentAnswers(mrr="low")) == "pre-seed"
        assert ClusterMappingStage.determine_stage(AssessmentAnswers(mrr="high")) == "seed"
        assert ClusterMappingStage.determine_stage(AssessmentAnswers(termSheets=True)) == "seed"

    def test_hints_come_from_known_sets(self, strong_answers, weak_answers):
        for answers in (strong_answers, weak_answers, AssessmentAnswers()):
            assert ClusterMappingStage.determine_sector(answers) in SECTORS
            assert ClusterMappingStage.determine_stage(answers) in STAGES
