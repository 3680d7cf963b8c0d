"""
Readiness Scoring Engine
========================
A five-stage pipeline for startup investment readiness:
  Stage 1: Answer Normalization (answers to 0-100 signals)
  Stage 2: Category Scoring (four weighted category scores)
  Stage 3: Total Aggregation (0-999 total from a scoring profile)
  Stage 4: Cluster Mapping (peer band and percentile)
  Stage 5: Badges & Recommendations (AI with static fallback)

Plus an investor classifier with a deterministic rule-table fallback.
"""

__version__ = "1.0.0"
__author__ = "Readiness Scoring Team"
