# Scoring pipeline stages
from .stage1_normalizer import AnswerNormalizationStage
from .stage2_category import CategoryScoringStage
from .stage3_aggregate import TotalScoreStage
from .stage4_cluster import ClusterMappingStage
from .stage5_badges import BadgeRecommendationStage
