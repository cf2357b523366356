"""Ranking configuration: constants, schemas and YAML loading."""

from termrank.config.loader import ConfigValidationError, load_ranking_config
from termrank.config.schemas import (
    CandidatesConfig,
    DecayConfig,
    PersonalizationConfig,
    RankingConfig,
    ScoringConfig,
    TrendingConfig,
)


__all__ = [
    "CandidatesConfig",
    "ConfigValidationError",
    "DecayConfig",
    "PersonalizationConfig",
    "RankingConfig",
    "ScoringConfig",
    "TrendingConfig",
    "load_ranking_config",
]
