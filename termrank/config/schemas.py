"""Ranking configuration schema."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator

from termrank.config import constants as c


class ConfigSection(BaseModel):
    """Immutable ranking.yaml section; unknown keys are rejected."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class ScoringConfig(ConfigSection):
    """Weights of the recommendation score.

    Attributes:
        likes_weight: Weight of compressed likes.
        views_weight: Weight of compressed views.
        comments_weight: Weight of compressed comments.
        recency_weight: Weight of the scaled time factor.
        compression_factor: Multiplier applied after log10(x + 1).
        recency_scale: Scale applied to the time factor before weighting.
    """

    likes_weight: Annotated[float, Field(ge=0.0, le=1.0)] = c.LIKES_WEIGHT
    views_weight: Annotated[float, Field(ge=0.0, le=1.0)] = c.VIEWS_WEIGHT
    comments_weight: Annotated[float, Field(ge=0.0, le=1.0)] = c.COMMENTS_WEIGHT
    recency_weight: Annotated[float, Field(ge=0.0, le=1.0)] = c.RECENCY_WEIGHT
    compression_factor: Annotated[float, Field(gt=0.0)] = c.COMPRESSION_FACTOR
    recency_scale: Annotated[float, Field(gt=0.0)] = c.RECENCY_SCALE


class DecayConfig(ConfigSection):
    """Freshness decay shape.

    Attributes:
        plateau_days: Age in days that still gets full freshness credit.
        window_days: Days over which the factor decays linearly after the plateau.
        floor: Minimum time factor; old content never drops below it.
    """

    plateau_days: Annotated[float, Field(ge=0.0)] = c.FRESHNESS_PLATEAU_DAYS
    window_days: Annotated[float, Field(gt=0.0)] = c.DECAY_WINDOW_DAYS
    floor: Annotated[float, Field(ge=0.0, le=1.0)] = c.DECAY_FLOOR


class CandidatesConfig(ConfigSection):
    """Candidate pool sizing for general ranking."""

    general_pool_multiplier: Annotated[int, Field(ge=1, le=100)] = (
        c.GENERAL_POOL_MULTIPLIER
    )


class PersonalizationConfig(ConfigSection):
    """Boosts and fetch bounds used for a known caller.

    Attributes:
        category_boost: Multiplier for candidates in a liked category.
        followed_boost: Extra multiplier for pooled terms by followed authors.
        injected_score: Flat score of followed terms missing from the pool.
        pool_size: Fixed candidate pool size.
        liked_category_limit: Most recent liked categories considered.
        followed_term_limit: Most recent followed-author terms considered.
    """

    category_boost: Annotated[float, Field(ge=1.0, le=10.0)] = c.CATEGORY_BOOST
    followed_boost: Annotated[float, Field(ge=1.0, le=10.0)] = c.FOLLOWED_AUTHOR_BOOST
    injected_score: Annotated[float, Field(ge=0.0)] = c.INJECTED_FOLLOWED_SCORE
    pool_size: Annotated[int, Field(ge=1, le=10000)] = c.PERSONALIZED_POOL_SIZE
    liked_category_limit: Annotated[int, Field(ge=0, le=1000)] = (
        c.LIKED_CATEGORY_LIMIT
    )
    followed_term_limit: Annotated[int, Field(ge=0, le=1000)] = c.FOLLOWED_TERM_LIMIT


class TrendingConfig(ConfigSection):
    """Short-term momentum composite."""

    window_days: Annotated[int, Field(ge=1, le=365)] = c.TRENDING_WINDOW_DAYS
    likes_weight: Annotated[float, Field(ge=0.0)] = c.TRENDING_LIKES_WEIGHT
    views_weight: Annotated[float, Field(ge=0.0)] = c.TRENDING_VIEWS_WEIGHT
    comments_weight: Annotated[float, Field(ge=0.0)] = c.TRENDING_COMMENTS_WEIGHT


class RankingConfig(ConfigSection):
    """Root configuration for ranking.yaml.

    Attributes:
        version: Schema version.
        scoring: Recommendation score weights.
        decay: Freshness decay shape.
        candidates: General candidate pool sizing.
        personalization: Personalized boosts and bounds.
        trending: Trending composite weights and window.
    """

    version: Annotated[str, Field(pattern=r"^\d+\.\d+$")] = "1.0"
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    decay: DecayConfig = Field(default_factory=DecayConfig)
    candidates: CandidatesConfig = Field(default_factory=CandidatesConfig)
    personalization: PersonalizationConfig = Field(
        default_factory=PersonalizationConfig
    )
    trending: TrendingConfig = Field(default_factory=TrendingConfig)

    @model_validator(mode="after")
    def validate_scoring_weights(self) -> "RankingConfig":
        """Ensure the four score weights add up to one."""
        s = self.scoring
        total = s.likes_weight + s.views_weight + s.comments_weight + s.recency_weight
        if abs(total - 1.0) > 1e-6:
            msg = f"Scoring weights must sum to 1.0, got {total:.4f}"
            raise ValueError(msg)
        return self
