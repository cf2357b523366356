"""Default ranking constants.

These values reproduce the production recommendation ordering. Changing
any of them changes which terms users see first.
"""

# Log-compression applied to raw counts: log10(x + 1) * factor
COMPRESSION_FACTOR: float = 10.0

# Weighted-sum blend of the recommendation score
LIKES_WEIGHT: float = 0.4
VIEWS_WEIGHT: float = 0.3
COMMENTS_WEIGHT: float = 0.2
RECENCY_WEIGHT: float = 0.1

# time_factor is scaled to 0-10 before weighting, matching compressed counts
RECENCY_SCALE: float = 10.0

# Time decay: full credit for the plateau, linear decay over the window
FRESHNESS_PLATEAU_DAYS: float = 7.0
DECAY_WINDOW_DAYS: float = 30.0
DECAY_FLOOR: float = 0.3

# Candidate pools
GENERAL_POOL_MULTIPLIER: int = 3
PERSONALIZED_POOL_SIZE: int = 100

# Personalization
CATEGORY_BOOST: float = 1.5
FOLLOWED_AUTHOR_BOOST: float = 1.3
INJECTED_FOLLOWED_SCORE: float = 50.0
LIKED_CATEGORY_LIMIT: int = 10
FOLLOWED_TERM_LIMIT: int = 5

# Trending composite over the recent activity window
TRENDING_WINDOW_DAYS: int = 7
TRENDING_LIKES_WEIGHT: float = 3.0
TRENDING_VIEWS_WEIGHT: float = 2.0
TRENDING_COMMENTS_WEIGHT: float = 2.0

# Only rows in this status are eligible for ranking
PUBLISHED_STATUS: str = "published"

# Limit used when callers do not pass one
DEFAULT_LIMIT: int = 20

# Component name used in structured logs
COMPONENT_RANKER: str = "ranker"
COMPONENT_STORE: str = "store"
COMPONENT_CLI: str = "cli"
