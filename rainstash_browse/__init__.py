from __future__ import annotations

from rainstash_browse.search import (
    DEFAULT_SCORING,
    MatchResult,
    RankedName,
    ScoringConfig,
    fuzzy_match,
    fuzzy_match_simple,
    rank_matches,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_SCORING",
    "MatchResult",
    "RankedName",
    "ScoringConfig",
    "__version__",
    "fuzzy_match",
    "fuzzy_match_simple",
    "rank_matches",
]
