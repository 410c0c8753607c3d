"""
Recommendation engine: scores the static SSG catalog against one project
analysis and overlays the caller's preference profile on the result.

Modules
-------
catalog : CatalogEntry dataclass + CATALOG tuple: static facts per SSG.
scorer  : ScoreComponents dataclass + compute_score() + score_to_confidence()
          + build_reasoning(): pure functions, no store or I/O.
engine  : RecommendationEngine: ranks candidates, builds BaseRecommendation.
overlay : apply_preferences() + pass_through(): BaseRecommendation +
          profile -> FinalRecommendation.
"""
