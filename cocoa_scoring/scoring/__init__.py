"""
scoring/ - Evaluation Scoring & Ranking Engine

Modules:
    utils.py             - Float / Decimal numeric helpers
    outlier_filter.py    - Judge-disagreement outlier filter
    chocolate_scorer.py  - Weighted five-category chocolate scorer
    cocoa_scorer.py      - Bean/liquor group totals and advisory quality
    physical_rules.py    - Physical evaluation rule engine and summary scores
    ranking.py           - Per-contest ranking aggregator and awards
    lifecycle.py         - Contest lifecycle gate (date-derived status)
"""
