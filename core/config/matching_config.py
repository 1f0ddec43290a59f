#!/usr/bin/env python3
"""Scoring weights and caps for matching, recommendation and ROI

Every tunable number used by the decision logic lives here so that
weight tuning is an environment change.
"""
import os
from dataclasses import dataclass

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class MatchingConfig:
    """Weights for candidate matching and package recommendation"""

    # ===========================================
    # Candidate matcher
    # ===========================================
    category_weight: int = 2
    language_weight: int = 1
    social_bonus: int = 1
    suggestion_limit: int = 24
    candidate_pool_limit: int = 200

    # ===========================================
    # Package recommender
    # ===========================================
    budget_fit_weight: float = 0.55
    volume_weight: float = 0.25
    completion_weight: float = 0.20
    neutral_budget_fit: float = 0.6
    volume_saturation_orders: int = 10
    high_completion_threshold: float = 0.8
    fits_budget_threshold: float = 0.9
    near_budget_threshold: float = 0.6
    proven_package_orders: int = 3
    alternatives_limit: int = 5

    # ===========================================
    # ROI aggregator
    # ===========================================
    top_offerings_per_creator: int = 3

    @classmethod
    def from_env(cls) -> 'MatchingConfig':
        """Load scoring weights from environment variables"""
        return cls(
            category_weight=_int(os.getenv("MATCH_CATEGORY_WEIGHT", "2"), 2),
            language_weight=_int(os.getenv("MATCH_LANGUAGE_WEIGHT", "1"), 1),
            social_bonus=_int(os.getenv("MATCH_SOCIAL_BONUS", "1"), 1),
            suggestion_limit=_int(os.getenv("MATCH_SUGGESTION_LIMIT", "24"), 24),
            candidate_pool_limit=_int(os.getenv("MATCH_CANDIDATE_POOL_LIMIT", "200"), 200),
            budget_fit_weight=_float(os.getenv("RECOMMEND_BUDGET_FIT_WEIGHT", "0.55"), 0.55),
            volume_weight=_float(os.getenv("RECOMMEND_VOLUME_WEIGHT", "0.25"), 0.25),
            completion_weight=_float(os.getenv("RECOMMEND_COMPLETION_WEIGHT", "0.20"), 0.20),
            neutral_budget_fit=_float(os.getenv("RECOMMEND_NEUTRAL_BUDGET_FIT", "0.6"), 0.6),
            volume_saturation_orders=_int(os.getenv("RECOMMEND_VOLUME_SATURATION", "10"), 10),
            high_completion_threshold=_float(os.getenv("RECOMMEND_HIGH_COMPLETION", "0.8"), 0.8),
            fits_budget_threshold=_float(os.getenv("RECOMMEND_FITS_BUDGET", "0.9"), 0.9),
            near_budget_threshold=_float(os.getenv("RECOMMEND_NEAR_BUDGET", "0.6"), 0.6),
            proven_package_orders=_int(os.getenv("RECOMMEND_PROVEN_ORDERS", "3"), 3),
            alternatives_limit=_int(os.getenv("RECOMMEND_ALTERNATIVES_LIMIT", "5"), 5),
            top_offerings_per_creator=_int(os.getenv("ROI_TOP_OFFERINGS", "3"), 3),
        )
