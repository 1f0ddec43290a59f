"""
Candidate Matcher

Filters a pool of creator profiles against a campaign's requirement set
and ranks the survivors by an additive overlap score.

Filtering is an ordered list of exclusion rules evaluated top to bottom;
the first rule that fires excludes the candidate.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

from core.config import MatchingConfig

from .followers import normalize_followers
from .models import CampaignRequirements, CreatorProfile, RankedCandidate

logger = logging.getLogger(__name__)

# Requirement gender values that mean "no filter"
_ANY_GENDER = {"", "any", "all"}


@dataclass(frozen=True)
class ExclusionRule:
    """Named predicate; excludes(profile, requirements, followers) -> True drops the candidate"""
    name: str
    excludes: Callable[[CreatorProfile, CampaignRequirements, int], bool]


def _lower_set(values: Iterable[str]) -> set:
    return {str(v).strip().lower() for v in values if v is not None and str(v).strip()}


def max_followers(profile: CreatorProfile) -> int:
    """Largest normalized follower count across the creator's social accounts"""
    return max((normalize_followers(s.followers) for s in profile.socials), default=0)


def _is_locked(profile: CreatorProfile, requirements: CampaignRequirements, followers: int) -> bool:
    return profile.is_locked


def _gender_mismatch(profile: CreatorProfile, requirements: CampaignRequirements, followers: int) -> bool:
    wanted = (requirements.gender or "").strip().lower()
    if wanted in _ANY_GENDER:
        return False
    actual = (profile.gender or "").strip().lower()
    if not actual:
        return False
    return actual != wanted


def _location_mismatch(profile: CreatorProfile, requirements: CampaignRequirements, followers: int) -> bool:
    wanted = [loc.lower() for loc in requirements.locations if loc.strip()]
    if not wanted:
        return False
    places = [p.lower() for p in (profile.city, profile.district, profile.state) if p]
    return not any(w in place for place in places for w in wanted)


def _followers_out_of_range(profile: CreatorProfile, requirements: CampaignRequirements, followers: int) -> bool:
    if requirements.min_followers is not None and followers < requirements.min_followers:
        return True
    if requirements.max_followers is not None and followers > requirements.max_followers:
        return True
    return False


EXCLUSION_RULES: Sequence[ExclusionRule] = (
    ExclusionRule("locked", _is_locked),
    ExclusionRule("gender", _gender_mismatch),
    ExclusionRule("location", _location_mismatch),
    ExclusionRule("followers", _followers_out_of_range),
)


def exclusion_reason(
    profile: CreatorProfile,
    requirements: CampaignRequirements,
    followers: Optional[int] = None,
    rules: Sequence[ExclusionRule] = EXCLUSION_RULES,
) -> Optional[str]:
    """Name of the first rule that excludes the candidate, or None if eligible"""
    if followers is None:
        followers = max_followers(profile)
    for rule in rules:
        if rule.excludes(profile, requirements, followers):
            return rule.name
    return None


def score_candidate(
    profile: CreatorProfile,
    requirements: CampaignRequirements,
    config: Optional[MatchingConfig] = None,
) -> int:
    """Category overlap, language overlap and a connected-social bonus"""
    config = config or MatchingConfig()

    category_hits = len(_lower_set(requirements.categories) & _lower_set(profile.categories))
    language_hits = len(_lower_set(requirements.languages) & _lower_set(profile.languages))

    score = category_hits * config.category_weight + language_hits * config.language_weight
    if profile.socials:
        score += config.social_bonus
    return score


def match_candidates(
    requirements: CampaignRequirements,
    profiles: Iterable[CreatorProfile],
    config: Optional[MatchingConfig] = None,
) -> List[RankedCandidate]:
    """
    Rank eligible creators for a campaign.

    Ties keep the pool's enumeration order. The result is capped at
    config.suggestion_limit.
    """
    config = config or MatchingConfig()
    ranked: List[RankedCandidate] = []
    excluded = 0

    for profile in profiles:
        followers = max_followers(profile)
        if exclusion_reason(profile, requirements, followers) is not None:
            excluded += 1
            continue

        ranked.append(
            RankedCandidate(
                creator_id=profile.creator_id,
                name=profile.name,
                username=profile.username,
                image=profile.image,
                city=profile.city,
                gender=profile.gender,
                categories=list(profile.categories),
                languages=list(profile.languages),
                followers=followers,
                has_social=bool(profile.socials),
                score=score_candidate(profile, requirements, config),
            )
        )

    ranked.sort(key=lambda c: c.score, reverse=True)
    logger.debug(f"Matched {len(ranked)} candidates, excluded {excluded}")
    return ranked[: config.suggestion_limit]


__all__ = [
    "ExclusionRule",
    "EXCLUSION_RULES",
    "max_followers",
    "exclusion_reason",
    "score_candidate",
    "match_candidates",
]
