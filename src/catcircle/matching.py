"""Discover-tab scorer — ranks other owners by interest overlap."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable

from catcircle.schemas.config import MatchingSettings
from catcircle.schemas.profiles import OwnerProfile, RecommendedMatch

logger = logging.getLogger(__name__)


def shared_interests(me: OwnerProfile, other: OwnerProfile) -> list[str]:
    """Interests of ``other`` that ``me`` also lists, in ``other``'s order."""
    mine = set(me.interests)
    return [i for i in other.interests if i in mine]


def _same_breed(me: OwnerProfile, other: OwnerProfile) -> str | None:
    mine, theirs = me.primary_cat, other.primary_cat
    if mine is None or theirs is None:
        return None
    return theirs.breed if theirs.breed == mine.breed else None


def build_reason(common: list[str], breed: str | None) -> str:
    reason = "Matched via Neural Discovery. "
    if common:
        reason += f"Both interested in {', '.join(common)}. "
    if breed:
        reason += f"Shared passion for {breed}s."
    return reason


class MatchScorer:
    """Scores candidates against the active user.

    ``rng`` is any ``random.Random``; pass a seeded one for reproducible runs.
    """

    def __init__(
        self,
        settings: MatchingSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or MatchingSettings()
        self.rng = rng or random.Random()

    def _jitter(self) -> int:
        return self.rng.randrange(self.settings.jitter) if self.settings.jitter else 0

    def score(self, me: OwnerProfile, other: OwnerProfile) -> RecommendedMatch:
        s = self.settings
        common = shared_interests(me, other)
        raw = s.base + len(common) * s.interest_weight + self._jitter()
        return RecommendedMatch(
            owner=other,
            match_score=min(raw, s.ceiling),
            reason=build_reason(common, _same_breed(me, other)),
        )

    def rank(self, me: OwnerProfile, candidates: Iterable[OwnerProfile]) -> list[RecommendedMatch]:
        """Score every candidate except ``me`` and sort by score, highest first.

        ``sorted`` is stable, so ties keep candidate order.
        """
        matches = [self.score(me, o) for o in candidates if o.id != me.id]
        matches.sort(key=lambda m: m.match_score, reverse=True)
        logger.debug("Ranked %d matches for %s", len(matches), me.id)
        return matches
