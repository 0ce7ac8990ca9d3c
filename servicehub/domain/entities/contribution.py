from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ContributionPlacement:
    category: str
    count: int | None = None
    rank: int | None = None
    total_participants: int | None = None
    percentile: float | None = None


@dataclass(frozen=True)
class ContributionBadge:
    category: str
    type: str  # "RANK", "TOP_PERCENT", ...
    label: str
    rank: int | None = None
    percentile: int | None = None


@dataclass(frozen=True)
class ContributionAward:
    category: str
    title: str
    rank: int | None = None


@dataclass(frozen=True)
class ContributionStats:
    creator_count: int | None = None
    reviewer_count: int | None = None
    total_contributions: int | None = None
    placements: tuple[ContributionPlacement, ...] = ()
    badges: tuple[ContributionBadge, ...] = ()
    awards: tuple[ContributionAward, ...] = ()
