from __future__ import annotations

from typing import Any

from servicehub.application.exceptions import GatewayError
from servicehub.application.ports.gateway import RemoteGatewayPort
from servicehub.application.use_cases.base import SessionBoundOrchestrator
from servicehub.application.use_cases.session import SessionStore
from servicehub.application.use_cases.session_expiry import SessionExpiryPolicy
from servicehub.domain.entities.account_state import StatsState
from servicehub.domain.entities.contribution import ContributionAward, ContributionBadge, ContributionPlacement

CATEGORY_ORDER = {"overall": 0, "creator": 1, "reviewer": 2}
BADGE_TYPE_ORDER = {"RANK": 0, "TOP_PERCENT": 1}


def category_order(category: str) -> int:
    return CATEGORY_ORDER.get(category.lower(), len(CATEGORY_ORDER))


def badge_type_order(badge_type: str) -> int:
    return BADGE_TYPE_ORDER.get(badge_type.upper(), len(BADGE_TYPE_ORDER))


class ContributionStatsOrchestrator(SessionBoundOrchestrator[StatsState]):
    def __init__(self, gateway: RemoteGatewayPort, session: SessionStore, expiry: SessionExpiryPolicy) -> None:
        super().__init__(StatsState(), session, expiry)
        self._gateway = gateway

    async def load(self) -> None:
        user = self._session.user
        if user is None:
            self._publish(stats=None)
            return
        self._publish(is_loading=True, error_message=None)
        try:
            result = await self._gateway.fetch_contribution_stats(user.uuid)
        except GatewayError as e:
            self._handle_failure(e, "Unable to load contributions.", stats=None, is_loading=False)
            return
        self._absorb_token(result.token)
        self._publish(stats=result.payload, is_loading=False)

    @property
    def ordered_placements(self) -> list[ContributionPlacement]:
        if self.state.stats is None:
            return []
        return sorted(self.state.stats.placements, key=lambda p: category_order(p.category))

    @property
    def ordered_badges(self) -> list[ContributionBadge]:
        if self.state.stats is None:
            return []
        return sorted(
            self.state.stats.badges,
            key=lambda b: (category_order(b.category), badge_type_order(b.type)),
        )

    @property
    def ordered_awards(self) -> list[ContributionAward]:
        if self.state.stats is None:
            return []
        return sorted(self.state.stats.awards, key=lambda a: category_order(a.category))

    @property
    def has_any_rank(self) -> bool:
        return any(p.rank is not None for p in self.ordered_placements)

    def _cached_state_reset(self) -> dict[str, Any]:
        return {"stats": None}
