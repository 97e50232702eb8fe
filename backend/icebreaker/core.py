"""Wiring of the stores, scorer and matcher into one in-process core."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional

from icebreaker.domain.exceptions import UserNotFound
from icebreaker.domain.matching.best_match import DailyBestMatchSelector
from icebreaker.domain.matching.cache import CompatibilityCache
from icebreaker.domain.matching.interactions import InteractionLedger
from icebreaker.domain.matching.scoring import CompatibilityStrategy, TokenOverlapScorer
from icebreaker.domain.matching.service import ProximityMatcher
from icebreaker.domain.profile.catalog import QuestionCatalog, default_catalog
from icebreaker.domain.profile.store import ProfileStore
from icebreaker.domain.proximity.store import PositionStore
from icebreaker.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


@dataclass
class MatchingCore:
	config: Settings
	positions: PositionStore
	profiles: ProfileStore
	cache: CompatibilityCache
	selector: DailyBestMatchSelector
	interactions: InteractionLedger
	matcher: ProximityMatcher

	async def remove_user(self, user_id: str) -> None:
		"""Drop ``user_id`` from every store, cache and ledger."""
		if user_id not in self.positions and user_id not in self.profiles:
			raise UserNotFound(user_id)
		if user_id in self.positions:
			await self.positions.remove(user_id)
		await self._forget(user_id)

	async def purge_expired(self, now: Optional[float] = None) -> List[str]:
		purged = await self.positions.purge_expired(now)
		for user_id in purged:
			await self._forget(user_id)
		return purged

	async def _forget(self, user_id: str) -> None:
		await self.profiles.forget(user_id)
		evicted = self.cache.evict_user(user_id)
		self.selector.forget(user_id)
		self.interactions.forget(user_id)
		logger.debug("user forgotten user=%s evicted_pairs=%s", user_id, evicted)


def build_core(
	*,
	config: Optional[Settings] = None,
	catalog: Optional[QuestionCatalog] = None,
	strategy: Optional[CompatibilityStrategy] = None,
	clock: Callable[[], float] = time.time,
	today: Callable[[], date] = date.today,
) -> MatchingCore:
	config = config or default_settings
	positions = PositionStore(config=config, clock=clock)
	profiles = ProfileStore(catalog or default_catalog(), config=config, clock=clock)
	cache = CompatibilityCache(strategy or TokenOverlapScorer(config), profiles)
	selector = DailyBestMatchSelector(config=config, today=today)
	interactions = InteractionLedger()
	matcher = ProximityMatcher(
		positions,
		profiles,
		cache,
		selector,
		interactions=interactions,
		config=config,
	)
	return MatchingCore(
		config=config,
		positions=positions,
		profiles=profiles,
		cache=cache,
		selector=selector,
		interactions=interactions,
		matcher=matcher,
	)


__all__ = ["MatchingCore", "build_core"]
