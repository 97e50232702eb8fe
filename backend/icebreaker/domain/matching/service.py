"""Radar matching: nearby users joined with compatibility and ranked."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from icebreaker.domain.exceptions import NotDiscoverable, UserNotFound
from icebreaker.domain.matching.best_match import DailyBestMatchSelector
from icebreaker.domain.matching.cache import CompatibilityCache
from icebreaker.domain.matching.interactions import InteractionLedger
from icebreaker.domain.matching.models import CompatibilityResult, MatchCandidate
from icebreaker.domain.profile.store import ProfileStore
from icebreaker.domain.proximity.store import PositionStore, validate_radius
from icebreaker.obs import metrics as obs_metrics
from icebreaker.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class ProximityMatcher:
	def __init__(
		self,
		positions: PositionStore,
		profiles: ProfileStore,
		cache: CompatibilityCache,
		selector: DailyBestMatchSelector,
		*,
		interactions: Optional[InteractionLedger] = None,
		config: Optional[Settings] = None,
	) -> None:
		self.positions = positions
		self.profiles = profiles
		self.cache = cache
		self.selector = selector
		self.interactions = interactions or InteractionLedger()
		self._config = config or default_settings

	async def find_matches(
		self,
		caller_id: str,
		range_override: Optional[float] = None,
		*,
		limit: Optional[int] = None,
	) -> List[MatchCandidate]:
		"""Ranked radar candidates for ``caller_id``.

		Ordered by score descending, then distance ascending, then user id. The
		full ranking feeds the daily best-match selector before the page is cut.
		"""
		config = self._config
		caller = self.positions.get(caller_id)
		if not caller.visible or self.positions.is_stale(caller):
			if config.not_discoverable_policy == "reject":
				obs_metrics.inc_radar_query("not_discoverable")
				raise NotDiscoverable()
			logger.debug("radar query from hidden caller=%s", caller_id)
		range_ = config.default_visibility_range if range_override is None else validate_radius(range_override)

		nearby = [
			(user, distance)
			for user, distance in self.positions.users_within(caller_id, range_)
			if not self.interactions.is_hidden(caller_id, user.user_id)
		]
		results = await asyncio.gather(*(self.cache.get(caller_id, user.user_id) for user, _ in nearby))

		candidates = [
			MatchCandidate(user=user, distance=distance, result=result.oriented(caller_id))
			for (user, distance), result in zip(nearby, results)
			if result.score >= config.min_match_score
		]
		candidates.sort(key=MatchCandidate.sort_key)
		await self.selector.observe(caller_id, candidates)

		page = candidates[: config.match_page_size if limit is None else limit]
		obs_metrics.inc_radar_query("ok")
		obs_metrics.RADAR_RESULTS.observe(len(page))
		logger.info(
			"radar query caller=%s range=%s effective_range=%s in_range=%s returned=%s",
			caller_id,
			range_,
			min(range_, caller.radius),
			len(nearby),
			len(page),
		)
		return page

	async def compatibility(self, user_a: str, user_b: str) -> CompatibilityResult:
		"""Pair result for the conversation-starter generator, oriented to ``user_a``."""
		if user_a == user_b:
			raise ValueError("compatibility needs two distinct users")
		for user_id in (user_a, user_b):
			if user_id not in self.positions and user_id not in self.profiles:
				raise UserNotFound(user_id)
		result = await self.cache.get(user_a, user_b)
		return result.oriented(user_a)


__all__ = ["ProximityMatcher"]
