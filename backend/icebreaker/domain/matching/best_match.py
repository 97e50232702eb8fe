"""Per-user, per-day "best match of the day" selection."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Dict, Optional, Sequence, Tuple

from icebreaker.domain.matching.models import DailyBestMatch, MatchCandidate
from icebreaker.infra.locks import KeyedLocks
from icebreaker.obs import metrics as obs_metrics
from icebreaker.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class DailyBestMatchSelector:
	"""Keyed table of (user id, day) -> DailyBestMatch.

	A user-day starts unset. The first observation whose top candidate reaches
	``best_match_threshold`` sets it, and it stays set for the rest of that day.
	Records from earlier days are dropped when a new one is written.
	"""

	def __init__(
		self,
		*,
		config: Optional[Settings] = None,
		today: Callable[[], date] = date.today,
	) -> None:
		self._config = config or default_settings
		self._today = today
		self._records: Dict[Tuple[str, date], DailyBestMatch] = {}
		self._locks = KeyedLocks(
			timeout=self._config.store_lock_timeout_seconds,
			attempts=self._config.store_lock_attempts,
		)

	def __len__(self) -> int:
		return len(self._records)

	def best_match(self, user_id: str, day: Optional[date] = None) -> Optional[DailyBestMatch]:
		return self._records.get((user_id, day or self._today()))

	def forget(self, user_id: str) -> None:
		for key in [key for key in self._records if key[0] == user_id]:
			del self._records[key]

	async def observe(
		self,
		user_id: str,
		candidates: Sequence[MatchCandidate],
		*,
		day: Optional[date] = None,
	) -> Optional[DailyBestMatch]:
		"""Lock in today's best match from an already ranked candidate list."""
		day = day or self._today()
		existing = self._records.get((user_id, day))
		if existing is not None:
			return existing
		if not candidates:
			return None
		top = candidates[0]
		if top.score < self._config.best_match_threshold:
			return None
		async with self._locks.hold(user_id):
			existing = self._records.get((user_id, day))
			if existing is not None:
				return existing
			record = DailyBestMatch(user_id=user_id, candidate_id=top.user_id, day=day, score=top.score)
			for key in [key for key in self._records if key[0] == user_id and key[1] != day]:
				del self._records[key]
			self._records[(user_id, day)] = record
		obs_metrics.BEST_MATCH_SET.inc()
		logger.info("best match set user=%s candidate=%s score=%s", user_id, top.user_id, top.score)
		return record


__all__ = ["DailyBestMatchSelector"]
