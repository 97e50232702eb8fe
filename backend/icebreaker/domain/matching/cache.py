"""Versioned cache of pairwise compatibility results."""

from __future__ import annotations

import asyncio
import dataclasses
import inspect
import logging
import time
from typing import Dict, Optional, Tuple

from icebreaker.domain.matching.models import CompatibilityResult
from icebreaker.domain.matching.scoring import CompatibilityStrategy
from icebreaker.domain.profile.store import ProfileStore
from icebreaker.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

PairId = Tuple[str, str]
CacheKey = Tuple[str, str, int]


def pair_id(user_a: str, user_b: str) -> PairId:
	return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


class CompatibilityCache:
	"""Fetch-or-compute compatibility results keyed by pair and answer version.

	The key is the unordered pair plus ``max(version A, version B)``; a new shared
	answer from either user therefore lands on a fresh key. Each key is computed
	by at most one task. Waiters share that task, and a waiter giving up does not
	cancel it, so the result still lands in the cache for the next query.
	"""

	def __init__(self, strategy: CompatibilityStrategy, profiles: ProfileStore) -> None:
		self._strategy = strategy
		self._profiles = profiles
		self._results: Dict[CacheKey, CompatibilityResult] = {}
		self._current: Dict[PairId, CacheKey] = {}
		self._inflight: Dict[CacheKey, asyncio.Task] = {}

	def __len__(self) -> int:
		return len(self._results)

	@property
	def strategy(self) -> CompatibilityStrategy:
		return self._strategy

	def key_for(self, user_a: str, user_b: str) -> CacheKey:
		low, high = pair_id(user_a, user_b)
		return (low, high, max(self._profiles.version(low), self._profiles.version(high)))

	def peek(self, user_a: str, user_b: str) -> Optional[CompatibilityResult]:
		"""Cached result for the pair's current versions, without computing."""
		return self._results.get(self.key_for(user_a, user_b))

	def inflight(self) -> int:
		return len(self._inflight)

	def evict_user(self, user_id: str) -> int:
		"""Drop every cached pair involving ``user_id``.

		Computations still running for those pairs finish for their waiters but
		are no longer stored.
		"""
		pairs = [pair for pair in self._current if user_id in pair]
		for pair in pairs:
			self._results.pop(self._current.pop(pair), None)
		for key in [key for key in self._inflight if user_id in key[:2]]:
			del self._inflight[key]
		return len(pairs)

	async def get(self, user_a: str, user_b: str) -> CompatibilityResult:
		key = self.key_for(user_a, user_b)
		cached = self._results.get(key)
		if cached is not None:
			obs_metrics.inc_cache("hit")
			return cached
		task = self._inflight.get(key)
		if task is None:
			obs_metrics.inc_cache("miss")
			task = asyncio.create_task(self._compute(key), name=f"compatibility:{key[0]}:{key[1]}:{key[2]}")
			self._inflight[key] = task
			task.add_done_callback(lambda done, key=key: self._forget(key, done))
		else:
			obs_metrics.inc_cache("shared")
		return await asyncio.shield(task)

	async def _compute(self, key: CacheKey) -> CompatibilityResult:
		low, high, version = key
		# Snapshot both sides before the first await so they match the key's versions.
		answers_low = self._profiles.shared_answers(low)
		answers_high = self._profiles.shared_answers(high)
		start = time.perf_counter()
		outcome = self._strategy.score(answers_low, answers_high, user_a_id=low, user_b_id=high)
		if inspect.isawaitable(outcome):
			outcome = await outcome
		obs_metrics.COMPATIBILITY_LATENCY.observe(time.perf_counter() - start)
		result = dataclasses.replace(outcome, version=version)
		self._store(key, result)
		return result

	def _store(self, key: CacheKey, result: CompatibilityResult) -> None:
		if self._inflight.get(key) is not asyncio.current_task():
			# Evicted while computing.
			return
		pair = (key[0], key[1])
		previous = self._current.get(pair)
		if previous is not None and previous[2] > key[2]:
			# A newer version finished first; the older result is only handed to its waiters.
			return
		if previous is not None and previous != key:
			self._results.pop(previous, None)
		self._current[pair] = key
		self._results[key] = result

	def _forget(self, key: CacheKey, task: asyncio.Task) -> None:
		if self._inflight.get(key) is task:
			self._inflight.pop(key, None)
		if task.cancelled():
			return
		error = task.exception()
		if error is not None:
			logger.warning("compatibility computation failed pair=%s:%s error=%s", key[0], key[1], error)


__all__ = ["CompatibilityCache", "pair_id"]
