"""Per-key asyncio locks with a bounded acquisition retry budget."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Hashable

from icebreaker.domain.exceptions import StoreContention

logger = logging.getLogger(__name__)


class KeyedLocks:
	"""Hand out one lock per key so unrelated keys never wait on each other.

	Acquisition waits at most ``timeout`` seconds per attempt and gives up after
	``attempts`` tries, raising :class:`StoreContention`.
	"""

	def __init__(self, *, timeout: float = 0.5, attempts: int = 3) -> None:
		self._locks: Dict[Hashable, asyncio.Lock] = {}
		self._waiters: Dict[Hashable, int] = {}
		self.timeout = timeout
		self.attempts = max(1, attempts)

	def __len__(self) -> int:
		return len(self._locks)

	def locked(self, key: Hashable) -> bool:
		lock = self._locks.get(key)
		return bool(lock and lock.locked())

	@asynccontextmanager
	async def hold(self, key: Hashable) -> AsyncIterator[None]:
		lock = self._locks.setdefault(key, asyncio.Lock())
		self._waiters[key] = self._waiters.get(key, 0) + 1
		try:
			await self._acquire(key, lock)
			try:
				yield
			finally:
				lock.release()
		finally:
			remaining = self._waiters.get(key, 1) - 1
			if remaining <= 0:
				self._waiters.pop(key, None)
				if not lock.locked():
					self._locks.pop(key, None)
			else:
				self._waiters[key] = remaining

	async def _acquire(self, key: Hashable, lock: asyncio.Lock) -> None:
		for attempt in range(1, self.attempts + 1):
			try:
				await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
				return
			except asyncio.TimeoutError:
				logger.debug("lock busy key=%s attempt=%s/%s", key, attempt, self.attempts)
		logger.warning("lock contention key=%s attempts=%s", key, self.attempts)
		raise StoreContention(key)


__all__ = ["KeyedLocks"]
