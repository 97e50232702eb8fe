"""In-memory position store backing the live radar."""

from __future__ import annotations

import dataclasses
import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from icebreaker.domain.exceptions import InvalidRadius, UserNotFound
from icebreaker.domain.proximity.geo import distance_between
from icebreaker.domain.proximity.models import Coordinates, User
from icebreaker.infra.locks import KeyedLocks
from icebreaker.obs import metrics as obs_metrics
from icebreaker.settings import RADIUS_MAX, RADIUS_MIN, Settings, settings as default_settings

logger = logging.getLogger(__name__)

NearbyTuple = Tuple[User, float]


def validate_radius(radius: float) -> float:
	try:
		value = float(radius)
	except (TypeError, ValueError):
		raise InvalidRadius(radius) from None
	if not RADIUS_MIN <= value <= RADIUS_MAX:
		raise InvalidRadius(radius)
	return value


class PositionStore:
	"""Current coordinates, broadcast radius and visibility of every active user.

	Writes for one user are serialized through a per-user lock; different users
	never contend. Reads work on a snapshot of the table and hand out copies, so
	callers cannot mutate stored records.
	"""

	def __init__(
		self,
		*,
		config: Optional[Settings] = None,
		clock: Callable[[], float] = time.time,
	) -> None:
		self._config = config or default_settings
		self._clock = clock
		self._users: Dict[str, User] = {}
		self._locks = KeyedLocks(
			timeout=self._config.store_lock_timeout_seconds,
			attempts=self._config.store_lock_attempts,
		)

	def __contains__(self, user_id: object) -> bool:
		return user_id in self._users

	def __len__(self) -> int:
		return len(self._users)

	async def update_position(
		self,
		user_id: str,
		coordinates: Coordinates,
		radius: float,
		*,
		handle: Optional[str] = None,
		timestamp: Optional[float] = None,
	) -> bool:
		"""Record a location broadcast.

		Returns False when the write carries an older timestamp than the stored
		one and was discarded.
		"""
		try:
			radius = validate_radius(radius)
		except InvalidRadius:
			obs_metrics.inc_position_reject("invalid_radius")
			raise
		ts = self._clock() if timestamp is None else float(timestamp)
		async with self._locks.hold(user_id):
			current = self._users.get(user_id)
			if current is None:
				self._users[user_id] = User(
					user_id=user_id,
					handle=handle or user_id,
					coordinates=coordinates,
					radius=radius,
					last_seen=ts,
				)
			else:
				if ts < current.last_seen:
					logger.debug("position discarded user=%s reason=stale_timestamp", user_id)
					obs_metrics.inc_position_reject("stale_timestamp")
					return False
				current.coordinates = coordinates
				current.radius = radius
				current.last_seen = ts
				current.expired = False
				if handle:
					current.handle = handle
		obs_metrics.POSITION_UPDATES.inc()
		return True

	async def set_visible(self, user_id: str, visible: bool) -> None:
		async with self._locks.hold(user_id):
			current = self._users.get(user_id)
			if current is None:
				raise UserNotFound(user_id)
			current.discoverable = bool(visible)
		logger.info("visibility changed user=%s visible=%s", user_id, bool(visible))

	async def remove(self, user_id: str) -> None:
		async with self._locks.hold(user_id):
			if self._users.pop(user_id, None) is None:
				raise UserNotFound(user_id)

	def get(self, user_id: str) -> User:
		current = self._users.get(user_id)
		if current is None:
			raise UserNotFound(user_id)
		return dataclasses.replace(current)

	def is_stale(self, user: User, now: Optional[float] = None) -> bool:
		now = self._clock() if now is None else now
		return now - user.last_seen > self._config.auto_expire_seconds

	def users_within(self, center_user_id: str, range_: float, *, now: Optional[float] = None) -> List[NearbyTuple]:
		"""Visible users the caller can see, nearest first.

		A user is returned when its distance is within both the caller's effective
		range (``min(range_, caller radius)``) and its own broadcast radius.
		"""
		center = self._users.get(center_user_id)
		if center is None:
			raise UserNotFound(center_user_id)
		now = self._clock() if now is None else now
		effective_range = min(float(range_), center.radius)
		origin = center.coordinates
		found: List[NearbyTuple] = []
		for user in list(self._users.values()):
			if user.user_id == center_user_id:
				continue
			if not user.visible or self.is_stale(user, now):
				continue
			distance = distance_between(origin, user.coordinates)
			if distance is None:
				if logger.isEnabledFor(logging.DEBUG):
					logger.debug("radar skip uid=%s reason=coordinate_kind", user.user_id)
				continue
			if distance > effective_range or distance > user.radius:
				continue
			found.append((dataclasses.replace(user), distance))
		found.sort(key=lambda item: (item[1], item[0].user_id))
		return found

	async def expire_stale(self, now: Optional[float] = None) -> List[str]:
		"""Hide users whose last broadcast is older than the expiry window."""
		now = self._clock() if now is None else now
		expired: List[str] = []
		for user_id, user in list(self._users.items()):
			if user.expired or not self.is_stale(user, now):
				continue
			async with self._locks.hold(user_id):
				current = self._users.get(user_id)
				# A broadcast may have landed while we waited for the lock.
				if current is None or current.expired or not self.is_stale(current, now):
					continue
				current.expired = True
			expired.append(user_id)
		obs_metrics.VISIBLE_USERS.set(float(self.visible_count()))
		return sorted(expired)

	async def purge_expired(self, now: Optional[float] = None) -> List[str]:
		"""Drop users silent for longer than the expiry window plus the purge window."""
		now = self._clock() if now is None else now
		cutoff = self._config.auto_expire_seconds + self._config.purge_after_seconds
		purged: List[str] = []
		for user_id, user in list(self._users.items()):
			if now - user.last_seen <= cutoff:
				continue
			async with self._locks.hold(user_id):
				current = self._users.get(user_id)
				if current is None or now - current.last_seen <= cutoff:
					continue
				del self._users[user_id]
			purged.append(user_id)
		return sorted(purged)

	def visible_count(self) -> int:
		return sum(1 for user in self._users.values() if user.visible)


__all__ = ["PositionStore", "validate_radius"]
