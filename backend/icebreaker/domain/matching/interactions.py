"""Pass and block decisions that hide candidates from a caller's radar."""

from __future__ import annotations

from typing import Dict, Set


class InteractionLedger:
	"""Passing hides the target from the caller only; blocking hides both ways."""

	def __init__(self) -> None:
		self._passed: Dict[str, Set[str]] = {}
		self._blocked: Dict[str, Set[str]] = {}

	def pass_user(self, user_id: str, target_id: str) -> None:
		if user_id == target_id:
			raise ValueError("cannot pass yourself")
		self._passed.setdefault(user_id, set()).add(target_id)

	def block_user(self, user_id: str, target_id: str) -> None:
		if user_id == target_id:
			raise ValueError("cannot block yourself")
		self._blocked.setdefault(user_id, set()).add(target_id)

	def is_hidden(self, viewer_id: str, target_id: str) -> bool:
		if target_id in self._passed.get(viewer_id, ()):
			return True
		if target_id in self._blocked.get(viewer_id, ()):
			return True
		return viewer_id in self._blocked.get(target_id, ())

	def forget(self, user_id: str) -> None:
		"""Drop the user's own decisions and passes on them.

		Blocks other users placed on ``user_id`` are kept so they still apply if
		the same id broadcasts again.
		"""
		self._passed.pop(user_id, None)
		self._blocked.pop(user_id, None)
		for targets in self._passed.values():
			targets.discard(user_id)
		for viewer in [viewer for viewer, targets in self._passed.items() if not targets]:
			del self._passed[viewer]

	def __len__(self) -> int:
		return len(self._passed) + len(self._blocked)


__all__ = ["InteractionLedger"]
