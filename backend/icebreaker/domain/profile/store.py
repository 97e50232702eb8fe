"""In-memory store of profile answers with per-user answer versions."""

from __future__ import annotations

import itertools
import logging
import time
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Union

from icebreaker.domain.exceptions import InvalidAnswer, UnknownQuestion, UserNotFound
from icebreaker.domain.profile.catalog import QuestionCatalog
from icebreaker.domain.profile.models import Answer, normalise_value
from icebreaker.infra.locks import KeyedLocks
from icebreaker.obs import metrics as obs_metrics
from icebreaker.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class ProfileStore:
	"""Latest answer per (user, question), validated against an injected catalog.

	Every change to a user's shared-answer set stamps the user with the next
	value of a store-wide sequence. Because the sequence only grows, the larger
	of two users' versions changes whenever either user changes, which is what
	the compatibility cache keys on.
	"""

	def __init__(
		self,
		catalog: QuestionCatalog,
		*,
		config: Optional[Settings] = None,
		clock: Callable[[], float] = time.time,
	) -> None:
		config = config or default_settings
		self._catalog = catalog
		self._clock = clock
		self._answers: Dict[str, Dict[str, Answer]] = {}
		self._versions: Dict[str, int] = {}
		self._sequence = itertools.count(1)
		self._locks = KeyedLocks(timeout=config.store_lock_timeout_seconds, attempts=config.store_lock_attempts)

	@property
	def catalog(self) -> QuestionCatalog:
		return self._catalog

	def __contains__(self, user_id: object) -> bool:
		return user_id in self._answers

	async def submit_answer(
		self,
		user_id: str,
		question_id: str,
		value: Union[str, Iterable[str]],
		*,
		shared: bool = True,
		category: Optional[str] = None,
		timestamp: Optional[float] = None,
	) -> Answer:
		question = self._catalog.get(question_id)
		if question is None:
			raise UnknownQuestion(question_id)
		if category is not None and category.strip().lower() != question.category:
			raise InvalidAnswer("category_mismatch")
		normalised = normalise_value(value)
		if not normalised:
			raise InvalidAnswer("empty_value")
		answer = Answer(
			user_id=user_id,
			question_id=question_id,
			category=question.category,
			value=normalised,
			submitted_at=self._clock() if timestamp is None else float(timestamp),
			shared=bool(shared),
			value_type=question.value_type,
		)
		async with self._locks.hold(user_id):
			answers = self._answers.setdefault(user_id, {})
			previous = answers.get(question_id)
			answers[question_id] = answer
			touches_shared = answer.shared or (previous is not None and previous.shared)
			if touches_shared and (previous is None or not previous.same_content(answer)):
				self._versions[user_id] = next(self._sequence)
		obs_metrics.inc_answer(answer.category, answer.shared)
		logger.debug(
			"answer stored user=%s question=%s shared=%s version=%s",
			user_id,
			question_id,
			answer.shared,
			self._versions.get(user_id, 0),
		)
		return answer

	def shared_answers(self, user_id: str) -> FrozenSet[Answer]:
		return frozenset(answer for answer in self._answers.get(user_id, {}).values() if answer.shared)

	def answers(self, user_id: str) -> List[Answer]:
		if user_id not in self._answers:
			raise UserNotFound(user_id)
		return sorted(self._answers[user_id].values(), key=lambda answer: answer.question_id)

	def version(self, user_id: str) -> int:
		return self._versions.get(user_id, 0)

	async def forget(self, user_id: str) -> bool:
		"""Drop every answer and the version of ``user_id``; False when unknown."""
		async with self._locks.hold(user_id):
			self._versions.pop(user_id, None)
			return self._answers.pop(user_id, None) is not None


__all__ = ["ProfileStore"]
