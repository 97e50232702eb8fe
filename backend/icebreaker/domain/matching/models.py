"""Value objects produced by the compatibility scorer and the radar matcher."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Mapping, Tuple

from icebreaker.domain.profile.models import AnswerValue
from icebreaker.domain.proximity.models import User


class MatchLevel(str, Enum):
	EXCELLENT = "excellent"
	GREAT = "great"
	GOOD = "good"
	FAIR = "fair"
	LOW = "low"

	@classmethod
	def for_score(cls, score: float) -> "MatchLevel":
		if score >= 90:
			return cls.EXCELLENT
		if score >= 80:
			return cls.GREAT
		if score >= 70:
			return cls.GOOD
		if score >= 60:
			return cls.FAIR
		return cls.LOW


@dataclass(frozen=True, slots=True)
class Highlight:
	"""One matched answer pair surfaced to the conversation-starter generator."""

	category: str
	question_a: str
	question_b: str
	value_a: AnswerValue
	value_b: AnswerValue
	similarity: float
	shared_terms: Tuple[str, ...] = ()

	def swapped(self) -> "Highlight":
		return dataclasses.replace(
			self,
			question_a=self.question_b,
			question_b=self.question_a,
			value_a=self.value_b,
			value_b=self.value_a,
		)


@dataclass(frozen=True, slots=True)
class CompatibilityResult:
	user_a_id: str
	user_b_id: str
	score: float
	breakdown: Mapping[str, float] = field(default_factory=dict)
	highlights: Tuple[Highlight, ...] = ()
	version: int = 0

	@property
	def level(self) -> MatchLevel:
		return MatchLevel.for_score(self.score)

	def oriented(self, viewer_id: str) -> "CompatibilityResult":
		"""Copy with ``viewer_id`` on the A side; scores are untouched."""
		if viewer_id != self.user_b_id or self.user_a_id == self.user_b_id:
			return self
		return dataclasses.replace(
			self,
			user_a_id=self.user_b_id,
			user_b_id=self.user_a_id,
			highlights=tuple(highlight.swapped() for highlight in self.highlights),
		)


@dataclass(frozen=True, slots=True)
class MatchCandidate:
	user: User
	distance: float
	result: CompatibilityResult

	@property
	def user_id(self) -> str:
		return self.user.user_id

	@property
	def score(self) -> float:
		return self.result.score

	@property
	def level(self) -> MatchLevel:
		return self.result.level

	def sort_key(self) -> Tuple[float, float, str]:
		return (-self.result.score, self.distance, self.user.user_id)


@dataclass(frozen=True, slots=True)
class DailyBestMatch:
	user_id: str
	candidate_id: str
	day: date
	score: float


__all__ = ["MatchLevel", "Highlight", "CompatibilityResult", "MatchCandidate", "DailyBestMatch"]
