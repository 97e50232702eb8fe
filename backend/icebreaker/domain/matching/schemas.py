"""Pydantic schemas consumed by the radar renderer and the conversation-starter generator."""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from icebreaker.domain.matching.models import (
	CompatibilityResult,
	DailyBestMatch,
	Highlight,
	MatchCandidate,
	MatchLevel,
)


def _plain(value: Union[str, tuple]) -> Union[str, List[str]]:
	return value if isinstance(value, str) else list(value)


class HighlightOut(BaseModel):
	category: str
	question_a: str
	question_b: str
	value_a: Union[str, List[str]]
	value_b: Union[str, List[str]]
	similarity: float
	shared_terms: List[str] = Field(default_factory=list)

	@classmethod
	def from_domain(cls, highlight: Highlight) -> "HighlightOut":
		return cls(
			category=highlight.category,
			question_a=highlight.question_a,
			question_b=highlight.question_b,
			value_a=_plain(highlight.value_a),
			value_b=_plain(highlight.value_b),
			similarity=highlight.similarity,
			shared_terms=list(highlight.shared_terms),
		)


class CompatibilityOut(BaseModel):
	user_a_id: str
	user_b_id: str
	score: float = Field(..., ge=0, le=100)
	level: MatchLevel
	breakdown: Dict[str, float] = Field(default_factory=dict)
	highlights: List[HighlightOut] = Field(default_factory=list)
	version: int

	@classmethod
	def from_domain(cls, result: CompatibilityResult) -> "CompatibilityOut":
		return cls(
			user_a_id=result.user_a_id,
			user_b_id=result.user_b_id,
			score=result.score,
			level=result.level,
			breakdown=dict(result.breakdown),
			highlights=[HighlightOut.from_domain(item) for item in result.highlights],
			version=result.version,
		)


class CandidateOut(BaseModel):
	"""Radar blip: who, how far, how compatible."""

	user_id: str
	handle: str
	distance: float = Field(..., ge=0)
	score: float
	level: MatchLevel
	compatibility: CompatibilityOut

	@classmethod
	def from_domain(cls, candidate: MatchCandidate) -> "CandidateOut":
		return cls(
			user_id=candidate.user_id,
			handle=candidate.user.handle,
			distance=round(candidate.distance, 2),
			score=candidate.score,
			level=candidate.level,
			compatibility=CompatibilityOut.from_domain(candidate.result),
		)


class BestMatchOut(BaseModel):
	user_id: str
	candidate_id: str
	day: date
	score: float

	@classmethod
	def from_domain(cls, record: DailyBestMatch) -> "BestMatchOut":
		return cls(user_id=record.user_id, candidate_id=record.candidate_id, day=record.day, score=record.score)


class MatchesResponse(BaseModel):
	items: List[CandidateOut]
	best_match: Optional[BestMatchOut] = None
