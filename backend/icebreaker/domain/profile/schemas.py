"""Pydantic schemas for answer endpoints."""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from icebreaker.domain.profile.models import Answer


class AnswerPayload(BaseModel):
	question_id: str = Field(..., min_length=1)
	value: Union[str, List[str]]
	shared: bool = True
	category: Optional[str] = None
	ts: Optional[float] = Field(default=None, ge=0)


class AnswerResponse(BaseModel):
	question_id: str
	category: str
	value: Union[str, List[str]]
	shared: bool
	submitted_at: float
	version: int

	@classmethod
	def from_answer(cls, answer: Answer, version: int) -> "AnswerResponse":
		return cls(
			question_id=answer.question_id,
			category=answer.category,
			value=answer.value if isinstance(answer.value, str) else list(answer.value),
			shared=answer.shared,
			submitted_at=answer.submitted_at,
			version=version,
		)
