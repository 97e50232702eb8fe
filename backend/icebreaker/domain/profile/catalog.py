"""Question catalog interface and the built-in daily question set."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Protocol

from icebreaker.domain.profile.models import Question


class QuestionCatalog(Protocol):
	"""Lookup owned by an external content service; injected into the profile store."""

	def get(self, question_id: str) -> Optional[Question]:
		...


class StaticQuestionCatalog:
	"""Immutable in-memory catalog keyed by question id."""

	def __init__(self, questions: Iterable[Question]) -> None:
		self._questions: Dict[str, Question] = {}
		for question in questions:
			if question.question_id in self._questions:
				raise ValueError(f"duplicate question id {question.question_id}")
			self._questions[question.question_id] = question

	def get(self, question_id: str) -> Optional[Question]:
		return self._questions.get(question_id)

	def __iter__(self) -> Iterator[Question]:
		return iter(self._questions.values())

	def __len__(self) -> int:
		return len(self._questions)

	def categories(self) -> list[str]:
		return sorted({question.category for question in self._questions.values()})


DEFAULT_QUESTIONS = (
	Question("interests", "interests", "What are you into right now?", "tags"),
	Question("books-current", "books", "What book are you reading right now, and what's the most interesting thing you've learned from it so far?"),
	Question("food-new", "food", "What food did you try for the first time this week?"),
	Question("food-comfort", "food", "What's your go-to comfort food when you've had a long day?"),
	Question("daily-morning", "daily", "What was the first thing you did this morning?"),
	Question("daily-laugh", "daily", "What's the last thing that made you laugh out loud?"),
	Question("lifestyle-habit", "lifestyle", "What's one small habit you're trying to build this month?"),
	Question("lifestyle-travel", "lifestyle", "What's one place you've never been but really want to visit?"),
	Question("lifestyle-chronotype", "lifestyle", "Early riser or night owl?", "choice"),
	Question("goals-skill", "goals", "If you could learn any skill instantly, what would it be and why?"),
)


def default_catalog() -> StaticQuestionCatalog:
	return StaticQuestionCatalog(DEFAULT_QUESTIONS)


__all__ = ["QuestionCatalog", "StaticQuestionCatalog", "DEFAULT_QUESTIONS", "default_catalog"]
