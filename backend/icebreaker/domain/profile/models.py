"""Profile answer and question models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Tuple, Union

ValueType = Literal["choice", "tags", "text"]
AnswerValue = Union[str, Tuple[str, ...]]


@dataclass(frozen=True, slots=True)
class Question:
	question_id: str
	category: str
	prompt: str
	value_type: ValueType = "text"


@dataclass(frozen=True, slots=True)
class Answer:
	"""Latest answer of one user to one catalog question."""

	user_id: str
	question_id: str
	category: str
	value: AnswerValue
	submitted_at: float
	shared: bool = True
	value_type: ValueType = "text"

	def same_content(self, other: "Answer") -> bool:
		return self.value == other.value and self.shared == other.shared


def normalise_value(value: Union[str, Iterable[str]]) -> AnswerValue:
	"""Strip surrounding whitespace; sequences become tuples without blanks."""
	if isinstance(value, str):
		return value.strip()
	return tuple(str(item).strip() for item in value if str(item).strip())


__all__ = ["Answer", "AnswerValue", "Question", "ValueType", "normalise_value"]
