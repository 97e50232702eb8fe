"""Compatibility scoring strategies.

The matcher only depends on :class:`CompatibilityStrategy`; the default
:class:`TokenOverlapScorer` is a deterministic stand-in for model-based judgment.
Exact categorical answers count fully when equal, free-text and tag answers
contribute their Jaccard overlap over normalised tokens.
"""

from __future__ import annotations

import math
import re
from collections import defaultdict
from typing import Awaitable, Collection, Dict, FrozenSet, List, Optional, Protocol, Tuple, Union

from icebreaker.domain.matching.models import CompatibilityResult, Highlight
from icebreaker.domain.profile.models import Answer, AnswerValue
from icebreaker.settings import Settings, settings as default_settings

_WORD_RE = re.compile(r"\w+", re.UNICODE)
_SPACE_RE = re.compile(r"\s+")

PairScore = Tuple[Answer, Answer, float, Tuple[str, ...]]


class CompatibilityStrategy(Protocol):
	def score(
		self,
		answers_a: Collection[Answer],
		answers_b: Collection[Answer],
		*,
		user_a_id: Optional[str] = None,
		user_b_id: Optional[str] = None,
	) -> Union[CompatibilityResult, Awaitable[CompatibilityResult]]:
		...


def _clean(term: str) -> str:
	return _SPACE_RE.sub(" ", term.strip().casefold())


def tokens_for(value: AnswerValue, value_type: str) -> FrozenSet[str]:
	"""Normalised comparison terms for an answer value.

	Tag answers keep multi-word tags whole ("rock climbing"); free text is split
	into word tokens.
	"""
	if value_type == "tags":
		items = value.split(",") if isinstance(value, str) else value
		return frozenset(term for term in (_clean(item) for item in items) if term)
	text = value if isinstance(value, str) else " ".join(value)
	return frozenset(_WORD_RE.findall(text.casefold()))


def jaccard(left: FrozenSet[str], right: FrozenSet[str]) -> float:
	union = left | right
	if not union:
		return 0.0
	return len(left & right) / len(union)


def answer_similarity(a: Answer, b: Answer) -> Tuple[float, Tuple[str, ...]]:
	"""Similarity in [0, 1] plus the terms both answers share."""
	if a.value_type == "choice" and b.value_type == "choice":
		left = frozenset([_clean(a.value)]) if isinstance(a.value, str) else frozenset(_clean(v) for v in a.value)
		right = frozenset([_clean(b.value)]) if isinstance(b.value, str) else frozenset(_clean(v) for v in b.value)
		if left == right:
			return 1.0, tuple(sorted(left))
		return 0.0, ()
	left = tokens_for(a.value, a.value_type)
	right = tokens_for(b.value, b.value_type)
	return jaccard(left, right), tuple(sorted(left & right))


def _owner(answers: Collection[Answer], fallback: Optional[str]) -> str:
	if fallback is not None:
		return fallback
	owners = sorted({answer.user_id for answer in answers})
	return owners[0] if owners else ""


def _answer_order(answer: Answer) -> Tuple[str, str]:
	return (answer.question_id, repr(answer.value))


class TokenOverlapScorer:
	"""Category-weighted answer overlap, symmetric in its two inputs."""

	def __init__(self, config: Optional[Settings] = None) -> None:
		self._config = config or default_settings

	def score(
		self,
		answers_a: Collection[Answer],
		answers_b: Collection[Answer],
		*,
		user_a_id: Optional[str] = None,
		user_b_id: Optional[str] = None,
	) -> CompatibilityResult:
		id_a = _owner(answers_a, user_a_id)
		id_b = _owner(answers_b, user_b_id)
		side_a = sorted((a for a in answers_a if a.shared), key=_answer_order)
		side_b = sorted((b for b in answers_b if b.shared), key=_answer_order)
		# Canonical side order keeps score(A, B) and score(B, A) bit-identical.
		if (id_b, [_answer_order(b) for b in side_b]) < (id_a, [_answer_order(a) for a in side_a]):
			id_a, id_b = id_b, id_a
			side_a, side_b = side_b, side_a

		by_category_a = self._partition(side_a)
		by_category_b = self._partition(side_b)
		config = self._config

		breakdown: Dict[str, float] = {}
		weighted: List[float] = []
		weights: List[float] = []
		scored_pairs: List[PairScore] = []
		for category in sorted(set(by_category_a) & set(by_category_b)):
			pairs = self._pair_answers(by_category_a[category], by_category_b[category])
			similarities = []
			for left, right in pairs:
				similarity, shared_terms = answer_similarity(left, right)
				similarities.append(similarity)
				scored_pairs.append((left, right, similarity, shared_terms))
			sub_score = 100.0 * math.fsum(similarities) / len(similarities)
			breakdown[category] = round(sub_score, 2)
			weight = config.weight_for(category)
			if weight <= 0:
				continue
			weighted.append(sub_score * weight)
			weights.append(weight)

		total_weight = math.fsum(weights)
		overall = math.fsum(weighted) / total_weight if total_weight > 0 else 0.0
		return CompatibilityResult(
			user_a_id=id_a,
			user_b_id=id_b,
			score=round(min(100.0, max(0.0, overall)), 2),
			breakdown=breakdown,
			highlights=self._highlights(scored_pairs),
		)

	@staticmethod
	def _partition(answers: List[Answer]) -> Dict[str, List[Answer]]:
		grouped: Dict[str, List[Answer]] = defaultdict(list)
		for answer in answers:
			grouped[answer.category].append(answer)
		return grouped

	@staticmethod
	def _pair_answers(left: List[Answer], right: List[Answer]) -> List[Tuple[Answer, Answer]]:
		"""Same-question pairs; every cross pair when the sides share no question."""
		right_by_question = {answer.question_id: answer for answer in right}
		same_question = [
			(answer, right_by_question[answer.question_id])
			for answer in left
			if answer.question_id in right_by_question
		]
		if same_question:
			return same_question
		return [(a, b) for a in left for b in right]

	def _highlights(self, scored_pairs: List[PairScore]) -> Tuple[Highlight, ...]:
		limit = self._config.highlight_count
		if limit <= 0:
			return ()
		ranked = sorted(
			(pair for pair in scored_pairs if pair[2] > 0),
			key=lambda pair: (
				-pair[2],
				self._config.priority_of(pair[0].category),
				pair[0].category,
				pair[0].question_id,
				pair[1].question_id,
			),
		)
		return tuple(
			Highlight(
				category=left.category,
				question_a=left.question_id,
				question_b=right.question_id,
				value_a=left.value,
				value_b=right.value,
				similarity=round(similarity, 4),
				shared_terms=shared_terms,
			)
			for left, right, similarity, shared_terms in ranked[:limit]
		)


__all__ = [
	"CompatibilityStrategy",
	"TokenOverlapScorer",
	"answer_similarity",
	"jaccard",
	"tokens_for",
]
