from __future__ import annotations
import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..schemas import QuestionResult, QuizQuestion

POINTS_PER_CORRECT_ANSWER = 10


@dataclass
class QuizGrade:
	correct_count: int
	total_questions: int
	score: int
	points_earned: int
	results: List[QuestionResult] = field(default_factory=list)


def percent(correct: int, total: int) -> int:
	"""Percentage rounded half up, matching what the client displays."""
	if total <= 0:
		return 0
	return (200 * correct + total) // (2 * total)


def grade_quiz(questions: Sequence[QuizQuestion], answers: Sequence[Optional[str]]) -> QuizGrade:
	results: List[QuestionResult] = []
	correct = 0
	for index, question in enumerate(questions):
		answer = answers[index] if index < len(answers) else None
		# Exact string match; no trimming or case folding
		is_correct = answer is not None and answer == question.correct_answer
		correct += int(is_correct)
		results.append(
			QuestionResult(
				question=question.question,
				user_answer=answer,
				correct_answer=question.correct_answer,
				is_correct=is_correct,
				explanation=question.explanation,
			)
		)
	return QuizGrade(
		correct_count=correct,
		total_questions=len(questions),
		score=percent(correct, len(questions)),
		points_earned=POINTS_PER_CORRECT_ANSWER * correct,
		results=results,
	)


def check_reasoning_answer(
	submitted: str,
	expected: str,
	*,
	lenient_pass_rate: float,
	rng: Callable[[], float] = random.random,
) -> bool:
	"""Accept when the expected answer appears in the submission (case-insensitive).

	A non-matching answer still passes with probability ``lenient_pass_rate``.
	"""
	given = (submitted or "").strip().lower()
	wanted = (expected or "").strip().lower()
	if wanted and wanted in given:
		return True
	return rng() < lenient_pass_rate
