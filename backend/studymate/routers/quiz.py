from __future__ import annotations
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from ..achievements import check_and_award
from ..models import User
from ..schemas import GeneratedQuiz, QuizGenerateRequest, QuizOut, QuizSubmitRequest, QuizSubmitResponse
from ..services import generation
from ..services.fallbacks import SINGLE_FALLBACK_QUESTION
from ..services.scoring import grade_quiz, percent
from ..storage import Storage
from .user import get_current_user, get_storage

router = APIRouter(prefix="/api/quiz", tags=["quiz"])

logger = logging.getLogger(__name__)


@router.post("/generate", response_model=GeneratedQuiz)
async def generate_quiz(req: QuizGenerateRequest, user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	logger.info("Generating quiz: class=%s subject=%s topic=%s difficulty=%s count=%s",
		req.class_name, req.subject, req.topic, req.difficulty, req.count)
	try:
		questions = await generation.generate_quiz(
			req.class_name,
			req.subject,
			topic=req.topic or None,
			difficulty=req.difficulty,
			count=req.count,
		)
		quiz = storage.create_quiz(
			user.id,
			class_name=req.class_name,
			subject=req.subject,
			topic=req.topic or None,
			difficulty=req.difficulty,
			questions=questions,
		)
	except Exception:
		storage.rollback()
		logger.exception("Quiz generation failed; serving the unsaved fallback quiz")
		return GeneratedQuiz(
			class_name=req.class_name,
			subject=req.subject,
			topic=req.topic,
			difficulty=req.difficulty,
			questions=[SINGLE_FALLBACK_QUESTION],
		)
	return GeneratedQuiz(
		id=quiz.id,
		class_name=quiz.class_name,
		subject=quiz.subject,
		topic=quiz.topic,
		difficulty=quiz.difficulty,
		questions=questions,
	)


@router.get("/history", response_model=List[QuizOut])
async def quiz_history(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	try:
		return storage.get_user_quizzes(user.id)
	except SQLAlchemyError:
		logger.exception("Failed to fetch quiz history")
		raise HTTPException(status_code=500, detail="Failed to fetch quiz history")


def _load_quiz(storage: Storage, quiz_id: str, user: User):
	quiz = storage.get_quiz(quiz_id)
	if quiz is None or quiz.user_id != user.id:
		raise HTTPException(status_code=404, detail="Quiz not found")
	return quiz


@router.get("/{quiz_id}", response_model=QuizOut)
async def get_quiz(quiz_id: str, user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	return _load_quiz(storage, quiz_id, user)


def _refresh_subject_progress(storage: Storage, user_id: str, subject: str) -> None:
	quizzes = [q for q in storage.get_user_quizzes(user_id) if q.subject == subject]
	completed = [q for q in quizzes if q.completed]
	topics_completed = sorted({q.topic for q in completed if q.topic})
	all_topics = {q.topic for q in quizzes if q.topic}
	scores = [q.score or 0 for q in completed]
	storage.update_user_progress(
		user_id,
		subject,
		topics_completed=topics_completed,
		total_topics=len(all_topics),
		average_score=percent(sum(scores), 100 * len(scores)) if scores else 0,
	)


@router.post("/{quiz_id}/submit", response_model=QuizSubmitResponse)
async def submit_quiz(
	quiz_id: str,
	req: QuizSubmitRequest,
	user: User = Depends(get_current_user),
	storage: Storage = Depends(get_storage),
):
	quiz = _load_quiz(storage, quiz_id, user)
	if quiz.completed:
		raise HTTPException(status_code=409, detail="Quiz already submitted")
	grade = grade_quiz(storage.quiz_questions(quiz), req.answers)
	try:
		# Score, points and progress land together or not at all
		with storage.atomic():
			storage.update_quiz_score(quiz.id, grade.score, True, time_spent=req.time_spent)
			storage.award_points(user.id, grade.points_earned)
			_refresh_subject_progress(storage, user.id, quiz.subject)
	except SQLAlchemyError:
		logger.exception("Quiz submission failed for %s", quiz_id)
		raise HTTPException(status_code=500, detail="Failed to submit quiz")

	new_badges: List[str] = []
	try:
		new_badges = [b.type for b in check_and_award(storage, user)]
	except SQLAlchemyError:
		storage.rollback()
		logger.exception("Achievement check failed after quiz %s", quiz_id)

	return QuizSubmitResponse(
		score=grade.score,
		correct_count=grade.correct_count,
		total_questions=grade.total_questions,
		points_earned=grade.points_earned,
		results=grade.results,
		new_badges=new_badges,
	)
