from __future__ import annotations
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from ..achievements import check_and_award
from ..models import User
from ..schemas import (
	ReasoningChallengeOut,
	ReasoningGenerated,
	ReasoningGenerateRequest,
	ReasoningSubmitRequest,
	ReasoningSubmitResponse,
)
from ..services import generation
from ..services.fallbacks import fallback_reasoning, points_for, reasoning_key
from ..services.scoring import check_reasoning_answer
from ..settings import settings
from ..storage import Storage
from .user import get_current_user, get_storage

router = APIRouter(prefix="/api/reasoning", tags=["reasoning"])

logger = logging.getLogger(__name__)


@router.get("/history", response_model=List[ReasoningChallengeOut])
async def reasoning_history(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	try:
		return storage.get_user_reasoning_challenges(user.id)
	except SQLAlchemyError:
		logger.exception("Failed to fetch reasoning history")
		raise HTTPException(status_code=500, detail="Failed to fetch reasoning history")


@router.post("/generate", response_model=ReasoningGenerated)
async def generate_challenge(
	req: ReasoningGenerateRequest,
	user: User = Depends(get_current_user),
	storage: Storage = Depends(get_storage),
):
	difficulty, category = reasoning_key(req.difficulty, req.category)
	points = points_for(difficulty)
	try:
		content = await generation.generate_reasoning_challenge(difficulty, category)
		challenge = storage.create_reasoning_challenge(
			user.id,
			difficulty=difficulty,
			category=category,
			question=content.question,
			answer=content.answer,
			explanation=content.explanation,
			points=points,
		)
	except Exception:
		storage.rollback()
		logger.exception("Reasoning generation failed; serving the unsaved fallback challenge")
		content = fallback_reasoning(difficulty, category)
		return ReasoningGenerated(question=content.question, difficulty=difficulty, category=category, points=points)
	return ReasoningGenerated(
		id=challenge.id,
		question=challenge.question,
		difficulty=challenge.difficulty,
		category=challenge.category,
		points=challenge.points,
	)


@router.post("/{challenge_id}/submit", response_model=ReasoningSubmitResponse)
async def submit_challenge(
	challenge_id: str,
	req: ReasoningSubmitRequest,
	user: User = Depends(get_current_user),
	storage: Storage = Depends(get_storage),
):
	challenge = storage.get_reasoning_challenge(challenge_id, user_id=user.id)
	if challenge is None:
		raise HTTPException(status_code=404, detail="Challenge not found")
	if challenge.completed_at is not None:
		raise HTTPException(status_code=409, detail="Challenge already submitted")
	correct = check_reasoning_answer(
		req.answer,
		challenge.answer,
		lenient_pass_rate=settings.reasoning_lenient_pass_rate,
	)
	points = (challenge.points or points_for(challenge.difficulty)) if correct else 0
	try:
		with storage.atomic():
			storage.update_reasoning_answer(challenge.id, req.answer, correct, points)
			if points:
				storage.award_points(user.id, points)
	except SQLAlchemyError:
		logger.exception("Reasoning submission failed for %s", challenge_id)
		raise HTTPException(status_code=500, detail="Failed to submit reasoning answer")
	try:
		check_and_award(storage, user)
	except SQLAlchemyError:
		storage.rollback()
		logger.exception("Achievement check failed after challenge %s", challenge_id)
	return ReasoningSubmitResponse(
		challenge_id=challenge.id,
		user_answer=req.answer,
		correct=correct,
		answer=challenge.answer,
		explanation=challenge.explanation,
		points=points,
	)
