from __future__ import annotations
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from ..models import User
from ..schemas import ProgressSummary, UserProgressOut
from ..services.scoring import percent
from ..storage import Storage
from .user import get_current_user, get_storage

router = APIRouter(prefix="/api/progress", tags=["progress"])

logger = logging.getLogger(__name__)


@router.get("", response_model=ProgressSummary)
async def progress_summary(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	try:
		completed = [q for q in storage.get_user_quizzes(user.id) if q.completed]
	except SQLAlchemyError:
		logger.exception("Failed to fetch progress")
		raise HTTPException(status_code=500, detail="Failed to fetch progress")
	total_score = sum(q.score or 0 for q in completed)
	return ProgressSummary(
		total_quizzes=len(completed),
		average_score=percent(total_score, 100 * len(completed)) if completed else 0,
		subjects_studied=len({q.subject for q in completed}),
		streak_days=user.current_streak or 0,
	)


@router.get("/subjects", response_model=List[UserProgressOut])
async def subject_progress(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	try:
		return storage.get_user_progress(user.id)
	except SQLAlchemyError:
		logger.exception("Failed to fetch subject progress")
		raise HTTPException(status_code=500, detail="Failed to fetch progress")
