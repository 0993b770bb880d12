from __future__ import annotations
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from ..models import User
from ..schemas import LeaderboardEntry, LeaderboardResponse
from ..services.scoring import percent
from ..storage import Storage
from .user import get_current_user, get_storage

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])

logger = logging.getLogger(__name__)

# Fixed rivals shown next to the live demo account
COMPETITORS = [
	{
		"id": "user-1",
		"name": "Priya Sharma",
		"class_name": "Class 10",
		"school": "Delhi Public School",
		"total_points": 2850,
		"accuracy": 94,
		"streak": 15,
		"badges": 12,
		"change": 0,
	},
	{
		"id": "user-2",
		"name": "Arjun Patel",
		"class_name": "Class 10",
		"school": "Kendriya Vidyalaya",
		"total_points": 2720,
		"accuracy": 91,
		"streak": 8,
		"badges": 10,
		"change": 1,
	},
]


def _user_accuracy(storage: Storage, user: User) -> int:
	scores = [q.score or 0 for q in storage.get_user_quizzes(user.id) if q.completed]
	return percent(sum(scores), 100 * len(scores)) if scores else 0


@router.get("", response_model=LeaderboardResponse)
async def leaderboard(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	try:
		accuracy = _user_accuracy(storage, user)
		badge_count = len(storage.get_user_badges(user.id))
	except SQLAlchemyError:
		logger.exception("Failed to fetch leaderboard")
		raise HTTPException(status_code=500, detail="Failed to fetch leaderboard")
	rows = [dict(c) for c in COMPETITORS]
	rows.append({
		"id": user.id,
		"name": user.name,
		"class_name": user.class_name,
		"school": user.school,
		"total_points": user.total_points or 0,
		"accuracy": accuracy,
		"streak": user.current_streak or 0,
		"badges": badge_count,
		"change": 0,
	})
	# Stable sort keeps the listed order for ties
	rows.sort(key=lambda r: r["total_points"], reverse=True)
	entries = [LeaderboardEntry(rank=i + 1, **row) for i, row in enumerate(rows)]
	user_rank = next((e.rank for e in entries if e.id == user.id), None)
	return LeaderboardResponse(leaderboard=entries, user_rank=user_rank)
