from __future__ import annotations
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from ..achievements import BADGE_CATALOG, check_and_award, earned_types
from ..models import User
from ..schemas import BadgeCatalogEntry, BadgeOut, BadgesResponse
from ..storage import Storage
from .user import get_current_user, get_storage

router = APIRouter(prefix="/api/badges", tags=["badges"])

logger = logging.getLogger(__name__)


@router.get("", response_model=BadgesResponse)
async def list_badges(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	try:
		earned = earned_types(storage, user)
	except SQLAlchemyError:
		logger.exception("Failed to fetch badges")
		raise HTTPException(status_code=500, detail="Failed to fetch badges")
	return BadgesResponse(
		earned=[d.id for d in BADGE_CATALOG if d.id in earned],
		available=[
			BadgeCatalogEntry(id=d.id, name=d.name, description=d.description, icon=d.icon, earned=d.id in earned)
			for d in BADGE_CATALOG
		],
	)


@router.get("/earned", response_model=List[BadgeOut])
async def earned_badges(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	try:
		return storage.get_user_badges(user.id)
	except SQLAlchemyError:
		logger.exception("Failed to fetch badges")
		raise HTTPException(status_code=500, detail="Failed to fetch badges")


@router.post("/check", response_model=List[BadgeOut])
async def check_badges(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	try:
		return check_and_award(storage, user)
	except SQLAlchemyError:
		storage.rollback()
		logger.exception("Achievement check failed")
		raise HTTPException(status_code=500, detail="Failed to check achievements")
