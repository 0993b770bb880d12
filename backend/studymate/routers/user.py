from __future__ import annotations
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import User
from ..schemas import UserOut, UserUpdate
from ..settings import settings
from ..storage import Storage

router = APIRouter(prefix="/api/user", tags=["user"])

logger = logging.getLogger(__name__)

DEMO_PROFILE = {
	"username": "demo",
	"name": "Alex Kumar",
	"email": "alex@example.com",
	"class_name": "Class 10",
	"school": "Excellence High School",
	"total_points": 0,
	"current_streak": 0,
	"is_authenticated": False,
}


def get_storage(db: Session = Depends(get_db)) -> Storage:
	return Storage(db)


def get_or_create_demo_user(storage: Storage) -> User:
	user = storage.get_user(settings.demo_user_id)
	if user is not None:
		return user
	try:
		return storage.create_user(id=settings.demo_user_id, **DEMO_PROFILE)
	except IntegrityError:
		# Another request created it first
		storage.rollback()
		user = storage.get_user(settings.demo_user_id)
		if user is None:
			raise
		return user


def get_current_user(storage: Storage = Depends(get_storage)) -> User:
	# Every request acts on the demo account until real auth exists
	try:
		return get_or_create_demo_user(storage)
	except SQLAlchemyError:
		logger.exception("Failed to load demo user")
		raise HTTPException(status_code=500, detail="Failed to fetch user")


@router.get("", response_model=UserOut)
async def read_user(user: User = Depends(get_current_user)):
	return user


_NULLABLE_FIELDS = {"phone", "profile_picture"}


def _apply_update(req: UserUpdate, user: User, storage: Storage) -> User:
	updates = {
		k: v for k, v in req.model_dump(exclude_unset=True).items()
		if v is not None or k in _NULLABLE_FIELDS
	}
	try:
		updated = storage.update_user(user.id, updates)
	except SQLAlchemyError:
		storage.rollback()
		logger.exception("Failed to update user %s", user.id)
		raise HTTPException(status_code=500, detail="Failed to update user")
	if updated is None:
		raise HTTPException(status_code=404, detail="User not found")
	return updated


@router.put("", response_model=UserOut)
async def update_user(req: UserUpdate, user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	return _apply_update(req, user, storage)


@router.put("/profile", response_model=UserOut)
async def update_profile(req: UserUpdate, user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	return _apply_update(req, user, storage)
