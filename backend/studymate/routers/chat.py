from __future__ import annotations
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from ..models import User
from ..schemas import ChatMessageOut, ChatRequest
from ..services import generation
from ..settings import settings
from ..storage import Storage
from .user import get_current_user, get_storage

router = APIRouter(prefix="/api/chat", tags=["chat"])

logger = logging.getLogger(__name__)


@router.post("/stream", response_class=PlainTextResponse)
async def chat_stream(req: ChatRequest, user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	content = (req.content or "").strip()
	if not content and not req.image:
		raise HTTPException(status_code=400, detail="content is required")
	try:
		storage.add_chat_message(user.id, "user", content or "[image]")
		reply = await generation.chat(content, image=req.image, mime_type=req.mime_type)
		storage.add_chat_message(user.id, "assistant", reply)
	except SQLAlchemyError:
		storage.rollback()
		logger.exception("Chat turn failed")
		raise HTTPException(status_code=500, detail="Failed to process chat")
	# Sent as one buffered body; the client reads it as a stream
	return PlainTextResponse(reply, headers={"Cache-Control": "no-cache"})


@router.get("/history", response_model=List[ChatMessageOut])
async def chat_history(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	try:
		return storage.get_chat_history(user.id, limit=settings.chat_history_limit)
	except SQLAlchemyError:
		logger.exception("Failed to fetch chat history")
		raise HTTPException(status_code=500, detail="Failed to fetch chat history")


@router.delete("/history")
async def clear_chat_history(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
	try:
		removed = storage.clear_chat_history(user.id)
	except SQLAlchemyError:
		storage.rollback()
		logger.exception("Failed to clear chat history")
		raise HTTPException(status_code=500, detail="Failed to clear chat history")
	logger.info("Cleared %d chat messages for %s", removed, user.id)
	return {"success": True}
