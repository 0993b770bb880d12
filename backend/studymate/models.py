from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text, Boolean, JSON, ForeignKey, CheckConstraint, UniqueConstraint
from .db import Base


def _new_id() -> str:
	return uuid.uuid4().hex


class User(Base):
	__tablename__ = "users"
	id = Column(String(64), primary_key=True, default=_new_id)
	username = Column(String(128), unique=True, nullable=False, index=True)
	name = Column(String(256), nullable=False)
	email = Column(String(256), nullable=False)
	phone = Column(String(32), nullable=True)
	# "class" is a Python keyword; the column is still named "class"
	class_name = Column("class", String(64), nullable=False)
	school = Column(String(256), nullable=False)
	profile_picture = Column(Text, nullable=True)
	total_points = Column(Integer, default=0, nullable=False)
	current_streak = Column(Integer, default=0, nullable=False)
	join_date = Column(DateTime, default=datetime.utcnow, nullable=False)
	is_authenticated = Column(Boolean, default=False, nullable=False)


class ChatMessage(Base):
	__tablename__ = "chat_messages"
	__table_args__ = (CheckConstraint("role IN ('user', 'assistant')", name="ck_chat_role"),)
	id = Column(String(64), primary_key=True, default=_new_id)
	user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
	role = Column(String(16), nullable=False)
	content = Column(Text, nullable=False)
	timestamp = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
	# Per-user insertion counter; orders messages written within the same tick
	seq = Column(Integer, default=0, nullable=False)


class Quiz(Base):
	__tablename__ = "quizzes"
	id = Column(String(64), primary_key=True, default=_new_id)
	user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
	class_name = Column("class", String(64), nullable=False)
	subject = Column(String(128), nullable=False)
	topic = Column(String(256), nullable=True)
	difficulty = Column(String(16), nullable=True)
	# List of QuizQuestion dicts; validated by Storage on the way in and out
	questions = Column(JSON, nullable=False)
	score = Column(Integer, nullable=True)
	total_questions = Column(Integer, nullable=False)
	completed = Column(Boolean, default=False, nullable=False)
	time_spent = Column(Integer, nullable=True)
	completed_at = Column(DateTime, nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ReasoningChallenge(Base):
	__tablename__ = "reasoning_challenges"
	id = Column(String(64), primary_key=True, default=_new_id)
	user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
	difficulty = Column(String(16), nullable=False)
	category = Column(String(64), nullable=False)
	question = Column(Text, nullable=False)
	answer = Column(Text, nullable=False)
	explanation = Column(Text, nullable=True)
	user_answer = Column(Text, nullable=True)
	correct = Column(Boolean, nullable=True)
	points = Column(Integer, default=0, nullable=False)
	completed_at = Column(DateTime, nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class UserProgress(Base):
	__tablename__ = "user_progress"
	__table_args__ = (UniqueConstraint("user_id", "subject", name="uq_progress_user_subject"),)
	id = Column(String(64), primary_key=True, default=_new_id)
	user_id = Column(String(64), ForeignKey("users.id"), nullable=False)
	subject = Column(String(128), nullable=False)
	topics_completed = Column(JSON, default=list, nullable=False)
	total_topics = Column(Integer, default=0, nullable=False)
	average_score = Column(Integer, default=0, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Badge(Base):
	__tablename__ = "badges"
	# Append-only; award-once is enforced by the achievement check
	id = Column(String(64), primary_key=True, default=_new_id)
	user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
	type = Column(String(64), nullable=False)
	name = Column(String(128), nullable=False)
	description = Column(Text, nullable=False)
	icon = Column(String(64), nullable=False)
	earned_at = Column(DateTime, default=datetime.utcnow, nullable=False)
