from __future__ import annotations
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional

from sqlalchemy import delete, func
from sqlalchemy.orm import Session

from .models import Badge, ChatMessage, Quiz, ReasoningChallenge, User, UserProgress
from .schemas import QuizQuestion


class Storage:
	"""Per-entity CRUD over one SQLAlchemy session.

	Every mutating call commits on its own unless it runs inside ``atomic()``,
	in which case the writes are only flushed and the block commits (or rolls
	back) as a whole.
	"""

	def __init__(self, db: Session) -> None:
		self.db = db
		self._atomic_depth = 0

	@contextmanager
	def atomic(self) -> Iterator["Storage"]:
		self._atomic_depth += 1
		try:
			yield self
		except Exception:
			self._atomic_depth -= 1
			self.db.rollback()
			raise
		self._atomic_depth -= 1
		if self._atomic_depth == 0:
			self.db.commit()

	def _save(self, *rows: Any) -> None:
		for row in rows:
			self.db.add(row)
		if self._atomic_depth:
			self.db.flush()
		else:
			self.db.commit()
		for row in rows:
			self.db.refresh(row)

	def rollback(self) -> None:
		self.db.rollback()

	# ---- users ----

	def get_user(self, user_id: str) -> Optional[User]:
		return self.db.get(User, user_id)

	def create_user(self, **fields: Any) -> User:
		user = User(**fields)
		self._save(user)
		return user

	def update_user(self, user_id: str, updates: Dict[str, Any]) -> Optional[User]:
		user = self.get_user(user_id)
		if user is None:
			return None
		for key, value in updates.items():
			if hasattr(User, key) and key != "id":
				setattr(user, key, value)
		self._save(user)
		return user

	def award_points(self, user_id: str, points: int) -> Optional[User]:
		user = self.get_user(user_id)
		if user is None:
			return None
		user.total_points = (user.total_points or 0) + points
		self._save(user)
		return user

	# ---- chat ----

	def get_chat_history(self, user_id: str, limit: int = 50) -> List[ChatMessage]:
		rows = (
			self.db.query(ChatMessage)
			.filter(ChatMessage.user_id == user_id)
			.order_by(ChatMessage.seq.desc(), ChatMessage.timestamp.desc())
			.limit(limit)
			.all()
		)
		rows.reverse()
		return rows

	def add_chat_message(self, user_id: str, role: str, content: str) -> ChatMessage:
		if role not in ("user", "assistant"):
			raise ValueError(f"invalid chat role: {role!r}")
		last = self.db.query(func.max(ChatMessage.seq)).filter(ChatMessage.user_id == user_id).scalar()
		message = ChatMessage(user_id=user_id, role=role, content=content, seq=(last or 0) + 1)
		self._save(message)
		return message

	def clear_chat_history(self, user_id: str) -> int:
		res = self.db.execute(delete(ChatMessage).where(ChatMessage.user_id == user_id))
		if not self._atomic_depth:
			self.db.commit()
		return res.rowcount or 0

	# ---- quizzes ----

	def create_quiz(
		self,
		user_id: str,
		*,
		class_name: str,
		subject: str,
		questions: Iterable[QuizQuestion],
		topic: Optional[str] = None,
		difficulty: Optional[str] = None,
	) -> Quiz:
		docs = [QuizQuestion.model_validate(q).model_dump(by_alias=True) for q in questions]
		if not docs:
			raise ValueError("a quiz needs at least one question")
		quiz = Quiz(
			user_id=user_id,
			class_name=class_name,
			subject=subject,
			topic=topic,
			difficulty=difficulty,
			questions=docs,
			total_questions=len(docs),
			completed=False,
		)
		self._save(quiz)
		return quiz

	def get_quiz(self, quiz_id: str) -> Optional[Quiz]:
		return self.db.get(Quiz, quiz_id)

	@staticmethod
	def quiz_questions(quiz: Quiz) -> List[QuizQuestion]:
		return [QuizQuestion.model_validate(doc) for doc in (quiz.questions or [])]

	def get_user_quizzes(self, user_id: str) -> List[Quiz]:
		return (
			self.db.query(Quiz)
			.filter(Quiz.user_id == user_id)
			.order_by(Quiz.created_at.desc())
			.all()
		)

	def update_quiz_score(self, quiz_id: str, score: int, completed: bool, time_spent: Optional[int] = None) -> Optional[Quiz]:
		quiz = self.get_quiz(quiz_id)
		if quiz is None:
			return None
		quiz.score = score
		quiz.completed = completed
		quiz.completed_at = datetime.utcnow() if completed else None
		if time_spent is not None:
			quiz.time_spent = time_spent
		self._save(quiz)
		return quiz

	# ---- reasoning ----

	def create_reasoning_challenge(
		self,
		user_id: str,
		*,
		difficulty: str,
		category: str,
		question: str,
		answer: str,
		explanation: Optional[str] = None,
		points: int = 0,
	) -> ReasoningChallenge:
		challenge = ReasoningChallenge(
			user_id=user_id,
			difficulty=difficulty,
			category=category,
			question=question,
			answer=answer,
			explanation=explanation,
			points=points,
		)
		self._save(challenge)
		return challenge

	def get_reasoning_challenge(self, challenge_id: str, user_id: Optional[str] = None) -> Optional[ReasoningChallenge]:
		challenge = self.db.get(ReasoningChallenge, challenge_id)
		if challenge is not None and user_id is not None and challenge.user_id != user_id:
			return None
		return challenge

	def get_user_reasoning_challenges(self, user_id: str) -> List[ReasoningChallenge]:
		return (
			self.db.query(ReasoningChallenge)
			.filter(ReasoningChallenge.user_id == user_id)
			.order_by(ReasoningChallenge.created_at.desc())
			.all()
		)

	def update_reasoning_answer(self, challenge_id: str, answer: str, correct: bool, points: int) -> Optional[ReasoningChallenge]:
		challenge = self.db.get(ReasoningChallenge, challenge_id)
		if challenge is None:
			return None
		challenge.user_answer = answer
		challenge.correct = correct
		challenge.points = points
		challenge.completed_at = datetime.utcnow()
		self._save(challenge)
		return challenge

	# ---- progress ----

	def get_user_progress(self, user_id: str) -> List[UserProgress]:
		return (
			self.db.query(UserProgress)
			.filter(UserProgress.user_id == user_id)
			.order_by(UserProgress.subject)
			.all()
		)

	def update_user_progress(
		self,
		user_id: str,
		subject: str,
		*,
		topics_completed: List[str],
		total_topics: int,
		average_score: int,
	) -> UserProgress:
		# Upsert keyed on (user_id, subject)
		row = (
			self.db.query(UserProgress)
			.filter(UserProgress.user_id == user_id, UserProgress.subject == subject)
			.first()
		)
		if row is None:
			row = UserProgress(user_id=user_id, subject=subject)
		row.topics_completed = list(topics_completed)
		row.total_topics = total_topics
		row.average_score = average_score
		self._save(row)
		return row

	# ---- badges ----

	def get_user_badges(self, user_id: str) -> List[Badge]:
		return (
			self.db.query(Badge)
			.filter(Badge.user_id == user_id)
			.order_by(Badge.earned_at.desc())
			.all()
		)

	def award_badge(self, user_id: str, *, type: str, name: str, description: str, icon: str) -> Badge:
		badge = Badge(user_id=user_id, type=type, name=name, description=description, icon=icon)
		self._save(badge)
		return badge
