"""Request/response shapes shared by storage and the routers.

Everything goes over the wire in camelCase (what the SPA expects) while the
Python side keeps snake_case; both spellings are accepted on input.
"""
from __future__ import annotations
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---- Quiz content ----

class QuizQuestion(ApiModel):
	id: str = ""
	question: str = Field(min_length=1)
	options: List[str] = Field(min_length=4, max_length=4)
	correct_answer: str
	explanation: str = ""

	@field_validator("id", mode="before")
	@classmethod
	def _coerce_id(cls, v):
		return "" if v is None else str(v)

	@field_validator("options", mode="before")
	@classmethod
	def _coerce_options(cls, v):
		if isinstance(v, list):
			return [str(o).strip() for o in v]
		return v

	@field_validator("correct_answer", mode="before")
	@classmethod
	def _strip_answer(cls, v):
		return v.strip() if isinstance(v, str) else v

	@model_validator(mode="after")
	def _answer_is_an_option(self) -> "QuizQuestion":
		if self.correct_answer not in self.options:
			raise ValueError("correctAnswer must be one of the options")
		return self


class ReasoningContent(BaseModel):
	question: str = Field(min_length=1)
	answer: str = Field(min_length=1)
	explanation: str = ""


# ---- Users ----

class UserOut(ApiModel):
	id: str
	username: str
	name: str
	email: str
	phone: Optional[str] = None
	class_name: str = Field(alias="class")
	school: str
	profile_picture: Optional[str] = None
	total_points: int = 0
	current_streak: int = 0
	join_date: Optional[datetime] = None
	is_authenticated: bool = False


class UserUpdate(ApiModel):
	name: Optional[str] = None
	email: Optional[str] = None
	phone: Optional[str] = None
	class_name: Optional[str] = Field(default=None, alias="class")
	school: Optional[str] = None
	profile_picture: Optional[str] = None
	total_points: Optional[int] = Field(default=None, ge=0)
	current_streak: Optional[int] = Field(default=None, ge=0)
	is_authenticated: Optional[bool] = None


# ---- Chat ----

class ChatMessageOut(ApiModel):
	id: str
	user_id: str
	role: Literal["user", "assistant"]
	content: str
	timestamp: Optional[datetime] = None


class ChatRequest(ApiModel):
	content: str = ""
	# Base64-encoded image data, optional
	image: Optional[str] = None
	mime_type: Optional[str] = None


# ---- Quiz ----

class QuizGenerateRequest(ApiModel):
	class_name: str = Field(default="Class 10", alias="class")
	subject: str = "General Knowledge"
	topic: Optional[str] = None
	difficulty: Optional[str] = "medium"
	count: int = 10


class QuizOut(ApiModel):
	id: str
	class_name: str = Field(alias="class")
	subject: str
	topic: Optional[str] = None
	difficulty: Optional[str] = None
	questions: List[QuizQuestion]
	score: Optional[int] = None
	total_questions: int
	completed: bool = False
	time_spent: Optional[int] = None
	completed_at: Optional[datetime] = None
	created_at: Optional[datetime] = None


class GeneratedQuiz(ApiModel):
	# id is absent when the quiz could not be stored
	id: Optional[str] = None
	class_name: Optional[str] = Field(default=None, alias="class")
	subject: Optional[str] = None
	topic: Optional[str] = None
	difficulty: Optional[str] = None
	questions: List[QuizQuestion]


class QuizSubmitRequest(ApiModel):
	answers: List[Optional[str]] = Field(default_factory=list)
	time_spent: Optional[int] = Field(default=None, ge=0)


class QuestionResult(ApiModel):
	question: str
	user_answer: Optional[str] = None
	correct_answer: str
	is_correct: bool
	explanation: str = ""


class QuizSubmitResponse(ApiModel):
	score: int
	correct_count: int
	total_questions: int
	points_earned: int
	results: List[QuestionResult]
	new_badges: List[str] = Field(default_factory=list)


# ---- Reasoning ----

class ReasoningGenerateRequest(ApiModel):
	difficulty: str = "medium"
	category: str = "logic"


class ReasoningGenerated(ApiModel):
	id: Optional[str] = None
	question: str
	difficulty: str
	category: str
	points: int


class ReasoningChallengeOut(ApiModel):
	id: str
	difficulty: str
	category: str
	question: str
	answer: str
	explanation: Optional[str] = None
	user_answer: Optional[str] = None
	correct: Optional[bool] = None
	points: int = 0
	completed_at: Optional[datetime] = None
	created_at: Optional[datetime] = None


class ReasoningSubmitRequest(ApiModel):
	answer: str = ""


class ReasoningSubmitResponse(ApiModel):
	challenge_id: str
	user_answer: str
	correct: bool
	answer: str
	explanation: Optional[str] = None
	points: int


# ---- Progress / badges / leaderboard ----

class ProgressSummary(ApiModel):
	total_quizzes: int
	average_score: int
	subjects_studied: int
	streak_days: int


class UserProgressOut(ApiModel):
	id: str
	subject: str
	topics_completed: List[str] = Field(default_factory=list)
	total_topics: int = 0
	average_score: int = 0
	updated_at: Optional[datetime] = None


class BadgeOut(ApiModel):
	id: str
	type: str
	name: str
	description: str
	icon: str
	earned_at: Optional[datetime] = None


class BadgeCatalogEntry(ApiModel):
	id: str
	name: str
	description: str
	icon: str
	earned: bool


class BadgesResponse(ApiModel):
	earned: List[str]
	available: List[BadgeCatalogEntry]


class LeaderboardEntry(ApiModel):
	id: str
	name: str
	class_name: str = Field(alias="class")
	school: str
	total_points: int
	accuracy: int
	streak: int
	badges: int
	rank: int
	change: int = 0


class LeaderboardResponse(ApiModel):
	leaderboard: List[LeaderboardEntry]
	user_rank: Optional[int] = None
