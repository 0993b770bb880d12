"""Badge catalog and the award-once achievement check."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .models import Badge, User
from .storage import Storage


logger = logging.getLogger(__name__)

SPEEDSTER_SECONDS = 60


@dataclass(frozen=True)
class AchievementStats:
	total_quizzes: int = 0
	perfect_scores: int = 0
	# Quickest completed quiz in seconds; None when no timed quiz exists
	fastest_time: Optional[int] = None
	current_streak: int = 0
	total_points: int = 0
	reasoning_solved: int = 0
	reasoning_accuracy: int = 0


@dataclass(frozen=True)
class BadgeDefinition:
	id: str
	name: str
	description: str
	icon: str
	qualifies: Callable[[AchievementStats], bool]


BADGE_CATALOG: List[BadgeDefinition] = [
	BadgeDefinition("first-quiz", "First Steps", "Complete your first quiz", "🎯",
		lambda s: s.total_quizzes >= 1),
	BadgeDefinition("quiz-master", "Quiz Master", "Complete 10 quizzes", "🏆",
		lambda s: s.total_quizzes >= 10),
	BadgeDefinition("perfectionist", "Perfectionist", "Get 100% on a quiz", "💯",
		lambda s: s.perfect_scores >= 1),
	BadgeDefinition("speedster", "Speedster", f"Finish a quiz in under {SPEEDSTER_SECONDS} seconds", "⚡",
		lambda s: s.fastest_time is not None and s.fastest_time < SPEEDSTER_SECONDS),
	BadgeDefinition("streak-keeper", "Streak Keeper", "Maintain a 7-day streak", "🔥",
		lambda s: s.current_streak >= 7),
	BadgeDefinition("scholar", "Scholar", "Earn 1000 points", "📚",
		lambda s: s.total_points >= 1000),
	BadgeDefinition("logic-ace", "Logic Ace", "Solve 5 reasoning challenges", "🧩",
		lambda s: s.reasoning_solved >= 5),
]


def compute_stats(storage: Storage, user: User) -> AchievementStats:
	quizzes = [q for q in storage.get_user_quizzes(user.id) if q.completed]
	times = [q.time_spent for q in quizzes if q.time_spent is not None]
	challenges = [c for c in storage.get_user_reasoning_challenges(user.id) if c.completed_at is not None]
	solved = sum(1 for c in challenges if c.correct)
	return AchievementStats(
		total_quizzes=len(quizzes),
		perfect_scores=sum(1 for q in quizzes if q.score == 100),
		fastest_time=min(times) if times else None,
		current_streak=user.current_streak or 0,
		total_points=user.total_points or 0,
		reasoning_solved=solved,
		reasoning_accuracy=round(100 * solved / len(challenges)) if challenges else 0,
	)


def earned_types(storage: Storage, user: User) -> set[str]:
	return {b.type for b in storage.get_user_badges(user.id)}


def check_and_award(storage: Storage, user: User, stats: Optional[AchievementStats] = None) -> List[Badge]:
	"""Award every catalog badge the user now qualifies for and does not hold yet."""
	stats = stats or compute_stats(storage, user)
	earned = earned_types(storage, user)
	awarded: List[Badge] = []
	for definition in BADGE_CATALOG:
		if definition.id in earned or not definition.qualifies(stats):
			continue
		badge = storage.award_badge(
			user.id,
			type=definition.id,
			name=definition.name,
			description=definition.description,
			icon=definition.icon,
		)
		earned.add(definition.id)
		awarded.append(badge)
	if awarded:
		logger.info("User %s earned badges: %s", user.id, ", ".join(b.type for b in awarded))
	return awarded
