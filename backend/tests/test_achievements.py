from studymate.achievements import AchievementStats, BADGE_CATALOG, check_and_award, compute_stats, earned_types
from studymate.services.fallbacks import placeholder_questions


def _complete_quiz(storage, user, score, time_spent=None, subject="Physics"):
	quiz = storage.create_quiz(user.id, class_name="Class 10", subject=subject, questions=placeholder_questions(subject, None, 1))
	storage.update_quiz_score(quiz.id, score, True, time_spent=time_spent)
	return quiz


def test_no_activity_earns_nothing(storage, demo_user):
	assert check_and_award(storage, demo_user) == []


def test_first_quiz_and_perfect_score(storage, demo_user):
	_complete_quiz(storage, demo_user, 100, time_spent=120)
	awarded = {b.type for b in check_and_award(storage, demo_user)}
	assert awarded == {"first-quiz", "perfectionist"}


def test_check_is_idempotent(storage, demo_user):
	_complete_quiz(storage, demo_user, 100, time_spent=30)
	first = check_and_award(storage, demo_user)
	second = check_and_award(storage, demo_user)
	assert first
	assert second == []
	types = [b.type for b in storage.get_user_badges(demo_user.id)]
	assert len(types) == len(set(types))


def test_stats_are_derived_from_history(storage, demo_user):
	_complete_quiz(storage, demo_user, 100, time_spent=90)
	_complete_quiz(storage, demo_user, 50, time_spent=45)
	storage.create_quiz(demo_user.id, class_name="Class 10", subject="Physics", questions=placeholder_questions("Physics", None, 1))
	stats = compute_stats(storage, storage.get_user(demo_user.id))
	assert stats.total_quizzes == 2
	assert stats.perfect_scores == 1
	assert stats.fastest_time == 45


def test_explicit_stats_drive_awards(storage, demo_user):
	stats = AchievementStats(total_quizzes=10, current_streak=7, total_points=1000, reasoning_solved=5)
	awarded = {b.type for b in check_and_award(storage, demo_user, stats)}
	assert {"first-quiz", "quiz-master", "streak-keeper", "scholar", "logic-ace"} <= awarded
	assert "speedster" not in awarded
	assert earned_types(storage, demo_user) == awarded


def test_catalog_ids_are_unique():
	ids = [d.id for d in BADGE_CATALOG]
	assert len(ids) == len(set(ids))
