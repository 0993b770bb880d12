import pytest

from studymate.schemas import QuizQuestion
from studymate.services.scoring import check_reasoning_answer, grade_quiz, percent


def _question(qid, answer, options=("A", "B", "C", "D")):
	return QuizQuestion(id=qid, question=f"Question {qid}?", options=list(options), correct_answer=answer, explanation=f"because {answer}")


@pytest.mark.parametrize(
	"correct,total,expected",
	[(0, 1, 0), (1, 1, 100), (1, 2, 50), (1, 3, 33), (2, 3, 67), (1, 8, 13), (3, 8, 38), (0, 0, 0)],
)
def test_percent_rounds_half_up(correct, total, expected):
	assert percent(correct, total) == expected


def test_single_correct_answer_scores_full_marks():
	grade = grade_quiz([_question("q1", "B")], ["B"])
	assert grade.score == 100
	assert grade.correct_count == 1
	assert grade.points_earned == 10


def test_one_wrong_answer_out_of_two():
	grade = grade_quiz([_question("q1", "A"), _question("q2", "C")], ["A", "D"])
	assert grade.score == 50
	assert grade.correct_count == 1
	assert grade.points_earned == 10
	assert [r.is_correct for r in grade.results] == [True, False]
	assert grade.results[1].user_answer == "D"
	assert grade.results[1].correct_answer == "C"


def test_comparison_is_exact_string_equality():
	grade = grade_quiz([_question("q1", "Paris", options=("London", "Berlin", "Paris", "Madrid"))], ["paris "])
	assert grade.correct_count == 0
	assert grade.score == 0


def test_missing_and_extra_answers():
	questions = [_question("q1", "A"), _question("q2", "B"), _question("q3", "C")]
	short = grade_quiz(questions, ["A"])
	assert short.correct_count == 1
	assert short.results[2].user_answer is None
	long = grade_quiz(questions, ["A", "B", "C", "D", "A"])
	assert long.correct_count == 3
	assert long.total_questions == 3


def test_null_answer_is_wrong():
	grade = grade_quiz([_question("q1", "A")], [None])
	assert grade.correct_count == 0


def test_reasoning_substring_match_is_case_insensitive():
	# rng would reject if consulted
	assert check_reasoning_answer("Fluffy is an ANIMAL", "animal", lenient_pass_rate=0.0, rng=lambda: 0.99)


def test_reasoning_mismatch_consults_rng():
	assert not check_reasoning_answer("a plant", "animal", lenient_pass_rate=0.3, rng=lambda: 0.5)
	assert check_reasoning_answer("a plant", "animal", lenient_pass_rate=0.3, rng=lambda: 0.1)


def test_reasoning_match_never_consults_rng():
	def boom():
		raise AssertionError("rng should not be called")

	assert check_reasoning_answer("42", "42", lenient_pass_rate=0.3, rng=boom)


def test_reasoning_empty_expected_answer_does_not_match_everything():
	assert not check_reasoning_answer("anything", "", lenient_pass_rate=0.0)
