import asyncio
import json

import httpx
import pytest

from studymate.services import fallbacks, generation


def _run(coro):
	return asyncio.run(coro)


QUIZ_JSON = [
	{
		"id": "q1",
		"question": "What is 2 + 2?",
		"options": ["3", "4", "5", "6"],
		"correctAnswer": "4",
		"explanation": "2 + 2 = 4",
	},
	{
		"id": "q2",
		"question": "What is 3 x 3?",
		"options": ["6", "8", "9", "12"],
		"correctAnswer": "9",
		"explanation": "3 x 3 = 9",
	},
]


def test_quiz_without_api_key_returns_placeholders():
	questions = _run(generation.generate_quiz("Class 10", "Physics", count=3))
	assert len(questions) == 3
	for q in questions:
		assert q.options == fallbacks.PLACEHOLDER_OPTIONS
		assert q.correct_answer in q.options
	assert [q.id for q in questions] == ["q1", "q2", "q3"]


def test_quiz_parses_model_json(fake_gemini):
	fake_gemini.reply = json.dumps(QUIZ_JSON)
	questions = _run(generation.generate_quiz("Class 8", "Mathematics", topic="Arithmetic", count=2))
	assert [q.correct_answer for q in questions] == ["4", "9"]
	call = fake_gemini.calls[0]
	assert call["response_schema"] == generation.QUIZ_RESPONSE_SCHEMA
	assert "Arithmetic" in call["prompt"]


def test_quiz_accepts_fenced_json_and_questions_wrapper(fake_gemini):
	fake_gemini.reply = "```json\n" + json.dumps({"questions": QUIZ_JSON}) + "\n```"
	questions = _run(generation.generate_quiz("Class 8", "Mathematics", count=5))
	assert len(questions) == 2


def test_quiz_truncates_to_count(fake_gemini):
	fake_gemini.reply = json.dumps(QUIZ_JSON)
	questions = _run(generation.generate_quiz("Class 8", "Mathematics", count=1))
	assert len(questions) == 1


@pytest.mark.parametrize(
	"reply",
	[
		"not json at all",
		"[]",
		json.dumps([{"question": "Missing options", "correctAnswer": "x"}]),
		json.dumps([{**QUIZ_JSON[0], "options": ["1", "2", "3"], "correctAnswer": "1"}]),
		json.dumps([{**QUIZ_JSON[0], "correctAnswer": "not an option"}]),
	],
)
def test_quiz_malformed_output_falls_back(fake_gemini, reply):
	fake_gemini.reply = reply
	questions = _run(generation.generate_quiz("Class 8", "Chemistry", count=4))
	assert len(questions) == 4
	assert all(q.options == fallbacks.PLACEHOLDER_OPTIONS for q in questions)


def test_quiz_http_error_falls_back(fake_gemini):
	fake_gemini.error = httpx.ConnectError("boom")
	questions = _run(generation.generate_quiz("Class 8", "Chemistry", count=2))
	assert len(questions) == 2


def test_quiz_count_is_clamped():
	assert len(_run(generation.generate_quiz("Class 8", "Chemistry", count=0))) == 1
	assert len(_run(generation.generate_quiz("Class 8", "Chemistry", count=500))) == generation.MAX_QUIZ_QUESTIONS


def test_duplicate_model_ids_are_renumbered(fake_gemini):
	fake_gemini.reply = json.dumps([{**QUIZ_JSON[0], "id": "x"}, {**QUIZ_JSON[1], "id": "x"}])
	questions = _run(generation.generate_quiz("Class 8", "Mathematics", count=2))
	assert [q.id for q in questions] == ["q1", "q2"]


def test_quiz_padded_answer_matches_padded_option(fake_gemini):
	fake_gemini.reply = json.dumps([{**QUIZ_JSON[0], "options": [" 3", " 4 ", "5", "6"], "correctAnswer": " 4 "}])
	questions = _run(generation.generate_quiz("Class 8", "Mathematics", count=1))
	assert questions[0].options == ["3", "4", "5", "6"]
	assert questions[0].correct_answer == "4"


def test_quiz_keeps_valid_questions_and_drops_broken_ones(fake_gemini):
	broken = {**QUIZ_JSON[0], "correctAnswer": "not an option"}
	fake_gemini.reply = json.dumps([broken, QUIZ_JSON[1], "junk", {**QUIZ_JSON[0], "id": None}])
	questions = _run(generation.generate_quiz("Class 8", "Mathematics", count=2))
	assert [q.correct_answer for q in questions] == ["9", "4"]
	assert [q.id for q in questions] == ["q1", "q2"]


def test_reasoning_fallback_unknown_difficulty_ignores_category():
	content = _run(generation.generate_reasoning_challenge("expert", "number_series"))
	assert content == fallbacks.REASONING_FALLBACKS[("medium", "logic")]
	assert fallbacks.reasoning_key("expert", "number_series") == ("medium", "logic")
	assert fallbacks.reasoning_key("Hard", "Logic Puzzles") == ("hard", "logic")


def test_reasoning_fallback_easy_logic_is_fixed():
	for _ in range(3):
		content = _run(generation.generate_reasoning_challenge("easy", "logic"))
		assert content.question == "If all cats are animals, and Fluffy is a cat, what is Fluffy?"
		assert content.answer == "animal"


def test_reasoning_fallback_unknown_combination_uses_medium_logic():
	content = _run(generation.generate_reasoning_challenge("impossible", "astrology"))
	assert content == fallbacks.REASONING_FALLBACKS[("medium", "logic")]


def test_reasoning_fallback_accepts_client_category_labels():
	content = _run(generation.generate_reasoning_challenge("medium", "number_series"))
	assert content.answer == "42"
	content = _run(generation.generate_reasoning_challenge("easy", "logic_puzzles"))
	assert content.answer == "animal"


def test_every_fallback_combination_exists():
	for difficulty in fallbacks.DIFFICULTIES:
		for category in fallbacks.CATEGORIES:
			content = fallbacks.REASONING_FALLBACKS[(difficulty, category)]
			assert content.question and content.answer


def test_reasoning_uses_model_output(fake_gemini):
	fake_gemini.reply = json.dumps({"question": "What is next: 1, 4, 9, ?", "answer": "16", "explanation": "squares"})
	content = _run(generation.generate_reasoning_challenge("medium", "number_series"))
	assert content.answer == "16"
	assert fake_gemini.calls[0]["response_schema"] == generation.REASONING_RESPONSE_SCHEMA


def test_reasoning_blank_model_answer_falls_back(fake_gemini):
	fake_gemini.reply = json.dumps({"question": "Something?", "answer": ""})
	content = _run(generation.generate_reasoning_challenge("easy", "logic"))
	assert content.answer == "animal"


def test_chat_returns_model_text(fake_gemini):
	fake_gemini.reply = "Photosynthesis turns light into chemical energy."
	reply = _run(generation.chat("What is photosynthesis?"))
	assert reply == "Photosynthesis turns light into chemical energy."
	assert fake_gemini.calls[0]["system_instruction"] == generation.CHAT_SYSTEM_INSTRUCTION


def test_chat_failure_returns_apology():
	assert _run(generation.chat("Hello")) == fallbacks.CHAT_APOLOGY


def test_chat_image_failure_returns_image_apology(fake_gemini):
	fake_gemini.error = RuntimeError("vision down")
	assert _run(generation.chat("What is this?", image="aGVsbG8=")) == fallbacks.CHAT_IMAGE_APOLOGY


def test_chat_image_is_sent_inline(fake_gemini):
	fake_gemini.reply = "A triangle."
	_run(generation.chat("What shape?", image="aGVsbG8=", mime_type="image/png"))
	parts = fake_gemini.calls[0]["parts"]
	assert parts[0] == {"inlineData": {"mimeType": "image/png", "data": "aGVsbG8="}}
	assert parts[1] == {"text": "What shape?"}


def test_extract_json_finds_embedded_object():
	assert generation.extract_json('Sure! {"a": 1} hope that helps') == {"a": 1}
	with pytest.raises(ValueError):
		generation.extract_json("no braces here")
