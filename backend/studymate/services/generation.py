"""Content generation backed by Gemini, with canned fallbacks.

None of these functions raise on model trouble: a missing key, an HTTP error,
or output that does not parse all end in fallback content and a log line.
"""
from __future__ import annotations
import json
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..gemini_client import GeminiClient
from ..schemas import QuizQuestion, ReasoningContent
from . import fallbacks


logger = logging.getLogger(__name__)

MAX_QUIZ_QUESTIONS = 20

CHAT_SYSTEM_INSTRUCTION = (
	"You are StudyMate, a friendly and patient tutor for school students. "
	"Explain concepts clearly and step by step, using simple language and short examples. "
	"When a student asks for the answer to a problem, show the reasoning rather than only the result. "
	"Keep answers focused on the question and suitable for the student's age. "
	"If a question is not about learning, gently steer the conversation back to studies."
)

QUIZ_SYSTEM_INSTRUCTION = (
	"You are an experienced school teacher who writes multiple-choice quiz questions. "
	"Questions must be factually correct and appropriate for the stated class level."
)

REASONING_SYSTEM_INSTRUCTION = (
	"You write short logical-reasoning puzzles for school students. "
	"Every puzzle must have a single, short, unambiguous answer."
)

QUIZ_RESPONSE_SCHEMA: Dict[str, Any] = {
	"type": "ARRAY",
	"items": {
		"type": "OBJECT",
		"properties": {
			"id": {"type": "STRING"},
			"question": {"type": "STRING"},
			"options": {"type": "ARRAY", "items": {"type": "STRING"}},
			"correctAnswer": {"type": "STRING"},
			"explanation": {"type": "STRING"},
		},
		"required": ["id", "question", "options", "correctAnswer", "explanation"],
	},
}

REASONING_RESPONSE_SCHEMA: Dict[str, Any] = {
	"type": "OBJECT",
	"properties": {
		"question": {"type": "STRING"},
		"answer": {"type": "STRING"},
		"explanation": {"type": "STRING"},
	},
	"required": ["question", "answer"],
}


def extract_json(text: str) -> Any:
	"""Parse JSON from model output, tolerating code fences and surrounding prose."""
	if text is None:
		raise ValueError("empty model output")
	cleaned = text.strip()
	fence = re.match(r"^```(?:json)?\s*([\s\S]*?)\s*```$", cleaned)
	if fence:
		cleaned = fence.group(1)
	try:
		return json.loads(cleaned)
	except Exception:
		pass
	for pattern in (r"\[[\s\S]*\]", r"\{[\s\S]*\}"):
		match = re.search(pattern, cleaned)
		if match:
			try:
				return json.loads(match.group(0))
			except Exception:
				continue
	raise ValueError("Failed to parse JSON from Gemini output")


def clamp_count(count: Optional[int]) -> int:
	try:
		value = int(count) if count is not None else 5
	except (TypeError, ValueError):
		value = 5
	return max(1, min(value, MAX_QUIZ_QUESTIONS))


async def chat(message: str, image: Optional[str] = None, mime_type: Optional[str] = None) -> str:
	client: Optional[GeminiClient] = None
	try:
		client = GeminiClient()
		if image:
			parts: List[Dict[str, Any]] = [
				{"inlineData": {"mimeType": mime_type or "image/jpeg", "data": image}},
				{"text": message or "Please explain what is shown in this image."},
			]
			text = await client.generate_multimodal(parts, system_instruction=CHAT_SYSTEM_INSTRUCTION)
		else:
			text = await client.generate(message, system_instruction=CHAT_SYSTEM_INSTRUCTION)
		if not text or not text.strip():
			raise ValueError("empty chat reply")
		return text
	except Exception:
		logger.warning("Chat generation failed; replying with fallback text", exc_info=True)
		return fallbacks.CHAT_IMAGE_APOLOGY if image else fallbacks.CHAT_APOLOGY
	finally:
		if client is not None:
			await client.aclose()


def _build_quiz_prompt(class_name: str, subject: str, topic: Optional[str], difficulty: Optional[str], count: int) -> str:
	focus = f"Topic: {topic}" if topic else "Topic: a mix of core topics from the syllabus"
	return (
		f"Create {count} multiple-choice questions for a {class_name} student.\n"
		f"Subject: {subject}\n"
		f"{focus}\n"
		f"Difficulty: {difficulty or 'medium'}\n\n"
		"Rules:\n"
		"- Each question has exactly 4 options.\n"
		"- correctAnswer must be copied exactly from one of the options.\n"
		"- explanation is 1-2 sentences on why the answer is right.\n"
		"- ids are q1, q2, ... in order.\n\n"
		"Return ONLY a JSON array of objects with keys: id, question, options, correctAnswer, explanation."
	)


def parse_quiz_questions(raw: str, count: int) -> List[QuizQuestion]:
	data = extract_json(raw)
	if isinstance(data, dict):
		data = data.get("questions")
	if not isinstance(data, list) or not data:
		raise ValueError("model did not return a list of questions")
	questions: List[QuizQuestion] = []
	skipped = 0
	for item in data:
		if len(questions) >= count:
			break
		try:
			question = QuizQuestion.model_validate(item)
		except ValidationError:
			skipped += 1
			continue
		if not question.id:
			question.id = f"q{len(questions) + 1}"
		questions.append(question)
	if skipped:
		logger.warning("Skipped %d malformed quiz question(s) from model output", skipped)
	if not questions:
		raise ValueError("no usable questions in model output")
	# Duplicate ids would break answer lookup on the client
	if len({q.id for q in questions}) != len(questions):
		for index, question in enumerate(questions):
			question.id = f"q{index + 1}"
	return questions


async def generate_quiz(
	class_name: str,
	subject: str,
	topic: Optional[str] = None,
	difficulty: Optional[str] = None,
	count: Optional[int] = 5,
) -> List[QuizQuestion]:
	n = clamp_count(count)
	client: Optional[GeminiClient] = None
	try:
		client = GeminiClient()
		raw = await client.generate(
			_build_quiz_prompt(class_name, subject, topic, difficulty, n),
			system_instruction=QUIZ_SYSTEM_INSTRUCTION,
			response_schema=QUIZ_RESPONSE_SCHEMA,
		)
		questions = parse_quiz_questions(raw, n)
		logger.info("Generated %d quiz questions for %s/%s", len(questions), subject, topic or "-")
		return questions
	except ValueError as err:
		# Unusable output and a missing API key both land here
		logger.warning("Quiz generation unavailable (%s); using placeholders", err)
	except Exception:
		logger.warning("Quiz generation failed; using placeholders", exc_info=True)
	finally:
		if client is not None:
			await client.aclose()
	return fallbacks.placeholder_questions(subject, topic, n)


def _build_reasoning_prompt(difficulty: str, category: str) -> str:
	return (
		f"Write ONE {difficulty} reasoning puzzle in the category '{category.replace('_', ' ')}'.\n"
		"The answer must be a single word, number or short phrase.\n"
		"Return ONLY a JSON object with keys: question, answer, explanation."
	)


async def generate_reasoning_challenge(difficulty: Optional[str], category: Optional[str]) -> ReasoningContent:
	client: Optional[GeminiClient] = None
	try:
		client = GeminiClient()
		raw = await client.generate(
			_build_reasoning_prompt(*fallbacks.reasoning_key(difficulty, category)),
			system_instruction=REASONING_SYSTEM_INSTRUCTION,
			response_schema=REASONING_RESPONSE_SCHEMA,
		)
		data = extract_json(raw)
		if not isinstance(data, dict):
			raise ValueError("model did not return an object")
		content = ReasoningContent(
			question=str(data.get("question") or "").strip(),
			answer=str(data.get("answer") or "").strip(),
			explanation=str(data.get("explanation") or "").strip(),
		)
		return content
	except ValueError as err:
		logger.warning("Reasoning generation unavailable (%s); using fallback", err)
	except Exception:
		logger.warning("Reasoning generation failed; using fallback", exc_info=True)
	finally:
		if client is not None:
			await client.aclose()
	return fallbacks.fallback_reasoning(difficulty, category)
