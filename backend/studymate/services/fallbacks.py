"""Canned content served whenever the model is unavailable or returns junk."""
from __future__ import annotations
from typing import Dict, List, Optional, Tuple

from ..schemas import QuizQuestion, ReasoningContent


CHAT_APOLOGY = (
	"I'm sorry, I'm having trouble answering right now. "
	"Please try asking again in a moment, or rephrase your question."
)

CHAT_IMAGE_APOLOGY = (
	"I can see you've uploaded an image, but I'm having trouble analyzing it right now. "
	"Please try again or describe what you'd like to know about the image."
)

PLACEHOLDER_OPTIONS = ["Option A", "Option B", "Option C", "Option D"]


def placeholder_questions(subject: str, topic: Optional[str], count: int) -> List[QuizQuestion]:
	area = f"{subject} ({topic})" if topic else subject
	return [
		QuizQuestion(
			id=f"q{i + 1}",
			question=f"Sample {area} question {i + 1}: question generation is temporarily unavailable.",
			options=list(PLACEHOLDER_OPTIONS),
			correct_answer=PLACEHOLDER_OPTIONS[0],
			explanation="This is placeholder content. Try generating the quiz again later.",
		)
		for i in range(count)
	]


# Served by the route when a quiz cannot be stored at all
SINGLE_FALLBACK_QUESTION = QuizQuestion(
	id="fallback_1",
	question="What is the basic unit of matter?",
	options=["Atom", "Molecule", "Cell", "Proton"],
	correct_answer="Atom",
	explanation="An atom is the smallest unit of ordinary matter that forms a chemical element.",
)


POINTS_BY_DIFFICULTY: Dict[str, int] = {"easy": 10, "medium": 20, "hard": 30}

DIFFICULTIES = ("easy", "medium", "hard")
CATEGORIES = ("logic", "number_series", "pattern_match", "analytical")

# Client labels ("Logic Puzzles" -> "logic_puzzles") mapped onto table keys
CATEGORY_ALIASES: Dict[str, str] = {
	"logic_puzzles": "logic",
	"logical": "logic",
	"number": "number_series",
	"numbers": "number_series",
	"sequence": "number_series",
	"pattern": "pattern_match",
	"patterns": "pattern_match",
	"analysis": "analytical",
}

DEFAULT_REASONING_KEY: Tuple[str, str] = ("medium", "logic")


def _c(question: str, answer: str, explanation: str) -> ReasoningContent:
	return ReasoningContent(question=question, answer=answer, explanation=explanation)


REASONING_FALLBACKS: Dict[Tuple[str, str], ReasoningContent] = {
	("easy", "logic"): _c(
		"If all cats are animals, and Fluffy is a cat, what is Fluffy?",
		"animal",
		"Fluffy belongs to the group of cats, and every cat is an animal, so Fluffy is an animal.",
	),
	("easy", "number_series"): _c(
		"What comes next in the sequence: 2, 4, 6, 8, ?",
		"10",
		"Each number is 2 more than the previous one.",
	),
	("easy", "pattern_match"): _c(
		"Complete the pattern: A, C, E, G, ?",
		"I",
		"The pattern skips one letter each time: A (b) C (d) E (f) G (h) I.",
	),
	("easy", "analytical"): _c(
		"Tom is taller than Sam. Sam is taller than Raj. Who is the shortest?",
		"Raj",
		"Tom > Sam > Raj, so Raj is the shortest.",
	),
	("medium", "logic"): _c(
		"If all roses are flowers and some flowers are red, which statement must be true: "
		"all roses are red, no roses are red, or some roses might be red?",
		"Some roses might be red",
		"We only know that some flowers are red. Roses may or may not be among them, so the only safe "
		"conclusion is that some roses might be red.",
	),
	("medium", "number_series"): _c(
		"What comes next in this sequence: 2, 6, 12, 20, 30, ?",
		"42",
		"The sequence follows n(n+1): 1x2, 2x3, 3x4, 4x5, 5x6, 6x7 = 42.",
	),
	("medium", "pattern_match"): _c(
		"Find the missing term: AZ, BY, CX, DW, ?",
		"EV",
		"The first letter moves forward through the alphabet while the second moves backward.",
	),
	("medium", "analytical"): _c(
		"A bat and a ball cost 110 rupees in total. The bat costs 100 rupees more than the ball. "
		"How much does the ball cost in rupees?",
		"5",
		"If the ball costs x, the bat costs x + 100, so 2x + 100 = 110 and x = 5.",
	),
	("hard", "logic"): _c(
		"Three boxes are labelled 'Apples', 'Oranges' and 'Mixed', and every label is wrong. "
		"You may take one fruit from one box. Which box should you pick from to relabel all of them?",
		"Mixed",
		"The box labelled 'Mixed' must hold only one kind of fruit. The fruit you draw tells you what it "
		"really holds, and the other two labels then follow.",
	),
	("hard", "number_series"): _c(
		"What comes next in the sequence: 1, 1, 2, 3, 5, 8, 13, ?",
		"21",
		"Each term is the sum of the two before it (Fibonacci): 8 + 13 = 21.",
	),
	("hard", "pattern_match"): _c(
		"If CAT is coded as 24 (3+1+20) and DOG is coded as 26, what is the code for BIRD?",
		"33",
		"Add the alphabet positions of the letters: B(2) + I(9) + R(18) + D(4) = 33.",
	),
	("hard", "analytical"): _c(
		"A man lives on the 20th floor. Every morning he takes the elevator down to the ground floor. "
		"When he comes home, he takes the elevator to the 10th floor and walks the rest, except when "
		"it's raining. Why?",
		"He is too short",
		"He is too short to reach the button for the 20th floor, but on rainy days he can press it with "
		"his umbrella.",
	),
}


def _category_key(category: Optional[str]) -> str:
	value = (category or "").strip().lower().replace(" ", "_").replace("-", "_")
	return CATEGORY_ALIASES.get(value, value)


def reasoning_key(difficulty: Optional[str], category: Optional[str]) -> Tuple[str, str]:
	"""Map a requested pair onto the table; anything not in it becomes medium/logic as a whole."""
	key = ((difficulty or "").strip().lower(), _category_key(category))
	return key if key in REASONING_FALLBACKS else DEFAULT_REASONING_KEY


def fallback_reasoning(difficulty: Optional[str], category: Optional[str]) -> ReasoningContent:
	content = REASONING_FALLBACKS[reasoning_key(difficulty, category)]
	return content.model_copy()


def points_for(difficulty: Optional[str]) -> int:
	return POINTS_BY_DIFFICULTY.get((difficulty or "").strip().lower(), POINTS_BY_DIFFICULTY["medium"])
