"""Prompt builder for single-question generation."""

import json

from quizcore.models.question import Difficulty, GenerationRequest, QuestionType, Subject

MAX_RECENT_QUESTIONS = 5

SYSTEM_PROMPT = """You are an expert teacher writing quiz questions for students.

Requirements:
- Write exactly ONE question
- Respond with a single JSON object and nothing else
- The question must be clear and unambiguous
- Never copy the example; write original content for the requested topic"""

TYPE_INSTRUCTIONS = {
    QuestionType.MULTIPLE_CHOICE: (
        "Create a multiple choice question with exactly 4 options. "
        "Only ONE option is correct; the others must be plausible but clearly wrong."
    ),
    QuestionType.TRUE_FALSE: (
        "Create a true/false statement. The correctAnswer must be \"True\" or \"False\"."
    ),
    QuestionType.FILL_IN_BLANK: (
        "Create a sentence with one missing word or phrase marked as _____. "
        "The correctAnswer is the missing word or phrase."
    ),
    QuestionType.SHORT_ANSWER: (
        "Create a question that needs a one or two sentence answer. "
        "The correctAnswer is a model answer."
    ),
}

FORMAT_EXAMPLES = {
    QuestionType.MULTIPLE_CHOICE: {
        "question": "Which planet is closest to the Sun?",
        "type": "multiple_choice",
        "options": ["Venus", "Mercury", "Earth", "Mars"],
        "correctAnswer": "Mercury",
        "explanation": "Mercury orbits closest to the Sun.",
        "hint": "It is also the smallest planet.",
        "concepts": ["solar system"],
    },
    QuestionType.TRUE_FALSE: {
        "question": "Water boils at 100 degrees Celsius at sea level.",
        "type": "true_false",
        "options": ["True", "False"],
        "correctAnswer": "True",
        "explanation": "At standard pressure water boils at 100 degrees Celsius.",
        "concepts": ["states of matter"],
    },
    QuestionType.FILL_IN_BLANK: {
        "question": "Plants make their own food through a process called _____.",
        "type": "fill_in_blank",
        "options": [],
        "correctAnswer": "photosynthesis",
        "explanation": "Photosynthesis turns light, water and carbon dioxide into sugar.",
        "concepts": ["plants"],
    },
    QuestionType.SHORT_ANSWER: {
        "question": "Why do we have seasons on Earth?",
        "type": "short_answer",
        "options": [],
        "correctAnswer": "Because the Earth is tilted on its axis as it orbits the Sun",
        "explanation": "The tilt changes how directly sunlight hits each hemisphere.",
        "concepts": ["earth and space"],
    },
}

SUBJECT_CONTEXTS = {
    Subject.MATHEMATICS: [
        "real-world application",
        "word problem scenario",
        "abstract mathematical concept",
        "visual/geometric interpretation",
        "practical calculation",
        "pattern recognition",
        "logical reasoning",
    ],
    Subject.SCIENCE: [
        "laboratory experiment",
        "natural phenomenon",
        "everyday observation",
        "scientific discovery",
        "technology application",
        "environmental context",
        "health and medicine",
    ],
    Subject.HISTORY: [
        "cause and effect",
        "historical figure perspective",
        "timeline and chronology",
        "cultural impact",
        "primary source analysis",
        "historical comparison",
        "modern relevance",
    ],
    Subject.LANGUAGE_ARTS: [
        "literary analysis",
        "grammar in context",
        "creative writing element",
        "vocabulary in use",
        "reading comprehension",
        "figurative language",
        "author's perspective",
    ],
}
DEFAULT_CONTEXTS = ["general knowledge", "practical application", "conceptual understanding"]

DIFFICULTY_GUIDANCE = {
    Difficulty.EASY: [
        "Use simple, clear language",
        "Focus on basic recognition",
        "Test fundamental understanding",
        "Use familiar examples",
    ],
    Difficulty.MEDIUM: [
        "Require application of concepts",
        "Include some analysis",
        "Test connections between ideas",
        "Use moderately complex scenarios",
    ],
    Difficulty.HARD: [
        "Require synthesis of multiple concepts",
        "Include complex reasoning",
        "Test deep understanding",
        "Use challenging scenarios",
    ],
    Difficulty.ADAPTIVE: ["Adjust complexity based on student level"],
}

FOCUS_VARIATIONS = [
    "core concept of {topic}",
    "application of {topic}",
    "common misconception about {topic}",
    "relationship of {topic} to other concepts",
    "real-world example of {topic}",
    "problem-solving using {topic}",
]

STYLE_VARIATIONS = [
    "straightforward and direct",
    "scenario-based",
    "analytical",
    "comparative",
    "cause-and-effect focused",
    "application-oriented",
    "conceptual",
    "problem-solving",
]

VARIATION_HINTS = {
    QuestionType.MULTIPLE_CHOICE: [
        "Focus on different aspects of the concept",
        "Use a scenario or story context",
        "Test application rather than memorization",
        "Include a 'which is NOT' style question",
        "Use a data interpretation question",
        "Create a comparison question",
        "Test understanding of exceptions or edge cases",
    ],
    QuestionType.TRUE_FALSE: [
        "Test a common misconception",
        "Use a statement with subtle complexity",
        "Focus on cause-and-effect relationships",
        "Test understanding of definitions",
        "Include conditional statements",
        "Test knowledge of exceptions",
    ],
    QuestionType.FILL_IN_BLANK: [
        "Use the term in a different context",
        "Test related vocabulary",
        "Focus on process or sequence",
        "Use an analogy or comparison",
        "Test understanding of relationships",
    ],
    QuestionType.SHORT_ANSWER: [
        "Ask for explanation of a process",
        "Request comparison between concepts",
        "Ask about real-world applications",
        "Test understanding of 'why' not just 'what'",
        "Ask for examples or counter-examples",
    ],
}


def _pick(pool: list[str], variation: int) -> str:
    return pool[variation % len(pool)]


def format_recent_questions(previous: list[str]) -> str:
    """Bullet list of the most recent questions the model must not repeat."""
    recent = previous[-MAX_RECENT_QUESTIONS:]
    if not recent:
        return ""
    lines = "\n".join(f"- {text}" for text in recent)
    return f"\nDo NOT repeat or rephrase any of these recent questions:\n{lines}\n"


def build_prompt(
    request: GenerationRequest,
    question_type: QuestionType,
    variation: int = 0,
) -> str:
    """
    Build the prompt for one generation attempt.

    The same request, type and variation always produce the same text; a
    new variation index changes the context, focus, style and hint lines.

    Args:
        request: What the caller asked for
        question_type: Type for this slot
        variation: Variation index, bumped on every retry

    Returns:
        Prompt text for the text generator
    """
    context = _pick(SUBJECT_CONTEXTS.get(request.subject, DEFAULT_CONTEXTS), variation)
    guidance = _pick(DIFFICULTY_GUIDANCE[request.difficulty], variation)
    focus = _pick(FOCUS_VARIATIONS, variation).format(topic=request.topic)
    style = _pick(STYLE_VARIATIONS, variation)
    hint = _pick(VARIATION_HINTS[question_type], variation)
    grade = f"Grade level: {request.grade_level}\n" if request.grade_level is not None else ""
    example = json.dumps(FORMAT_EXAMPLES[question_type], indent=2)

    return f"""Subject: {request.subject.value.replace("_", " ")}
Topic: {request.topic}
Difficulty: {request.difficulty.value}
{grade}
{TYPE_INSTRUCTIONS[question_type]}

Context suggestion: {context}
Difficulty guidance: {guidance}
Focus area: {focus}
Style: {style}
Variation hint #{variation + 1}: {hint}
{format_recent_questions(request.previous_questions)}
Respond with JSON in exactly this format:
{example}"""
