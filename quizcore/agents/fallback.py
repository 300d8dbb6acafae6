"""Canned questions substituted when generation is exhausted."""

import uuid

from quizcore.models.question import Difficulty, Question, QuestionType, Subject

FALLBACK_CONCEPT = "fallback"

MC = QuestionType.MULTIPLE_CHOICE
TF = QuestionType.TRUE_FALSE
FIB = QuestionType.FILL_IN_BLANK
SA = QuestionType.SHORT_ANSWER


def _q(question_type: QuestionType, text: str, answer: str, explanation: str, options=None) -> Question:
    if question_type == TF:
        options = ["True", "False"]
    return Question(
        question_text=text,
        question_type=question_type,
        options=options or [],
        correct_answer=answer,
        explanation=explanation,
        concepts_covered=[FALLBACK_CONCEPT],
    )


GENERAL_POOL = {
    MC: [
        _q(MC, "Which season comes after summer?", "Fall/Autumn",
           "The seasons go: spring, summer, fall/autumn, winter.",
           ["Winter", "Spring", "Fall/Autumn", "Summer"]),
        _q(MC, "How many days are there in a week?", "7",
           "A week has seven days.", ["5", "6", "7", "8"]),
    ],
    TF: [
        _q(TF, "The sun rises in the east.", "True",
           "The Earth spins toward the east, so the sun appears there first."),
        _q(TF, "A year has 10 months.", "False", "A year has 12 months."),
    ],
    FIB: [
        _q(FIB, "There are _____ hours in a day.", "24", "One full day lasts 24 hours."),
    ],
    SA: [
        _q(SA, "Why is it important to read instructions before starting a task?",
           "So you know what to do and avoid mistakes",
           "Instructions explain the steps and help prevent errors."),
    ],
}

SUBJECT_POOLS = {
    Subject.MATHEMATICS: {
        MC: [
            _q(MC, "What is 3 + 2?", "5", "When we add 3 and 2, we get 5.", ["4", "5", "6", "7"]),
            _q(MC, "What is 7 x 8?", "56", "7 x 8 = 56.", ["54", "56", "58", "60"]),
        ],
        TF: [_q(TF, "A triangle has 3 sides.", "True", "Triangles always have 3 sides.")],
        FIB: [_q(FIB, "12 divided by 3 = _____", "4", "12 divided by 3 equals 4.")],
        SA: [
            _q(SA, "Solve for x: 2x + 5 = 13", "x = 4",
               "Subtract 5 from both sides, then divide by 2."),
        ],
    },
    Subject.SCIENCE: {
        MC: [
            _q(MC, "What do we use to see things?", "Our eyes", "We use our eyes to see.",
               ["Our nose", "Our eyes", "Our ears", "Our mouth"]),
        ],
        TF: [_q(TF, "Plants need water to grow.", "True", "Plants need water, just like we do.")],
        FIB: [
            _q(FIB, "The chemical formula for water is _____.", "H2O",
               "Water is made of 2 hydrogen atoms and 1 oxygen atom."),
        ],
        SA: [
            _q(SA, "What are the three states of matter?", "Solid, liquid, and gas",
               "Matter can be solid like ice, liquid like water, or gas like steam."),
        ],
    },
    Subject.LANGUAGE_ARTS: {
        MC: [
            _q(MC, "Which word rhymes with 'cat'?", "hat",
               "Cat and hat both end with the 'at' sound.", ["dog", "hat", "bird", "fish"]),
            _q(MC, "What type of figurative language is: 'The stars danced in the sky'?",
               "Personification", "Personification gives human qualities to non-human things.",
               ["Simile", "Metaphor", "Personification", "Alliteration"]),
        ],
        TF: [
            _q(TF, "A sentence always starts with a capital letter.", "True",
               "Every sentence begins with a capital letter."),
        ],
    },
    Subject.HISTORY: {
        MC: [
            _q(MC, "Who was the first president of the United States?", "George Washington",
               "George Washington was the first U.S. president.",
               ["Abraham Lincoln", "George Washington", "Thomas Jefferson", "John Adams"]),
            _q(MC, "What was Ghana called before independence?", "Gold Coast",
               "Ghana was known as the Gold Coast during British colonial rule.",
               ["Gold Coast", "Ivory Coast", "Upper Volta", "British West Africa"]),
        ],
        FIB: [_q(FIB, "World War II ended in the year _____.", "1945", "World War II ended in 1945.")],
    },
    Subject.GEOGRAPHY: {
        MC: [
            _q(MC, "How many continents are there?", "7", "There are 7 continents on Earth.",
               ["5", "6", "7", "8"]),
        ],
        FIB: [_q(FIB, "The capital of France is _____.", "Paris", "Paris is the capital city of France.")],
    },
    Subject.ECONOMICS: {
        MC: [
            _q(MC, "What do we call things we really need?", "Needs",
               "Needs are things we must have to live, like food and water.",
               ["Wants", "Needs", "Toys", "Games"]),
            _q(MC, "What does GDP measure?", "Total economic output",
               "GDP measures the total value of goods and services produced in a country.",
               ["Government debt", "Total economic output", "Unemployment rate", "Inflation rate"]),
        ],
        TF: [
            _q(TF, "Money helps us trade more easily than bartering.", "True",
               "Money makes trading easier because everyone accepts it."),
        ],
        FIB: [
            _q(FIB, "Supply and _____ work together to determine price.", "demand",
               "Supply and demand together determine price."),
        ],
        SA: [
            _q(SA, "What is opportunity cost?",
               "The next best alternative you give up when making a choice",
               "Opportunity cost is what you miss out on when you choose one thing over another."),
        ],
    },
}


def fallback_pool(subject: Subject, question_type: QuestionType) -> list[Question]:
    """Canned questions for a subject and type, falling back to the general pool."""
    pool = SUBJECT_POOLS.get(subject, {}).get(question_type)
    return pool or GENERAL_POOL[question_type]


def fallback_question(
    question_type: QuestionType,
    difficulty: Difficulty,
    subject: Subject = Subject.GENERAL,
    slot: int = 0,
) -> Question:
    """
    Deterministic canned question for a slot.

    The same inputs always pick the same question; only the id is new.

    Args:
        question_type: Type the slot asked for
        difficulty: Difficulty the slot asked for
        subject: Subject of the request
        slot: Batch slot index, spreads picks across the pool

    Returns:
        A copy of the canned question with a fresh id
    """
    pool = fallback_pool(subject, question_type)
    canned = pool[slot % len(pool)]
    return canned.model_copy(
        update={
            "id": str(uuid.uuid4()),
            "difficulty": difficulty,
            "concepts_covered": [FALLBACK_CONCEPT],
        },
        deep=True,
    )
