import logging
from typing import List

from pydantic import ValidationError

from code_mentor.core.errors import LLMError, ResponseParseError
from code_mentor.models.quiz import Difficulty, QuizQuestion
from code_mentor.services.llm import LLMClient
from code_mentor.utils.text_utils import extract_json_object

logger = logging.getLogger(__name__)

SYSTEM = (
    "You are an expert coding instructor who writes reliable, unambiguous "
    "multiple-choice questions. Each question has exactly 4 options and ONE correct answer."
)

TOPICS = [
    "The purpose and functionality of the code",
    "Key concepts demonstrated in the code",
    "Potential bugs or edge cases",
    "Design patterns and architectural decisions",
    "Best practices and code quality aspects",
    "Performance considerations",
    "Security implications (if applicable)",
]


def build_quiz_prompt(code: str, language: str, difficulty: Difficulty, n: int, full_file: bool) -> str:
    scope = (
        "Analyze the ENTIRE file thoroughly, not just specific snippets. "
        "Cover all important concepts, patterns, and functionality in the file."
        if full_file
        else "Focus on the most important aspects of the code."
    )
    topics = "\n".join(f"{i}. {t}" for i, t in enumerate(TOPICS, start=1))
    return (
        "Generate a comprehensive quiz based on the following code.\n"
        f"The quiz should be suitable for {difficulty.value} level programmers.\n\n"
        f"Code ({language}):\n```{language}\n{code}\n```\n\n"
        f"{scope}\n\n"
        f"Create {n} multiple-choice questions that test understanding of:\n{topics}\n\n"
        "Return the response as a JSON object with this structure:\n"
        '{"questions": [{"question": "Question text", '
        '"options": ["Option A", "Option B", "Option C", "Option D"], '
        '"correctAnswer": 0, "explanation": "Why this answer is correct"}]}\n'
        "correctAnswer is the index (0-3) of the correct option.\n\n"
        f"IMPORTANT: Generate EXACTLY {n} questions covering different aspects of the code."
    )


def parse_quiz(text: str) -> List[QuizQuestion]:
    """
    Questions from a model reply. Malformed questions are dropped; an empty
    result is an error.
    """
    try:
        data = extract_json_object(text)
    except ResponseParseError as e:
        logger.error("Error parsing quiz data: %s; response starts with %r", e.details, text[:200])
        raise ResponseParseError("Failed to parse quiz data. Please try again.", details=e.message)

    raw = data.get("questions")
    if not isinstance(raw, list) or not raw:
        raise ResponseParseError("Invalid quiz data structure. Please try again.")

    questions: List[QuizQuestion] = []
    for item in raw:
        try:
            questions.append(QuizQuestion.model_validate(item))
        except ValidationError as e:
            logger.warning("Dropping malformed quiz question: %s", e.errors()[:1])

    if not questions:
        raise ResponseParseError("Invalid quiz data structure. Please try again.")
    return questions


class QuizService:
    def __init__(self, llm: LLMClient):
        self.llm = llm

    def generate(
        self,
        code: str,
        language: str = "text",
        difficulty: Difficulty = Difficulty.beginner,
        question_count: int = 5,
        full_file_analysis: bool = False,
    ) -> List[QuizQuestion]:
        logger.info(
            "Generating quiz for %s code, difficulty=%s, questions=%d, full_file=%s",
            language, difficulty.value, question_count, full_file_analysis,
        )
        prompt = build_quiz_prompt(code, language, difficulty, question_count, full_file_analysis)
        try:
            text = self.llm.complete(prompt, system=SYSTEM, json_mode=True)
        except LLMError as e:
            raise LLMError("Failed to generate quiz. API error.", details=e.details or e.message)
        return parse_quiz(text)
