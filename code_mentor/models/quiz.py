from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class Difficulty(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class QuizQuestion(BaseModel):
    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=4, max_length=4)
    correctAnswer: int = Field(..., ge=0, le=3, description="Index of the correct option")
    explanation: str = ""


class QuizRequest(BaseModel):
    code: str = Field(..., min_length=1)
    language: str = "text"
    difficulty: Difficulty = Difficulty.beginner
    questionCount: int = Field(default=5, ge=1, le=20)
    fullFileAnalysis: bool = False


class QuizResponse(BaseModel):
    questions: List[QuizQuestion]
