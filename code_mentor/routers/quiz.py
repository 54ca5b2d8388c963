from fastapi import APIRouter, Depends

from code_mentor.core.deps import get_quiz_service
from code_mentor.models.quiz import QuizRequest, QuizResponse
from code_mentor.services.quiz_service import QuizService

router = APIRouter(prefix="/api", tags=["quiz"])


@router.post("/generate-quiz", response_model=QuizResponse)
def generate_quiz(body: QuizRequest, service: QuizService = Depends(get_quiz_service)):
    questions = service.generate(
        body.code,
        language=body.language,
        difficulty=body.difficulty,
        question_count=body.questionCount,
        full_file_analysis=body.fullFileAnalysis,
    )
    return QuizResponse(questions=questions)
