from fastapi import APIRouter, Depends

from code_mentor.core.deps import get_explain_service
from code_mentor.core.errors import LLMError
from code_mentor.models.explain import ExplainRequest, ExplainResponse
from code_mentor.services.explain_service import ExplainService

router = APIRouter(prefix="/api", tags=["explain"])


@router.post("/explain-code", response_model=ExplainResponse)
def explain_code(body: ExplainRequest, service: ExplainService = Depends(get_explain_service)):
    try:
        explanation = service.explain(body.code, body.language)
    except LLMError as e:
        raise LLMError("Failed to explain code snippet", details=e.details or e.message)
    return ExplainResponse(explanation=explanation)
