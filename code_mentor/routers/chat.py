from fastapi import APIRouter, Depends

from code_mentor.core.deps import get_chat_service
from code_mentor.core.errors import LLMError
from code_mentor.models.chat import ChatRequest, ChatResponse
from code_mentor.services.chat_service import ChatService

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
def chat(body: ChatRequest, service: ChatService = Depends(get_chat_service)):
    try:
        text = service.reply(body.message, project_id=body.projectId, history=body.history)
    except LLMError as e:
        raise LLMError("Failed to generate response", details=e.details or e.message)
    return ChatResponse(response=text)
