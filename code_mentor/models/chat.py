from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Role(str, Enum):
    user = "user"
    assistant = "assistant"


class ChatTurn(BaseModel):
    role: Role
    text: str = Field(..., min_length=1)


class ChatRequest(BaseModel):
    projectId: Optional[str] = None
    message: str = Field(..., min_length=1)
    history: List[ChatTurn] = Field(
        default_factory=list,
        description="Earlier turns of the conversation, oldest first",
    )


class ChatResponse(BaseModel):
    response: str
