from typing import Optional

from pydantic import BaseModel, Field


class ExplainRequest(BaseModel):
    code: str = Field(..., min_length=1, description="Selected code snippet")
    language: Optional[str] = None


class ExplainResponse(BaseModel):
    explanation: str
