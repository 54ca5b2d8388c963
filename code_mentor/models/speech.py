from typing import Dict, Optional

from pydantic import BaseModel, Field


class SpeechRequest(BaseModel):
    text: str = Field(..., min_length=1)
    language: str = "en"
    voiceId: Optional[str] = None


class SpeechResponse(BaseModel):
    audioUrl: str = Field(..., description="data: URL holding the base64 audio")
    mimeType: str
    voiceId: str
    text: str = Field(..., description="Text actually spoken (after translation)")


class VoicesResponse(BaseModel):
    voices: Dict[str, str]
    default: str


class TranslateRequest(BaseModel):
    text: str = Field(..., min_length=1)
    targetLanguage: str = Field(..., min_length=2)


class TranslateResponse(BaseModel):
    translatedText: str
    language: str


class LanguagesResponse(BaseModel):
    languages: Dict[str, str]
