from functools import lru_cache
from typing import Dict, Tuple

from fastapi import Depends

from code_mentor.core.config import Settings, get_settings
from code_mentor.services.chat_service import ChatService
from code_mentor.services.explain_service import ExplainService
from code_mentor.services.llm import LLMClient
from code_mentor.services.quiz_service import QuizService
from code_mentor.services.speech import SpeechClient
from code_mentor.services.storage import ProjectStore
from code_mentor.services.summary_service import ProjectSummarizer
from code_mentor.services.translation import Translator
from code_mentor.services.visual_service import VisualService

# translations outlive a request
_translations: Dict[Tuple[str, str], str] = {}


def get_settings_dep() -> Settings:
    return get_settings()


def get_project_store() -> ProjectStore:
    """
    Provides the project store (DI).
    """
    settings = get_settings()
    return ProjectStore(
        base_path=settings.PROJECTS_PATH,
        max_file_bytes=settings.MAX_FILE_BYTES,
        clone_timeout=settings.GIT_CLONE_TIMEOUT,
    )


@lru_cache
def _llm_client(api_key: str, model: str, temperature: float) -> LLMClient:
    return LLMClient(api_key=api_key, model=model, temperature=temperature)


def get_llm_client() -> LLMClient:
    settings = get_settings()
    return _llm_client(settings.OPENAI_API_KEY, settings.OPENAI_MODEL, settings.LLM_TEMPERATURE)


def get_speech_client() -> SpeechClient:
    settings = get_settings()
    return SpeechClient(
        api_key=settings.ELEVENLABS_API_KEY,
        base_url=settings.ELEVENLABS_API_URL,
        model=settings.ELEVENLABS_MODEL,
        default_voice=settings.DEFAULT_VOICE_ID,
    )


def get_summarizer(llm: LLMClient = Depends(get_llm_client)) -> ProjectSummarizer:
    settings = get_settings()
    return ProjectSummarizer(
        llm,
        max_retries=settings.SUMMARY_MAX_RETRIES,
        base_delay=settings.SUMMARY_RETRY_BASE_DELAY,
    )


def get_chat_service(
    llm: LLMClient = Depends(get_llm_client),
    store: ProjectStore = Depends(get_project_store),
) -> ChatService:
    return ChatService(llm, store)


def get_explain_service(llm: LLMClient = Depends(get_llm_client)) -> ExplainService:
    return ExplainService(llm)


def get_quiz_service(llm: LLMClient = Depends(get_llm_client)) -> QuizService:
    return QuizService(llm)


def get_visual_service(llm: LLMClient = Depends(get_llm_client)) -> VisualService:
    return VisualService(llm)


def get_translator(llm: LLMClient = Depends(get_llm_client)) -> Translator:
    return Translator(llm, cache=_translations)
