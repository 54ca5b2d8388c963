import logging
from typing import Dict, Optional, Tuple

from code_mentor.core.errors import InvalidRequest, LLMError
from code_mentor.services.llm import LLMClient
from code_mentor.utils.text_utils import normalize_text

logger = logging.getLogger(__name__)

LANGUAGES: Dict[str, str] = {
    "en": "English",
    "hi": "Hindi",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "ar": "Arabic",
    "ru": "Russian",
}


class Translator:
    """
    LLM-backed translation with an in-process cache.
    A failed translation returns the original text.
    """

    def __init__(self, llm: LLMClient, cache: Optional[Dict[Tuple[str, str], str]] = None):
        self.llm = llm
        self._cache = cache if cache is not None else {}

    def translate(self, text: str, target: str) -> str:
        if target not in LANGUAGES:
            raise InvalidRequest(f"Unsupported language: {target}")
        if target == "en" or not text.strip():
            return text

        source = normalize_text(text)
        key = (target, source)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Using cached translation (%s)", target)
            return cached

        prompt = (
            f"Translate the following text to {LANGUAGES[target]}. "
            f"Provide only the translated text without any explanations or additional content:\n\n{source}"
        )
        try:
            translated = self.llm.complete(prompt).strip()
        except LLMError as e:
            logger.error("Translation error (%s): %s", target, e.details or e.message)
            return text

        self._cache[key] = translated
        return translated
