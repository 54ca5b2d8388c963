import logging
import time
from typing import Any, Callable, Dict, List, Optional

from openai import OpenAI, OpenAIError, RateLimitError

from code_mentor.core.errors import LLMError, LLMRateLimitError
from code_mentor.core.logging import log_duration

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Thin wrapper over the OpenAI chat completions API.
    Every AI feature goes through complete(); errors come out as LLMError.
    """

    def __init__(
        self,
        api_key: str = "",
        model: str = "gpt-4o-mini",
        temperature: float = 0.2,
        client: Any = None,
    ):
        self.model = model
        self.temperature = temperature
        self._client = client
        if self._client is None and api_key:
            self._client = OpenAI(api_key=api_key)

    @property
    def configured(self) -> bool:
        return self._client is not None

    def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        json_mode: bool = False,
        max_tokens: Optional[int] = None,
    ) -> str:
        if self._client is None:
            raise LLMError("LLM API key is not configured")

        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        try:
            with log_duration("llm_request", logger, model=self.model, json_mode=json_mode):
                comp = self._client.chat.completions.create(**kwargs)
        except RateLimitError as e:
            raise LLMRateLimitError(details=str(e))
        except OpenAIError as e:
            raise LLMError(details=str(e))

        text = (comp.choices[0].message.content or "").strip()
        if not text:
            raise LLMError("Empty response from model")
        return text

    def complete_with_backoff(
        self,
        prompt: str,
        retries: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        **kwargs,
    ) -> str:
        """
        complete() that retries on rate limiting, waiting base_delay * 2**attempt
        between attempts. Gives up after `retries` retries.
        """
        attempt = 0
        while True:
            try:
                return self.complete(prompt, **kwargs)
            except LLMRateLimitError:
                if attempt >= retries:
                    raise
                delay = base_delay * (2 ** attempt)
                logger.warning("Rate limit exceeded, retrying in %.1fs (attempt %d/%d)", delay, attempt + 1, retries)
                sleep(delay)
                attempt += 1
