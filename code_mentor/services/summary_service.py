import logging
from typing import Callable, List, Optional

from code_mentor.core.errors import LLMError
from code_mentor.services.llm import LLMClient
from code_mentor.services.storage import ProjectFile
from code_mentor.utils.text_utils import truncate

logger = logging.getLogger(__name__)

SUMMARY_FAILED = "Failed to analyze project. Please try again."

MAX_FILES = 10
MAX_CHARS_PER_FILE = 2000

_IMPORTANT_MARKERS = ("package.json", "readme", "requirements", "pyproject")
_IMPORTANT_SUFFIXES = (".js", ".ts", ".jsx", ".tsx", ".py")


def is_important(name: str) -> bool:
    lower = name.lower()
    return any(m in lower for m in _IMPORTANT_MARKERS) or lower.endswith(_IMPORTANT_SUFFIXES)


def build_summary_prompt(files: List[ProjectFile]) -> str:
    prompt = (
        "Analyze this project and provide a summary with the following information:\n"
        "1. Project overview in natural language\n"
        "2. Detected dependencies\n"
        "3. Tech stack used\n\n"
        "Here are the project files:"
    )
    selected = [f for f in files if is_important(f.name)][:MAX_FILES]
    for f in selected:
        prompt += f"\n\nFile: {f.name}\n{truncate(f.content, MAX_CHARS_PER_FILE)}"
    return prompt


class ProjectSummarizer:
    def __init__(
        self,
        llm: LLMClient,
        max_retries: int = 3,
        base_delay: float = 1.0,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.llm = llm
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._sleep = sleep

    def summarize(self, files: List[ProjectFile]) -> str:
        """
        Free-text summary of the project. Never raises: a failed analysis
        must not fail the upload.
        """
        if not self.llm.configured:
            logger.warning("Skipping project analysis: LLM API key is not configured")
            return SUMMARY_FAILED

        prompt = build_summary_prompt(files)
        kwargs = {"retries": self.max_retries, "base_delay": self.base_delay}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        try:
            return self.llm.complete_with_backoff(prompt, **kwargs)
        except LLMError as e:
            logger.error("Error analyzing project: %s (%s)", e.message, e.details)
            return SUMMARY_FAILED
