from typing import Optional

from code_mentor.services.llm import LLMClient

EXPLAIN_PROMPT = (
    "Explain this code concisely in 2-3 short paragraphs. Be direct, clear, and to the point. "
    "Focus only on the most important aspects. Use simple language and avoid unnecessary details:"
)


class ExplainService:
    def __init__(self, llm: LLMClient):
        self.llm = llm

    def explain(self, code: str, language: Optional[str] = None) -> str:
        header = EXPLAIN_PROMPT
        if language:
            header += f"\n\nLanguage: {language}"
        return self.llm.complete(f"{header}\n\n{code}")
