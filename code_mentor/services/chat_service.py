import logging
from typing import List, Optional

from code_mentor.core.errors import CodeMentorError
from code_mentor.models.chat import ChatTurn
from code_mentor.services.llm import LLMClient
from code_mentor.services.storage import ProjectStore
from code_mentor.utils.text_utils import normalize_text

logger = logging.getLogger(__name__)

MAX_CONTEXT_FILES = 50

SYSTEM = (
    "You are a helpful coding mentor assistant. Provide a clear, concise, and helpful response. "
    "If you're explaining code concepts, use simple language and examples."
)


class ChatService:
    """
    Mentor chat. When the project exists, its file list is given to the model
    as context; the project itself is never required.
    """

    def __init__(self, llm: LLMClient, store: Optional[ProjectStore] = None):
        self.llm = llm
        self.store = store

    def _file_context(self, project_id: Optional[str]) -> List[str]:
        if not project_id or self.store is None:
            return []
        try:
            root = self.store.project_root(project_id)
        except CodeMentorError:
            return []
        return self.store.list_file_paths(root, limit=MAX_CONTEXT_FILES)

    def build_prompt(
        self,
        message: str,
        project_id: Optional[str] = None,
        history: Optional[List[ChatTurn]] = None,
    ) -> str:
        lines = ["Answer the following question about the project:", ""]
        if project_id:
            lines.append(f"Project ID: {project_id}")
        files = self._file_context(project_id)
        if files:
            lines.append("Project files: " + ", ".join(files))
        if history:
            lines.append("")
            lines.append("Conversation so far:")
            for turn in history:
                lines.append(f"{turn.role.value}: {turn.text}")
        lines.append("")
        lines.append(f"User Question: {normalize_text(message)}")
        return "\n".join(lines)

    def reply(
        self,
        message: str,
        project_id: Optional[str] = None,
        history: Optional[List[ChatTurn]] = None,
    ) -> str:
        prompt = self.build_prompt(message, project_id, history)
        return self.llm.complete(prompt, system=SYSTEM)
