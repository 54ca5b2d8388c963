"""
HTTP client for the Code Mentor API.

It plays the front end's part: explanations and narrations are looked up in
the local cache before any request is made, and quizzes are held as a
QuizSession while the user answers them.
"""
import base64
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx

from code_mentor.cache import AudioCache, ExplanationCache, MemoryStore, clear_all
from code_mentor.core.config import get_settings
from code_mentor.models.projects import FileContentResponse, FileNode, UploadResponse
from code_mentor.models.quiz import QuizQuestion
from code_mentor.models.visual import Visualization
from code_mentor.services.speech import VOICE_OPTIONS

logger = logging.getLogger(__name__)


class ClientError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


@dataclass
class Explanation:
    text: str
    cached: bool


@dataclass
class Narration:
    audio: bytes
    mime_type: str
    voice_id: str
    cached: bool


@dataclass
class AnswerResult:
    is_correct: bool
    correct_index: int
    explanation: str


@dataclass
class QuizSession:
    """Answers are kept here only; the server never sees them."""

    questions: List[QuizQuestion]
    index: int = 0
    score: int = 0
    answers: Dict[int, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def finished(self) -> bool:
        return self.index >= self.total

    @property
    def current(self) -> Optional[QuizQuestion]:
        return None if self.finished else self.questions[self.index]

    def answer(self, choice: int) -> AnswerResult:
        if self.finished:
            raise ValueError("Quiz is already finished")
        q = self.questions[self.index]
        if not 0 <= choice < len(q.options):
            raise ValueError(f"Invalid choice index: {choice}")

        is_correct = choice == q.correctAnswer
        if is_correct:
            self.score += 1
        self.answers[self.index] = choice
        self.index += 1
        return AnswerResult(is_correct=is_correct, correct_index=q.correctAnswer, explanation=q.explanation)


def _decode_data_url(url: str) -> bytes:
    _, _, payload = url.partition(";base64,")
    if not payload:
        raise ClientError(0, "Malformed audio data URL")
    return base64.b64decode(payload)


class CodeMentorClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        store=None,
        ttl: Optional[float] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 120.0,
        api_key: Optional[str] = None,
        voice_id: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        settings = get_settings()
        ttl = settings.CACHE_TTL_SECONDS if ttl is None else ttl
        headers = {"x-api-key": api_key} if api_key else None
        self._owns_http = http is None
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout, headers=headers)
        self.store = store if store is not None else MemoryStore()
        self.explanations = ExplanationCache(self.store, ttl=ttl, clock=clock)
        self.audio = AudioCache(self.store, ttl=ttl, clock=clock)
        self.voice_id = voice_id or settings.DEFAULT_VOICE_ID

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "CodeMentorClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            resp = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ClientError(0, str(e))
        if resp.is_error:
            try:
                body = resp.json()
            except ValueError:
                body = None
            message = body.get("error") if isinstance(body, dict) else None
            raise ClientError(resp.status_code, message or resp.text or resp.reason_phrase)
        return resp.json()

    # ---------- settings ----------

    def set_voice(self, voice_id: str) -> None:
        if voice_id not in VOICE_OPTIONS:
            raise ValueError(f"Invalid voice ID: {voice_id}")
        self.voice_id = voice_id
        logger.info("Voice set to %s (%s)", VOICE_OPTIONS[voice_id], voice_id)

    def voices(self) -> Dict[str, str]:
        return self._request("GET", "/api/voices")["voices"]

    def languages(self) -> Dict[str, str]:
        return self._request("GET", "/api/languages")["languages"]

    # ---------- projects ----------

    def upload_zip(self, path: str) -> UploadResponse:
        p = Path(path)
        with p.open("rb") as f:
            data = self._request(
                "POST",
                "/api/upload-project",
                data={"uploadType": "zip"},
                files={"file": (p.name, f, "application/zip")},
            )
        return UploadResponse.model_validate(data)

    def upload_git(self, repo_url: str) -> UploadResponse:
        data = self._request("POST", "/api/upload-project", data={"uploadType": "git", "repoUrl": repo_url})
        return UploadResponse.model_validate(data)

    def file_tree(self, project_id: str, beginner: bool = False) -> List[FileNode]:
        data = self._request(
            "GET",
            f"/api/project-files/{project_id}",
            params={"beginner": "true" if beginner else "false"},
        )
        return [FileNode.model_validate(n) for n in data["files"]]

    def file_content(self, project_id: str, path: str) -> FileContentResponse:
        data = self._request("GET", f"/api/file-content/{project_id}", params={"path": path})
        return FileContentResponse.model_validate(data)

    # ---------- AI ----------

    def chat(self, message: str, project_id: Optional[str] = None, history: Optional[List[dict]] = None) -> str:
        body = {"message": message, "projectId": project_id, "history": history or []}
        return self._request("POST", "/api/chat", json=body)["response"]

    def explain(self, code: str, language: str) -> Explanation:
        hit = self.explanations.get(code, language)
        if hit is not None:
            logger.debug("Using cached explanation")
            return Explanation(text=hit.explanation, cached=True)

        data = self._request("POST", "/api/explain-code", json={"code": code, "language": language})
        self.explanations.put(code, language, data["explanation"])
        return Explanation(text=data["explanation"], cached=False)

    def narrate(self, text: str, language: str = "en", voice_id: Optional[str] = None) -> Narration:
        voice_id = voice_id or self.voice_id
        text = text.strip()
        hit = self.audio.get(text, language, voice_id)
        if hit is not None:
            logger.debug("Using cached audio")
            return Narration(
                audio=base64.b64decode(hit.audioBase64),
                mime_type=hit.mimeType,
                voice_id=voice_id,
                cached=True,
            )

        data = self._request(
            "POST",
            "/api/text-to-speech",
            json={"text": text, "language": language, "voiceId": voice_id},
        )
        audio = _decode_data_url(data["audioUrl"])
        self.audio.put(text, language, voice_id, base64.b64encode(audio).decode("ascii"), data["mimeType"])
        return Narration(audio=audio, mime_type=data["mimeType"], voice_id=voice_id, cached=False)

    def generate_quiz(
        self,
        code: str,
        language: str,
        difficulty: str = "beginner",
        question_count: int = 5,
        full_file_analysis: bool = False,
    ) -> QuizSession:
        body = {
            "code": code,
            "language": language,
            "difficulty": difficulty,
            "questionCount": question_count,
            "fullFileAnalysis": full_file_analysis,
        }
        data = self._request("POST", "/api/generate-quiz", json=body)
        return QuizSession(questions=[QuizQuestion.model_validate(q) for q in data["questions"]])

    def visualize(self, code: str, language: str) -> Visualization:
        data = self._request("POST", "/api/generate-visual", json={"code": code, "language": language})
        return Visualization.model_validate(data)

    def translate(self, text: str, language: str) -> str:
        if language == "en":
            return text
        data = self._request("POST", "/api/translate", json={"text": text, "targetLanguage": language})
        return data["translatedText"]

    def clear_cache(self) -> int:
        return clear_all(self.store)
