import io
import zipfile
from types import SimpleNamespace
from typing import Dict, List, Union

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from code_mentor.core import deps
from code_mentor.core.config import get_settings
from code_mentor.core.deps import get_llm_client, get_speech_client
from code_mentor.main import create_app
from code_mentor.services.llm import LLMClient
from code_mentor.services.speech import SpeechClient

FAKE_AUDIO = b"ID3-fake-mp3-bytes"


class FakeOpenAI:
    """
    Stands in for openai.OpenAI: replies are served in order, exceptions
    are raised, and the default reply is "ok".
    """

    def __init__(self) -> None:
        self.replies: List[Union[str, Exception]] = []
        self.calls: List[dict] = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def queue(self, *replies: Union[str, Exception]) -> None:
        self.replies.extend(replies)

    @property
    def last_prompt(self) -> str:
        return self.calls[-1]["messages"][-1]["content"]

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0) if self.replies else "ok"
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


def rate_limit_error() -> openai.RateLimitError:
    response = httpx.Response(429, request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    return openai.RateLimitError("Rate limit reached", response=response, body=None)


def api_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))


def make_zip(entries: Dict[str, Union[str, bytes]], dirs: List[str] = ()) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for d in dirs:
            zf.writestr(d if d.endswith("/") else d + "/", b"")
        for name, content in entries.items():
            zf.writestr(name, content)
    return buf.getvalue()


@pytest.fixture(scope="session")
def projects_dir(tmp_path_factory):
    return tmp_path_factory.mktemp("projects")


@pytest.fixture(scope="session")
def app(projects_dir):
    """
    App built against a temporary PROJECTS_PATH, with the environment forced
    for the whole session.
    """
    with pytest.MonkeyPatch.context() as mp:
        mp.setenv("APP_ENV", "test")
        mp.setenv("APP_NAME", "Code Mentor API (tests)")
        mp.setenv("PROJECTS_PATH", str(projects_dir))
        mp.setenv("MAX_UPLOAD_MB", "2")  # low limit for tests
        mp.setenv("CORS_ORIGINS", "http://localhost")
        mp.setenv("API_KEY", "")
        mp.setenv("OPENAI_API_KEY", "")
        mp.setenv("ELEVENLABS_API_KEY", "")
        mp.setenv("SUMMARY_RETRY_BASE_DELAY", "0")

        # settings are cached: drop the cache so the env above is used
        get_settings.cache_clear()
        yield create_app()
    get_settings.cache_clear()


@pytest.fixture
def fake_openai():
    return FakeOpenAI()


@pytest.fixture
def tts_requests():
    return []


@pytest.fixture
def speech_client(tts_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        tts_requests.append(request)
        return httpx.Response(200, content=FAKE_AUDIO, headers={"content-type": "audio/mpeg"})

    return SpeechClient(api_key="test-key", transport=httpx.MockTransport(handler))


@pytest.fixture
def test_client(app, fake_openai, speech_client):
    app.dependency_overrides[get_llm_client] = lambda: LLMClient(model="test-model", client=fake_openai)
    app.dependency_overrides[get_speech_client] = lambda: speech_client
    deps._translations.clear()
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def uploaded_project(test_client, fake_openai):
    """A small project uploaded as ZIP; returns its id."""
    fake_openai.queue("A tiny demo project.")
    data = make_zip(
        {
            "README.md": "# Demo\n",
            "package.json": '{"name": "demo"}',
            "src/index.js": "console.log('hi');\n",
            "src/utils/math.py": "def add(a, b):\n    return a + b\n",
            "node_modules/left-pad/index.js": "module.exports = 1;\n",
            ".git/HEAD": "ref: refs/heads/main\n",
            "dist/bundle.min.js": "!function(){}();",
        },
        dirs=["src/", "empty/"],
    )
    r = test_client.post(
        "/api/upload-project",
        data={"uploadType": "zip"},
        files={"file": ("demo.zip", data, "application/zip")},
    )
    assert r.status_code == 200, r.text
    return r.json()["projectId"]
