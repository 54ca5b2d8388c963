import json

import httpx
import pytest

from code_mentor.cache import MemoryStore
from code_mentor.client import ClientError, CodeMentorClient, QuizSession
from code_mentor.models.quiz import QuizQuestion
from tests.conftest import FAKE_AUDIO, make_zip

RACHEL = "21m00Tcm4TlvDq8ikWAM"


class Clock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def mentor(test_client, clock):
    with CodeMentorClient(http=test_client, store=MemoryStore(), clock=clock) as client:
        yield client


def _question(answer):
    return QuizQuestion(question="Q?", options=["a", "b", "c", "d"], correctAnswer=answer, explanation="because")


class TestQuizSession:
    def test_scoring(self):
        session = QuizSession(questions=[_question(0), _question(2)])
        assert session.current.correctAnswer == 0

        first = session.answer(0)
        assert first.is_correct
        second = session.answer(1)
        assert not second.is_correct
        assert second.correct_index == 2
        assert second.explanation == "because"

        assert session.finished
        assert session.current is None
        assert session.score == 1
        assert session.answers == {0: 0, 1: 1}

    def test_invalid_choice(self):
        session = QuizSession(questions=[_question(0)])
        with pytest.raises(ValueError):
            session.answer(4)
        assert session.index == 0

    def test_answer_after_finish(self):
        session = QuizSession(questions=[])
        assert session.finished
        with pytest.raises(ValueError):
            session.answer(0)


class TestExplain:
    def test_second_call_is_served_from_cache(self, mentor, fake_openai):
        fake_openai.queue("Adds two numbers.")
        first = mentor.explain("a + b", "python")
        second = mentor.explain("a + b", "python")
        assert (first.text, first.cached) == ("Adds two numbers.", False)
        assert (second.text, second.cached) == ("Adds two numbers.", True)
        assert len(fake_openai.calls) == 1

    def test_expired_entry_is_refetched(self, mentor, fake_openai, clock):
        fake_openai.queue("v1", "v2")
        mentor.explain("a + b", "python")
        clock.now += 7 * 24 * 60 * 60 + 1
        again = mentor.explain("a + b", "python")
        assert (again.text, again.cached) == ("v2", False)


class TestNarrate:
    def test_audio_is_cached_per_voice(self, mentor, tts_requests):
        first = mentor.narrate("Hello there")
        second = mentor.narrate("Hello there ")
        assert first.audio == FAKE_AUDIO
        assert not first.cached
        assert second.cached
        assert second.audio == FAKE_AUDIO
        assert len(tts_requests) == 1

        mentor.set_voice(RACHEL)
        other = mentor.narrate("Hello there")
        assert not other.cached
        assert other.voice_id == RACHEL
        assert len(tts_requests) == 2

    def test_set_voice_rejects_unknown(self, mentor):
        with pytest.raises(ValueError):
            mentor.set_voice("nobody")


class TestProjects:
    def test_upload_browse_and_read(self, mentor, fake_openai, tmp_path):
        archive = tmp_path / "demo.zip"
        archive.write_bytes(make_zip({"app.py": "print('hi')\n", "lib/util.js": "export {}\n"}))
        fake_openai.queue("Demo summary")

        upload = mentor.upload_zip(str(archive))
        assert upload.fileCount == 2
        assert upload.summary == "Demo summary"

        tree = mentor.file_tree(upload.projectId)
        assert [n.name for n in tree] == ["lib", "app.py"]
        assert tree[0].children[0].path == "lib/util.js"

        content = mentor.file_content(upload.projectId, "app.py")
        assert content.language == "python"
        assert content.content == "print('hi')\n"

    def test_server_errors_become_client_errors(self, mentor):
        with pytest.raises(ClientError) as exc:
            mentor.file_tree("nope")
        assert exc.value.status_code == 400
        assert exc.value.message == "Invalid project ID format"


def test_generate_quiz_returns_session(mentor, fake_openai):
    q = {"question": "Q?", "options": ["a", "b", "c", "d"], "correctAnswer": 3, "explanation": ""}
    fake_openai.queue(json.dumps({"questions": [q, q]}))
    session = mentor.generate_quiz("x = 1", "python", question_count=2)
    assert session.total == 2
    assert session.answer(3).is_correct


def test_chat_and_translate(mentor, fake_openai):
    fake_openai.queue("Sure.", "Claro.")
    assert mentor.chat("Can you help?") == "Sure."
    assert mentor.translate("Sure.", "en") == "Sure."
    assert mentor.translate("Sure.", "es") == "Claro."
    assert len(fake_openai.calls) == 2


def test_clear_cache(mentor, fake_openai):
    mentor.explain("x", "python")
    mentor.narrate("x")
    assert mentor.clear_cache() == 2
    assert list(mentor.store.keys()) == []


def test_non_object_error_body(clock):
    def handler(request):
        return httpx.Response(502, json=["bad", "gateway"])

    transport = httpx.MockTransport(handler)
    with httpx.Client(base_url="http://mentor", transport=transport) as http, CodeMentorClient(http=http, clock=clock) as client:
        with pytest.raises(ClientError) as exc:
            client.voices()
    assert exc.value.status_code == 502
    assert "gateway" in exc.value.message
