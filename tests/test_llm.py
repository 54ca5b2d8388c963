import pytest

from code_mentor.core.errors import LLMError, LLMRateLimitError, ResponseParseError
from code_mentor.services.llm import LLMClient
from code_mentor.services.storage import ProjectFile
from code_mentor.services.summary_service import (
    SUMMARY_FAILED,
    ProjectSummarizer,
    build_summary_prompt,
    is_important,
)
from code_mentor.utils.text_utils import extract_json_object, normalize_text, truncate
from tests.conftest import FakeOpenAI, api_error, rate_limit_error


def _llm(*replies):
    fake = FakeOpenAI()
    fake.queue(*replies)
    return LLMClient(model="test-model", temperature=0.3, client=fake), fake


class TestComplete:
    def test_sends_system_and_user_messages(self):
        llm, fake = _llm("  hello  ")
        assert llm.complete("hi", system="be nice") == "hello"
        call = fake.calls[0]
        assert call["model"] == "test-model"
        assert call["temperature"] == 0.3
        assert call["messages"] == [
            {"role": "system", "content": "be nice"},
            {"role": "user", "content": "hi"},
        ]
        assert "response_format" not in call

    def test_json_mode(self):
        llm, fake = _llm("{}")
        llm.complete("give json", json_mode=True)
        assert fake.calls[0]["response_format"] == {"type": "json_object"}

    def test_not_configured(self):
        llm = LLMClient(api_key="")
        assert not llm.configured
        with pytest.raises(LLMError):
            llm.complete("hi")

    def test_rate_limit_is_mapped(self):
        llm, _ = _llm(rate_limit_error())
        with pytest.raises(LLMRateLimitError):
            llm.complete("hi")

    def test_api_error_is_mapped(self):
        llm, _ = _llm(api_error())
        with pytest.raises(LLMError) as exc:
            llm.complete("hi")
        assert not isinstance(exc.value, LLMRateLimitError)

    def test_empty_reply(self):
        llm, _ = _llm("   ")
        with pytest.raises(LLMError):
            llm.complete("hi")


class TestBackoff:
    def test_retries_with_exponential_delays(self):
        llm, fake = _llm(rate_limit_error(), rate_limit_error(), "done")
        delays = []
        assert llm.complete_with_backoff("hi", retries=3, base_delay=1.0, sleep=delays.append) == "done"
        assert delays == [1.0, 2.0]
        assert len(fake.calls) == 3

    def test_gives_up_after_retries(self):
        llm, fake = _llm(*[rate_limit_error() for _ in range(4)])
        delays = []
        with pytest.raises(LLMRateLimitError):
            llm.complete_with_backoff("hi", retries=3, base_delay=0.5, sleep=delays.append)
        assert delays == [0.5, 1.0, 2.0]
        assert len(fake.calls) == 4

    def test_other_errors_are_not_retried(self):
        llm, fake = _llm(api_error(), "never")
        with pytest.raises(LLMError):
            llm.complete_with_backoff("hi", sleep=lambda _: None)
        assert len(fake.calls) == 1


class TestSummary:
    def test_prompt_keeps_important_files_only(self):
        files = [ProjectFile(name=f"src/mod{i}.py", content="x" * 5000) for i in range(12)]
        files.insert(0, ProjectFile(name="image.svg", content="<svg/>"))
        prompt = build_summary_prompt(files)

        assert "image.svg" not in prompt
        assert prompt.count("File: ") == 10
        assert "x" * 2001 not in prompt

    def test_important_names(self):
        assert is_important("README.md")
        assert is_important("backend/requirements-dev.txt")
        assert is_important("web/App.TSX")
        assert not is_important("styles.css")

    def test_rate_limited_then_recovers(self):
        llm, _ = _llm(rate_limit_error(), "Summary")
        delays = []
        summarizer = ProjectSummarizer(llm, max_retries=3, base_delay=1.0, sleep=delays.append)
        assert summarizer.summarize([ProjectFile("main.py", "print(1)")]) == "Summary"
        assert delays == [1.0]

    def test_unconfigured_llm_is_not_called(self, monkeypatch):
        llm = LLMClient(api_key="")
        monkeypatch.setattr(llm, "complete", lambda *a, **kw: pytest.fail("complete() called"))
        assert ProjectSummarizer(llm).summarize([ProjectFile("main.py", "print(1)")]) == SUMMARY_FAILED

    def test_exhausted_retries_fall_back(self):
        llm, _ = _llm(*[rate_limit_error() for _ in range(3)])
        summarizer = ProjectSummarizer(llm, max_retries=2, base_delay=0, sleep=lambda _: None)
        assert summarizer.summarize([]) == SUMMARY_FAILED


class TestExtractJson:
    def test_fenced_json(self):
        text = 'Sure!\n```json\n{"a": 1}\n```\nEnjoy.'
        assert extract_json_object(text) == {"a": 1}

    def test_plain_fence(self):
        assert extract_json_object('```\n{"a": 2}\n```') == {"a": 2}

    def test_braces_in_prose(self):
        assert extract_json_object('Here you go: {"a": {"b": 3}} hope it helps') == {"a": {"b": 3}}

    @pytest.mark.parametrize("text", ["", "   ", "no json here", "[1, 2, 3]"])
    def test_failures(self, text):
        with pytest.raises(ResponseParseError):
            extract_json_object(text)


def test_truncate():
    assert truncate("abcdef", 3) == "abc"
    assert truncate("ab", 3) == "ab"
    assert truncate("ab", 0) == ""


def test_normalize_text():
    assert normalize_text("  a\n\n b\t c  ") == "a b c"
    # NFKC folds full-width characters
    assert normalize_text("ＡＢＣ１") == "ABC1"
    assert normalize_text("") == ""
