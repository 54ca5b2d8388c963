import json
import re
import unicodedata
from typing import Any, Dict

from code_mentor.core.errors import ResponseParseError

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_FENCED_ANY = re.compile(r"```\s*([\s\S]*?)\s*```")
_BRACES = re.compile(r"\{[\s\S]*\}")


def normalize_text(text: str) -> str:
    """
    Trim, NFKC-normalize and collapse whitespace.
    """
    if not text:
        return ""
    text = text.strip()
    text = unicodedata.normalize("NFKC", text)
    text = re.sub(r"\s+", " ", text)
    return text


def truncate(text: str, limit: int) -> str:
    if limit <= 0:
        return ""
    return text if len(text) <= limit else text[:limit]


def _candidates(text: str):
    for pattern in (_FENCED_JSON, _FENCED_ANY):
        m = pattern.search(text)
        if m:
            yield m.group(1)
    m = _BRACES.search(text)
    if m:
        yield m.group(0)
    yield text


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Locate a JSON object in a model reply.

    Models often wrap JSON in markdown fences or surround it with prose, so we
    try a ```json block, any fenced block, the outermost {...} span and
    finally the raw text.
    """
    if not text or not text.strip():
        raise ResponseParseError("Empty response from model")

    last_error = None
    for candidate in _candidates(text):
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError as e:
            last_error = e
            continue
        if isinstance(data, dict):
            return data
        last_error = ValueError("JSON is not an object")

    raise ResponseParseError("Could not extract JSON from response", details=str(last_error))
