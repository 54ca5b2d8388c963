"""
Explanation and narration cache used by the client before any network call.

Entries are keyed by a 32-bit rolling hash (the classic ``h*31 + c``) of the
cached input, stored as JSON strings in a key-value store, and expire after a
fixed TTL. Expired or unreadable entries are deleted when read. Two inputs
with the same hash share a slot: the later write wins, and a read compares
the stored input before answering, so a collision is a miss.
"""
import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional
from urllib.parse import quote, unquote

logger = logging.getLogger(__name__)

EXPLANATION_PREFIX = "code_explanation_"
AUDIO_PREFIX = "elevenlabs_audio_cache_"
DEFAULT_TTL_SECONDS = 7 * 24 * 60 * 60


def rolling_hash(text: str) -> int:
    """
    Signed 32-bit ``h = h*31 + unit`` over the UTF-16 code units of text,
    i.e. Java's String.hashCode.
    """
    h = 0
    data = text.encode("utf-16-le", errors="surrogatepass")
    for i in range(0, len(data), 2):
        h = (h * 31 + (data[i] | (data[i + 1] << 8))) & 0xFFFFFFFF
    return h - 0x100000000 if h >= 0x80000000 else h


# ---------- stores ----------

class MemoryStore:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._data))


class FileStore:
    """One file per key under a directory; survives restarts."""

    SUFFIX = ".json"

    def __init__(self, path: str) -> None:
        self.path = Path(path)
        self.path.mkdir(parents=True, exist_ok=True)

    def _file(self, key: str) -> Path:
        return self.path / (quote(key, safe="") + self.SUFFIX)

    def get(self, key: str) -> Optional[str]:
        try:
            return self._file(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        target = self._file(key)
        tmp = target.with_name(target.name + ".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(target)

    def remove(self, key: str) -> None:
        self._file(key).unlink(missing_ok=True)

    def keys(self) -> Iterator[str]:
        for p in sorted(self.path.glob("*" + self.SUFFIX)):
            yield unquote(p.name[: -len(self.SUFFIX)])


def clear_all(store) -> int:
    """Remove every explanation and audio entry; returns how many."""
    doomed = [k for k in store.keys() if k.startswith((EXPLANATION_PREFIX, AUDIO_PREFIX))]
    for key in doomed:
        store.remove(key)
    logger.info("Cleared %d cached items", len(doomed))
    return len(doomed)


# ---------- entries ----------

@dataclass
class CachedExplanation:
    code: str
    language: str
    explanation: str
    timestamp: float


@dataclass
class CachedAudio:
    text: str
    language: str
    voiceId: str
    audioBase64: str
    mimeType: str
    timestamp: float


class _TTLCache:
    prefix = ""

    def __init__(self, store, ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.store = store
        self.ttl = ttl
        self._clock = clock

    def _load(self, key: str) -> Optional[dict]:
        raw = self.store.get(key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            timestamp = float(data["timestamp"])
        except (ValueError, TypeError, KeyError) as e:
            logger.warning("Dropping unreadable cache entry %s: %s", key, e)
            self.store.remove(key)
            return None
        if self._clock() - timestamp > self.ttl:
            self.store.remove(key)
            return None
        return data

    def _save(self, key: str, entry) -> None:
        self.store.set(key, json.dumps(asdict(entry)))


class ExplanationCache(_TTLCache):
    prefix = EXPLANATION_PREFIX

    def key(self, code: str, language: str) -> str:
        return f"{self.prefix}{language}_{rolling_hash(code)}"

    def get(self, code: str, language: str) -> Optional[CachedExplanation]:
        data = self._load(self.key(code, language))
        if data is None or data.get("code") != code or data.get("language") != language:
            return None
        try:
            return CachedExplanation(**data)
        except TypeError:
            return None

    def put(self, code: str, language: str, explanation: str) -> CachedExplanation:
        entry = CachedExplanation(code=code, language=language, explanation=explanation, timestamp=self._clock())
        self._save(self.key(code, language), entry)
        return entry


class AudioCache(_TTLCache):
    prefix = AUDIO_PREFIX

    def key(self, text: str, language: str, voice_id: str) -> str:
        return f"{self.prefix}{rolling_hash(f'{text}_{language}_{voice_id}')}"

    def get(self, text: str, language: str, voice_id: str) -> Optional[CachedAudio]:
        data = self._load(self.key(text, language, voice_id))
        if data is None or (data.get("text"), data.get("language"), data.get("voiceId")) != (text, language, voice_id):
            return None
        try:
            return CachedAudio(**data)
        except TypeError:
            return None

    def put(self, text: str, language: str, voice_id: str, audio_base64: str, mime_type: str) -> CachedAudio:
        entry = CachedAudio(
            text=text,
            language=language,
            voiceId=voice_id,
            audioBase64=audio_base64,
            mimeType=mime_type,
            timestamp=self._clock(),
        )
        self._save(self.key(text, language, voice_id), entry)
        return entry
