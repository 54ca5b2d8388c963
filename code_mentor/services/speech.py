"""
Text-to-speech through the ElevenLabs REST API.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional

import httpx

from code_mentor.core.errors import InvalidRequest, SpeechError
from code_mentor.core.logging import log_duration

logger = logging.getLogger(__name__)

VOICE_OPTIONS: Dict[str, str] = {
    "21m00Tcm4TlvDq8ikWAM": "Rachel (English Female)",
    "AZnzlk1XvdvUeBnXmlld": "Domi (English Female)",
    "EXAVITQu4vr4xnSDxMaL": "Bella (English Female)",
    "ErXwobaYiN019PkySvjV": "Antoni (English Male)",
    "MF3mGyEYCl7XYWbV9V6O": "Elli (English Female)",
    "TxGEqnHWrfWFTfGW9XjX": "Josh (English Male)",
    "VR6AewLTigWG4xSOukaG": "Arnold (English Male)",
    "pNInz6obpgDQGcFmaJgB": "Adam (Indian Male)",
    "yoZ06aMxZJJ28mfd3POQ": "Sam (English Male)",
}

VOICE_SETTINGS = {
    "stability": 0.5,
    "similarity_boost": 0.75,
    "style": 0.5,
    "use_speaker_boost": True,
}

OUTPUT_FORMAT = "mp3_44100_128"


@dataclass
class SpeechAudio:
    audio: bytes
    mime_type: str
    voice_id: str


class SpeechClient:
    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://api.elevenlabs.io/v1",
        model: str = "eleven_turbo_v2_5",
        default_voice: str = "pNInz6obpgDQGcFmaJgB",
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.default_voice = default_voice
        self.timeout = timeout
        self._transport = transport

    def resolve_voice(self, voice_id: Optional[str]) -> str:
        voice_id = voice_id or self.default_voice
        if voice_id not in VOICE_OPTIONS:
            raise InvalidRequest(f"Invalid voice ID: {voice_id}")
        return voice_id

    def synthesize(self, text: str, voice_id: Optional[str] = None) -> SpeechAudio:
        voice_id = self.resolve_voice(voice_id)
        if not self.api_key:
            raise SpeechError(details="Text-to-speech API key is not configured")

        payload = {
            "text": text,
            "model_id": self.model,
            "voice_settings": VOICE_SETTINGS,
        }
        headers = {
            "Accept": "audio/mpeg",
            "xi-api-key": self.api_key,
        }
        try:
            with log_duration("tts_request", logger, voice=voice_id, chars=len(text)):
                with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                    response = client.post(
                        f"{self.base_url}/text-to-speech/{voice_id}",
                        params={"output_format": OUTPUT_FORMAT},
                        json=payload,
                        headers=headers,
                    )
                    response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SpeechError(details=f"{e.response.status_code}: {e.response.text[:200]}")
        except httpx.HTTPError as e:
            raise SpeechError(details=str(e))

        mime_type = response.headers.get("content-type", "audio/mpeg").split(";")[0].strip()
        return SpeechAudio(audio=response.content, mime_type=mime_type, voice_id=voice_id)
