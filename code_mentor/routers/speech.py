import base64

from fastapi import APIRouter, Depends

from code_mentor.core.deps import get_speech_client, get_translator
from code_mentor.models.speech import (
    LanguagesResponse,
    SpeechRequest,
    SpeechResponse,
    TranslateRequest,
    TranslateResponse,
    VoicesResponse,
)
from code_mentor.services.speech import VOICE_OPTIONS, SpeechClient
from code_mentor.services.translation import LANGUAGES, Translator

router = APIRouter(prefix="/api", tags=["speech"])


@router.get("/voices", response_model=VoicesResponse)
def voices(speech: SpeechClient = Depends(get_speech_client)):
    return VoicesResponse(voices=VOICE_OPTIONS, default=speech.default_voice)


@router.get("/languages", response_model=LanguagesResponse)
def languages():
    return LanguagesResponse(languages=LANGUAGES)


@router.post("/translate", response_model=TranslateResponse)
def translate(body: TranslateRequest, translator: Translator = Depends(get_translator)):
    text = translator.translate(body.text, body.targetLanguage)
    return TranslateResponse(translatedText=text, language=body.targetLanguage)


@router.post("/text-to-speech", response_model=SpeechResponse)
def text_to_speech(
    body: SpeechRequest,
    speech: SpeechClient = Depends(get_speech_client),
    translator: Translator = Depends(get_translator),
):
    voice_id = speech.resolve_voice(body.voiceId)
    text = translator.translate(body.text.strip(), body.language)
    audio = speech.synthesize(text, voice_id)
    encoded = base64.b64encode(audio.audio).decode("ascii")
    return SpeechResponse(
        audioUrl=f"data:{audio.mime_type};base64,{encoded}",
        mimeType=audio.mime_type,
        voiceId=audio.voice_id,
        text=text,
    )
