from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Base
    APP_ENV: str = "dev"  # dev | staging | prod | test
    APP_NAME: str = "Code Mentor API"
    APP_VERSION: str = "0.1.0"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Security (empty = upload left open)
    API_KEY: str = ""

    # Projects
    PROJECTS_PATH: str = "./projects"
    MAX_FILE_BYTES: int = 1_000_000
    MAX_UPLOAD_MB: int = 50
    GIT_CLONE_TIMEOUT: int = 120

    # LLM
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    LLM_TEMPERATURE: float = 0.2
    SUMMARY_MAX_RETRIES: int = 3
    SUMMARY_RETRY_BASE_DELAY: float = 1.0

    # Text-to-speech
    ELEVENLABS_API_KEY: str = ""
    ELEVENLABS_API_URL: str = "https://api.elevenlabs.io/v1"
    ELEVENLABS_MODEL: str = "eleven_turbo_v2_5"
    DEFAULT_VOICE_ID: str = "pNInz6obpgDQGcFmaJgB"

    # Client cache
    CACHE_TTL_SECONDS: int = 7 * 24 * 60 * 60

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_MB * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    return Settings()
