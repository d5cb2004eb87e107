"""Configuration settings for Voice Signage."""

import os
from functools import lru_cache
from urllib.parse import quote_plus

from dotenv import load_dotenv

load_dotenv()

DEFAULT_BANNED_WORDS = ["욕설1", "욕설2", "부적절한단어"]


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _database_url() -> str:
    """Build the database URL from DATABASE_URL or the discrete DB_* variables."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    host = os.getenv("DB_HOST")
    if not host:
        return "sqlite:///./voice_signage.db"
    user = quote_plus(os.getenv("DB_USER", "postgres"))
    password = quote_plus(os.getenv("DB_PASSWORD", ""))
    port = os.getenv("DB_PORT", "5432")
    name = os.getenv("DB_NAME", "voice_signage")
    return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}"


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = _database_url()
    DB_SSLMODE: str = os.getenv("DB_SSLMODE", "require")
    DB_CONNECT_TIMEOUT: int = int(os.getenv("DB_CONNECT_TIMEOUT", "10"))
    # Maximum connection age in seconds before the pool reopens it
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "1800"))

    # Object storage
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "gcs").lower()
    GCP_PROJECT_ID: str | None = os.getenv("GCP_PROJECT_ID")
    GCS_BUCKET_NAME: str = os.getenv("GCS_BUCKET_NAME", "")
    GCP_SERVICE_ACCOUNT_KEY: str | None = os.getenv("GCP_SERVICE_ACCOUNT_KEY")
    GCP_KEY_FILE: str | None = os.getenv("GCP_KEY_FILE")
    SIGNED_URL_TTL_HOURS: int = int(os.getenv("SIGNED_URL_TTL_HOURS", "24"))
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    MAX_UPLOAD_SIZE_MB: int = int(os.getenv("MAX_UPLOAD_SIZE_MB", "25"))

    # Speech
    TRANSCRIPTION_BACKEND: str = os.getenv("TRANSCRIPTION_BACKEND", "google").lower()
    SPEECH_LANGUAGE_CODE: str = os.getenv("SPEECH_LANGUAGE_CODE", "ko-KR")
    SPEECH_ALTERNATIVE_LANGUAGES: list[str] = _split_csv(os.getenv("SPEECH_ALTERNATIVE_LANGUAGES", "en-US"))
    SPEECH_MIN_CONFIDENCE: float = float(os.getenv("SPEECH_MIN_CONFIDENCE", "0.5"))
    SPEECH_TIMEOUT_SECONDS: int = int(os.getenv("SPEECH_TIMEOUT_SECONDS", "600"))
    WHISPER_MODEL_SIZE: str = os.getenv("WHISPER_MODEL_SIZE", "base")

    # Moderation
    BANNED_WORDS: list[str] = _split_csv(os.getenv("BANNED_WORDS", ""))
    BANNED_WORDS_FILE: str | None = os.getenv("BANNED_WORDS_FILE")
    MODERATION_MAX_LENGTH: int = int(os.getenv("MODERATION_MAX_LENGTH", "500"))

    # Display rotation
    ROTATION_INTERVAL_SECONDS: float = float(os.getenv("ROTATION_INTERVAL_SECONDS", "5"))
    ROTATION_REFRESH_SECONDS: float = float(os.getenv("ROTATION_REFRESH_SECONDS", "30"))

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    UPLOAD_RATE_LIMIT: str = os.getenv("UPLOAD_RATE_LIMIT", "20/minute")

    def banned_words(self) -> list[str]:
        """Resolve the banned-word list: file, then env list, then the built-in sample."""
        if self.BANNED_WORDS_FILE:
            with open(self.BANNED_WORDS_FILE, encoding="utf-8") as f:
                return [line.strip() for line in f if line.strip() and not line.startswith("#")]
        if self.BANNED_WORDS:
            return list(self.BANNED_WORDS)
        return list(DEFAULT_BANNED_WORDS)

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self.STORAGE_BACKEND not in ("gcs", "local"):
            errors.append(f"Unknown STORAGE_BACKEND '{self.STORAGE_BACKEND}' - expected 'gcs' or 'local'")
        if self.STORAGE_BACKEND == "gcs" and not self.GCS_BUCKET_NAME:
            errors.append("GCS_BUCKET_NAME is not set - uploads to Cloud Storage will fail")
        if self.TRANSCRIPTION_BACKEND not in ("google", "whisper"):
            errors.append(
                f"Unknown TRANSCRIPTION_BACKEND '{self.TRANSCRIPTION_BACKEND}' - expected 'google' or 'whisper'"
            )
        if self.TRANSCRIPTION_BACKEND == "google" and self.STORAGE_BACKEND == "local":
            errors.append("Google Speech cannot read local files - use STORAGE_BACKEND=gcs or TRANSCRIPTION_BACKEND=whisper")
        if self.DATABASE_URL.startswith("sqlite"):
            errors.append("Using SQLite database - set DB_HOST or DATABASE_URL for production")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
